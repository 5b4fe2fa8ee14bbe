"""Main client for the Brainus AI API."""

from typing import Any

import httpx

from .core.http_client import make_request_with_retry
from .core.models import (
    ClientConfig,
    Plan,
    QueryFilters,
    QueryRequest,
    QueryResponse,
    UsageStats,
    plan_from_wire,
    query_response_from_wire,
    usage_from_wire,
)

QUERY_PATH = "/api/v1/dev/query"
USAGE_PATH = "/api/v1/dev/usage"
PLANS_PATH = "/api/v1/dev/plans"


class BrainusAI:
    """Client for the Brainus question-answering API.

    Example:
        client = BrainusAI(api_key="brainus_...")
        response = client.query("What is Python?", filters={"subject": "ICT"})
        for citation in response.citations:
            print(citation.document_name, citation.pages)

    The instance holds only immutable configuration and may be shared
    between threads.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str | None = None,
        timeout: int | None = None,
        max_retries: int | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        """Validate configuration. No network activity happens here.

        Args:
            api_key: Brainus API key (brainus_...)
            base_url: API origin (default: production gateway)
            timeout: Request timeout in milliseconds (default: 30000)
            max_retries: Retries after the first attempt (default: 3)
            transport: Optional httpx transport used for every request

        Raises:
            ConfigError: If the API key is missing or malformed
        """
        self.config = ClientConfig.create(api_key, base_url, timeout, max_retries)
        self._transport = transport

    @classmethod
    def from_config(
        cls, config: ClientConfig, transport: httpx.BaseTransport | None = None
    ) -> "BrainusAI":
        return cls(
            api_key=config.api_key,
            base_url=config.base_url,
            timeout=config.timeout,
            max_retries=config.max_retries,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self.config.base_url

    @property
    def timeout(self) -> int:
        return self.config.timeout

    @property
    def max_retries(self) -> int:
        return self.config.max_retries

    def query(
        self,
        request: QueryRequest | str,
        *,
        store_id: str | None = None,
        filters: QueryFilters | dict[str, str] | None = None,
        model: str | None = None,
    ) -> QueryResponse:
        """Ask a question.

        Args:
            request: A QueryRequest, or the query text
            store_id: File search store ID (server default if omitted)
            filters: Metadata filters (subject, grade, year, category, language)
            model: Model to use; must be in the plan's allowed models

        Only used when ``request`` is text; a QueryRequest carries its own
        optional fields.

        Returns:
            QueryResponse with the answer and its citations
        """
        if isinstance(request, str):
            if isinstance(filters, dict):
                filters = QueryFilters(**filters)
            request = QueryRequest(
                query=request, store_id=store_id, filters=filters, model=model
            )

        raw = self._request("POST", QUERY_PATH, request.to_wire())
        return query_response_from_wire(raw)

    def get_usage(self) -> UsageStats:
        """Get usage statistics for the current API key."""
        raw = self._request("GET", USAGE_PATH)
        return usage_from_wire(raw)

    def get_plans(self) -> list[Plan]:
        """Get available API plans."""
        raw = self._request("GET", PLANS_PATH)
        return [plan_from_wire(p) for p in raw.get("plans") or []]

    def _request(self, method: str, path: str, body: dict[str, Any] | None = None) -> Any:
        url = f"{self.config.base_url.rstrip('/')}{path}"
        return make_request_with_retry(
            method,
            url,
            api_key=self.config.api_key,
            timeout=self.config.timeout_seconds,
            max_retries=self.config.max_retries,
            json=body,
            transport=self._transport,
        )
