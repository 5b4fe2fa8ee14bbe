"""Value records for the Brainus API and their wire (snake_case) mappings.

Models use snake_case attributes; ``model_dump(by_alias=True)`` produces the
camelCase shape the API documents. Each response shape has its own explicit
``*_from_wire`` function so unknown fields never leak through.
"""

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .exceptions import ConfigError

API_KEY_PREFIX = "brainus_"
DEFAULT_BASE_URL = "https://api.brainus.lk"
DEFAULT_TIMEOUT_MS = 30000
DEFAULT_MAX_RETRIES = 3


@dataclass(frozen=True)
class ClientConfig:
    """Immutable client configuration, validated once on construction.

    ``timeout`` is in milliseconds.
    """

    api_key: str
    base_url: str = DEFAULT_BASE_URL
    timeout: int = DEFAULT_TIMEOUT_MS
    max_retries: int = DEFAULT_MAX_RETRIES

    def __post_init__(self) -> None:
        if not isinstance(self.api_key, str) or not self.api_key.startswith(API_KEY_PREFIX):
            raise ConfigError(
                f"Invalid API key format. Expected format: {API_KEY_PREFIX}..."
            )
        if not self.base_url:
            raise ConfigError("base_url must not be empty")
        if self.timeout <= 0:
            raise ConfigError(f"timeout must be positive, got {self.timeout}")
        if self.max_retries < 0:
            raise ConfigError(f"max_retries must be >= 0, got {self.max_retries}")

    @classmethod
    def create(
        cls,
        api_key: str,
        base_url: str | None = None,
        timeout: int | None = None,
        max_retries: int | None = None,
    ) -> "ClientConfig":
        """Build a config, substituting defaults for any argument left as None."""
        return cls(
            api_key=api_key,
            base_url=base_url if base_url is not None else DEFAULT_BASE_URL,
            timeout=timeout if timeout is not None else DEFAULT_TIMEOUT_MS,
            max_retries=max_retries if max_retries is not None else DEFAULT_MAX_RETRIES,
        )

    @property
    def timeout_seconds(self) -> float:
        return self.timeout / 1000


class _Model(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class QueryFilters(_Model):
    """Metadata filters applied to a query."""

    subject: str | None = Field(default=None, description="Subject, e.g. ICT, Science")
    grade: str | None = Field(default=None, description="Grade level, e.g. 10, 11, 12")
    year: str | None = Field(default=None, description="Year, e.g. 2023")
    category: str | None = Field(default=None, description="Past Paper, Textbook, ...")
    language: str | None = Field(default=None, description="English, Sinhala, Tamil")

    def to_wire(self) -> dict[str, str]:
        return self.model_dump(exclude_none=True)


class QueryRequest(_Model):
    query: str
    store_id: str | None = None
    filters: QueryFilters | None = None
    model: str | None = None

    def to_wire(self) -> dict[str, Any]:
        """Request body with unset optional fields omitted, so server defaults apply."""
        body: dict[str, Any] = {"query": self.query}

        if self.store_id is not None:
            body["store_id"] = self.store_id

        if self.filters is not None:
            body["filters"] = self.filters.to_wire()

        if self.model is not None:
            body["model"] = self.model

        return body


class Citation(_Model):
    """Reference to a source document supporting part of an answer."""

    document_id: str | None = None
    document_name: str | None = None
    pages: list[int] = Field(default_factory=list)
    metadata: dict[str, Any] | None = None
    chunk_text: str | None = None


class QueryResponse(_Model):
    answer: str | None = None
    citations: list[Citation] = Field(default_factory=list)
    has_citations: bool | None = None


class PlanInfo(_Model):
    name: str | None = None
    rate_limit_per_minute: int | None = None
    rate_limit_per_day: int | None = None
    monthly_quota: int | None = None


class UsageStats(_Model):
    """Usage for the current billing period of an API key."""

    total_requests: int | None = None
    total_tokens: int | None = None
    total_cost_usd: float | None = None
    by_endpoint: dict[str, int | float] = Field(default_factory=dict)
    quota_remaining: int | None = None
    quota_percentage: float | None = None
    plan: PlanInfo | None = None
    period_start: str | None = None
    period_end: str | None = None


class Plan(_Model):
    """An API plan. ``monthly_quota`` None means unlimited, ``price_lkr`` None means free."""

    id: str | None = None
    name: str | None = None
    description: str | None = None
    rate_limit_per_minute: int | None = None
    rate_limit_per_day: int | None = None
    monthly_quota: int | None = None
    price_lkr: float | None = None
    allowed_models: list[str] = Field(default_factory=list)
    features: dict[str, Any] = Field(default_factory=dict)
    is_active: bool | None = None


def _text(value: Any) -> str | None:
    """Identifiers and names may arrive as numbers; keep them as text."""
    return None if value is None else str(value)


def citation_from_wire(raw: dict[str, Any]) -> Citation:
    return Citation(
        document_id=_text(raw.get("document_id")),
        document_name=_text(raw.get("document_name")),
        pages=raw.get("pages") or [],
        metadata=raw.get("metadata"),
        chunk_text=raw.get("chunk_text"),
    )


def query_response_from_wire(raw: dict[str, Any]) -> QueryResponse:
    return QueryResponse(
        answer=raw.get("answer"),
        citations=[citation_from_wire(c) for c in raw.get("citations") or []],
        has_citations=raw.get("has_citations"),
    )


def plan_info_from_wire(raw: dict[str, Any]) -> PlanInfo:
    return PlanInfo(
        name=_text(raw.get("name")),
        rate_limit_per_minute=raw.get("rate_limit_per_minute"),
        rate_limit_per_day=raw.get("rate_limit_per_day"),
        monthly_quota=raw.get("monthly_quota"),
    )


def usage_from_wire(raw: dict[str, Any]) -> UsageStats:
    plan = raw.get("plan")
    return UsageStats(
        total_requests=raw.get("total_requests"),
        total_tokens=raw.get("total_tokens"),
        total_cost_usd=raw.get("total_cost_usd"),
        by_endpoint=raw.get("by_endpoint") or {},
        quota_remaining=raw.get("quota_remaining"),
        quota_percentage=raw.get("quota_percentage"),
        plan=plan_info_from_wire(plan) if plan else None,
        period_start=raw.get("period_start"),
        period_end=raw.get("period_end"),
    )


def plan_from_wire(raw: dict[str, Any]) -> Plan:
    return Plan(
        id=_text(raw.get("id")),
        name=_text(raw.get("name")),
        description=raw.get("description"),
        rate_limit_per_minute=raw.get("rate_limit_per_minute"),
        rate_limit_per_day=raw.get("rate_limit_per_day"),
        monthly_quota=raw.get("monthly_quota"),
        price_lkr=raw.get("price_lkr"),
        allowed_models=raw.get("allowed_models") or [],
        features=raw.get("features") or {},
        is_active=raw.get("is_active"),
    )
