import json
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import typer
from rich.markup import escape
from rich.table import Table

from . import __version__
from . import logger as log
from .client import BrainusAI
from .config import get_settings
from .core.exceptions import BrainusError, ConfigError, RateLimitError
from .core.models import QueryFilters, QueryResponse, UsageStats

app = typer.Typer(add_completion=False, help="Query the Brainus AI API from the command line.")


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"brainus-ai version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable colored output", envvar="NO_COLOR"
    ),
) -> None:
    log.init_console(no_color=no_color)


ApiKeyOption = typer.Option(None, "--api-key", help="API key (default: BRAINUS_API_KEY)")
BaseUrlOption = typer.Option(None, "--base-url", help="API origin override")
TimeoutOption = typer.Option(None, "--timeout", help="Request timeout in milliseconds")
MaxRetriesOption = typer.Option(None, "--max-retries", help="Retries after the first attempt")
JsonOption = typer.Option(False, "--json", help="Print the raw camelCase JSON response")


def make_client(
    api_key: str | None = None,
    base_url: str | None = None,
    timeout: int | None = None,
    max_retries: int | None = None,
) -> BrainusAI:
    """Build a client from settings, with CLI arguments taking priority."""
    settings = get_settings().merge_cli_args(
        api_key=api_key, base_url=base_url, timeout=timeout, max_retries=max_retries
    )
    return BrainusAI(**settings.client_kwargs())


@contextmanager
def handle_errors() -> Iterator[None]:
    """Report client errors on the console and exit with status 1."""
    try:
        yield
    except ConfigError as e:
        log.error(f"Configuration error: {escape(str(e))}")
        log.warning("Set BRAINUS_API_KEY or pass --api-key")
        raise typer.Exit(1)
    except RateLimitError as e:
        log.error(f"Rate limited: {escape(e.message)}")
        if e.retry_after is not None:
            log.warning(f"Retry after {e.retry_after} seconds")
        raise typer.Exit(1)
    except BrainusError as e:
        status = f" (HTTP {e.status_code})" if getattr(e, "status_code", None) else ""
        log.error(f"{type(e).__name__}{status}: {escape(str(e))}")
        raise typer.Exit(1)


def _print_json(data: Any) -> None:
    typer.echo(json.dumps(data, indent=2, ensure_ascii=False))


def _print_query_response(response: QueryResponse) -> None:
    log.info(escape(response.answer or ""))

    if not response.citations:
        log.dim("No citations")
        return

    table = Table(title="Citations")
    table.add_column("Document", style="cyan")
    table.add_column("Pages", justify="right")
    table.add_column("Excerpt", overflow="fold")

    for citation in response.citations:
        pages = ", ".join(str(p) for p in citation.pages) or "-"
        excerpt = citation.chunk_text or ""
        if len(excerpt) > 120:
            excerpt = excerpt[:117] + "..."
        table.add_row(
            escape(citation.document_name or citation.document_id or "?"),
            pages,
            escape(excerpt),
        )

    log.get_console().print(table)


def _print_usage(stats: UsageStats) -> None:
    table = Table(title="Usage", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")

    rows = [
        ("Period", f"{stats.period_start or '?'} to {stats.period_end or '?'}"),
        ("Total requests", stats.total_requests),
        ("Total tokens", stats.total_tokens),
        ("Total cost (USD)", stats.total_cost_usd),
        ("Quota remaining", stats.quota_remaining),
        ("Quota used (%)", stats.quota_percentage),
    ]
    if stats.plan is not None:
        rows.append(("Plan", stats.plan.name))
        rows.append(
            (
                "Rate limits",
                f"{stats.plan.rate_limit_per_minute}/min, {stats.plan.rate_limit_per_day}/day",
            )
        )
        rows.append(("Monthly quota", stats.plan.monthly_quota or "unlimited"))

    for name, value in rows:
        table.add_row(name, "-" if value is None else escape(str(value)))
    for endpoint, count in sorted(stats.by_endpoint.items()):
        table.add_row(f"  {escape(endpoint)}", str(count))

    log.get_console().print(table)


@app.command()
def query(
    text: str = typer.Argument(..., help="Question to ask"),
    store_id: str | None = typer.Option(None, "--store-id", help="File search store ID"),
    model: str | None = typer.Option(None, "--model", help="Model to use"),
    subject: str | None = typer.Option(None, "--subject", help="Subject filter"),
    grade: str | None = typer.Option(None, "--grade", help="Grade filter"),
    year: str | None = typer.Option(None, "--year", help="Year filter"),
    category: str | None = typer.Option(None, "--category", help="Category filter"),
    language: str | None = typer.Option(None, "--language", help="Language filter"),
    as_json: bool = JsonOption,
    api_key: str | None = ApiKeyOption,
    base_url: str | None = BaseUrlOption,
    timeout: int | None = TimeoutOption,
    max_retries: int | None = MaxRetriesOption,
) -> None:
    """Ask a question and print the answer with its citations."""
    filter_values = {
        "subject": subject,
        "grade": grade,
        "year": year,
        "category": category,
        "language": language,
    }
    filters = None
    if any(v is not None for v in filter_values.values()):
        filters = QueryFilters(**filter_values)

    with handle_errors():
        client = make_client(api_key, base_url, timeout, max_retries)
        with log.spinner("Querying Brainus AI..."):
            response = client.query(text, store_id=store_id, filters=filters, model=model)

    if as_json:
        _print_json(response.model_dump(by_alias=True))
    else:
        _print_query_response(response)


@app.command()
def usage(
    as_json: bool = JsonOption,
    api_key: str | None = ApiKeyOption,
    base_url: str | None = BaseUrlOption,
    timeout: int | None = TimeoutOption,
    max_retries: int | None = MaxRetriesOption,
) -> None:
    """Show usage statistics for the API key."""
    with handle_errors():
        client = make_client(api_key, base_url, timeout, max_retries)
        with log.spinner("Fetching usage..."):
            stats = client.get_usage()

    if as_json:
        _print_json(stats.model_dump(by_alias=True))
    else:
        _print_usage(stats)


@app.command()
def plans(
    as_json: bool = JsonOption,
    api_key: str | None = ApiKeyOption,
    base_url: str | None = BaseUrlOption,
    timeout: int | None = TimeoutOption,
    max_retries: int | None = MaxRetriesOption,
) -> None:
    """List available API plans."""
    with handle_errors():
        client = make_client(api_key, base_url, timeout, max_retries)
        with log.spinner("Fetching plans..."):
            plan_list = client.get_plans()

    if as_json:
        _print_json([p.model_dump(by_alias=True) for p in plan_list])
        return

    if not plan_list:
        log.warning("No plans available")
        return

    table = Table(title="Plans")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Req/min", justify="right")
    table.add_column("Req/day", justify="right")
    table.add_column("Monthly quota", justify="right")
    table.add_column("Price (LKR)", justify="right")
    table.add_column("Models")
    table.add_column("Active")

    for p in plan_list:
        table.add_row(
            escape(p.id or ""),
            escape(p.name or ""),
            str(p.rate_limit_per_minute or "-"),
            str(p.rate_limit_per_day or "-"),
            "unlimited" if p.monthly_quota is None else str(p.monthly_quota),
            "free" if p.price_lkr is None else f"{p.price_lkr:,.2f}",
            escape(", ".join(p.allowed_models)),
            "yes" if p.is_active else "no",
        )

    log.get_console().print(table)


if __name__ == "__main__":
    app()
