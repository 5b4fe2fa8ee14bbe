try:
    from importlib.metadata import version

    __version__ = version("brainus-ai")
except Exception:
    __version__ = "unknown"

from .client import BrainusAI
from .core.exceptions import (
    APIError,
    AuthenticationError,
    BrainusError,
    ConfigError,
    QuotaExceededError,
    RateLimitError,
)
from .core.models import (
    Citation,
    ClientConfig,
    Plan,
    PlanInfo,
    QueryFilters,
    QueryRequest,
    QueryResponse,
    UsageStats,
)

__all__ = [
    "__version__",
    "BrainusAI",
    "APIError",
    "AuthenticationError",
    "BrainusError",
    "ConfigError",
    "QuotaExceededError",
    "RateLimitError",
    "Citation",
    "ClientConfig",
    "Plan",
    "PlanInfo",
    "QueryFilters",
    "QueryRequest",
    "QueryResponse",
    "UsageStats",
]
