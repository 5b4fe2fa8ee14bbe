"""Core logic for brainus-ai (independent of CLI)."""

__all__ = [
    "http_client",
    "models",
    "exceptions",
]
