"""AI Tool Gateway - Source Package.

Exposes curated business operations as LLM-callable tools.

Note: Import `app` directly from `tool_gateway.main` to avoid circular imports.
"""

__version__ = "1.0.0"

__all__ = ["main", "api", "core", "models", "observability", "tools"]
