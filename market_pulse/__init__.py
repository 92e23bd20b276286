"""Market Pulse: AI-curated digital marketing trends with persona-aware caching."""

try:
    from importlib.metadata import version

    __version__ = version("market-pulse")
except Exception:
    __version__ = "0.1.0"
