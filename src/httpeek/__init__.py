"""httpeek - a small colorizing HTTP client for the terminal."""

__all__ = ["body", "cli", "config", "dispatch", "errors", "highlight", "logging", "models", "render"]
__version__ = "1.0.0"
