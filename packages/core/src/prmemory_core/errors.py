"""Exception types shared by every prmemory package."""


class PRMemoryError(Exception):
    """Base exception for all recoverable prmemory errors."""


class ConfigurationError(PRMemoryError):
    """Raised when required configuration (destination ids, API keys, provider) is missing or invalid."""


class AuthenticationError(PRMemoryError):
    """Raised when the GitHub credential is unavailable, rejected, or the device flow fails."""


class SummarizerError(PRMemoryError):
    """Raised when the summarization provider cannot produce a summary for a payload."""
