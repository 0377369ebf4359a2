"""
Application errors for clean API error handling.

Services raise these; the HTTP layer turns anything that escapes a request into a
generic 500, and startup turns ConfigurationError into a process abort.
"""


class ConfigurationError(Exception):
    """Raised when required configuration (e.g. OPENAI_API_KEY, QUERY_MODE) is missing or invalid."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class DocumentsNotFoundError(Exception):
    """Raised when a document directory is missing or holds no readable documents."""

    def __init__(self, path: str, reason: str = "no readable documents") -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")
