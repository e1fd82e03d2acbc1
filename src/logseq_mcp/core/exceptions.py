"""Custom exceptions for the Logseq graph bridge."""


class LogseqError(Exception):
    """Base exception for Logseq graph operations."""

    kind = "error"


class NotFoundError(LogseqError):
    """Raised when a requested page or block does not exist."""

    kind = "not_found"

    def __init__(self, entity_type: str, identifier: str, message: str = ""):
        self.entity_type = entity_type
        self.identifier = identifier
        super().__init__(message or f"{entity_type} not found: {identifier}")


class PageNotFoundError(NotFoundError):
    """Raised when a page lookup by name or id returns nothing."""

    def __init__(self, page_name: str):
        super().__init__("Page", str(page_name))

    @property
    def page_name(self) -> str:
        return self.identifier


class BlockNotFoundError(NotFoundError):
    """Raised when a block lookup by UUID returns nothing."""

    def __init__(self, block_uuid: str):
        super().__init__("Block", block_uuid)


class LogseqUnreachableError(LogseqError):
    """Raised when the Logseq HTTP API cannot be reached."""

    kind = "unreachable"

    def __init__(self, url: str, reason: str = ""):
        self.url = url
        self.reason = reason
        message = f"Failed to connect to Logseq API at {url}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class LogseqProtocolError(LogseqError):
    """Raised when the Logseq API answers with a non-success HTTP status."""

    kind = "protocol"

    def __init__(self, status_code: int, reason: str = ""):
        self.status_code = status_code
        self.reason = reason
        message = f"HTTP {status_code}"
        if reason:
            message += f": {reason}"
        super().__init__(message)

    @property
    def unauthorized(self) -> bool:
        return self.status_code in (401, 403)


class LogseqRemoteError(LogseqError):
    """Raised when Logseq itself rejects an operation (e.g. a malformed query)."""

    kind = "remote"

    def __init__(self, message: str, method: str | None = None):
        self.remote_message = message
        self.method = method
        super().__init__(f"Logseq API error: {message}")


class InvalidInputError(LogseqError):
    """Raised when a caller-supplied parameter fails local validation."""

    kind = "invalid_input"


class ConfigError(LogseqError):
    """Raised when the configuration file is missing or invalid."""

    kind = "config"
