class EngineError(Exception):
    """Base class for errors raised by the recommendation and analytics engine."""


class TransientIOError(EngineError):
    """Catalog or event store unreachable or timed out."""


class ValidationError(EngineError):
    """Missing required field or unrecognized interaction type."""


class AuthorizationError(EngineError):
    """Caller is not allowed to perform the operation."""
