"""
Core error taxonomy.

Handlers translate these into HTTP responses using ``status_code``; anything
else escaping the core (store unreachable, driver errors) is an internal
failure.
"""


class CoreError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(CoreError):
    """Caller-correctable input problem, raised before any store access"""
    status_code = 400


class NotFoundError(CoreError):
    """
    Zero rows from a detail lookup or an owner-scoped mutation.

    ``reason`` keeps "missing" and "not_owner" apart internally; both are
    reported to clients as 404.
    """
    status_code = 404

    MISSING = "missing"
    NOT_OWNER = "not_owner"

    def __init__(self, message: str, reason: str = MISSING):
        super().__init__(message)
        self.reason = reason


class ConflictError(CoreError):
    status_code = 409
