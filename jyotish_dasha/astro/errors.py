"""Domain errors raised by the period engine.

All of them derive from ValueError so callers that only guard against bad
input keep working. Each carries a stable ``code`` used in API responses.
"""


class DomainError(ValueError):
    code = "DOMAIN_ERROR"


class OutOfRangeError(DomainError):
    """Longitude is not a finite number."""
    code = "OUT_OF_RANGE"


class QueryOutOfBoundsError(DomainError):
    """Query instant falls outside the root span of the period system."""
    code = "QUERY_OUT_OF_BOUNDS"


class DepthUnsupportedError(DomainError):
    """A subdivision would produce periods shorter than one microsecond.

    The resolver does not raise this to its caller. It returns it on the
    chain as a warning alongside the deepest valid prefix.
    """
    code = "DEPTH_UNSUPPORTED"

    def __init__(self, message: str, level: int = 0):
        super().__init__(message)
        self.level = level
