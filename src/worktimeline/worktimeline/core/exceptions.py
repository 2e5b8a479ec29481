class DomainError(Exception):
    """Base exception for business rule violations."""


class InvalidConfigurationError(DomainError):
    """Raised when input data is out of range or malformed."""


# Request-layer name for the same failure.
ValidationError = InvalidConfigurationError


class EmptyOperationSetError(DomainError):
    """Raised when every operation was soft-deleted before scheduling."""


class InconsistentChainStateError(DomainError):
    """Raised when a chained run cannot find the state it resumes from."""


class FormulaMirrorGapError(DomainError):
    """Raised when a row lacks the metadata needed to emit its formulas."""
