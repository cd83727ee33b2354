class LedgerError(ValueError):
    """Base class for errors raised by the ledger services.

    Subclasses ``ValueError`` so callers that only know about ``ValueError``
    (form handlers, scripts) keep working.
    """


class ValidationError(LedgerError):
    """Malformed input: empty name or description, bad amount, bad month."""


class NotFoundError(LedgerError):
    """No record with that id exists for the calling owner."""


class ForbiddenError(LedgerError):
    """The caller tried to use a record owned by somebody else."""
