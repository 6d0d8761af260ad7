class ValidationError(ValueError):
    """A request the ledger refuses (duplicate attendance, bad minutes, closed window)."""


class NotFoundError(ValueError):
    """A row the operation needs does not exist."""
