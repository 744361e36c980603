"""Domain exceptions for the Tenancy bounded context."""


class InvalidTenantError(ValueError):
    """Raised when tenant attributes break a domain rule.

    Carries one message per violated rule so callers can report them all.
    """

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__("; ".join(errors))


class TenantDatabaseNameImmutableError(Exception):
    """Raised when attempting to change the database of an existing tenant."""
