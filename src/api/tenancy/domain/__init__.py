"""Domain layer for the Tenancy bounded context."""
