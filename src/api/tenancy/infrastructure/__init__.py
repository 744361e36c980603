"""Infrastructure adapters for the Tenancy bounded context."""
