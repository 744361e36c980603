"""FastAPI dependency wiring for the Tenancy bounded context."""
