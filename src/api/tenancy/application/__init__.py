"""Application layer for the Tenancy bounded context."""
