"""Ports (protocols and port exceptions) for the Tenancy bounded context."""
