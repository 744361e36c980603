"""Database infrastructure for the Tenant Directory and tenant databases."""
