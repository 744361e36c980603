"""Tenancy bounded context.

Owns the Tenant Directory and the per-request routing of callers to their
tenant's isolated database, including validation of each tenant database's
identity record before any handler touches it.
"""
