"""Request-scoped values shared across bounded contexts."""

from shared_kernel.middleware.tenant_context import TenantContext

__all__ = ["TenantContext"]
