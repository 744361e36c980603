"""Code shared by every bounded context of the LMS API.

Holds bearer token authentication, the tenant context middleware and the
observation context carried by probes. Keep it small: anything added here
becomes a dependency of every context.
"""
