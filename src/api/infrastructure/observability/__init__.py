"""Process-level probes: database connections and application lifecycle.

Bounded contexts keep their own probes next to the services they observe;
only probes used by shared infrastructure live here.
"""

from shared_kernel.observability_context import ObservationContext
from infrastructure.observability.probes import (
    ConnectionProbe,
    DefaultConnectionProbe,
)
from infrastructure.observability.startup_probe import (
    DefaultStartupProbe,
    StartupProbe,
)

__all__ = [
    "ConnectionProbe",
    "DefaultConnectionProbe",
    "DefaultStartupProbe",
    "ObservationContext",
    "StartupProbe",
]
