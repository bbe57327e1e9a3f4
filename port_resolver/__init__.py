"""Top-level package for the Port Resolver project.

Turns free-text cruise port labels ("Hilo, HI", "Port of Seattle",
"Cozumel (Mexico)") into geographic port entries, using bundled
reference datasets, a persistent LRU + TTL cache of previous answers
and, when local matches are weak, an online geocoder.

Consumers normally go through ``port_resolver.api``.
"""

from .domain.models import PortEntry, PortSource, ScoredPort

__all__ = ["PortEntry", "PortSource", "ScoredPort"]
