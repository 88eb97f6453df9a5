"""Live data synchronization: polling cadence and latest-wins lookups."""

from .sequence import SUPERSEDED, SequenceGuard
from .spot_poller import SpotPoller

__all__ = ["SUPERSEDED", "SequenceGuard", "SpotPoller"]
