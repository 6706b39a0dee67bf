"""
Gangs - Per-gang aggregate and its collaborators.

One authoritative progression record per gang ID, reachable only
through GangProgressionFacade. The facade serializes mutations per
gang (GangLockRegistry) and talks to:
- A ProgressionStore (load/save/delete records)
- A FundsCollaborator (ordinary gang funds for upgrades)
"""

from .facade import GangProgressionFacade, build_facade
from .locks import GangLockRegistry
from .store import ProgressionStore, InMemoryProgressionStore, JsonFileProgressionStore
from .funds import FundsCollaborator, InMemoryFundsLedger

__all__ = [
    "GangProgressionFacade",
    "build_facade",
    "GangLockRegistry",
    "ProgressionStore",
    "InMemoryProgressionStore",
    "JsonFileProgressionStore",
    "FundsCollaborator",
    "InMemoryFundsLedger",
]
