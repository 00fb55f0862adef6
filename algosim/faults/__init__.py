"""Fault injection for the consensus simulations.

Provides declarative participant faults plus helpers to list and clear
the faults currently set on the clusters.
"""

from algosim.faults.fault import Fault, FaultContext, active_faults, heal_all
from algosim.faults.participant_faults import ByzantineReplica, CrashServer

__all__ = [
    "ByzantineReplica",
    "CrashServer",
    "Fault",
    "FaultContext",
    "active_faults",
    "heal_all",
]
