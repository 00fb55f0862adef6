"""Fault protocol and resolution context for participant fault injection.

Faults are declarations: a frozen dataclass naming a participant. They
are applied to the consensus clusters through a ``FaultContext`` and can
be removed again with ``heal``. The protocols read the resulting flags
when a run starts.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol, runtime_checkable, TYPE_CHECKING

if TYPE_CHECKING:
    from algosim.models.cluster import PaxosCluster, PbftCluster

logger = logging.getLogger(__name__)


@dataclass
class FaultContext:
    """Clusters a fault can resolve its target in.

    Attributes:
        paxos: The Paxos cluster.
        pbft: The PBFT cluster.
    """

    paxos: PaxosCluster
    pbft: PbftCluster


@runtime_checkable
class Fault(Protocol):
    """Protocol that all fault types implement."""

    def inject(self, ctx: FaultContext) -> None:
        """Mark the target participant faulty.

        Raises:
            TopologyError: If the participant does not exist or cannot be
                faulted (the Paxos proposer, the PBFT primary).
        """
        ...

    def heal(self, ctx: FaultContext) -> None:
        """Clear the fault flag on the target participant."""
        ...


def active_faults(ctx: FaultContext) -> list[Fault]:
    """Declarations for every fault currently set on the clusters."""
    from algosim.faults.participant_faults import ByzantineReplica, CrashServer

    faults: list[Fault] = [CrashServer(i) for i in ctx.paxos.failed_ids]
    faults.extend(ByzantineReplica(i) for i in ctx.pbft.byzantine_ids)
    return faults


def heal_all(ctx: FaultContext) -> int:
    """Clear every injected fault.

    Returns:
        Number of faults healed.
    """
    faults = active_faults(ctx)
    for fault in faults:
        fault.heal(ctx)
    if faults:
        logger.info("Healed %d fault(s)", len(faults))
    return len(faults)
