"""Participant-level faults: crashed Paxos servers and Byzantine PBFT replicas.

``CrashServer`` sets ``failed`` on a Paxos acceptor or learner; a failed
server never answers. ``ByzantineReplica`` sets ``is_byzantine`` on a PBFT
backup; Byzantine replicas stay silent and are left out of every tally.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from algosim.faults.fault import FaultContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CrashServer:
    """Make a Paxos server unresponsive.

    Attributes:
        server_id: Id of the acceptor or learner to crash.
    """

    server_id: int

    def inject(self, ctx: FaultContext) -> None:
        ctx.paxos.set_failed(self.server_id, True)
        logger.info("[FaultInjection] Crashed Paxos server %d", self.server_id)

    def heal(self, ctx: FaultContext) -> None:
        ctx.paxos.set_failed(self.server_id, False)
        logger.info("[FaultInjection] Restarted Paxos server %d", self.server_id)


@dataclass(frozen=True)
class ByzantineReplica:
    """Make a PBFT backup Byzantine.

    Attributes:
        replica_id: Id of the replica to corrupt.
    """

    replica_id: int

    def inject(self, ctx: FaultContext) -> None:
        ctx.pbft.set_byzantine(self.replica_id, True)
        logger.info("[FaultInjection] Replica %d is Byzantine", self.replica_id)

    def heal(self, ctx: FaultContext) -> None:
        ctx.pbft.set_byzantine(self.replica_id, False)
        logger.info("[FaultInjection] Replica %d is honest again", self.replica_id)
