"""Participants of the Paxos and PBFT simulations.

Each protocol gets its own record type because the roles carry different
state: Paxos servers track promises and accepted values, PBFT replicas
track phase and vote counts.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum

from algosim.errors import TopologyError

logger = logging.getLogger(__name__)


# ----------------------------------------------------------------------
# Paxos
# ----------------------------------------------------------------------


class Role(str, Enum):
    PROPOSER = "proposer"
    ACCEPTOR = "acceptor"
    LEARNER = "learner"


class PaxosPhase(str, Enum):
    IDLE = "idle"
    PREPARE = "prepare"
    ACCEPT = "accept"
    LEARN = "learn"


@dataclass
class PaxosServer:
    """A Paxos participant.

    Attributes:
        id: Server number; server 0 is the proposer.
        role: Proposer, acceptor or learner.
        promised_round: Highest round this acceptor promised, if any.
        accepted_round: Round of the last accepted proposal, if any.
        accepted_value: Value of the last accepted proposal (or the learned
            value for learners).
        learned: True once a learner has received the chosen value.
        failed: True if the server is unresponsive (fault injected).
    """

    id: int
    role: Role
    promised_round: int | None = None
    accepted_round: int | None = None
    accepted_value: str | None = None
    learned: bool = False
    failed: bool = False


@dataclass(frozen=True)
class PaxosServerSnapshot:
    id: int
    role: Role
    promised_round: int | None
    accepted_round: int | None
    accepted_value: str | None
    learned: bool
    failed: bool


@dataclass(frozen=True)
class PaxosClusterSnapshot:
    phase: PaxosPhase
    servers: tuple[PaxosServerSnapshot, ...]


class PaxosCluster:
    """One proposer, ``acceptors`` acceptors and ``learners`` learners.

    Server ids are assigned in that order starting at 0.
    """

    def __init__(self, acceptors: int = 3, learners: int = 2) -> None:
        if acceptors < 1:
            raise TopologyError("a Paxos cluster needs at least one acceptor")
        if learners < 0:
            raise TopologyError("learner count must be >= 0")
        self._servers: list[PaxosServer] = [PaxosServer(0, Role.PROPOSER)]
        for _ in range(acceptors):
            self._servers.append(PaxosServer(len(self._servers), Role.ACCEPTOR))
        for _ in range(learners):
            self._servers.append(PaxosServer(len(self._servers), Role.LEARNER))
        self.phase = PaxosPhase.IDLE

    @property
    def servers(self) -> tuple[PaxosServer, ...]:
        return tuple(self._servers)

    @property
    def proposer(self) -> PaxosServer:
        return self._servers[0]

    @property
    def acceptors(self) -> list[PaxosServer]:
        return [s for s in self._servers if s.role is Role.ACCEPTOR]

    @property
    def learners(self) -> list[PaxosServer]:
        return [s for s in self._servers if s.role is Role.LEARNER]

    @property
    def majority(self) -> int:
        """Votes needed to advance a phase: ceil(acceptors / 2)."""
        return math.ceil(len(self.acceptors) / 2)

    @property
    def failed_ids(self) -> list[int]:
        return [s.id for s in self._servers if s.failed]

    def server(self, server_id: int) -> PaxosServer:
        for server in self._servers:
            if server.id == server_id:
                return server
        raise TopologyError(f"unknown Paxos server {server_id!r}")

    def highest_promise(self) -> int:
        """Highest round any acceptor has promised (0 if none)."""
        return max((a.promised_round or 0 for a in self.acceptors), default=0)

    def set_failed(self, server_id: int, failed: bool = True) -> None:
        server = self.server(server_id)
        if server.role is Role.PROPOSER and failed:
            raise TopologyError("the proposer cannot be marked as failed")
        server.failed = failed
        logger.info("Paxos server %d %s", server_id, "failed" if failed else "recovered")

    def snapshot(self) -> PaxosClusterSnapshot:
        return PaxosClusterSnapshot(
            phase=self.phase,
            servers=tuple(PaxosServerSnapshot(**vars(s)) for s in self._servers),
        )

    def __repr__(self) -> str:
        return (
            f"PaxosCluster(acceptors={len(self.acceptors)}, "
            f"learners={len(self.learners)}, phase={self.phase.value})"
        )


# ----------------------------------------------------------------------
# PBFT
# ----------------------------------------------------------------------


class PbftPhase(str, Enum):
    IDLE = "idle"
    PRE_PREPARE = "pre-prepare"
    PREPARE = "prepare"
    COMMIT = "commit"
    REPLY = "reply"


@dataclass
class PbftReplica:
    """A PBFT replica.

    Attributes:
        id: Replica number.
        is_primary: True for the replica that orders requests.
        is_byzantine: True if the replica is faulty and ignored in tallies.
        phase: Last protocol phase this replica entered.
        prepare_count: PREPAREs counted, including the replica's own vote.
        commit_count: COMMITs counted, including the replica's own vote.
        value: Request the replica is working on.
        replied: True once the replica replied to the client.
    """

    id: int
    is_primary: bool = False
    is_byzantine: bool = False
    phase: PbftPhase = PbftPhase.IDLE
    prepare_count: int = 0
    commit_count: int = 0
    value: str | None = None
    replied: bool = False

    def reset_round(self) -> None:
        """Clear per-request state. The Byzantine flag is kept."""
        self.phase = PbftPhase.IDLE
        self.prepare_count = 0
        self.commit_count = 0
        self.value = None
        self.replied = False


@dataclass(frozen=True)
class PbftReplicaSnapshot:
    id: int
    is_primary: bool
    is_byzantine: bool
    phase: PbftPhase
    prepare_count: int
    commit_count: int
    value: str | None
    replied: bool


@dataclass(frozen=True)
class PbftClusterSnapshot:
    n: int
    f: int
    quorum: int
    replicas: tuple[PbftReplicaSnapshot, ...]


class PbftCluster:
    """``n`` replicas with one primary.

    ``f = (n - 1) // 3`` Byzantine replicas are tolerated and phases need
    ``quorum = 2f + 1`` matching votes.
    """

    def __init__(self, replicas: int = 5, primary: int = 0) -> None:
        if replicas < 1:
            raise TopologyError("a PBFT cluster needs at least one replica")
        if not 0 <= primary < replicas:
            raise TopologyError(f"primary {primary} is not a replica id")
        self._replicas = [PbftReplica(i, is_primary=(i == primary)) for i in range(replicas)]

    @property
    def replicas(self) -> tuple[PbftReplica, ...]:
        return tuple(self._replicas)

    @property
    def n(self) -> int:
        return len(self._replicas)

    @property
    def f(self) -> int:
        return (self.n - 1) // 3

    @property
    def quorum(self) -> int:
        return 2 * self.f + 1

    @property
    def primary(self) -> PbftReplica:
        return next(r for r in self._replicas if r.is_primary)

    @property
    def honest(self) -> list[PbftReplica]:
        return [r for r in self._replicas if not r.is_byzantine]

    @property
    def byzantine_ids(self) -> list[int]:
        return [r.id for r in self._replicas if r.is_byzantine]

    def replica(self, replica_id: int) -> PbftReplica:
        for replica in self._replicas:
            if replica.id == replica_id:
                return replica
        raise TopologyError(f"unknown PBFT replica {replica_id!r}")

    def set_byzantine(self, replica_id: int, byzantine: bool = True) -> None:
        replica = self.replica(replica_id)
        if replica.is_primary and byzantine:
            raise TopologyError("the primary cannot be marked Byzantine")
        replica.is_byzantine = byzantine
        logger.info(
            "PBFT replica %d marked %s", replica_id, "Byzantine" if byzantine else "honest"
        )

    def reset_round(self) -> None:
        for replica in self._replicas:
            replica.reset_round()

    def snapshot(self) -> PbftClusterSnapshot:
        return PbftClusterSnapshot(
            n=self.n,
            f=self.f,
            quorum=self.quorum,
            replicas=tuple(PbftReplicaSnapshot(**vars(r)) for r in self._replicas),
        )

    def __repr__(self) -> str:
        return f"PbftCluster(n={self.n}, f={self.f}, byzantine={self.byzantine_ids})"
