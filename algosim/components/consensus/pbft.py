"""Practical Byzantine Fault Tolerance, one client request, as a step sequence.

The primary orders the request (pre-prepare); honest backups broadcast
PREPARE; replicas that count a quorum of PREPAREs broadcast COMMIT;
replicas that count more than a quorum of COMMITs reply to the client.
Every count includes the replica's own implicit vote. Byzantine replicas
stay silent and are left out of every tally.
"""

from __future__ import annotations

import logging

from algosim.components.consensus.messages import CLIENT, Message, MessageType
from algosim.core.step import Executor, ExecutorKind, RunOutcome, Step
from algosim.core.trace import StepKind, StepTrace
from algosim.errors import TopologyError
from algosim.models.cluster import PbftCluster, PbftPhase, PbftReplica

logger = logging.getLogger(__name__)

KIND = ExecutorKind.PBFT


def count_received(messages: list[Message], replica_id: int) -> int:
    """Messages addressed to ``replica_id`` plus the replica's own vote."""
    return sum(1 for m in messages if m.recipient == replica_id) + 1


def pbft(
    cluster: PbftCluster,
    trace: StepTrace,
    request: str = "Transaction-X",
    view: int = 0,
    sequence: int = 1,
) -> Executor:
    """Create a PBFT executor for one client request.

    Per-request replica state is cleared before the run starts; Byzantine
    flags are kept.

    Raises:
        TopologyError: If ``request`` is empty or ``view``/``sequence`` are
            out of range.
    """
    if not request:
        raise TopologyError("client request must not be empty")
    if view < 0 or sequence < 1:
        raise TopologyError(f"invalid view/sequence ({view}, {sequence})")
    cluster.reset_round()
    return _run(cluster, trace, str(request), view, sequence)


def _run(
    cluster: PbftCluster, trace: StepTrace, request: str, view: int, seq: int
) -> Executor:
    replicas = cluster.replicas
    n, f, quorum = cluster.n, cluster.f, cluster.quorum
    byzantine = cluster.byzantine_ids
    primary = cluster.primary

    for replica_id in byzantine:
        trace.append(f"⚠️ Node {replica_id} is Byzantine (faulty)", StepKind.WARNING)
    trace.append(f"Starting PBFT with {n} replicas (f={f}, quorum={quorum})", StepKind.START)
    trace.append(f"Client sends request: {request}", StepKind.MESSAGE)
    yield Step("request", focus=CLIENT)

    # Pre-prepare
    trace.append(f"Pre-Prepare: Primary ({primary.id}) broadcasts request", StepKind.PHASE)
    primary.phase = PbftPhase.PRE_PREPARE
    primary.value = request
    pre_prepares = tuple(
        Message(primary.id, r.id, MessageType.PRE_PREPARE, view=view, sequence=seq, value=request)
        for r in replicas
        if not r.is_primary
    )
    yield Step("pre-prepare", focus=primary.id, messages=pre_prepares)

    backups = [r for r in replicas if not r.is_primary and not r.is_byzantine]
    for replica in backups:
        replica.value = request
        replica.phase = PbftPhase.PRE_PREPARE
    yield Step("phase", pause=0.5)

    # Prepare
    trace.append("Prepare: Replicas broadcast PREPARE messages", StepKind.PHASE)
    prepares: list[Message] = []
    for replica in backups:
        replica.phase = PbftPhase.PREPARE
        prepares.extend(_broadcast(replica, replicas, MessageType.PREPARE, view, seq, request))
    yield Step("prepare", messages=tuple(prepares))

    honest = cluster.honest
    for replica in honest:
        replica.prepare_count = count_received(prepares, replica.id)
        trace.append(
            f"Replica {replica.id} received {replica.prepare_count} PREPARE messages",
            StepKind.MESSAGE,
        )
    yield Step("phase", pause=0.5)

    prepared = [r for r in honest if r.prepare_count >= quorum]
    if not prepared:
        return _fail(cluster, trace, "❌ Failed to reach prepare quorum",
                     "failed to reach prepare quorum", request, prepared=0, committed=0)
    trace.append(
        f"✓ {len(prepared)} replicas reached prepare quorum ({quorum} needed)", StepKind.INFO
    )

    # Commit
    trace.append("Commit: Prepared replicas broadcast COMMIT messages", StepKind.PHASE)
    commits: list[Message] = []
    for replica in prepared:
        replica.phase = PbftPhase.COMMIT
        commits.extend(_broadcast(replica, replicas, MessageType.COMMIT, view, seq, None))
    yield Step("commit", messages=tuple(commits))

    for replica in honest:
        replica.commit_count = count_received(commits, replica.id)
        trace.append(
            f"Replica {replica.id} received {replica.commit_count} COMMIT messages",
            StepKind.MESSAGE,
        )
    yield Step("phase", pause=0.5)

    committed = [r for r in honest if r.commit_count >= quorum + 1]
    if not committed:
        return _fail(cluster, trace, "❌ Failed to reach commit quorum",
                     "failed to reach commit quorum", request,
                     prepared=len(prepared), committed=0)
    trace.append(f"✓ {len(committed)} replicas reached commit quorum", StepKind.INFO)

    # Reply
    trace.append("Reply: Replicas send REPLY to client", StepKind.PHASE)
    for replica in committed:
        replica.phase = PbftPhase.REPLY
        replica.replied = True
    replies = tuple(
        Message(r.id, CLIENT, MessageType.REPLY, view=view, sequence=seq, value=request)
        for r in committed
    )
    yield Step("reply", focus=CLIENT, messages=replies)

    trace.append(
        f"🎉 Consensus achieved! Client received {len(committed)} matching replies",
        StepKind.SUCCESS,
    )
    tolerated = None
    if byzantine:
        tolerated = True
        ids = ", ".join(str(i) for i in byzantine)
        trace.append(f"✓ Byzantine node {ids} was tolerated ({f} failures max)", StepKind.INFO)
    trace.append(f'Request "{request}" committed successfully', StepKind.SUCCESS)
    logger.info("PBFT committed %r with %d replies", request, len(committed))
    return RunOutcome.succeeded(
        KIND,
        request=request,
        view=view,
        sequence=seq,
        prepared=len(prepared),
        committed=len(committed),
        replied=[r.id for r in committed],
        fault_tolerated=tolerated,
    )


def _broadcast(
    sender: PbftReplica,
    replicas: tuple[PbftReplica, ...],
    type: MessageType,
    view: int,
    seq: int,
    value: str | None,
) -> list[Message]:
    return [
        Message(sender.id, other.id, type, view=view, sequence=seq, value=value)
        for other in replicas
        if other.id != sender.id
    ]


def _fail(
    cluster: PbftCluster,
    trace: StepTrace,
    line: str,
    reason: str,
    request: str,
    **details,
) -> RunOutcome:
    byzantine = cluster.byzantine_ids
    tolerated = None
    if byzantine:
        tolerated = False
        ids = ", ".join(str(i) for i in byzantine)
        trace.append(
            f"✗ Byzantine node(s) {ids} exceed tolerance ({cluster.f} failures max)",
            StepKind.WARNING,
        )
    trace.append(line, StepKind.FAILURE)
    logger.info("PBFT request %r failed: %s", request, reason)
    return RunOutcome.failed(KIND, reason, request=request, fault_tolerated=tolerated, **details)
