"""Single-decree Paxos with one proposer, as a resumable step sequence.

Server 0 proposes; acceptors vote; learners are told the chosen value.
The protocol proceeds in two phases:

- Phase 1 (Prepare/Promise): the proposer sends PREPARE(n); an acceptor
  promises if it has not promised a round >= n, and reports any value it
  accepted earlier.
- Phase 2 (Accept/Accepted): the proposer sends ACCEPT(n, v), where v is
  the value of the highest-round earlier accept among the promises (or
  its own value if there is none); acceptors accept if n is at least
  their promise.

Acceptor state survives between runs, so a second run with a higher
round re-proposes the value chosen earlier. Failed servers never answer.
"""

from __future__ import annotations

import logging

from algosim.components.consensus.messages import Message, MessageType
from algosim.core.step import Executor, ExecutorKind, RunOutcome, Step
from algosim.core.trace import StepKind, StepTrace
from algosim.errors import TopologyError
from algosim.models.cluster import PaxosCluster, PaxosPhase

logger = logging.getLogger(__name__)

KIND = ExecutorKind.PAXOS


def choose_value(promises: list[Message], default: str) -> tuple[str, int | None]:
    """Pick the value phase 2 must propose.

    Returns:
        ``(value, prior_round)`` where ``prior_round`` is the highest earlier
        accepted round among the promises, or None if no acceptor had
        accepted anything (then ``value`` is ``default``).
    """
    chosen = default
    highest: int | None = None
    for promise in promises:
        if promise.prior_round is None:
            continue
        if highest is None or promise.prior_round > highest:
            highest = promise.prior_round
            chosen = promise.prior_value
    return chosen, highest


def paxos(
    cluster: PaxosCluster,
    trace: StepTrace,
    round: int | None = None,
    value: str = "Value-A",
) -> Executor:
    """Create a Paxos executor.

    Args:
        cluster: Participants to run on.
        trace: Trace to append to.
        round: Proposal number. Defaults to one above the highest promise
            any acceptor holds.
        value: Value the proposer wants chosen.

    Raises:
        TopologyError: If ``round`` is not a positive integer or ``value``
            is empty.
    """
    if round is None:
        round = cluster.highest_promise() + 1
    if isinstance(round, bool) or not isinstance(round, int) or round < 1:
        raise TopologyError(f"proposal round must be a positive integer, got {round!r}")
    if not value:
        raise TopologyError("proposal value must not be empty")
    return _run(cluster, trace, round, str(value))


def _run(cluster: PaxosCluster, trace: StepTrace, n: int, value: str) -> Executor:
    proposer = cluster.proposer
    acceptors = cluster.acceptors
    majority = cluster.majority
    faulty = cluster.failed_ids

    for server_id in faulty:
        role = cluster.server(server_id).role.value
        trace.append(
            f"⚠️ Server {server_id} ({role}) is unresponsive (fault injected)",
            StepKind.WARNING,
        )

    # Phase 1a
    cluster.phase = PaxosPhase.PREPARE
    trace.append(f"Phase 1a: Proposer sends PREPARE(n={n}) to acceptors", StepKind.PHASE)
    prepares = tuple(
        Message(proposer.id, a.id, MessageType.PREPARE, round=n) for a in acceptors
    )
    yield Step("prepare", focus=proposer.id, messages=prepares)

    # Phase 1b
    promises: list[Message] = []
    for acceptor in acceptors:
        if acceptor.failed:
            trace.append(f"Phase 1b: Acceptor {acceptor.id} does not respond", StepKind.WARNING)
            continue
        if acceptor.promised_round is None or n > acceptor.promised_round:
            acceptor.promised_round = n
            promises.append(
                Message(
                    acceptor.id,
                    proposer.id,
                    MessageType.PROMISE,
                    round=n,
                    prior_round=acceptor.accepted_round,
                    prior_value=acceptor.accepted_value,
                )
            )
            earlier = (
                f" (previously accepted: {acceptor.accepted_value})"
                if acceptor.accepted_value is not None
                else ""
            )
            trace.append(
                f"Phase 1b: Acceptor {acceptor.id} promises to accept n={n}{earlier}",
                StepKind.ACCEPT,
            )
        else:
            trace.append(
                f"Phase 1b: Acceptor {acceptor.id} rejects "
                f"(already promised n={acceptor.promised_round})",
                StepKind.REJECT,
            )
    yield Step("promise", focus=proposer.id, messages=tuple(promises))

    if len(promises) < majority:
        return _fail(
            cluster, trace, faulty, "❌ Failed to get majority promises", "no majority promise",
            round=n, promises=len(promises), accepted=0,
        )
    trace.append(
        f"✓ Received majority promises ({len(promises)}/{len(acceptors)})", StepKind.INFO
    )

    chosen, prior_round = choose_value(promises, value)
    if prior_round is not None:
        trace.append(
            f"Using previously accepted value: {chosen} (from round {prior_round})",
            StepKind.INFO,
        )

    # Phase 2a
    cluster.phase = PaxosPhase.ACCEPT
    yield Step("phase", focus=proposer.id, pause=0.5)
    trace.append(
        f"Phase 2a: Proposer sends ACCEPT(n={n}, value={chosen})", StepKind.PHASE
    )
    accepts = tuple(
        Message(proposer.id, a.id, MessageType.ACCEPT, round=n, value=chosen)
        for a in acceptors
    )
    yield Step("accept", focus=proposer.id, messages=accepts)

    # Phase 2b
    accepted: list[Message] = []
    for acceptor in acceptors:
        if acceptor.failed:
            trace.append(f"Phase 2b: Acceptor {acceptor.id} does not respond", StepKind.WARNING)
            continue
        if acceptor.promised_round is not None and n >= acceptor.promised_round:
            acceptor.accepted_round = n
            acceptor.accepted_value = chosen
            accepted.append(
                Message(acceptor.id, proposer.id, MessageType.ACCEPTED, round=n, value=chosen)
            )
            trace.append(
                f"Phase 2b: Acceptor {acceptor.id} accepted (n={n}, value={chosen})",
                StepKind.ACCEPT,
            )
        else:
            trace.append(
                f"Phase 2b: Acceptor {acceptor.id} rejects ACCEPT "
                f"(promised n={acceptor.promised_round})",
                StepKind.REJECT,
            )
    yield Step("accepted", focus=proposer.id, messages=tuple(accepted))

    if len(accepted) < majority:
        return _fail(
            cluster, trace, faulty, "❌ Failed to get majority acceptance", "no majority accept",
            round=n, promises=len(promises), accepted=len(accepted),
        )
    trace.append(f"✓ Majority accepted ({len(accepted)}/{len(acceptors)})", StepKind.INFO)

    # Learn: every learner hears the value from the first acceptor that accepted.
    cluster.phase = PaxosPhase.LEARN
    yield Step("phase", pause=0.5)
    informant = accepted[0].sender
    learners = cluster.learners
    notices = tuple(
        Message(informant, learner.id, MessageType.ACCEPTED, round=n, value=chosen)
        for learner in learners
    )
    trace.append(f"Learners receive consensus value: {chosen}", StepKind.MESSAGE)
    for learner in learners:
        if learner.failed:
            trace.append(f"Learner {learner.id} is unresponsive and did not learn", StepKind.WARNING)
            continue
        learner.learned = True
        learner.accepted_value = chosen
    yield Step("learn", focus=informant, messages=notices)

    tolerated = _report_faults(trace, faulty, True, majority, len(acceptors))
    trace.append(f"🎉 Consensus achieved: {chosen}", StepKind.SUCCESS)
    cluster.phase = PaxosPhase.IDLE
    logger.info("Paxos round %d chose %r", n, chosen)
    return RunOutcome.succeeded(
        KIND,
        value=chosen,
        round=n,
        promises=len(promises),
        accepted=len(accepted),
        learners=[l.id for l in learners if l.learned],
        fault_tolerated=tolerated,
    )


def _fail(
    cluster: PaxosCluster,
    trace: StepTrace,
    faulty: list[int],
    line: str,
    reason: str,
    **details,
) -> RunOutcome:
    tolerated = _report_faults(trace, faulty, False, cluster.majority, len(cluster.acceptors))
    trace.append(line, StepKind.FAILURE)
    cluster.phase = PaxosPhase.IDLE
    logger.info("Paxos round %s failed: %s", details.get("round"), reason)
    return RunOutcome.failed(KIND, reason, fault_tolerated=tolerated, **details)


def _report_faults(
    trace: StepTrace, faulty: list[int], reached: bool, majority: int, acceptors: int
) -> bool | None:
    if not faulty:
        return None
    ids = ", ".join(str(i) for i in faulty)
    if reached:
        trace.append(
            f"✓ Faulty server(s) {ids} tolerated (majority {majority} of {acceptors} acceptors)",
            StepKind.INFO,
        )
    else:
        trace.append(
            f"✗ Faulty server(s) {ids} not tolerated (majority {majority} of {acceptors} acceptors)",
            StepKind.WARNING,
        )
    return reached
