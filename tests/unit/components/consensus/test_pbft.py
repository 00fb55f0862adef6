"""Tests for the PBFT executor."""

import pytest

from algosim.components.consensus import CLIENT, Message, MessageType, count_received, pbft
from algosim.core.trace import StepKind, StepTrace
from algosim.errors import TopologyError
from algosim.models.cluster import PbftCluster, PbftPhase


def run_to_end(executor):
    steps = []
    while True:
        try:
            steps.append(next(executor))
        except StopIteration as stop:
            return steps, stop.value


def make_cluster(n: int = 5, *byzantine: int) -> PbftCluster:
    cluster = PbftCluster(replicas=n)
    for replica_id in byzantine:
        cluster.set_byzantine(replica_id)
    return cluster


class TestPbftHealthy:
    """No Byzantine replicas."""

    def test_all_replicas_reply(self):
        cluster = make_cluster()
        trace = StepTrace()

        _, outcome = run_to_end(pbft(cluster, trace, "Transaction-X"))

        assert outcome.success is True
        assert outcome.details["replied"] == [0, 1, 2, 3, 4]
        assert outcome.details["fault_tolerated"] is None
        assert trace.lines[0] == "Starting PBFT with 5 replicas (f=1, quorum=3)"
        assert "🎉 Consensus achieved! Client received 5 matching replies" in trace.lines
        assert trace.last.line == 'Request "Transaction-X" committed successfully'

    def test_counts_include_own_vote(self):
        cluster = make_cluster()
        run_to_end(pbft(cluster, StepTrace()))

        primary = cluster.primary
        backup = cluster.replica(1)
        assert primary.prepare_count == 5
        assert backup.prepare_count == 4
        assert backup.commit_count == 5
        assert all(r.phase is PbftPhase.REPLY and r.replied for r in cluster.replicas)

    def test_reply_messages_go_to_client(self):
        steps, _ = run_to_end(pbft(make_cluster(), StepTrace()))

        reply = [s for s in steps if s.label == "reply"][0]
        assert len(reply.messages) == 5
        assert all(m.recipient == CLIENT and m.type is MessageType.REPLY for m in reply.messages)

    def test_rerun_starts_from_clean_counts(self):
        cluster = make_cluster()
        run_to_end(pbft(cluster, StepTrace()))
        run_to_end(pbft(cluster, StepTrace(), "Transaction-Y"))

        assert cluster.replica(1).prepare_count == 4
        assert cluster.replica(1).value == "Transaction-Y"


class TestPbftByzantine:
    """Byzantine replicas are excluded from every tally."""

    def test_one_byzantine_is_tolerated(self):
        cluster = make_cluster(5, 3)
        trace = StepTrace()

        _, outcome = run_to_end(pbft(cluster, trace))

        assert outcome.success is True
        assert outcome.details["replied"] == [0, 1, 2, 4]
        assert outcome.details["fault_tolerated"] is True
        assert trace.lines[0] == "⚠️ Node 3 is Byzantine (faulty)"
        assert "✓ Byzantine node 3 was tolerated (1 failures max)" in trace.lines
        assert cluster.replica(3).prepare_count == 0
        assert cluster.replica(3).replied is False

    def test_two_byzantine_fail_commit_quorum(self):
        cluster = make_cluster(5, 3, 4)
        trace = StepTrace()

        _, outcome = run_to_end(pbft(cluster, trace))

        assert outcome.success is False
        assert outcome.reason == "failed to reach commit quorum"
        assert outcome.details["prepared"] == 1
        assert outcome.details["fault_tolerated"] is False
        assert trace.last.line == "❌ Failed to reach commit quorum"
        assert trace.last.kind is StepKind.FAILURE
        assert not any(r.replied for r in cluster.replicas)

    def test_no_honest_backups_fail_prepare_quorum(self):
        cluster = make_cluster(4, 1, 2, 3)
        trace = StepTrace()

        _, outcome = run_to_end(pbft(cluster, trace))

        assert outcome.success is False
        assert outcome.reason == "failed to reach prepare quorum"
        assert trace.last.line == "❌ Failed to reach prepare quorum"


class TestPbftHelpers:
    """Helper and validation tests."""

    def test_count_received(self):
        messages = [
            Message(1, 2, MessageType.PREPARE),
            Message(3, 2, MessageType.PREPARE),
            Message(2, 1, MessageType.PREPARE),
        ]
        assert count_received(messages, 2) == 3
        assert count_received(messages, 4) == 1

    def test_empty_request_rejected(self):
        with pytest.raises(TopologyError):
            pbft(make_cluster(), StepTrace(), "")

    def test_invalid_sequence_rejected(self):
        with pytest.raises(TopologyError):
            pbft(make_cluster(), StepTrace(), sequence=0)
