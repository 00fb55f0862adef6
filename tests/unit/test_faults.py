"""Unit tests for consensus fault injection."""

from __future__ import annotations

import pytest

from algosim.errors import TopologyError
from algosim.faults import (
    ByzantineReplica,
    CrashServer,
    Fault,
    FaultContext,
    active_faults,
    heal_all,
)
from algosim.models.cluster import PaxosCluster, PbftCluster

# =============================================================================
# Helpers
# =============================================================================


@pytest.fixture
def ctx() -> FaultContext:
    return FaultContext(PaxosCluster(acceptors=3, learners=2), PbftCluster(replicas=5))


# =============================================================================
# CrashServer
# =============================================================================


class TestCrashServer:
    def test_is_a_fault(self):
        assert isinstance(CrashServer(1), Fault)

    def test_inject_and_heal(self, ctx):
        fault = CrashServer(2)
        fault.inject(ctx)
        assert ctx.paxos.server(2).failed is True

        fault.heal(ctx)
        assert ctx.paxos.server(2).failed is False

    def test_learner_can_crash(self, ctx):
        CrashServer(5).inject(ctx)
        assert ctx.paxos.failed_ids == [5]

    def test_proposer_cannot_crash(self, ctx):
        with pytest.raises(TopologyError, match="proposer"):
            CrashServer(0).inject(ctx)

    def test_unknown_server(self, ctx):
        with pytest.raises(TopologyError):
            CrashServer(42).inject(ctx)

    def test_logs_injection(self, ctx, caplog):
        with caplog.at_level("INFO", logger="algosim.faults"):
            CrashServer(1).inject(ctx)
        assert "[FaultInjection] Crashed Paxos server 1" in caplog.text


# =============================================================================
# ByzantineReplica
# =============================================================================


class TestByzantineReplica:
    def test_inject_and_heal(self, ctx):
        fault = ByzantineReplica(3)
        fault.inject(ctx)
        assert ctx.pbft.byzantine_ids == [3]

        fault.heal(ctx)
        assert ctx.pbft.byzantine_ids == []

    def test_primary_cannot_be_byzantine(self, ctx):
        with pytest.raises(TopologyError, match="primary"):
            ByzantineReplica(0).inject(ctx)

    def test_more_than_f_allowed(self, ctx):
        """Exceeding the tolerance is allowed so the failure can be shown."""
        ByzantineReplica(1).inject(ctx)
        ByzantineReplica(2).inject(ctx)
        assert len(ctx.pbft.byzantine_ids) > ctx.pbft.f


# =============================================================================
# Helpers
# =============================================================================


class TestActiveFaults:
    def test_lists_current_faults(self, ctx):
        CrashServer(1).inject(ctx)
        ByzantineReplica(4).inject(ctx)
        assert active_faults(ctx) == [CrashServer(1), ByzantineReplica(4)]

    def test_heal_all(self, ctx):
        CrashServer(1).inject(ctx)
        CrashServer(3).inject(ctx)
        ByzantineReplica(2).inject(ctx)

        assert heal_all(ctx) == 3
        assert active_faults(ctx) == []

    def test_heal_all_when_clean(self, ctx):
        assert heal_all(ctx) == 0
