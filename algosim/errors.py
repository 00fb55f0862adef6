"""Exceptions raised for rejected user input.

Algorithmic dead ends (unreachable target, disconnected graph, failed
quorum) are not exceptions; they end a run with a failed ``RunOutcome``.
"""

from __future__ import annotations


class AlgosimError(Exception):
    """Base class for algosim errors."""


class TopologyError(AlgosimError, ValueError):
    """An edit or run parameter does not fit the current model.

    Raised before anything is mutated, so the model is left unchanged.
    """
