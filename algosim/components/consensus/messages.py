"""Transient protocol messages shown between two steps.

Messages carry no behaviour: the simulators update participant state
directly when a round of messages is processed and attach the messages
to the step only so renderers can draw them.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

BROADCAST = "all"
CLIENT = -1


class MessageType(str, Enum):
    PREPARE = "prepare"
    PROMISE = "promise"
    ACCEPT = "accept"
    ACCEPTED = "accepted"
    PRE_PREPARE = "pre-prepare"
    COMMIT = "commit"
    REPLY = "reply"


@dataclass(frozen=True)
class Message:
    """A single protocol message.

    Attributes:
        sender: Participant id of the sender.
        recipient: Participant id, ``BROADCAST`` or ``CLIENT``.
        type: Message type.
        round: Paxos proposal number, or None for PBFT.
        view: PBFT view, or None for Paxos.
        sequence: PBFT sequence number, or None for Paxos.
        value: Proposed / agreed value, if carried.
        prior_round: Paxos promise: round of the acceptor's last accept.
        prior_value: Paxos promise: value of the acceptor's last accept.
    """

    sender: int
    recipient: int | str
    type: MessageType
    round: int | None = None
    view: int | None = None
    sequence: int | None = None
    value: str | None = None
    prior_round: int | None = None
    prior_value: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "from": self.sender,
            "to": self.recipient,
            "type": self.type.value,
        }
        for key in ("round", "view", "sequence", "value", "prior_round", "prior_value"):
            val = getattr(self, key)
            if val is not None:
                data[key] = val
        return data
