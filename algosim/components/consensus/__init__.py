"""Consensus protocol executors: single-decree Paxos and PBFT."""

from algosim.components.consensus.messages import BROADCAST, CLIENT, Message, MessageType
from algosim.components.consensus.paxos import choose_value, paxos
from algosim.components.consensus.pbft import count_received, pbft

__all__ = [
    "BROADCAST",
    "CLIENT",
    "Message",
    "MessageType",
    "choose_value",
    "count_received",
    "paxos",
    "pbft",
]
