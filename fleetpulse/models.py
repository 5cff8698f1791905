from dataclasses import dataclass, field
from datetime import datetime
from typing import Tuple


@dataclass(frozen=True)
class ConnectionObservation:
    target_ip: str
    latency: float       # ms
    packet_loss: float   # %
    is_connected: bool


@dataclass(frozen=True)
class NodeReport:
    node_ip: str
    timestamp: datetime  # measurement time, not receipt time
    connections: Tuple[ConnectionObservation, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class HistoryEntry:
    timestamp: datetime
    connections: Tuple[ConnectionObservation, ...]

    @classmethod
    def from_report(cls, report: NodeReport) -> "HistoryEntry":
        return cls(timestamp=report.timestamp, connections=report.connections)
