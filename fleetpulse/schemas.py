from datetime import datetime
from typing import List

from pydantic import AwareDatetime, BaseModel, ConfigDict, StrictBool, StrictFloat

from .models import ConnectionObservation, NodeReport


class ConnectionIn(BaseModel):
    target_ip: str
    latency: StrictFloat = 0.0
    packet_loss: StrictFloat = 0.0
    is_connected: StrictBool = False


class NodeStatusIn(BaseModel):
    node_ip: str
    timestamp: AwareDatetime
    connections: List[ConnectionIn] = []

    def to_report(self) -> NodeReport:
        return NodeReport(
            node_ip=self.node_ip,
            timestamp=self.timestamp,
            connections=tuple(ConnectionObservation(**c.model_dump()) for c in self.connections),
        )


class ConnectionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    target_ip: str
    latency: float
    packet_loss: float
    is_connected: bool


class NodeStatusOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    node_ip: str
    timestamp: datetime
    connections: List[ConnectionOut]


class HistoryEntryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    timestamp: datetime
    connections: List[ConnectionOut]
