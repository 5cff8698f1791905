from datetime import datetime, timezone

import pytest

from fleetpulse.models import ConnectionObservation, NodeReport

T0 = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def make_report(node_ip="10.0.0.2", timestamp=T0, target_ip="10.0.0.3",
                latency=12.5, packet_loss=0.0, is_connected=True, connections=None):
    if connections is None:
        connections = (ConnectionObservation(target_ip, latency, packet_loss, is_connected),)
    return NodeReport(node_ip=node_ip, timestamp=timestamp, connections=connections)


@pytest.fixture
def report():
    return make_report()
