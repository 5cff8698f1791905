import ipaddress, math
from datetime import datetime
from numbers import Real

from ..errors import MalformedInput
from ..models import ConnectionObservation, NodeReport


def is_valid_ipv4(ip) -> bool:
    if not isinstance(ip, str):
        return False
    try:
        ipaddress.IPv4Address(ip)
    except ValueError:
        return False
    return True


def _is_number(value) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool) and math.isfinite(value)


def validate_connection(conn: ConnectionObservation) -> None:
    if not is_valid_ipv4(conn.target_ip):
        raise MalformedInput(f"invalid target ip: {conn.target_ip!r}")
    if not _is_number(conn.latency) or conn.latency < 0:
        raise MalformedInput(f"invalid latency for {conn.target_ip}: {conn.latency!r}")
    if not _is_number(conn.packet_loss) or not 0 <= conn.packet_loss <= 100:
        raise MalformedInput(f"invalid packet loss for {conn.target_ip}: {conn.packet_loss!r}")


def validate_report(report: NodeReport) -> None:
    """Raise MalformedInput unless the whole report is admissible."""
    if not is_valid_ipv4(report.node_ip):
        raise MalformedInput(f"invalid node ip: {report.node_ip!r}")
    if not isinstance(report.timestamp, datetime) or report.timestamp.utcoffset() is None:
        raise MalformedInput("timestamp must be a timezone-aware datetime")
    if not report.connections:
        raise MalformedInput("report has no connections")
    for conn in report.connections:
        validate_connection(conn)
