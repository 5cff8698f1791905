import asyncio, json, logging, re
from datetime import datetime, timezone
from typing import Any, Dict, List, Tuple

import httpx

from ..models import ConnectionObservation, NodeReport
from ..schemas import NodeStatusOut
from .validation import is_valid_ipv4

logger = logging.getLogger(__name__)

# "rtt min/avg/max/mdev = ..." (Linux), "round-trip min/avg/max/stddev = ..." (BSD)
# o "round-trip min/avg/max = ..." (BusyBox)
_SUMMARY_RE = re.compile(r"(?:rtt|round-trip)\s+min/avg/max(?:/\w+)?\s*=\s*([\d.]+)/([\d.]+)/")
_LOSS_RE = re.compile(r"([\d.]+)%\s+packet loss")


def load_peers(raw) -> List[str]:
    if isinstance(raw, list):
        data = raw
    else:
        try:
            data = json.loads(raw or "[]")
        except ValueError as e:
            logger.warning("PEERS inválido: %s", e)
            return []
    if not isinstance(data, list):
        logger.warning("PEERS debe ser lista, recibido %s", type(data).__name__)
        return []
    return [p for p in data if is_valid_ipv4(p)]


def parse_ping_output(output: str) -> Tuple[float, float]:
    """Average latency (ms) and packet loss (%) from ping's summary lines.

    Unparsable latency reads as 0 and unparsable loss as 100.
    """
    latency, loss = 0.0, 100.0
    if not output:
        return latency, loss
    m = _SUMMARY_RE.search(output)
    if m:
        latency = float(m.group(2))
    m = _LOSS_RE.search(output)
    if m:
        loss = min(100.0, max(0.0, float(m.group(1))))
    return latency, loss


def is_connected(latency: float, loss: float, threshold_ms: float) -> bool:
    return loss < 100 and latency < threshold_ms


async def probe(target: str, count: int = 4, timeout: float = 10.0,
                threshold_ms: float = 1000.0) -> ConnectionObservation:
    cmd = ["ping", "-c", str(count), target]
    try:
        proc = await asyncio.create_subprocess_exec(
            *cmd, stdout=asyncio.subprocess.PIPE, stderr=asyncio.subprocess.DEVNULL)
    except OSError as ex:
        logger.warning("No se pudo ejecutar ping para %s: %s", target, ex)
        return ConnectionObservation(target, 0.0, 100.0, False)

    try:
        out, _ = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        proc.kill()
        await proc.wait()
        logger.warning("Ping a %s excedió %.1fs", target, timeout)
        return ConnectionObservation(target, 0.0, 100.0, False)

    # ping sale con código != 0 si hubo pérdida total; el resumen sigue siendo útil
    latency, loss = parse_ping_output(out.decode(errors="replace"))
    if proc.returncode not in (0, 1):
        logger.warning("Ping a %s terminó con código %s", target, proc.returncode)
        latency, loss = 0.0, 100.0
    return ConnectionObservation(
        target_ip=target,
        latency=latency,
        packet_loss=loss,
        is_connected=is_connected(latency, loss, threshold_ms),
    )


async def collect_report(node_ip: str, peers: List[str], count: int = 4,
                         timeout: float = 10.0, threshold_ms: float = 1000.0) -> NodeReport:
    targets = [p for p in peers if p != node_ip and is_valid_ipv4(p)]
    results = await asyncio.gather(*[probe(t, count, timeout, threshold_ms) for t in targets])
    return NodeReport(
        node_ip=node_ip,
        timestamp=datetime.now(timezone.utc),
        connections=tuple(results),
    )


def report_payload(report: NodeReport) -> Dict[str, Any]:
    return NodeStatusOut.model_validate(report).model_dump(mode="json")


async def send_report(client: httpx.AsyncClient, server_url: str, report: NodeReport) -> None:
    r = await client.post(f"{server_url.rstrip('/')}/api/status", json=report_payload(report))
    if r.status_code != 200:
        raise httpx.HTTPStatusError(
            f"server returned status code {r.status_code}", request=r.request, response=r)
