from datetime import datetime
from typing import Dict

from ..models import NodeReport


def render_metrics(snapshot: Dict[str, NodeReport], history_sizes: Dict[str, int],
                   now: datetime) -> str:
    lines = [
        '# HELP fleet_link_latency_ms Latencia media del último reporte (ms)',
        '# TYPE fleet_link_latency_ms gauge',
        '# HELP fleet_link_packet_loss_pct Pérdida de paquetes del último reporte (%)',
        '# TYPE fleet_link_packet_loss_pct gauge',
        '# HELP fleet_link_up 1 si el enlace está conectado, 0 si no',
        '# TYPE fleet_link_up gauge',
        '# HELP fleet_node_report_age_seconds Segundos desde el timestamp del último reporte',
        '# TYPE fleet_node_report_age_seconds gauge',
        '# HELP fleet_node_history_entries Entradas de historial retenidas',
        '# TYPE fleet_node_history_entries gauge',
    ]

    for node in sorted(snapshot):
        report = snapshot[node]
        for conn in report.connections:
            labels = f'node="{node}",target="{conn.target_ip}"'
            lines.append(f'fleet_link_latency_ms{{{labels}}} {conn.latency}')
            lines.append(f'fleet_link_packet_loss_pct{{{labels}}} {conn.packet_loss}')
            lines.append(f'fleet_link_up{{{labels}}} {1 if conn.is_connected else 0}')
        age = round((now - report.timestamp).total_seconds(), 3)
        lines.append(f'fleet_node_report_age_seconds{{node="{node}"}} {age}')
        lines.append(f'fleet_node_history_entries{{node="{node}"}} {history_sizes.get(node, 0)}')

    return "\n".join(lines) + "\n"
