import asyncio
import logging
from typing import Optional

import httpx

from .config import AgentSettings
from .logging_config import configure_logging
from .services import monitor
from .services.validation import is_valid_ipv4

logger = logging.getLogger(__name__)


class AgentConfigError(Exception):
    pass


def check_settings(settings: AgentSettings) -> None:
    if not settings.NODE_IP:
        raise AgentConfigError("NODE_IP environment variable is required")
    if not is_valid_ipv4(settings.NODE_IP):
        raise AgentConfigError(f"Invalid NODE_IP format: {settings.NODE_IP}")
    if not settings.SERVER_URL:
        raise AgentConfigError("SERVER_URL environment variable is required")


async def report_once(client: httpx.AsyncClient, settings: AgentSettings) -> None:
    report = await monitor.collect_report(
        settings.NODE_IP,
        monitor.load_peers(settings.PEERS),
        count=settings.PING_COUNT,
        timeout=settings.PING_TIMEOUT_SECONDS,
        threshold_ms=settings.CONNECTED_THRESHOLD_MS,
    )
    if not report.connections:
        logger.warning("Sin peers para sondear desde %s; no se envía reporte", settings.NODE_IP)
        return
    await monitor.send_report(client, settings.SERVER_URL, report)
    logger.info("Reporte enviado: %d conexiones", len(report.connections))


async def run_agent(settings: AgentSettings, iterations: Optional[int] = None) -> None:
    check_settings(settings)
    done = 0
    async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS) as client:
        while iterations is None or done < iterations:
            await asyncio.sleep(settings.REPORT_INTERVAL_SECONDS)
            try:
                await report_once(client, settings)
            except httpx.HTTPError as ex:
                logger.error("Error sending status to server: %s", ex)
            except Exception:
                logger.exception("Fallo inesperado al reportar")
            done += 1


def main():
    settings = AgentSettings()
    configure_logging(settings.LOG_LEVEL)
    try:
        asyncio.run(run_agent(settings))
    except AgentConfigError as ex:
        logger.error("%s", ex)
        raise SystemExit(1)
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
