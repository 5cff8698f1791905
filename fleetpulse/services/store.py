import logging
import re
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Union

from ..errors import NotFound
from ..models import HistoryEntry, NodeReport
from .rwlock import RWLock
from .validation import validate_report

logger = logging.getLogger(__name__)

TimeBound = Union[datetime, str, None]

_RFC3339_RE = re.compile(
    r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(?:\.\d+)?(?:Z|[+-]\d{2}:\d{2})")


@dataclass(frozen=True)
class RetentionPolicy:
    window: timedelta = timedelta(hours=24)
    period: timedelta = timedelta(hours=1)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_time_bound(value: TimeBound) -> Optional[datetime]:
    """Best-effort RFC3339 parse of a history bound.

    Only the strict RFC3339 form (T separator, Z or +HH:MM offset) is read.
    Anything else, including naive datetimes, is treated as an
    absent bound, widening the result instead of failing the query.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value if value.utcoffset() is not None else None
    if not isinstance(value, str) or not value.strip():
        return None
    value = value.strip()
    if not _RFC3339_RE.fullmatch(value):
        logger.debug("Ignoring non-RFC3339 time bound %r", value)
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        logger.debug("Ignoring unparsable time bound %r", value)
        return None
    return parsed


class StatusStore:
    """Latest report per node plus a retained history per node.

    Both maps are one unit guarded by a single reader/writer lock. Ingestion and
    retention sweeps are writers, queries are readers. Nothing blocks on I/O
    while the lock is held.

    The snapshot is last-write-wins by arrival: a late report carrying an older
    timestamp still replaces the current entry for its node.
    """

    def __init__(self, policy: Optional[RetentionPolicy] = None,
                 clock: Callable[[], datetime] = utcnow):
        self.policy = policy or RetentionPolicy()
        self._clock = clock
        self._lock = RWLock()
        self._snapshot: Dict[str, NodeReport] = {}
        self._history: Dict[str, List[HistoryEntry]] = {}

    def ingest(self, report: NodeReport) -> None:
        """Validate and commit one report, or raise MalformedInput untouched."""
        report = replace(report, connections=tuple(report.connections or ()))
        validate_report(report)
        entry = HistoryEntry.from_report(report)
        with self._lock.write():
            self._snapshot[report.node_ip] = report
            self._history.setdefault(report.node_ip, []).append(entry)
        logger.debug("Ingested report from %s (%d connections)",
                     report.node_ip, len(report.connections))

    def get_snapshot(self) -> Dict[str, NodeReport]:
        with self._lock.read():
            return dict(self._snapshot)

    def get_history(self, node: str, start: TimeBound = None,
                    end: TimeBound = None) -> List[HistoryEntry]:
        start_at = parse_time_bound(start)
        end_at = parse_time_bound(end)
        with self._lock.read():
            entries = self._history.get(node)
            if entries is None:
                raise NotFound(node)
            return [
                e for e in entries
                if (start_at is None or e.timestamp >= start_at)
                and (end_at is None or e.timestamp <= end_at)
            ]

    def sweep(self, now: Optional[datetime] = None) -> int:
        """Drop history older than the retention window; returns entries pruned.

        The reference instant is taken once, and the write lock is held for the
        whole pass so no reader sees some nodes pruned and others not. Nodes whose
        history empties keep their key.
        """
        with self._lock.write():
            now = now or self._clock()
            pruned = 0
            for node, entries in self._history.items():
                kept = [e for e in entries if now - e.timestamp <= self.policy.window]
                pruned += len(entries) - len(kept)
                self._history[node] = kept
        logger.info("Retention sweep pruned %d entries across %d nodes",
                    pruned, len(self._history))
        return pruned

    def history_sizes(self) -> Dict[str, int]:
        with self._lock.read():
            return {node: len(entries) for node, entries in self._history.items()}
