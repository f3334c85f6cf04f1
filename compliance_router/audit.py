"""Audit sinks for routing decisions.

Entries are append-only. Sinks are best-effort: a sink that fails must not
fail the routing call, so emit() writes the entry to the log instead.
"""

from __future__ import annotations

import asyncio
import json
from abc import ABC, abstractmethod
from pathlib import Path

from loguru import logger

from compliance_router.models import AuditEntry


class AuditSink(ABC):
    """Long-term storage for audit entries."""

    @abstractmethod
    async def append(self, entry: AuditEntry) -> None:
        ...

    @property
    def name(self) -> str:
        return self.__class__.__name__


class InMemoryAuditLog(AuditSink):
    """Keeps entries in process. Useful for tests and short-lived sessions."""

    def __init__(self) -> None:
        self._entries: list[AuditEntry] = []

    async def append(self, entry: AuditEntry) -> None:
        self._entries.append(entry)

    def entries(self, limit: int | None = None) -> list[AuditEntry]:
        """Entries newest first, optionally capped at ``limit``."""
        newest_first = list(reversed(self._entries))
        return newest_first[:limit] if limit else newest_first

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()


class JsonlAuditSink(AuditSink):
    """Appends one JSON object per line to a file."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _write(self, line: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as f:
            f.write(line + "\n")

    async def append(self, entry: AuditEntry) -> None:
        line = json.dumps(entry.to_dict(), sort_keys=True)
        await asyncio.to_thread(self._write, line)


async def emit(sink: AuditSink | None, entry: AuditEntry) -> bool:
    """Forward ``entry`` to ``sink``; on failure log it instead of raising.

    Returns True if the sink accepted the entry.
    """
    if sink is None:
        logger.info(f"Audit: {entry.to_dict()}")
        return False
    try:
        await sink.append(entry)
        return True
    except Exception as e:
        # Keep the entry: the log is the fallback audit channel.
        logger.error(f"Audit sink {sink.name} failed: {e}; entry={entry.to_dict()}")
        return False
