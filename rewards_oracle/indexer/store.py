"""File-backed persistence for the indexed event log."""

from __future__ import annotations

import os
import typing as typ
from pathlib import Path

import msgspec

from rewards_oracle.common.time import utcnow
from rewards_oracle.logging import get_logger, log_info, log_warning

from .models import IndexedEventLog

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import datetime as dt

    from rewards_oracle.logging import SupportsLog

logger = get_logger(__name__)


class IndexedEventStore:
    """Load and atomically save an :class:`IndexedEventLog` as JSON."""

    def __init__(
        self,
        path: Path,
        *,
        clock: cabc.Callable[[], dt.datetime] = utcnow,
        logger: SupportsLog | None = None,
    ) -> None:
        """Bind the store to ``path``."""
        self._path = Path(path)
        self._clock = clock
        self._logger = logger or get_logger(__name__)

    @property
    def path(self) -> Path:
        """Return the file backing this store."""
        return self._path

    def load(self) -> IndexedEventLog:
        """Return the persisted log, or a fresh one if none is usable."""
        if not self._path.exists():
            log_info(self._logger, "No index at %s, starting fresh", self._path)
            return IndexedEventLog()
        try:
            return msgspec.json.decode(
                self._path.read_bytes(), type=IndexedEventLog
            )
        except (OSError, msgspec.DecodeError) as exc:
            log_warning(
                self._logger,
                "Index at %s is unreadable (%s), starting fresh",
                self._path,
                exc,
            )
            return IndexedEventLog()

    def save(self, log: IndexedEventLog) -> None:
        """Stamp ``log`` and replace the file contents atomically."""
        log.last_updated = self._clock()
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = msgspec.json.format(msgspec.json.encode(log), indent=2)
        tmp_path = self._path.with_name(f"{self._path.name}.tmp")
        tmp_path.write_bytes(payload)
        os.replace(tmp_path, self._path)
