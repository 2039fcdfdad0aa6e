"""Append-only, file-backed decision ledger.

Each decision cycle is one pretty-printed JSON document named
``decision_YYYYMMDD_HHMMSS_cycleN.json``. Files are never rewritten after
they are appended. Bulk read paths are best-effort: a file that cannot be read
or validated is logged and skipped.

Single-writer discipline: one ledger instance per directory per process. The
instance lock serializes appends from threads within that process.
"""

import os
import re
import threading
from datetime import date, datetime, timezone
from pathlib import Path

from pydantic import ValidationError

from tradescope.exceptions import RecordValidationError
from tradescope.ledger.models import DecisionRecord, LedgerStatistics
from tradescope.logging import get_logger

logger = get_logger(__name__)

_FILE_RE = re.compile(r"^decision_(\d{8}_\d{6})_cycle(\d+)\.json$")
_TIME_FORMAT = "%Y%m%d_%H%M%S"


def record_file_name(timestamp: datetime, cycle_number: int) -> str:
    """File name for a record: ``decision_20250101_120000_cycle7.json``."""
    return f"decision_{timestamp.strftime(_TIME_FORMAT)}_cycle{cycle_number}.json"


def _sort_key(path: Path) -> tuple[str, int]:
    match = _FILE_RE.match(path.name)
    if match is None:
        raise ValueError(f"not a decision record file name: {path.name}")
    return match.group(1), int(match.group(2))


class DecisionLedger:
    """Persists and reads back DecisionRecords in a log directory.

    Usage:
        ledger = DecisionLedger("decision_logs")
        stored = ledger.append(record)
        window = ledger.read_recent(20)
    """

    def __init__(self, log_dir: str | os.PathLike[str] = "decision_logs") -> None:
        self._log_dir = Path(log_dir or "decision_logs")
        self._log_dir.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._cycle_number = max(
            (_sort_key(p)[1] for p in self._record_paths()), default=0
        )
        logger.debug(
            "ledger_opened",
            log_dir=str(self._log_dir),
            cycle_number=self._cycle_number,
        )

    @property
    def log_dir(self) -> Path:
        return self._log_dir

    @property
    def cycle_number(self) -> int:
        """Cycle number of the most recently appended record (0 if none)."""
        return self._cycle_number

    # ──────────────────────────────────────────────
    # Write path
    # ──────────────────────────────────────────────

    def append(self, record: DecisionRecord) -> DecisionRecord:
        """Persist a record as the next cycle.

        The caller's record is not modified; the stored copy carries the
        assigned cycle number and UTC timestamp and is returned.
        """
        with self._lock:
            cycle_number = self._cycle_number + 1
            stored = record.model_copy(
                update={
                    "cycle_number": cycle_number,
                    "timestamp": datetime.now(timezone.utc),
                }
            )
            file_name = record_file_name(stored.timestamp, cycle_number)
            path = self._log_dir / file_name
            tmp_path = path.with_suffix(".json.tmp")
            tmp_path.write_text(stored.model_dump_json(indent=2), encoding="utf-8")
            os.replace(tmp_path, path)
            self._cycle_number = cycle_number

        logger.info(
            "decision_logged",
            file=file_name,
            cycle_number=cycle_number,
            actions=len(stored.decisions),
            success=stored.success,
        )
        return stored

    # ──────────────────────────────────────────────
    # Read paths
    # ──────────────────────────────────────────────

    def load(self, path: Path) -> DecisionRecord:
        """Read and validate a single record file.

        Raises:
            RecordValidationError: If the file is unreadable or not a valid record.
        """
        try:
            return DecisionRecord.model_validate_json(path.read_bytes())
        except OSError as e:
            raise RecordValidationError(str(path), f"unreadable: {e}") from e
        except ValidationError as e:
            raise RecordValidationError(
                str(path), f"{e.error_count()} validation error(s)"
            ) from e

    def read_recent(self, n: int) -> list[DecisionRecord]:
        """Return the n most recently persisted records, oldest first.

        Files that fail to parse are skipped, so fewer than n records may be
        returned even when n files exist.
        """
        if n <= 0:
            return []
        return self._load_many(self._record_paths()[-n:])

    def read_all(self) -> list[DecisionRecord]:
        """Return every readable record, oldest first."""
        return self._load_many(self._record_paths())

    def read_by_date(self, day: date) -> list[DecisionRecord]:
        """Return every readable record written on the given UTC day."""
        prefix = day.strftime("%Y%m%d")
        paths = [p for p in self._record_paths() if _sort_key(p)[0].startswith(prefix)]
        return self._load_many(paths)

    def statistics(self) -> LedgerStatistics:
        """Count cycles and successful open/close actions across the ledger."""
        stats = LedgerStatistics()
        for record in self.read_all():
            stats.total_cycles += 1
            if record.success:
                stats.successful_cycles += 1
            else:
                stats.failed_cycles += 1

            for action in record.decisions:
                if not action.success:
                    continue
                if action.action.is_open:
                    stats.total_open_positions += 1
                else:
                    stats.total_close_positions += 1
        return stats

    # ──────────────────────────────────────────────
    # Maintenance
    # ──────────────────────────────────────────────

    def prune(self, older_than: datetime) -> int:
        """Delete record files last modified before ``older_than``.

        Returns:
            Number of files removed. Files that cannot be removed are logged
            and left in place.
        """
        cutoff = older_than.timestamp()
        removed = 0

        for path in self._record_paths():
            try:
                if path.stat().st_mtime >= cutoff:
                    continue
                path.unlink()
            except OSError as e:
                logger.error("ledger_prune_failed", file=path.name, error=str(e))
                continue
            removed += 1

        if removed:
            logger.info(
                "ledger_pruned",
                removed=removed,
                cutoff=older_than.isoformat(),
            )
        return removed

    # ──────────────────────────────────────────────
    # Internal helpers
    # ──────────────────────────────────────────────

    def _record_paths(self) -> list[Path]:
        """Ledger files in chronological order (timestamp, then cycle number)."""
        paths = [
            p
            for p in self._log_dir.iterdir()
            if p.is_file() and _FILE_RE.match(p.name)
        ]
        return sorted(paths, key=_sort_key)

    def _load_many(self, paths: list[Path]) -> list[DecisionRecord]:
        records = []
        for path in paths:
            try:
                records.append(self.load(path))
            except RecordValidationError as e:
                logger.warning("ledger_record_skipped", file=path.name, reason=e.reason)
        return records
