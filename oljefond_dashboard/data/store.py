"""Append-only JSON series on disk."""

import json
import logging
import math
import os
import tempfile
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any

from oljefond_dashboard.config import (
    FUND_FILE,
    PER_CAPITA_FILE,
    POPULATION_FILE,
    USD_NOK_FILE,
)
from oljefond_dashboard.models.series import (
    FundSnapshot,
    FxRecord,
    PerCapitaRecord,
    PopulationRecord,
)


logger = logging.getLogger(__name__)


def parse_timestamp(raw: Any) -> datetime:
    """Parse an ISO 8601 timestamp ('Z' suffix allowed). Naive values are UTC."""
    if not isinstance(raw, str) or not raw:
        raise ValueError(f"Invalid timestamp: {raw!r}")
    ts = datetime.fromisoformat(raw.strip().replace("Z", "+00:00"))
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def format_timestamp(ts: datetime) -> str:
    """Format as UTC ISO 8601 with millisecond precision and 'Z' suffix."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


def _require(row: Any, *keys: str) -> dict:
    if not isinstance(row, dict):
        raise ValueError(f"Expected an object, got {type(row).__name__}: {row!r}")
    missing = [k for k in keys if row.get(k) is None]
    if missing:
        raise ValueError(f"Row missing {', '.join(missing)}: {row!r}")
    return row


def _optional_date(raw: Any) -> date | None:
    if not isinstance(raw, str):
        return None
    try:
        return date.fromisoformat(raw[:10])
    except ValueError:
        return None


def _optional_rate(raw: Any) -> float | None:
    if isinstance(raw, bool) or raw is None:
        return None
    try:
        rate = float(raw)
    except (TypeError, ValueError):
        return None
    return rate if math.isfinite(rate) else None


class SeriesStore:
    """JSON-array files, one per series, under a data directory."""

    def __init__(self, data_dir: Path) -> None:
        self.data_dir = Path(data_dir)

    def _path(self, name: str) -> Path:
        return self.data_dir / name

    def read_array(self, name: str) -> list:
        """
        Read a JSON array file.

        Returns:
            The rows, or an empty list if the file is missing or not an array
        """
        path = self._path(name)
        if not path.exists():
            return []
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read {path}: {e}")
            return []
        if not isinstance(data, list):
            logger.warning(f"{path} is not a JSON array, ignoring")
            return []
        return data

    def write_array(self, name: str, rows: list) -> None:
        """Replace a series file atomically so readers never see a partial write."""
        path = self._path(name)
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(rows, indent=2, ensure_ascii=False) + "\n"

        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def append(self, name: str, row: dict) -> int:
        """
        Append one row to a series.

        Returns:
            Length of the series after the append
        """
        rows = self.read_array(name)
        rows.append(row)
        self.write_array(name, rows)
        return len(rows)

    # ------------------------------------------------------------------
    # Typed loaders
    # ------------------------------------------------------------------

    def load_per_capita(self) -> list[PerCapitaRecord]:
        """Per-capita series sorted by timestamp."""
        records = []
        for row in self.read_array(PER_CAPITA_FILE):
            row = _require(row, "ts", "fund_nok", "pop", "per_capita_nok")
            records.append(
                PerCapitaRecord(
                    timestamp=parse_timestamp(row["ts"]),
                    fund_value=int(row["fund_nok"]),
                    population=int(row["pop"]),
                    per_capita_value=float(row["per_capita_nok"]),
                    population_date=_optional_date(row.get("pop_date")),
                )
            )
        records.sort(key=lambda r: r.timestamp)
        return records

    def load_fund(self) -> list[FundSnapshot]:
        """Fund snapshots sorted by timestamp."""
        snapshots = []
        for row in self.read_array(FUND_FILE):
            row = _require(row, "ts", "fund_nok")
            snapshots.append(
                FundSnapshot(
                    timestamp=parse_timestamp(row["ts"]),
                    fund_value=int(row["fund_nok"]),
                )
            )
        snapshots.sort(key=lambda s: s.timestamp)
        return snapshots

    def load_population(self) -> list[PopulationRecord]:
        """Population records sorted by date."""
        records = []
        for row in self.read_array(POPULATION_FILE):
            row = _require(row, "date", "pop")
            records.append(
                PopulationRecord(
                    date=date.fromisoformat(row["date"]),
                    population=int(row["pop"]),
                )
            )
        records.sort(key=lambda r: r.date)
        return records

    def load_fx(self) -> list[FxRecord]:
        """
        USD/NOK observations in file order.

        Unparsable dates and rates are kept as None; the Fx Index drops them.
        """
        records = []
        for row in self.read_array(USD_NOK_FILE):
            row = _require(row)
            records.append(
                FxRecord(
                    date=_optional_date(row.get("date")),
                    rate=_optional_rate(row.get("usdnok")),
                    source=str(row.get("source", "")),
                )
            )
        return records

    def latest_population(self) -> PopulationRecord | None:
        """Population record with the greatest date."""
        records = self.load_population()
        return records[-1] if records else None

    # ------------------------------------------------------------------
    # Typed appenders
    # ------------------------------------------------------------------

    def append_per_capita(self, record: PerCapitaRecord) -> int:
        row = {
            "ts": format_timestamp(record.timestamp),
            "fund_nok": record.fund_value,
            "pop_date": record.population_date.isoformat() if record.population_date else None,
            "pop": record.population,
            "per_capita_nok": record.per_capita_value,
        }
        return self.append(PER_CAPITA_FILE, row)

    def append_fund(self, snapshot: FundSnapshot) -> int:
        row = {"ts": format_timestamp(snapshot.timestamp), "fund_nok": snapshot.fund_value}
        return self.append(FUND_FILE, row)

    def append_population(self, record: PopulationRecord) -> int:
        row = {"date": record.date.isoformat(), "pop": record.population}
        return self.append(POPULATION_FILE, row)

    def append_fx(self, record: FxRecord) -> int:
        if record.date is None or record.rate is None:
            raise ValueError(f"Cannot persist incomplete FX record: {record!r}")
        row = {
            "date": record.date.isoformat(),
            "source": record.source,
            "usdnok": round(record.rate, 6),
        }
        return self.append(USD_NOK_FILE, row)

    def _has_date(self, name: str, day: date) -> bool:
        key = day.isoformat()
        return any(
            isinstance(row, dict) and row.get("date") == key
            for row in self.read_array(name)
        )

    def has_population_for(self, day: date) -> bool:
        return self._has_date(POPULATION_FILE, day)

    def has_fx_for(self, day: date) -> bool:
        return self._has_date(USD_NOK_FILE, day)

    def get_status(self) -> dict[str, dict]:
        """Row count and last entry per series file."""
        status = {}
        for name in (PER_CAPITA_FILE, FUND_FILE, POPULATION_FILE, USD_NOK_FILE):
            rows = self.read_array(name)
            last = rows[-1] if rows and isinstance(rows[-1], dict) else {}
            status[name] = {
                "count": len(rows),
                "last": last.get("ts") or last.get("date"),
            }
        return status
