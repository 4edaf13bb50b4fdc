"""Spreadsheet export of the visible list."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Sequence

from openpyxl import Workbook

from .models import ListSnapshot

logger = logging.getLogger(__name__)

BASE_COLUMNS = ["id", "is_active"]


def flatten_record(record: Mapping[str, Any], prefix: str = "") -> Dict[str, Any]:
    """Flatten nested mappings into dotted keys; lists become comma-joined text."""
    flat: Dict[str, Any] = {}
    for key, value in record.items():
        name = f"{prefix}{key}"
        if isinstance(value, Mapping):
            flat.update(flatten_record(value, prefix=f"{name}."))
        elif isinstance(value, (list, tuple)):
            flat[name] = ", ".join(str(entry) for entry in value)
        else:
            flat[name] = value
    return flat


def _discover_columns(rows: Iterable[Mapping[str, Any]]) -> List[str]:
    columns: List[str] = []
    for row in rows:
        for key in row:
            if key not in columns and key not in BASE_COLUMNS and key not in ("_id", "isActive"):
                columns.append(key)
    return columns


def export_snapshot_to_xlsx(
    snapshot: ListSnapshot,
    path: Path,
    columns: Sequence[str] | None = None,
) -> Path:
    """Write the snapshot's items to ``path`` and return it."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    rows = [flatten_record(item.data) for item in snapshot.items]
    data_columns = list(columns) if columns is not None else _discover_columns(rows)

    workbook = Workbook()
    worksheet = workbook.active
    worksheet.title = f"page-{snapshot.page}"
    worksheet.append(BASE_COLUMNS + data_columns)
    for item, row in zip(snapshot.items, rows):
        values = [_cell(row.get(column)) for column in data_columns]
        worksheet.append([item.id, item.is_active] + values)

    workbook.save(path)
    logger.info("Exported %d item(s) to %s", len(snapshot.items), path)
    return path


def _cell(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)
