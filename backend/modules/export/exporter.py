"""
Record export.

Turns mirrored records into delimited-text or plain-text snapshots and
writes them to disk.
"""

import json
import logging
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Sequence

from modules.records.models import Client, Payment, Project, Record, RecordKind

from .models import ExportFormat

logger = logging.getLogger(__name__)

ExportRow = dict[str, Any]


def _project_row(p: Project) -> ExportRow:
    return {
        "title": p.title,
        "client": p.client,
        "deadline": p.deadline,
        "payment": p.payment,
        "status": p.status,
        "created_at": p.created_at,
    }


def _client_row(c: Client) -> ExportRow:
    return {
        "name": c.name,
        "email": c.email,
        "phone": c.phone,
        "country": c.country or "",
        "created_at": c.created_at,
    }


def _payment_row(p: Payment) -> ExportRow:
    return {
        "project_id": p.project_id,
        "amount": p.amount,
        "status": p.status,
        "due_date": p.due_date,
        "description": p.description or "",
        "created_at": p.created_at,
    }


_ROW_BUILDERS = {
    RecordKind.PROJECTS: _project_row,
    RecordKind.CLIENTS: _client_row,
    RecordKind.PAYMENTS: _payment_row,
}


def export_rows(kind: RecordKind, records: Sequence[Record]) -> list[ExportRow]:
    """The exported columns of each record, in list order."""
    build = _ROW_BUILDERS[kind]
    return [build(record) for record in records]


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def _csv_field(value: Any) -> str:
    value = _plain(value)
    text = "" if value is None else str(value)
    return '"' + text.replace('"', '""') + '"'


def render_csv(rows: Sequence[ExportRow]) -> str:
    """
    Render rows as delimited text.

    The header is the keys of the first row, unquoted. Every value is
    double-quoted. Rows are separated by a bare newline.
    """
    if not rows:
        return ""
    headers = list(rows[0])
    lines = [",".join(headers)]
    lines.extend(",".join(_csv_field(row.get(header)) for header in headers) for row in rows)
    return "\n".join(lines)


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return float(value)
    return _plain(value)


def render_text(rows: Sequence[ExportRow]) -> str:
    """Render rows as indented JSON objects separated by blank lines."""
    return "\n\n".join(
        json.dumps({key: _plain(value) for key, value in row.items()}, indent=2, default=_json_default)
        for row in rows
    )


def render(rows: Sequence[ExportRow], fmt: ExportFormat) -> str:
    if fmt is ExportFormat.CSV:
        return render_csv(rows)
    return render_text(rows)


def write_export(
    kind: RecordKind,
    records: Sequence[Record],
    fmt: ExportFormat,
    directory: Path,
) -> Optional[Path]:
    """
    Write ``<kind>.<ext>`` into ``directory``.

    Returns:
        Path of the written file, or None when there was nothing to export
    """
    rows = export_rows(kind, records)
    if not rows:
        logger.info(f"No {kind.value} to export")
        return None

    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{kind.value}.{fmt.extension}"
    path.write_text(render(rows, fmt), encoding="utf-8")
    logger.info(f"Exported {len(rows)} {kind.value} to {path}")
    return path
