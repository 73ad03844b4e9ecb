"""
rgpd_compliance.exports.csv_export

CSV export of the processing records registry.

Responsibilities:
- Render records as quoted, comma-separated text (header + one line per record).
- Format list, boolean and date fields the way the registry displays them.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Callable, Iterable, Sequence
from datetime import date, datetime
from typing import Any

LIST_SEPARATOR = "; "


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "Oui" if value else "Non"
    if isinstance(value, datetime | date):
        return value.strftime("%d/%m/%Y")
    if isinstance(value, list | tuple):
        return LIST_SEPARATOR.join(str(v) for v in value)
    return str(value)


def _field(name: str) -> Callable[[Any], str]:
    return lambda record: _text(getattr(record, name, None))


RECORD_COLUMNS: Sequence[tuple[str, Callable[[Any], str]]] = (
    ("Nom du traitement", _field("name")),
    ("Type", _field("type")),
    ("Finalité", _field("purpose")),
    ("Base légale", _field("legal_basis")),
    ("Catégories de données", _field("data_categories")),
    ("Destinataires", _field("recipients")),
    ("Durée de conservation", _field("retention")),
    ("Mesures de sécurité", _field("security_measures")),
    ("Transferts hors UE", _field("transfers_outside_eu")),
    ("Responsable de traitement", _field("data_controller_name")),
    ("Email du responsable", _field("data_controller_email")),
    ("DPO", _field("dpo_name")),
    ("Email du DPO", _field("dpo_email")),
    ("AIPD requise", _field("dpia_required")),
    ("Date de création", _field("created_at")),
)


def render_csv(rows: Iterable[Sequence[str]]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerows(rows)
    return buf.getvalue()


def export_records(records: Iterable[Any]) -> str:
    """
    One header line plus one line per record; every cell is double-quoted.
    """

    header = [title for title, _ in RECORD_COLUMNS]
    body = [[getter(record) for _, getter in RECORD_COLUMNS] for record in records]
    return render_csv([header, *body])


def export_filename(today: date) -> str:
    return f"registre-traitements-{today.isoformat()}.csv"
