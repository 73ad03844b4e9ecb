from __future__ import annotations

import csv
import io
from datetime import date, datetime
from types import SimpleNamespace

from rgpd_compliance.exports import csv_export


def _record(name: str, **extra):
    fields = {
        "name": name,
        "type": "controller",
        "purpose": "Gestion des clients",
        "legal_basis": "Contrat",
        "data_categories": ["Identité", "Email"],
        "recipients": [],
        "retention": "3 ans",
        "security_measures": ["Chiffrement"],
        "transfers_outside_eu": False,
        "data_controller_name": None,
        "data_controller_email": None,
        "dpo_name": None,
        "dpo_email": None,
        "dpia_required": True,
        "created_at": datetime(2024, 3, 5, 10, 30),
    }
    fields.update(extra)
    return SimpleNamespace(**fields)


def test_n_records_give_n_plus_one_quoted_lines() -> None:
    text = csv_export.export_records([_record("Clients"), _record("Prospects"), _record("Paie")])
    lines = text.splitlines()
    assert len(lines) == 4
    for line in lines:
        assert line.startswith('"') and line.endswith('"')
    assert lines[0].startswith('"Nom du traitement","Type","Finalité"')


def test_field_formatting() -> None:
    text = csv_export.export_records([_record('Fichier "VIP"')])
    row = next(csv.reader(io.StringIO(text.splitlines()[1])))
    assert row[0] == 'Fichier "VIP"'
    assert row[4] == "Identité; Email"
    assert row[8] == "Non"
    assert row[13] == "Oui"
    assert row[14] == "05/03/2024"
    # Embedded quotes are doubled in the raw line.
    assert '"Fichier ""VIP"""' in text


def test_empty_registry_is_header_only() -> None:
    assert len(csv_export.export_records([]).splitlines()) == 1


def test_export_filename() -> None:
    assert csv_export.export_filename(date(2024, 1, 31)) == "registre-traitements-2024-01-31.csv"
