import csv
import io
import json
from datetime import datetime, timezone

import pytest

from hardhat.core.exceptions import ValidationError
from hardhat.services.export import CSV_HEADER, render_export


EXPORT_TIME = datetime(2025, 5, 6, 23, 30, tzinfo=timezone.utc)


def test_json_export_keeps_full_records(add_record, store):
    add_record(["helmet", "no-vest"], filename="a.jpg", site="Site A")

    export = render_export(store.list(), "json", now=EXPORT_TIME)
    payload = json.loads(export.content)

    assert export.filename == "helmet-detections-2025-05-06.json"
    assert export.media_type == "application/json"
    assert payload["export_info"]["total_records"] == 1
    assert payload["export_info"]["format"] == "json"
    record = payload["detections"][0]
    assert record["filename"] == "a.jpg"
    assert record["detections"][0]["class"] == "helmet"
    assert record["summary"]["no_vest_count"] == 1


def test_csv_export_quotes_every_field(add_record, store):
    add_record(["helmet", "no-helmet", "vest"], filename='site "B" gate.jpg', supervisor="Ann")

    export = render_export(store.list(), "csv", now=EXPORT_TIME)
    lines = export.content.split("\n")

    assert export.filename == "helmet-detections-2025-05-06.csv"
    assert export.media_type == "text/csv"
    assert lines[0] == ",".join(f'"{name}"' for name in CSV_HEADER)
    assert len(lines) == 2
    assert '"site ""B"" gate.jpg"' in lines[1]
    assert lines[1].startswith('"') and lines[1].endswith('"')


def test_csv_row_values(add_record, store):
    add_record(["helmet", "no-helmet", "vest"], filename="a.jpg", site="Site A")

    export = render_export(store.list(), "csv", now=EXPORT_TIME)
    [header, row] = list(csv.reader(io.StringIO(export.content)))

    values = dict(zip(header, row))
    assert values["Site"] == "Site A"
    assert values["Supervisor"] == ""
    assert values["Total Detections"] == "3"
    assert values["Helmet Compliance %"] == "50.00"
    assert values["Vest Compliance %"] == "100.00"
    embedded = json.loads(values["Detections (JSON)"])
    assert [d["class"] for d in embedded] == ["helmet", "no-helmet", "vest"]
    assert values["Timestamp"].endswith("Z")


def test_table_export_uses_fixed_decimal_strings(add_record, store):
    add_record(["helmet", "helmet", "no-helmet"], filename="a.jpg")
    add_record([], filename="b.jpg")

    export = render_export(store.list(), "xlsx", now=EXPORT_TIME)
    payload = json.loads(export.content)

    assert export.filename == "helmet-detections-2025-05-06.xlsx.json"
    assert payload["summary"]["format"] == "xlsx (simplified)"
    assert payload["summary"]["total_records"] == 2
    empty, full = payload["detections"]
    assert empty["helmet_compliance"] == "0.00"
    assert full["helmet_compliance"] == "66.67"
    assert full["site"] == ""


def test_format_is_case_insensitive(store):
    assert render_export(store.list(), "CSV", now=EXPORT_TIME).media_type == "text/csv"


def test_unknown_format_is_rejected(store):
    with pytest.raises(ValidationError) as exc_info:
        render_export(store.list(), "pdf", now=EXPORT_TIME)
    assert exc_info.value.fields == ["format"]
