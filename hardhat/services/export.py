"""
Export formatters for detection history.
"""
import csv
import io
import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence

from hardhat.core.exceptions import ValidationError
from hardhat.models.schemas.detection import DetectionRecord
from hardhat.utils.rounding import compliance_rate


EXPORT_PREFIX = "helmet-detections"

CSV_HEADER = [
    "ID",
    "Timestamp",
    "Filename",
    "Site",
    "Supervisor",
    "Total Detections",
    "Helmet Count",
    "Vest Count",
    "No Helmet Count",
    "No Vest Count",
    "Helmet Compliance %",
    "Vest Compliance %",
    "Detections (JSON)",
]


@dataclass
class ExportFile:
    """Rendered export ready to be sent as an attachment."""
    content: str
    media_type: str
    filename: str


def _iso(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def _export_name(now: datetime) -> str:
    return f"{EXPORT_PREFIX}-{now.astimezone(timezone.utc).date().isoformat()}"


def _percent(positive: int, negative: int) -> str:
    return f"{compliance_rate(positive, negative):.2f}"


def _detections_json(record: DetectionRecord) -> List[Dict[str, Any]]:
    return [d.model_dump(mode="json", by_alias=True) for d in record.detections]


def export_json(records: Sequence[DetectionRecord], now: datetime) -> ExportFile:
    """Full-fidelity export."""
    payload = {
        "export_info": {
            "timestamp": _iso(now),
            "total_records": len(records),
            "format": "json"
        },
        "detections": [record.model_dump(mode="json", by_alias=True) for record in records]
    }
    return ExportFile(
        content=json.dumps(payload, indent=2),
        media_type="application/json",
        filename=f"{_export_name(now)}.json"
    )


def export_csv(records: Sequence[DetectionRecord], now: datetime) -> ExportFile:
    """
    Flattened export, one row per record.

    Every field is quoted; detections are embedded as a compact JSON string.
    """
    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADER)

    for record in records:
        summary = record.summary
        writer.writerow([
            record.id,
            _iso(record.timestamp),
            record.filename,
            record.site or "",
            record.supervisor or "",
            summary.total_detections,
            summary.helmet_count,
            summary.vest_count,
            summary.no_helmet_count,
            summary.no_vest_count,
            _percent(summary.helmet_count, summary.no_helmet_count),
            _percent(summary.vest_count, summary.no_vest_count),
            json.dumps(_detections_json(record), separators=(",", ":"))
        ])

    return ExportFile(
        content=output.getvalue().rstrip("\n"),
        media_type="text/csv",
        filename=f"{_export_name(now)}.csv"
    )


def export_table(records: Sequence[DetectionRecord], now: datetime) -> ExportFile:
    """Simplified spreadsheet-style rows with percentages as 2-decimal strings."""
    rows = []
    for record in records:
        summary = record.summary
        rows.append({
            "id": record.id,
            "timestamp": _iso(record.timestamp),
            "filename": record.filename,
            "site": record.site or "",
            "supervisor": record.supervisor or "",
            "total_detections": summary.total_detections,
            "helmet_count": summary.helmet_count,
            "vest_count": summary.vest_count,
            "no_helmet_count": summary.no_helmet_count,
            "no_vest_count": summary.no_vest_count,
            "helmet_compliance": _percent(summary.helmet_count, summary.no_helmet_count),
            "vest_compliance": _percent(summary.vest_count, summary.no_vest_count)
        })

    payload = {
        "summary": {
            "total_records": len(records),
            "export_date": _iso(now),
            "format": "xlsx (simplified)"
        },
        "detections": rows
    }
    return ExportFile(
        content=json.dumps(payload, indent=2),
        media_type="application/json",
        filename=f"{_export_name(now)}.xlsx.json"
    )


EXPORTERS: Dict[str, Callable[[Sequence[DetectionRecord], datetime], ExportFile]] = {
    "json": export_json,
    "csv": export_csv,
    "xlsx": export_table,
}


def render_export(
    records: Sequence[DetectionRecord],
    export_format: str = "json",
    now: Optional[datetime] = None
) -> ExportFile:
    """
    Render records in the requested format.

    Raises:
        ValidationError: unsupported format
    """
    exporter = EXPORTERS.get((export_format or "json").lower())
    if exporter is None:
        raise ValidationError(
            f"Unsupported format '{export_format}'. Use one of: {', '.join(EXPORTERS)}",
            fields=["format"]
        )
    return exporter(records, now or datetime.now(timezone.utc))
