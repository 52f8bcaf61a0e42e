"""
Loader and exporter for metric workbooks.

Layout: one sheet, header in row 1 with the column names client_id,
period_type, date and the schema's metric fields; one record per row from
row 2 down. Dates may be datetimes, ISO strings or Excel serial numbers.
"""

import logging
from pathlib import Path

import openpyxl

from ..config import METRICS_SHEET_NAME
from ..models import MetricRecord
from .utils import normalise_date, normalise_period, safe_float, safe_int

logger = logging.getLogger(__name__)

_KEY_COLUMNS = ["client_id", "period_type", "date"]


def load_metrics_xlsx(path: str | Path, schema: type = MetricRecord) -> list:
    """Read metric records from a workbook.

    Assumptions
    -----------
    - Row 1 holds column names; unknown columns are ignored.
    - Rows without client_id or a parseable period are skipped.
    - Metric columns missing from the sheet, or empty cells, read as zero.

    Returns
    -------
    List of ``schema`` records in sheet order.
    """
    try:
        wb = openpyxl.load_workbook(path, data_only=True, read_only=True)
    except Exception:
        logger.exception("Failed to open metrics workbook: %s", path)
        raise

    try:
        records, skipped = _read_records(wb, path, schema)
    finally:
        wb.close()

    if skipped:
        logger.warning("Skipped %d rows without client or period in %s", skipped, path)
    logger.info("Loaded %d metric records from %s", len(records), path)
    return records


def _read_records(wb, path, schema: type) -> tuple[list, int]:
    sheet_name = METRICS_SHEET_NAME
    if sheet_name not in wb.sheetnames:
        sheet_name = wb.sheetnames[0]
        logger.warning("Sheet '%s' not found, using '%s'", METRICS_SHEET_NAME, sheet_name)

    ws = wb[sheet_name]
    rows = ws.iter_rows(values_only=True)
    header = next(rows, None)
    if header is None:
        logger.warning("Empty metrics workbook: %s", path)
        return [], 0

    col_index = {
        str(name).strip(): idx for idx, name in enumerate(header) if name is not None
    }
    missing_keys = [c for c in _KEY_COLUMNS if c not in col_index]
    if missing_keys:
        raise ValueError(f"Metrics workbook {path} lacks columns: {', '.join(missing_keys)}")

    def cell(row, name):
        idx = col_index.get(name)
        if idx is None or idx >= len(row):
            return None
        return row[idx]

    records = []
    skipped = 0
    for row in rows:
        client_id = cell(row, "client_id")
        period = normalise_period(cell(row, "period_type"))
        if client_id is None or period is None:
            skipped += 1
            continue

        values = {}
        for name in schema.RATIO_FIELDS:
            values[name] = safe_float(cell(row, name)) or 0.0
        for name in schema.COUNT_FIELDS:
            values[name] = safe_int(cell(row, name)) or 0

        record_date = normalise_date(cell(row, "date"))
        if record_date is None:
            record_date = normalise_date(f"{period}-01")

        records.append(schema(
            client_id=str(client_id).strip(),
            period_type=period,
            date=record_date,
            **values,
        ))

    return records, skipped


def export_metrics_xlsx(records, path: str | Path, schema: type = MetricRecord) -> Path:
    """Write records to a workbook in the layout load_metrics_xlsx reads."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = METRICS_SHEET_NAME

    columns = _KEY_COLUMNS + list(schema.metric_fields())
    ws.append(columns)
    for record in records:
        ws.append([
            record.client_id,
            record.period_type,
            record.date,
            *(getattr(record, name, 0) for name in schema.metric_fields()),
        ])

    wb.save(path)
    logger.info("Exported %d metric records to %s", len(records), path)
    return path
