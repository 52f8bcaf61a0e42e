"""Import and export of metric data files."""

from .metrics_workbook import export_metrics_xlsx, load_metrics_xlsx
from .report_docx import load_report_text

__all__ = [
    "export_metrics_xlsx",
    "load_metrics_xlsx",
    "load_report_text",
]
