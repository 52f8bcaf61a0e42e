"""
Loader for client reports delivered as Word documents.

The text is handed to the metrics parser unchanged, so the loader only
collects paragraphs and table cells in document order.
"""

import logging

from docx import Document

logger = logging.getLogger(__name__)


def load_report_text(path) -> str:
    """Return the text of a Word report: paragraphs, then table rows.

    ``path`` may be a filesystem path or an open binary file object.

    Table rows are joined cell by cell with a space so that a
    "Конверсия | 75%" row reads as "Конверсия 75%".
    """
    try:
        doc = Document(path if hasattr(path, "read") else str(path))
    except Exception:
        logger.exception("Failed to open Word document: %s", path)
        raise

    lines = [p.text.strip() for p in doc.paragraphs if p.text.strip()]

    for table in doc.tables:
        for row in table.rows:
            cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
            if cells:
                lines.append(" ".join(cells))

    text = "\n".join(lines)
    logger.info("Loaded %d lines of report text from %s", len(lines), path)
    return text
