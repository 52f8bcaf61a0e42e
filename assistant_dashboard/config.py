"""
Configuration: metric field registry, parser patterns, windows, constants.

FIELD_REGISTRY maps each canonical metric field to its kind ("ratio" or
"count"), display label, and display unit. FIELD_PATTERNS holds the keyword
stem the text parser anchors on for that field.
"""

from pathlib import Path

# ---------------------------------------------------------------------------
# File paths. Adjust these if data files move
# ---------------------------------------------------------------------------
DATA_DIR = Path(__file__).resolve().parent.parent / "data"

METRICS_WORKBOOK_FILE = DATA_DIR / "metrics.xlsx"
METRICS_SHEET_NAME = "metrics"

# ---------------------------------------------------------------------------
# Service identity
# ---------------------------------------------------------------------------
SERVICE_NAME = "AI Assistant Analytics"

# ---------------------------------------------------------------------------
# Field registry
# ---------------------------------------------------------------------------
# kind: "ratio" (stored in [0, 1], entered and shown as a percentage)
#       or "count" (non-negative integer)
# label: display label on KPI cards and in the preview table
# unit: display unit string
FIELD_REGISTRY: dict[str, dict] = {
    "conversion": {
        "kind": "ratio",
        "label": "Конверсия в запись",
        "unit": "%",
    },
    "autonomy": {
        "kind": "ratio",
        "label": "Автономность",
        "unit": "%",
    },
    "satisfaction": {
        "kind": "ratio",
        "label": "Удовлетворённость",
        "unit": "%",
    },
    "retention_share": {
        "kind": "ratio",
        "label": "Повторные клиенты",
        "unit": "%",
    },
    "financial_equiv": {
        "kind": "count",
        "label": "Экономия",
        "unit": "₽",
    },
    "time_saved_hours": {
        "kind": "count",
        "label": "Сэкономлено времени",
        "unit": "ч",
    },
    "confirmed_appointments": {
        "kind": "count",
        "label": "Подтверждённые записи",
        "unit": "",
    },
    "business_hours_appointments": {
        "kind": "count",
        "label": "Записи в рабочее время",
        "unit": "",
    },
    "non_business_hours_appointments": {
        "kind": "count",
        "label": "Записи в нерабочее время",
        "unit": "",
    },
    "short_dialogs": {
        "kind": "count",
        "label": "Короткие диалоги",
        "unit": "",
    },
    "medium_dialogs": {
        "kind": "count",
        "label": "Средние диалоги",
        "unit": "",
    },
    "long_dialogs": {
        "kind": "count",
        "label": "Длинные диалоги",
        "unit": "",
    },
}

# ---------------------------------------------------------------------------
# Text parser patterns
# ---------------------------------------------------------------------------
# Keyword stems are matched case-insensitively. Each stem is followed by
# SEPARATOR_PATTERN and NUMBER_PATTERN when compiled.
FIELD_PATTERNS: dict[str, str] = {
    "conversion": r"конверси[яи]",
    "autonomy": r"автономност[ьи]",
    "satisfaction": r"удовлетвор[её]нност[ьи]",
    "retention_share": r"повторн\w*(?:\s+клиент\w*)?",
    "financial_equiv": r"экономи[яи]",
    "time_saved_hours": r"(?:сэкономлено|экономи[яи])\s+(?:времени|час\w*)",
    "confirmed_appointments": r"подтвержд[её]нн\w*\s+запис\w*",
    # must not fire inside "нерабочее время"
    "business_hours_appointments": r"(?<![а-яё])рабоч[иеа]+ врем[яи]+",
    "non_business_hours_appointments": r"(?:не|вне\s+)рабоч\w*\s+врем\w*",
    "short_dialogs": r"коротк\w*\s+диалог\w*",
    "medium_dialogs": r"средн\w*\s+диалог\w*",
    "long_dialogs": r"длинн\w*\s+диалог\w*",
}

SEPARATOR_PATTERN = r"[\s:=\-–—]*"
NUMBER_PATTERN = r"(\d+(?:[.,]\d+)?)"

MAX_TEXT_LENGTH = 5000

# ---------------------------------------------------------------------------
# Reporting windows
# ---------------------------------------------------------------------------
# window name -> number of monthly periods, ending at the reference period
WINDOW_MONTHS: dict[str, int] = {
    "month": 1,
    "half_year": 6,
    "year": 12,
}

WINDOW_LABELS: dict[str, str] = {
    "month": "За месяц",
    "half_year": "За полгода",
    "year": "За год",
}

DEFAULT_WINDOW = "month"

# Fixed reference month that the half-year and year windows count back from
REFERENCE_PERIOD = "2025-10"

# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------
CLIENT_STATUSES = ("active", "paused", "inactive")
MAX_EMAIL_LENGTH = 255
PASSWORD_HASH_ITERATIONS = 120_000
