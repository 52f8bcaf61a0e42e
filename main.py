"""
AI Assistant Analytics — end-to-end metrics pipeline.

Runs the parse → store → aggregate pipeline on demo data and prints
smoke-test summaries.

Usage:
    python main.py
"""

import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent))

from assistant_dashboard.aggregator import aggregate_metrics, filter_window
from assistant_dashboard.config import METRICS_WORKBOOK_FILE, WINDOW_MONTHS
from assistant_dashboard.dashboard import get_admin_overview, get_client_overview
from assistant_dashboard.kpis import format_field
from assistant_dashboard.loaders import export_metrics_xlsx, load_metrics_xlsx
from assistant_dashboard.models import LegacyMetricRecord, ViewMode, upgrade_legacy_record
from assistant_dashboard.parser import (
    build_preview,
    find_unrecognised_fields,
    parse_metrics_text,
    validate_metrics_text,
)
from assistant_dashboard.simulator import build_demo_services, sample_report_text
from assistant_dashboard.view_state import ViewState, WindowSelected, reduce_view_state

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


def main() -> None:
    """Run the metrics pipeline on demo data and print smoke-test outputs."""

    print("=" * 70)
    print("  AI ASSISTANT ANALYTICS — Metrics Pipeline Smoke Test")
    print("=" * 70)
    print()

    # ------------------------------------------------------------------
    # 1. Demo services
    # ------------------------------------------------------------------
    print("[ 1 ] SEEDING DEMO DATA")
    print("-" * 40)

    store, _ = build_demo_services()
    clients = store.list_clients()
    print(f"\nClients: {len(clients)}  |  Managers: {len(store.list_managers())}")
    print(get_admin_overview(store).to_string(index=False))

    client = clients[0]

    # ------------------------------------------------------------------
    # 2. Parse pasted text
    # ------------------------------------------------------------------
    print("\n")
    print("[ 2 ] PARSING ADMIN TEXT")
    print("-" * 40)

    latest = store.list_metrics(client.id, "month")[-1]
    text = validate_metrics_text(sample_report_text(latest))
    print(f"\nInput:\n{text}\n")

    candidate = parse_metrics_text(text, latest.period_type, client.id)
    print(build_preview(candidate)[["label", "display", "recognised"]].to_string(index=False))
    missing = find_unrecognised_fields(candidate)
    print(f"\nNot recognised: {missing or 'none'}")

    legacy_text = "конверсия 75, автономность 85.5, экономия 50000, повторные 45%"
    legacy = parse_metrics_text(legacy_text, "2023-12", client.id, schema=LegacyMetricRecord)
    print(f"\nLegacy schema parse of '{legacy_text}':")
    print(f"  {legacy.to_dict()}")

    upgraded = store.create_metric(upgrade_legacy_record(legacy))
    print(f"Upgraded to schema v{upgraded.SCHEMA_VERSION} and saved:")
    print(f"  {upgraded.to_dict()}")

    # ------------------------------------------------------------------
    # 3. Aggregation per window
    # ------------------------------------------------------------------
    print("\n")
    print("[ 3 ] AGGREGATION")
    print("-" * 40)

    state = ViewState()
    for window in WINDOW_MONTHS:
        state = reduce_view_state(state, WindowSelected(window))
        overview = get_client_overview(store, client.id, state)
        print(f"\n{client.company_name} — {window} ({overview['view_mode'].value}):")
        for card in overview["cards"]:
            print(f"  {card['title']:28s} | {card['display']}")

    empty = aggregate_metrics([], ViewMode.MULTI_PERIOD)
    print(f"\nAggregate of an empty window: {empty!r}")

    # ------------------------------------------------------------------
    # 4. Workbook round trip
    # ------------------------------------------------------------------
    print("\n")
    print("[ 4 ] WORKBOOK EXPORT")
    print("-" * 40)

    records = store.list_all_metrics(client.id)
    path = export_metrics_xlsx(records, METRICS_WORKBOOK_FILE)
    reloaded = load_metrics_xlsx(path)
    check = len(reloaded) == len(records)
    print(f"\n  [{'PASS' if check else 'FAIL'}] Exported and reloaded {len(reloaded)} records ({path})")

    in_year = filter_window(reloaded, store.reference_period, WINDOW_MONTHS["year"])
    year = aggregate_metrics(in_year, ViewMode.MULTI_PERIOD)
    if year is not None:
        print(f"  Conversion over the year: {format_field('conversion', year['conversion'])}")

    print("\n" + "=" * 70)
    print("  Pipeline complete.")
    print("=" * 70)


if __name__ == "__main__":
    main()
