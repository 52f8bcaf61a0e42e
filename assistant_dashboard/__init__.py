"""
AI Assistant Analytics — client dashboard backend

Turns the metrics an administrator pastes as free text into structured
monthly records, and summarises those records for the client dashboard.

To add a metric:
    Add the field to the record class in models.py, register its kind,
    label and unit in config.FIELD_REGISTRY, and give it a keyword stem in
    config.FIELD_PATTERNS so the text parser can find it.

To connect a hosted backend:
    Replace storage.MetricStore and identity.IdentityService with clients
    for the hosted tables and auth API. list_metrics must keep returning
    records in ascending chronological order, filtered to the window.

To render:
    Call dashboard.get_client_overview(store, client_id, state) to get a
    plain dict of KPI cards and chart series.
"""
