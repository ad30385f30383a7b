"""
Export module: display labels and CSV/JSON rendering.
"""

from .labels import TYPE_LABELS, format_type_label, humanize_type
from .summary import (
    meta_snippet,
    parse_summary_csv,
    render_events_csv,
    render_raw_json,
    render_summary_csv,
    render_summary_csv_from,
    summary_rows,
)

__all__ = [
    "TYPE_LABELS",
    "format_type_label",
    "humanize_type",
    "summary_rows",
    "render_summary_csv",
    "render_summary_csv_from",
    "parse_summary_csv",
    "render_raw_json",
    "render_events_csv",
    "meta_snippet",
]
