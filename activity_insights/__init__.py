"""
Activity Insight & Anomaly Detection Engine.

Turns a bounded snapshot of workspace activity events into volume rankings,
period-over-period spike detection, actor rankings, and CSV/JSON exports.
"""

__version__ = "0.1.0"
