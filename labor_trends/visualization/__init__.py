"""
Visualization module for trend charts and result tables.
"""

from .trend_viz import create_question_artifacts, export_table, plot_endpoint_change, plot_trend

__all__ = [
    "plot_trend",
    "plot_endpoint_change",
    "export_table",
    "create_question_artifacts",
]
