"""Reports -- append-only user-submitted abuse reports."""

from mediator.reports.models import Report
from mediator.reports.store import ReportStore

__all__ = ["Report", "ReportStore"]
