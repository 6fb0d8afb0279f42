"""
BinWatch — Public Issue Reports
pending → in_progress → resolved | rejected. Description is fixed at creation.
"""
import logging
from datetime import datetime, timezone

from pydantic import ValidationError

from config.settings import REPORT_TYPES, REPORT_STATUSES, REPORT_PRIORITIES, REPORT_DESCRIPTION_MAX
from store.errors import ValidationFailed, NotFound
from store.schemas import Report

log = logging.getLogger(__name__)

SYSTEM_RESOLVER = "system"


def create_report(store, report_type, description, location=None, bin_id=None,
                  reported_by=None, priority=None):
    report_type = (report_type or "").strip()
    description = (description or "").strip()
    if not report_type:
        raise ValidationFailed("missing_reportType")
    if not description:
        raise ValidationFailed("missing_description")
    if report_type not in REPORT_TYPES:
        raise ValidationFailed("invalid_reportType")
    if len(description) > REPORT_DESCRIPTION_MAX:
        raise ValidationFailed("invalid_description")
    if priority is not None and priority not in REPORT_PRIORITIES:
        raise ValidationFailed("invalid_priority")

    try:
        report = Report(
            reportType=report_type,
            description=description,
            location=location,
            binId=bin_id,
            reportedBy=reported_by or None,
            priority=priority or "medium",
        )
    except ValidationError as e:
        raise ValidationFailed(f"invalid_{e.errors()[0]['loc'][0]}")

    doc = store.insert("report", report.model_dump(exclude={"createdAt"}))
    log.info(f"[Reports] {doc['id']} created: {report_type} (bin={doc.get('binId')})")
    return doc


def list_reports(store, status=None):
    """Newest first, optionally filtered by status."""
    if status and status not in REPORT_STATUSES:
        raise ValidationFailed("invalid_status")
    reports = store.find("report", {"status": status} if status else None)
    reports.sort(key=lambda r: r.get("createdAt") or datetime.min.replace(tzinfo=timezone.utc),
                 reverse=True)
    return reports


def resolve_report(store, report_id, resolved_by=None, notes=None, now=None):
    """
    Mark a report resolved and stamp resolver and time.

    Resolving an already-resolved report overwrites the resolver and
    timestamp instead of failing.
    """
    changes = {
        "status": "resolved",
        "resolvedBy": resolved_by or SYSTEM_RESOLVER,
        "resolvedAt": now or datetime.now(timezone.utc),
    }
    if notes:
        changes["resolutionNotes"] = notes.strip()

    doc = store.update_by_id("report", report_id, changes)
    if doc is None:
        raise NotFound("report_not_found")
    log.info(f"[Reports] {report_id} resolved by {changes['resolvedBy']}")
    return doc
