"""Read-only projections over document and request collections."""

from collections.abc import Iterable
from datetime import date, datetime

DOCUMENT_STATUSES = ("pending", "verified", "rejected")
REQUEST_STATUSES = ("open", "fulfilled")


def filter_by_status(docs: Iterable, status: str) -> list:
    return [d for d in docs if d.status == status]


def count_by_status(docs: Iterable, status: str) -> int:
    return sum(1 for d in docs if d.status == status)


def status_counts(docs: Iterable) -> dict[str, int]:
    docs = list(docs)
    return {s: count_by_status(docs, s) for s in DOCUMENT_STATUSES}


def _as_date(value: date | datetime | str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value[:10])


def is_urgent(request, now: date | datetime, threshold_days: int) -> bool:
    """True iff the due date is at most ``threshold_days`` days after ``now``.

    Overdue requests count as urgent; requests without a due date never do.
    """
    if not request.due_date:
        return False
    return (_as_date(request.due_date) - _as_date(now)).days <= threshold_days


def display_confidence(doc) -> int | None:
    if doc.status == "pending":
        return None
    return doc.confidence_score


def average_confidence(docs: Iterable) -> float | None:
    scores = [d.confidence_score for d in docs if d.status != "pending"]
    if not scores:
        return None
    return round(sum(scores) / len(scores), 1)


def summarize(docs: Iterable, requests: Iterable, now: date | datetime, threshold_days: int) -> dict:
    docs = list(docs)
    open_requests = filter_by_status(requests, "open")
    return {
        "total_documents": len(docs),
        "by_status": status_counts(docs),
        "trusted_imports": sum(1 for d in docs if d.source == "digilocker"),
        "average_confidence": average_confidence(docs),
        "open_requests": len(open_requests),
        "urgent_requests": sum(1 for r in open_requests if is_urgent(r, now, threshold_days)),
    }
