"""
BinWatch — Administrator Notices
A notice is currently active iff status = active and it has no expiry
or the expiry is still in the future.
"""
import logging
from datetime import datetime, timezone

from pydantic import ValidationError

from config.bins import SAMPLE_NOTICES
from config.settings import NOTICE_PRIORITIES, NOTICE_TITLE_MAX, NOTICE_CONTENT_MAX
from store.errors import ValidationFailed
from store.schemas import Notice

log = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _aware(dt):
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def create_notice(store, title, content, priority=None, admin_id=None,
                  notice_type=None, expiry=None, audience=None):
    title = (title or "").strip()
    content = (content or "").strip()
    if not title:
        raise ValidationFailed("missing_title")
    if not content:
        raise ValidationFailed("missing_content")
    if len(title) > NOTICE_TITLE_MAX:
        raise ValidationFailed("invalid_title")
    if len(content) > NOTICE_CONTENT_MAX:
        raise ValidationFailed("invalid_content")

    fields = {"title": title, "content": content, "createdBy": admin_id or None}
    if priority:
        fields["priority"] = priority
    if notice_type:
        fields["type"] = notice_type
    if expiry:
        fields["expiryDate"] = expiry
    if audience:
        fields["targetAudience"] = audience
    try:
        notice = Notice(**fields)
    except ValidationError as e:
        raise ValidationFailed(f"invalid_{e.errors()[0]['loc'][0]}")

    doc = store.insert("notice", notice.model_dump(exclude={"createdAt"}))
    log.info(f"[Notices] '{title}' published ({notice.priority})")
    return doc


def is_currently_active(notice, now=None):
    now = now or datetime.now(timezone.utc)
    if notice.get("status") != "active":
        return False
    expiry = _aware(notice.get("expiryDate"))
    return expiry is None or expiry > now


def list_active_notices(store, now=None):
    """Most urgent first; within a priority, newest first."""
    now = now or datetime.now(timezone.utc)
    notices = [n for n in store.find("notice", {"status": "active"}) if is_currently_active(n, now)]
    notices.sort(key=lambda n: _aware(n.get("createdAt")) or _EPOCH, reverse=True)
    notices.sort(key=lambda n: NOTICE_PRIORITIES.index(n.get("priority", "medium")))
    return notices


def seed_sample_notices(store, author_id):
    if store.count("notice") > 0:
        return 0
    for sample in SAMPLE_NOTICES:
        create_notice(store, sample["title"], sample["content"], sample["priority"],
                      author_id, notice_type=sample["type"])
    return len(SAMPLE_NOTICES)


def sample_notices():
    return [{
        "id": "sample1",
        "title": "System Notice",
        "content": "Database temporarily unavailable. Some features may be limited.",
        "priority": "high",
        "type": "alert",
        "status": "active",
        "createdAt": datetime.now(timezone.utc),
        "createdBy": "system",
    }]
