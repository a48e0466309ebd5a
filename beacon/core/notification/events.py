from __future__ import annotations

import re
from enum import StrEnum
from typing import Any

from beacon.configs import configs
from beacon.models.notification import Notification, NotificationPayload


class NotificationEventType(StrEnum):
    """Known values of ``Notification.type``.  Other strings are stored as-is."""

    ANNOUNCEMENT = "announcement"
    COURSE_UPDATE = "course_update"
    NEW_LESSON = "new_lesson"
    LESSON_COMPLETION = "lesson_completion"
    LIVE_LESSON_REMINDER = "live_lesson_reminder"
    TUTOR_RESPONSE = "tutor_response"
    TEST = "test"


# ---------------------------------------------------------------------------
# Markdown stripping: produce clean plain-text for push notifications
# ---------------------------------------------------------------------------

_MD_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"^#{1,6}\s+", re.MULTILINE), ""),  # headings
    (re.compile(r"\*{1,3}(.+?)\*{1,3}"), r"\1"),  # bold / italic
    (re.compile(r"~~(.+?)~~"), r"\1"),  # strikethrough
    (re.compile(r"`{1,3}[^`]*`{1,3}"), ""),  # inline / fenced code
    (re.compile(r"!?\[([^\]]*)\]\([^)]*\)"), r"\1"),  # links / images
    (re.compile(r"^[-*+]\s+", re.MULTILINE), ""),  # unordered list markers
    (re.compile(r"^\d+\.\s+", re.MULTILINE), ""),  # ordered list markers
    (re.compile(r"^>\s?", re.MULTILINE), ""),  # blockquotes
]

PUSH_BODY_MAX_LEN = 180


def strip_markdown(text: str, max_len: int = PUSH_BODY_MAX_LEN) -> str:
    """Strip common Markdown syntax and return a single-line plain-text preview."""
    for pat, repl in _MD_PATTERNS:
        text = pat.sub(repl, text)
    text = re.sub(r"\s+", " ", text).strip()
    if len(text) > max_len:
        text = text[:max_len].rstrip() + "…"
    return text


def build_push_message(notification: Notification, payload: NotificationPayload) -> dict[str, Any]:
    """JSON document the service worker receives for *notification*."""
    push = configs.Push
    url = notification.url or push.DefaultUrl
    data: dict[str, Any] = {
        **notification.data,
        "url": url,
        "notificationId": str(notification.id),
    }
    if notification.type:
        data["type"] = notification.type
    return {
        "title": notification.title,
        "body": strip_markdown(notification.body),
        "icon": payload.icon or push.Icon,
        "badge": payload.badge or push.Badge,
        "tag": notification.tag or f"notification-{notification.id}",
        "data": data,
    }
