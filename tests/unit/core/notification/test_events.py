from datetime import datetime, timezone
from uuid import uuid4

import pytest

from beacon.core.notification.events import PUSH_BODY_MAX_LEN, build_push_message, strip_markdown
from beacon.models.notification import Notification, NotificationPayload


def _notification(**overrides) -> Notification:
    values = {
        "id": uuid4(),
        "user_id": "user-1",
        "title": "New lesson",
        "body": "Lesson **3** is ready",
        "created_at": datetime.now(timezone.utc),
    }
    values.update(overrides)
    return Notification(**values)


class TestStripMarkdown:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("# Heading\nbody", "Heading body"),
            ("**bold** and *italic*", "bold and italic"),
            ("~~gone~~ text", "gone text"),
            ("see [the docs](https://example.com)", "see the docs"),
            ("- one\n- two", "one two"),
            ("1. first\n2. second", "first second"),
            ("> quoted", "quoted"),
            ("run `make` now", "run now"),
        ],
    )
    def test_strips_syntax(self, text: str, expected: str) -> None:
        assert strip_markdown(text) == expected

    def test_truncates_with_ellipsis(self) -> None:
        result = strip_markdown("word " * 100)
        assert result.endswith("…")
        assert len(result) <= PUSH_BODY_MAX_LEN + 1

    def test_custom_max_len(self) -> None:
        assert strip_markdown("abcdefghij", max_len=4) == "abcd…"


class TestBuildPushMessage:
    def test_defaults(self) -> None:
        notification = _notification()
        message = build_push_message(notification, NotificationPayload(title="New lesson"))

        assert message["title"] == "New lesson"
        assert message["body"] == "Lesson 3 is ready"
        assert message["icon"] == "/logo.svg"
        assert message["badge"] == "/logo.svg"
        assert message["tag"] == f"notification-{notification.id}"
        assert message["data"] == {"url": "/notifications", "notificationId": str(notification.id)}

    def test_payload_values_win(self) -> None:
        notification = _notification(url="/courses/1", tag="course-1", type="course_update", data={"courseId": 1})
        payload = NotificationPayload(title="New lesson", icon="/course.png", badge="/badge.png")

        message = build_push_message(notification, payload)

        assert message["icon"] == "/course.png"
        assert message["badge"] == "/badge.png"
        assert message["tag"] == "course-1"
        assert message["data"]["url"] == "/courses/1"
        assert message["data"]["type"] == "course_update"
        assert message["data"]["courseId"] == 1
