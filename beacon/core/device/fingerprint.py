"""Heuristic device fingerprint.

A fingerprint is a short base-36 token derived from environment signals
(user agent, language, screen size, timezone offset, a canvas rendering
sample).  It is advisory: collisions are acceptable and generation must
never fail.  When anything goes wrong the caller gets a
``fallback-<epoch ms>-<random>`` token instead of an exception.
"""

from __future__ import annotations

import logging
import secrets
import time
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)

CANVAS_UNAVAILABLE = "canvas-unavailable"
FALLBACK_PREFIX = "fallback-"

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


@dataclass(frozen=True, slots=True)
class EnvironmentSignals:
    """Everything the fingerprint depends on, passed explicitly.

    ``timezone_offset`` follows the browser convention: minutes *behind* UTC
    (UTC+2 is ``-120``).  ``canvas`` returns a rendering sample such as a
    canvas data URL; it may raise.
    """

    user_agent: str | None = None
    language: str | None = None
    screen_width: int | None = None
    screen_height: int | None = None
    timezone_offset: int | None = None
    canvas: Callable[[], str] | None = None


def to_base36(value: int) -> str:
    if value < 0:
        raise ValueError("base36 encoding expects a non-negative integer")
    if value == 0:
        return "0"
    digits: list[str] = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def rolling_hash(text: str) -> int:
    """``h = h * 31 + c`` over UTF-16 code units, wrapped to a signed 32-bit int."""
    h = 0
    raw = text.encode("utf-16-le", "surrogatepass")
    for i in range(0, len(raw), 2):
        unit = raw[i] | (raw[i + 1] << 8)
        h = ((h << 5) - h + unit) & 0xFFFFFFFF
    if h & 0x80000000:
        h -= 1 << 32
    return h


def _sample_canvas(canvas: Callable[[], str] | None) -> str:
    if canvas is None:
        return ""
    try:
        return str(canvas())
    except Exception as e:
        logger.warning("Canvas sampling failed: %s", e)
        return CANVAS_UNAVAILABLE


def _dimension(value: int | None) -> str:
    return "unknown" if value is None else str(value)


def fallback_fingerprint() -> str:
    return f"{FALLBACK_PREFIX}{int(time.time() * 1000)}-{to_base36(secrets.randbits(56))}"


def generate_fingerprint(signals: EnvironmentSignals) -> str:
    """Collapse *signals* into a stable token.  Never raises."""
    try:
        parts = [
            signals.user_agent or "unknown-ua",
            signals.language or "unknown-lang",
            f"{_dimension(signals.screen_width)}x{_dimension(signals.screen_height)}",
            _dimension(signals.timezone_offset),
            _sample_canvas(signals.canvas),
        ]
        return to_base36(abs(rolling_hash("|".join(str(p) for p in parts))))
    except Exception:
        logger.exception("Device fingerprint generation failed, using fallback")
        return fallback_fingerprint()
