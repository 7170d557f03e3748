"""Operating-hours checks, including windows that wrap past midnight."""

from __future__ import annotations

from .timewindow import MINUTES_PER_DAY, Interval


def is_wrap_style(opening: int, closing: int) -> bool:
    return closing < opening


def within_hours(point: int, opening: int, closing: int) -> bool:
    """Return True when minute-of-day ``point`` lies in the operating window.

    Both ends are inclusive. For wrap-style hours (e.g. 22:00-02:00) the
    window is everything from opening to midnight plus midnight to closing.
    ``opening == closing`` only admits the opening minute itself.
    """
    if is_wrap_style(opening, closing):
        return point >= opening or point <= closing
    return opening <= point <= closing


def window_length(opening: int, closing: int) -> int:
    return (closing - opening) % MINUTES_PER_DAY


def interval_within_hours(candidate: Interval, opening: int, closing: int) -> bool:
    """Return True when a whole booking interval fits in the operating window.

    The end is compared modulo 1440 for the point check, and the interval
    may not run past the closing time it reaches first: in normal hours a
    booking ending after midnight is rejected, in wrap-style hours it may
    continue up to the wrap closing time. Zero-width hours mean closed all
    day.
    """
    if opening == closing or candidate.duration <= 0:
        return False

    start = candidate.start % MINUTES_PER_DAY
    if not within_hours(start, opening, closing):
        return False
    if not within_hours(candidate.end % MINUTES_PER_DAY, opening, closing):
        return False

    offset = (start - opening) % MINUTES_PER_DAY
    return offset + candidate.duration <= window_length(opening, closing)
