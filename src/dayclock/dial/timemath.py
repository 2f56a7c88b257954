"""Clock time, minute and dial-angle conversions plus SVG arc geometry.

The dial has two concentric rings, each covering one 12-hour half of the day.
Angles are measured clockwise in degrees with 0 at 12 o'clock, so one hour is
30 degrees and one minute is half a degree.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import datetime

from dayclock.errors import InvalidTimeFormat

MINUTES_PER_DAY = 1440
MINUTES_PER_HALF_DAY = 720
NOON = MINUTES_PER_HALF_DAY
DEGREES_PER_HOUR = 30.0
DEGREES_PER_MINUTE = 0.5

# Largest sweep an SVG arc can draw between two distinct endpoints.
_MAX_SWEEP = 359.99

_TIME_RE = re.compile(r"([01]\d|2[0-3]):([0-5]\d)")


@dataclass(frozen=True)
class DialGeometry:
    center_x: float = 160.0
    center_y: float = 160.0
    radius_am: float = 75.0
    radius_pm: float = 110.0
    view_size: int = 320
    stroke_track: float = 28.0
    stroke_event: float = 24.0

    def radius_for(self, pm: bool) -> float:
        return self.radius_pm if pm else self.radius_am


def time_to_minutes(hhmm: str) -> int:
    """Parse ``HH:mm`` (24-hour) into minutes since midnight.

    Raises :class:`InvalidTimeFormat` for anything else, including
    single-digit hours and out-of-range values.
    """
    if not isinstance(hhmm, str):
        raise InvalidTimeFormat(hhmm)
    match = _TIME_RE.fullmatch(hhmm)
    if not match:
        raise InvalidTimeFormat(hhmm)
    return int(match.group(1)) * 60 + int(match.group(2))


def minutes_to_time(minutes: int) -> str:
    """Format minutes since midnight as ``HH:mm``. Callers clamp the input."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def minutes_to_dial_degrees(minutes: float) -> float:
    """Angle of *minutes* on its 12-hour ring, in ``[0, 360)``."""
    within_half = minutes % MINUTES_PER_HALF_DAY
    hours, mins = divmod(within_half, 60)
    return hours * DEGREES_PER_HOUR + mins * DEGREES_PER_MINUTE


def clock_hand_degrees(now: datetime) -> float:
    """Angle of the live clock hand, at minute resolution."""
    return minutes_to_dial_degrees(now.hour * 60 + now.minute)


def polar_to_cartesian(
    center_x: float, center_y: float, radius: float, degrees: float
) -> tuple[float, float]:
    radians = math.radians(degrees - 90.0)
    return (
        center_x + radius * math.cos(radians),
        center_y + radius * math.sin(radians),
    )


def _fmt(value: float) -> str:
    # round() can yield -0.0; adding 0.0 normalizes it to 0.0
    return f"{round(value, 3) + 0.0:g}"


def describe_arc(
    center_x: float,
    center_y: float,
    radius: float,
    start_deg: float,
    end_deg: float,
) -> str:
    """Return an SVG path for the clockwise arc from *start_deg* to *end_deg*.

    The path starts at the end angle and sweeps back to the start angle, so
    the sweep flag stays 0 and the large-arc flag alone picks the long way
    round when the span exceeds 180 degrees.
    """
    if end_deg - start_deg > _MAX_SWEEP:
        end_deg = start_deg + _MAX_SWEEP
    sx, sy = polar_to_cartesian(center_x, center_y, radius, end_deg)
    ex, ey = polar_to_cartesian(center_x, center_y, radius, start_deg)
    large_arc = "0" if end_deg - start_deg <= 180 else "1"
    return " ".join(
        [
            "M", _fmt(sx), _fmt(sy),
            "A", _fmt(radius), _fmt(radius), "0", large_arc, "0", _fmt(ex), _fmt(ey),
        ]
    )


def angle_from_point(x: float, y: float, center_x: float, center_y: float) -> float:
    """Angle of the point ``(x, y)`` around the dial centre, in ``[0, 360)``."""
    angle = math.degrees(math.atan2(y - center_y, x - center_x)) + 90.0
    if angle < 0:
        angle += 360.0
    if angle >= 360.0:
        angle -= 360.0
    return angle
