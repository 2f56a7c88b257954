"""Render the day dial as a standalone SVG document."""

from __future__ import annotations

from datetime import datetime
from html import escape

from dayclock.dial.segments import ArcSegment
from dayclock.dial.timemath import DialGeometry, clock_hand_degrees

TRACK_ACTIVE = "rgba(99, 102, 241, 0.12)"
TRACK_IDLE = "rgba(0, 0, 0, 0.04)"
HAND_COLOR = "#ef4444"
HALO_EXTRA = 8


def _num(value: float) -> str:
    return f"{round(value, 3) + 0.0:g}"


def clock_label(now: datetime) -> tuple[str, str]:
    """12-hour ``h:mm`` text and its ``AM``/``PM`` suffix."""
    hour = now.hour % 12 or 12
    return f"{hour}:{now.minute:02d}", "PM" if now.hour >= 12 else "AM"


def _segment_markup(seg: ArcSegment, geo: DialGeometry, selected: bool) -> list[str]:
    classes = ["segment"]
    if seg.is_dragging:
        classes.append("dragging")
    if seg.is_active:
        classes.append("active")
    out = [
        f'<g class="{" ".join(classes)}" data-task-id="{escape(seg.task_id)}" '
        f'data-ring="{seg.ring.value}">',
        f"<title>{escape(seg.task.title)} ({escape(seg.task.start_time)}-"
        f"{escape(seg.task.end_time)})</title>",
    ]
    if selected:
        out.append(
            f'<path d="{seg.path}" fill="none" stroke="white" '
            f'stroke-width="{_num(geo.stroke_event + HALO_EXTRA)}" stroke-linecap="round"/>'
        )
    out.append(
        f'<path d="{seg.path}" fill="none" stroke="{escape(seg.color)}" '
        f'stroke-width="{_num(geo.stroke_event)}" stroke-linecap="round" '
        f'stroke-opacity="{_num(seg.opacity)}"/>'
    )
    out.append("</g>")
    return out


def render_dial_svg(
    segments: list[ArcSegment],
    geometry: DialGeometry | None = None,
    *,
    now: datetime | None = None,
    selected_id: str | None = None,
    show_hand: bool = True,
) -> str:
    """Return SVG markup for the dial.

    Segments are drawn in the order given, so callers pass the output of
    :func:`~dayclock.dial.segments.build_segments` to keep a dragged arc on top.
    The centre label and the hand use *now*; the hand is omitted when
    *show_hand* is false (the viewed day is not today).
    """
    geo = geometry or DialGeometry()
    cx, cy = _num(geo.center_x), _num(geo.center_y)
    size = geo.view_size
    is_pm = now is not None and now.hour >= 12

    lines = [
        f'<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 {size} {size}" '
        f'width="{size}" height="{size}">',
        f'<circle cx="{cx}" cy="{cy}" r="{_num(geo.radius_am - 15)}" fill="white"/>',
        f'<circle class="track pm" cx="{cx}" cy="{cy}" r="{_num(geo.radius_pm)}" fill="none" '
        f'stroke="{TRACK_ACTIVE if is_pm else TRACK_IDLE}" stroke-width="{_num(geo.stroke_track)}"/>',
        f'<circle class="track am" cx="{cx}" cy="{cy}" r="{_num(geo.radius_am)}" fill="none" '
        f'stroke="{TRACK_IDLE if is_pm else TRACK_ACTIVE}" stroke-width="{_num(geo.stroke_track)}"/>',
    ]

    if now is not None:
        text, suffix = clock_label(now)
        lines.append(
            f'<text x="{cx}" y="{cy}" text-anchor="middle" dominant-baseline="middle" '
            f'font-size="28" font-weight="900" fill="#1e293b">{text}</text>'
        )
        lines.append(
            f'<text x="{cx}" y="{_num(geo.center_y + 22)}" text-anchor="middle" '
            f'dominant-baseline="middle" font-size="11" font-weight="900" '
            f'fill="#94a3b8">{suffix}</text>'
        )

    for seg in segments:
        lines.extend(_segment_markup(seg, geo, seg.task_id == selected_id))

    if now is not None and show_hand:
        tip = _num(geo.center_y - geo.radius_pm - 6)
        lines.append(
            f'<g class="hand" transform="rotate({_num(clock_hand_degrees(now))}, {cx}, {cy})">'
        )
        lines.append(
            f'<line x1="{cx}" y1="{cy}" x2="{cx}" y2="{tip}" stroke="{HAND_COLOR}" '
            'stroke-width="2.5" stroke-linecap="round"/>'
        )
        lines.append(f'<circle cx="{cx}" cy="{cy}" r="3.5" fill="{HAND_COLOR}"/>')
        lines.append("</g>")

    lines.append("</svg>")
    return "\n".join(lines) + "\n"
