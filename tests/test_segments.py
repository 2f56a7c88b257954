"""Tests for dayclock.dial.segments: ring placement, opacity and ordering."""

from __future__ import annotations

import pytest

from dayclock.dial.segments import (
    BASELINE_OPACITY,
    DragPreview,
    Ring,
    build_segments,
    completion_opacity,
    split_interval,
)
from dayclock.dial.timemath import DialGeometry
from dayclock.errors import InvalidTask
from dayclock.tasks.model import DEFAULT_TASK_COLOR

from conftest import at


# ═══════════════════════════════════════════════════════════════════
#  Ring placement
# ═══════════════════════════════════════════════════════════════════


class TestRingPlacement:
    def test_morning_task_is_one_am_segment(self, make_task, make_project):
        segs = build_segments([make_task("a", "09:00", "10:00")], [make_project()])
        assert len(segs) == 1
        assert segs[0].ring == Ring.AM
        assert (segs[0].start_minute, segs[0].end_minute) == (540, 600)

    def test_afternoon_task_is_one_pm_segment(self, make_task, make_project):
        segs = build_segments([make_task("a", "13:00", "14:00")], [make_project()])
        assert [s.ring for s in segs] == [Ring.PM]

    def test_task_ending_at_noon_stays_on_am_ring(self, make_task):
        segs = build_segments([make_task("a", "10:00", "12:00")], [])
        assert [s.ring for s in segs] == [Ring.AM]

    def test_task_starting_at_noon_is_pm(self, make_task):
        segs = build_segments([make_task("a", "12:00", "13:00")], [])
        assert [s.ring for s in segs] == [Ring.PM]

    def test_noon_straddling_task_splits_in_two(self, make_task, make_project):
        task = make_task("a", "11:30", "12:30")
        segs = build_segments([task], [make_project()])

        assert [(s.ring, s.start_minute, s.end_minute) for s in segs] == [
            (Ring.AM, 690, 720),
            (Ring.PM, 720, 750),
        ]
        assert all(s.task is task for s in segs)
        assert segs[0].color == segs[1].color
        assert segs[0].opacity == segs[1].opacity

    def test_split_reconstructs_interval_without_gap_or_overlap(self):
        for start, end in [(600, 800), (1, 1439), (719, 721)]:
            parts = split_interval(start, end)
            assert parts[0][1] == start
            assert parts[-1][2] == end
            for (_, _, prev_end), (_, next_start, _) in zip(parts, parts[1:]):
                assert prev_end == next_start

    def test_segment_path_uses_ring_radius(self, make_task):
        geo = DialGeometry(radius_am=75, radius_pm=110)
        am, pm = build_segments([make_task("a", "11:00", "13:00")], [], geometry=geo)
        assert " 75 75 " in am.path
        assert " 110 110 " in pm.path


# ═══════════════════════════════════════════════════════════════════
#  Completion opacity
# ═══════════════════════════════════════════════════════════════════


class TestCompletionOpacity:
    def test_baseline_without_checklist(self, make_task):
        assert completion_opacity(make_task("a")) == BASELINE_OPACITY == 0.2

    def test_completed_is_full_regardless_of_checklist(self, make_task):
        assert completion_opacity(make_task("a", completed=True)) == 1.0
        assert completion_opacity(make_task("a", items=[False, False], completed=True)) == 1.0

    def test_partial_checklist(self, make_task):
        assert completion_opacity(make_task("a", items=[True, False, False, False])) == pytest.approx(0.4)

    def test_monotonic_in_completed_items(self, make_task):
        total = 5
        values = [
            completion_opacity(make_task("a", items=[i < done for i in range(total)]))
            for done in range(total)
        ]
        assert values == sorted(values)
        assert values[0] == pytest.approx(0.2)
        assert all(v < 1.0 for v in values)


# ═══════════════════════════════════════════════════════════════════
#  Colour, flags and ordering
# ═══════════════════════════════════════════════════════════════════


class TestSegmentAttributes:
    def test_color_comes_from_project(self, make_task, make_project):
        segs = build_segments([make_task("a")], [make_project("p1", color="#f43f5e")])
        assert segs[0].color == "#f43f5e"

    def test_unknown_project_uses_default_color(self, make_task):
        segs = build_segments([make_task("a", project_id="missing")], [])
        assert segs[0].color == DEFAULT_TASK_COLOR

    def test_active_when_now_inside_interval(self, make_task):
        segs = build_segments([make_task("a", "09:00", "10:00")], [], at(9, 30))
        assert segs[0].is_active

    def test_end_minute_is_exclusive(self, make_task):
        segs = build_segments([make_task("a", "09:00", "10:00")], [], at(10, 0))
        assert not segs[0].is_active

    def test_not_active_on_another_date(self, make_task):
        task = make_task("a", "09:00", "10:00", day="2026-10-20")
        assert not build_segments([task], [], at(9, 30))[0].is_active

    def test_preview_overrides_times_and_draws_last(self, make_task):
        tasks = [make_task("a", "09:00", "10:00"), make_task("b", "01:00", "02:00")]
        preview = DragPreview(task_id="a", start_time="03:00", end_time="04:00")

        segs = build_segments(tasks, [], preview=preview)

        assert [s.task_id for s in segs] == ["b", "a"]
        assert segs[-1].is_dragging
        assert (segs[-1].start_minute, segs[-1].end_minute) == (180, 240)
        assert not segs[0].is_dragging

    def test_preview_can_move_task_onto_noon_split(self, make_task):
        preview = DragPreview(task_id="a", start_time="11:30", end_time="12:30")
        segs = build_segments([make_task("a", "09:00", "10:00")], [], preview=preview)
        assert len(segs) == 2
        assert all(s.is_dragging for s in segs)


class TestContractViolations:
    def test_zero_duration_rejected(self, make_task):
        with pytest.raises(InvalidTask):
            build_segments([make_task("a", "09:00", "09:00")], [])

    def test_negative_duration_rejected(self, make_task):
        with pytest.raises(InvalidTask):
            build_segments([make_task("a", "23:30", "00:30")], [])

    def test_split_interval_rejects_empty(self):
        with pytest.raises(InvalidTask):
            split_interval(600, 600)
