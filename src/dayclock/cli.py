"""dayclock CLI: view a day on the dial, reschedule tasks, tick off checklists.

Installed as the ``dayclock`` console_script.
"""

from __future__ import annotations

import sys
from collections.abc import Callable
from datetime import date, datetime
from pathlib import Path
from typing import TYPE_CHECKING

import click

from dayclock import __version__
from dayclock.config import Config
from dayclock.io_utils import write_text

if TYPE_CHECKING:
    from rich.text import Text

    from dayclock.dial.view import DayDial
    from dayclock.store import TaskStore
    from dayclock.tasks.model import Project, Task


CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])


# ── Option parsing helpers ───────────────────────────────────────────


def _parse_date(raw: str | None) -> date:
    if not raw or raw == "today":
        return date.today()
    try:
        return date.fromisoformat(raw)
    except ValueError:
        raise click.BadParameter(f"Expected YYYY-MM-DD, got {raw!r}.", param_hint="DATE") from None


def _parse_now(raw: str, day: date) -> datetime | None:
    """Turn ``--now HH:MM`` into a datetime on *day*; empty means wall-clock time."""
    if not raw:
        return None
    from dayclock.dial.timemath import time_to_minutes
    from dayclock.errors import InvalidTimeFormat

    try:
        minutes = time_to_minutes(raw)
    except InvalidTimeFormat as exc:
        raise click.BadParameter(str(exc), param_hint="--now") from None
    return datetime(day.year, day.month, day.day, minutes // 60, minutes % 60)


# ── Store and dial helpers ───────────────────────────────────────────


def _open_store(cfg: Config) -> TaskStore:
    from dayclock import log as dlog
    from dayclock.errors import DayclockError
    from dayclock.store import open_store

    try:
        return open_store(cfg)
    except DayclockError as exc:
        dlog.error(str(exc))
        sys.exit(1)


def _open_dial(ctx: click.Context, day: date, now: datetime | None) -> DayDial:
    from dayclock import log as dlog
    from dayclock.dial.view import DayDial
    from dayclock.errors import DayclockError

    cfg: Config = ctx.obj
    store = _open_store(cfg)
    clock = (lambda: now) if now is not None else datetime.now
    dial = DayDial(store, day, config=cfg, clock=clock)
    try:
        dial.reload()
    except DayclockError as exc:
        dlog.error(f"Could not load {day.isoformat()}: {exc}")
        sys.exit(1)
    return dial


def _find_task(store: TaskStore, task_id: str) -> Task:
    from dayclock import log as dlog
    from dayclock.errors import DayclockError

    try:
        task = store.get_task(task_id)
    except DayclockError as exc:
        dlog.error(str(exc))
        sys.exit(1)
    if task is None:
        dlog.error(f"Task {task_id} not found")
        sys.exit(1)
    return task


def _find_task_date(ctx: click.Context, task_id: str) -> date:
    from dayclock import log as dlog

    task = _find_task(_open_store(ctx.obj), task_id)
    try:
        return date.fromisoformat(task.date)
    except ValueError:
        dlog.error(f"Task {task_id} has an invalid date {task.date!r}; pass --date")
        sys.exit(1)


def _view_date(ctx: click.Context, task_id: str, day: str) -> date:
    return _parse_date(day) if day else _find_task_date(ctx, task_id)


def _edit_task(ctx: click.Context, task_id: str, change: Callable[[Task], Task]) -> Task:
    """Apply *change* to a stored task and write it back."""
    from dayclock import log as dlog
    from dayclock.errors import DayclockError

    store = _open_store(ctx.obj)
    task = _find_task(store, task_id)
    try:
        return store.update_task(change(task))
    except DayclockError as exc:
        dlog.error(str(exc))
        sys.exit(1)


# ── Output helpers ───────────────────────────────────────────────────


def _project_label(project: Project | None) -> Text:
    from rich.color import Color, ColorParseError
    from rich.text import Text

    if project is None:
        return Text("")
    try:
        Color.parse(project.color)
    except ColorParseError:
        return Text(project.name)
    return Text(project.name, style=project.color)


def _print_detail(task: Task, project: Project | None) -> None:
    """Detail panel for one task: times, description, checklist, content ideas."""
    from rich.markup import escape
    from rich.text import Text

    from dayclock import log as dlog

    out = dlog.console
    header = Text.assemble(
        ("▶ ", "bold"),
        (task.title or task.id, "bold"),
        f"  {task.start_time}-{task.end_time}  ",
        _project_label(project),
        f"  id={task.id}",
    )
    out.print(header)
    if task.description:
        out.print(f"  {escape(task.description)}")

    done, total = task.checklist_progress()
    if total:
        out.print(f"  Checklist {done}/{total}{' (completed)' if task.completed else ''}:")
        for item in task.checklist:
            mark = "x" if item.completed else " "
            out.print(f"    \\[{mark}] {escape(item.id)}  {escape(item.text)}")
    else:
        out.print(f"  {'Completed' if task.completed else 'Open'}, no checklist")

    if task.content_ideas:
        out.print("  Content ideas:")
        for idea in task.content_ideas:
            out.print(f"    {escape(idea.id)}  {idea.type.value}  {escape(idea.text)}")


# ── Main group ───────────────────────────────────────────────────────


@click.group(context_settings=CONTEXT_SETTINGS)
@click.option("--store", "store_file", default="", help="Planner JSON file (default: dayclock.json)")
@click.option("--api-url", default="", help="Planner REST API base URL (overrides --store)")
@click.option("--token", "api_token", default="", help="Bearer token for the REST API")
@click.option(
    "--snap", "snap_minutes", type=click.IntRange(min=1), default=5,
    help="Drag snap step in minutes",
)
@click.option("-v", "--verbose", is_flag=True, help="Show debug output")
@click.version_option(__version__, prog_name="dayclock")
@click.pass_context
def main(
    ctx: click.Context,
    store_file: str,
    api_url: str,
    api_token: str,
    snap_minutes: int,
    verbose: bool,
) -> None:
    """dayclock: family day planner on a 24-hour dial.

    \b
    EXAMPLES:
      dayclock day                          # Today's tasks and the selected task
      dayclock dial 2026-10-19 -o day.svg   # Render the dial as SVG
      dayclock move t1 14:30                # Drag task t1 to start at 14:30
      dayclock check t1 i2                  # Toggle checklist item i2 of t1
      dayclock item add t1 "Pack lunch"     # Add a checklist item
    """
    from dayclock import log as dlog

    dlog.set_verbose(verbose)
    ctx.obj = Config(
        store_file=store_file,
        api_url=api_url,
        api_token=api_token,
        snap_minutes=snap_minutes,
        verbose=verbose,
    )


# ── Subcommand: day ──────────────────────────────────────────────────


@main.command()
@click.argument("day", required=False, default="today")
@click.option("--now", "now_raw", default="", help="Pretend the time is HH:MM on DAY")
@click.option("--select", "select_id", default="", help="Task id to show in detail")
@click.pass_context
def day(ctx: click.Context, day: str, now_raw: str, select_id: str) -> None:
    """List the tasks of DAY (YYYY-MM-DD, default today) and detail the selected one."""
    from rich.markup import escape
    from rich.table import Table

    from dayclock import log as dlog
    from dayclock.dial.segments import Ring, completion_opacity
    from dayclock.errors import DayclockError

    view_date = _parse_date(day)
    dial = _open_dial(ctx, view_date, _parse_now(now_raw, view_date))

    if not dial.tasks:
        dlog.info(f"No tasks on {view_date.isoformat()}.")
        return
    if select_id:
        dial.select(select_id)

    try:
        segments = dial.segments()
    except DayclockError as exc:
        dlog.error(str(exc))
        sys.exit(1)
    active_ids = {seg.task_id for seg in segments if seg.is_active}
    rings: dict[str, list[str]] = {}
    for seg in segments:
        rings.setdefault(seg.task_id, [])
        if seg.ring.value not in rings[seg.task_id]:
            rings[seg.task_id].append(seg.ring.value)
    projects = {p.id: p for p in dial.projects or []}

    table = Table(title=f"{view_date.isoformat()}", show_lines=False)
    table.add_column("", width=2)
    table.add_column("ID")
    table.add_column("Time")
    table.add_column("Ring")
    table.add_column("Task")
    table.add_column("Project")
    table.add_column("Done", justify="right")
    table.add_column("Fill", justify="right")

    for task in dial.tasks:
        marker = ""
        if task.id == dial.selected_id:
            marker = "▶"
        if task.id in active_ids:
            marker += "●"
        done, total = task.checklist_progress()
        table.add_row(
            marker,
            escape(task.id),
            f"{task.start_time}-{task.end_time}",
            "/".join(rings.get(task.id, [Ring.AM.value])),
            f"[strike]{escape(task.title)}[/strike]" if task.completed else escape(task.title),
            _project_label(projects.get(task.project_id)),
            f"{done}/{total}" if total else "-",
            f"{completion_opacity(task):.0%}",
        )

    dlog.console.print(table)

    selected = dial.active_task()
    if selected is not None:
        _print_detail(selected, projects.get(selected.project_id))


# ── Subcommand: show ─────────────────────────────────────────────────


@main.command()
@click.argument("task_id")
@click.option("--date", "day", default="", help="Date of the task (default: looked up)")
@click.pass_context
def show(ctx: click.Context, task_id: str, day: str) -> None:
    """Show one task with its checklist and content ideas."""
    from dayclock import log as dlog

    view_date = _view_date(ctx, task_id, day)
    view = _open_dial(ctx, view_date, None)
    if view.get_task(task_id) is None:
        dlog.error(f"Task {task_id} not found on {view_date.isoformat()}")
        sys.exit(1)
    view.select(task_id)
    task = view.active_task()
    projects = {p.id: p for p in view.projects or []}
    _print_detail(task, projects.get(task.project_id))


# ── Subcommand: dial ─────────────────────────────────────────────────


@main.command()
@click.argument("day", required=False, default="today")
@click.option("--output", "-o", default="", help="Write SVG here (default: stdout)")
@click.option("--now", "now_raw", default="", help="Pretend the time is HH:MM on DAY")
@click.option("--select", "select_id", default="", help="Task id to highlight")
@click.pass_context
def dial(ctx: click.Context, day: str, output: str, now_raw: str, select_id: str) -> None:
    """Render the dial for DAY as an SVG image."""
    from dayclock import log as dlog
    from dayclock.errors import DayclockError

    view_date = _parse_date(day)
    view = _open_dial(ctx, view_date, _parse_now(now_raw, view_date))
    if select_id:
        view.select(select_id)

    try:
        svg = view.render_svg()
    except DayclockError as exc:
        dlog.error(str(exc))
        sys.exit(1)

    if output:
        path = Path(output)
        path.parent.mkdir(parents=True, exist_ok=True)
        write_text(path, svg)
        dlog.success(f"Dial written to {path}")
    else:
        click.echo(svg, nl=False)


# ── Subcommand: move ─────────────────────────────────────────────────


@main.command()
@click.argument("task_id")
@click.argument("start")
@click.option("--date", "day", default="", help="Date of the task (default: looked up)")
@click.pass_context
def move(ctx: click.Context, task_id: str, start: str, day: str) -> None:
    """Drag TASK_ID on its ring so it starts at START (HH:MM).

    Moves snap to the drag step and never cross noon.
    """
    from dayclock import log as dlog
    from dayclock.errors import DayclockError, InvalidTimeFormat

    view_date = _view_date(ctx, task_id, day)
    view = _open_dial(ctx, view_date, None)
    if view.get_task(task_id) is None:
        dlog.error(f"Task {task_id} not found on {view_date.isoformat()}")
        sys.exit(1)

    try:
        moved = view.reschedule(task_id, start)
    except InvalidTimeFormat as exc:
        raise click.BadParameter(str(exc), param_hint="START") from None
    except DayclockError as exc:
        dlog.error(str(exc))
        sys.exit(1)

    if view.last_error is not None or moved is None:
        sys.exit(1)
    if moved.start_time != start:
        dlog.warn(f"Snapped/clamped to {moved.start_time} (requested {start})")
    dlog.success(f"{moved.title or moved.id}: {moved.start_time}-{moved.end_time}")


# ── Subcommand: check ────────────────────────────────────────────────


@main.command()
@click.argument("task_id")
@click.argument("item_id")
@click.option("--date", "day", default="", help="Date of the task (default: looked up)")
@click.pass_context
def check(ctx: click.Context, task_id: str, item_id: str, day: str) -> None:
    """Toggle checklist item ITEM_ID of TASK_ID."""
    from dayclock import log as dlog
    from dayclock.errors import DayclockError

    view_date = _view_date(ctx, task_id, day)
    view = _open_dial(ctx, view_date, None)
    if view.get_task(task_id) is None:
        dlog.error(f"Task {task_id} not found on {view_date.isoformat()}")
        sys.exit(1)

    try:
        updated = view.toggle_checklist(item_id, task_id=task_id)
    except DayclockError as exc:
        dlog.error(str(exc))
        sys.exit(1)
    if updated is None:
        sys.exit(1)

    done, total = updated.checklist_progress()
    status = "completed" if updated.completed else "open"
    dlog.success(f"{updated.title or updated.id}: {done}/{total} done ({status})")


# ── Subcommand: done ─────────────────────────────────────────────────


@main.command()
@click.argument("task_id")
@click.option("--undo", is_flag=True, help="Mark the task open again")
@click.pass_context
def done(ctx: click.Context, task_id: str, undo: bool) -> None:
    """Mark a task without a checklist as completed (or open with --undo)."""
    from dayclock import log as dlog

    updated = _edit_task(ctx, task_id, lambda t: t.mark_completed(not undo))
    status = "completed" if updated.completed else "open"
    dlog.success(f"{updated.title or updated.id}: {status}")


# ── Subcommands: add / rm ────────────────────────────────────────────


@main.command()
@click.argument("title")
@click.option("--date", "day", default="today", help="Task date (YYYY-MM-DD)")
@click.option("--start", "start_time", required=True, help="Start time HH:MM")
@click.option("--end", "end_time", required=True, help="End time HH:MM")
@click.option("--project", "project_id", default="", help="Project id")
@click.option("--item", "items", multiple=True, help="Checklist item (repeatable)")
@click.option("--description", default="", help="Free-text description")
@click.option("--id", "task_id", default="", help="Explicit task id")
@click.pass_context
def add(
    ctx: click.Context,
    title: str,
    day: str,
    start_time: str,
    end_time: str,
    project_id: str,
    items: tuple[str, ...],
    description: str,
    task_id: str,
) -> None:
    """Add a task; tasks must start before they end on the same day."""
    from dayclock import log as dlog
    from dayclock.errors import DayclockError
    from dayclock.tasks.model import ChecklistItem, Planner, Task, new_id
    from dayclock.tasks.validate import validate_and_report

    store = _open_store(ctx.obj)
    task = Task(
        id=task_id or new_id(),
        project_id=project_id,
        title=title,
        date=_parse_date(day).isoformat(),
        start_time=start_time,
        end_time=end_time,
        description=description,
        checklist=[ChecklistItem(id=f"i{n}", text=text) for n, text in enumerate(items, 1)],
    )

    try:
        projects = store.list_projects()
    except DayclockError as exc:
        dlog.error(str(exc))
        sys.exit(1)
    if not validate_and_report(task, Planner(projects=projects)):
        sys.exit(1)

    try:
        store.create_task(task)
    except DayclockError as exc:
        dlog.error(str(exc))
        sys.exit(1)
    dlog.success(f"Added {task.id}: {task.title} {task.date} {task.start_time}-{task.end_time}")


@main.command()
@click.argument("task_id")
@click.pass_context
def rm(ctx: click.Context, task_id: str) -> None:
    """Delete a task."""
    from dayclock import log as dlog
    from dayclock.errors import DayclockError

    store = _open_store(ctx.obj)
    try:
        store.delete_task(task_id)
    except DayclockError as exc:
        dlog.error(str(exc))
        sys.exit(1)
    dlog.success(f"Deleted {task_id}")


# ── Subcommand group: item ───────────────────────────────────────────


@main.group(context_settings=CONTEXT_SETTINGS)
def item() -> None:
    """Add or remove checklist items."""


@item.command("add")
@click.argument("task_id")
@click.argument("text")
@click.option("--id", "item_id", default="", help="Explicit item id")
@click.pass_context
def item_add(ctx: click.Context, task_id: str, text: str, item_id: str) -> None:
    """Append a checklist item to TASK_ID; a completed task reopens."""
    from dayclock import log as dlog

    updated = _edit_task(ctx, task_id, lambda t: t.add_item(text, item_id))
    added = updated.checklist[-1]
    done_count, total = updated.checklist_progress()
    dlog.success(f"{updated.title or updated.id}: added {added.id} ({done_count}/{total} done)")


@item.command("rm")
@click.argument("task_id")
@click.argument("item_id")
@click.pass_context
def item_rm(ctx: click.Context, task_id: str, item_id: str) -> None:
    """Remove checklist item ITEM_ID from TASK_ID."""
    from dayclock import log as dlog

    updated = _edit_task(ctx, task_id, lambda t: t.remove_item(item_id))
    status = "completed" if updated.completed else "open"
    dlog.success(f"{updated.title or updated.id}: removed {item_id} ({status})")


# ── Subcommand group: idea ───────────────────────────────────────────


@main.group(context_settings=CONTEXT_SETTINGS)
def idea() -> None:
    """Add or remove content ideas attached to a task."""


@idea.command("add")
@click.argument("task_id")
@click.argument("text")
@click.option(
    "--type", "kind", type=click.Choice(["video", "story", "image"]), default="video",
    help="Kind of content",
)
@click.option("--id", "idea_id", default="", help="Explicit idea id")
@click.pass_context
def idea_add(ctx: click.Context, task_id: str, text: str, kind: str, idea_id: str) -> None:
    """Attach a content idea to TASK_ID."""
    from dayclock import log as dlog
    from dayclock.tasks.model import ContentType

    updated = _edit_task(ctx, task_id, lambda t: t.add_idea(text, ContentType(kind), idea_id))
    added = updated.content_ideas[-1]
    dlog.success(f"{updated.title or updated.id}: added {kind} idea {added.id}")


@idea.command("rm")
@click.argument("task_id")
@click.argument("idea_id")
@click.pass_context
def idea_rm(ctx: click.Context, task_id: str, idea_id: str) -> None:
    """Remove content idea IDEA_ID from TASK_ID."""
    from dayclock import log as dlog

    updated = _edit_task(ctx, task_id, lambda t: t.remove_idea(idea_id))
    dlog.success(f"{updated.title or updated.id}: removed idea {idea_id}")


# ── Subcommand group: project ────────────────────────────────────────


@main.group(context_settings=CONTEXT_SETTINGS)
def project() -> None:
    """Manage projects; a project's colour marks its tasks on the dial."""


@project.command("add")
@click.argument("name")
@click.option("--color", default="", help="Hex colour (default: next preset)")
@click.option("--id", "project_id", default="", help="Explicit project id")
@click.pass_context
def project_add(ctx: click.Context, name: str, color: str, project_id: str) -> None:
    """Add a project."""
    from dayclock import log as dlog
    from dayclock.errors import DayclockError
    from dayclock.tasks.model import PRESET_COLORS, Project, new_id

    store = _open_store(ctx.obj)
    try:
        existing = store.list_projects()
        if not color:
            color = PRESET_COLORS[len(existing) % len(PRESET_COLORS)][1]
        created = store.create_project(Project(id=project_id or new_id(), name=name, color=color))
    except DayclockError as exc:
        dlog.error(str(exc))
        sys.exit(1)
    dlog.success(f"Added project {created.id}: {created.name} ({created.color})")


@project.command("rm")
@click.argument("project_id")
@click.pass_context
def project_rm(ctx: click.Context, project_id: str) -> None:
    """Delete a project; its tasks keep their id and draw in the default colour."""
    from dayclock import log as dlog
    from dayclock.errors import DayclockError

    store = _open_store(ctx.obj)
    try:
        store.delete_project(project_id)
    except DayclockError as exc:
        dlog.error(str(exc))
        sys.exit(1)
    dlog.success(f"Deleted project {project_id}")


@project.command("ls")
@click.pass_context
def project_ls(ctx: click.Context) -> None:
    """List projects."""
    from rich.markup import escape
    from rich.table import Table

    from dayclock import log as dlog
    from dayclock.errors import DayclockError

    store = _open_store(ctx.obj)
    try:
        projects = store.list_projects()
    except DayclockError as exc:
        dlog.error(str(exc))
        sys.exit(1)
    if not projects:
        dlog.info("No projects.")
        return

    table = Table(title="Projects")
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Colour")
    for p in projects:
        table.add_row(escape(p.id), _project_label(p), escape(p.color))
    dlog.console.print(table)


if __name__ == "__main__":
    main()
