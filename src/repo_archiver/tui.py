"""Terminal UI -- rich renderables plus the age picker and session loops."""

from __future__ import annotations

import logging
import queue
import time
from collections.abc import Callable
from typing import Protocol

from rich import box
from rich.align import Align
from rich.console import Console, Group, RenderableType
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from repo_archiver.age import Age, AgeStepper, AgeUnit
from repo_archiver.catalog import CatalogItem
from repo_archiver.config import ArchiverConfig
from repo_archiver.constants import (
	DESCRIPTION_WIDTH,
	INPUT_POLL_TIMEOUT,
	KEY_CTRL_C,
	KEY_DOWN,
	KEY_ENTER,
	KEY_ESC,
	KEY_LEFT,
	KEY_RIGHT,
	KEY_TAB,
	KEY_UP,
	SPINNER_FRAMES,
	SPINNER_INTERVAL,
)
from repo_archiver.executor import ArchiveExecutor
from repo_archiver.models import ArchiveEvent, ConfirmChoice, Mode, StatusKind
from repo_archiver.session import Action, Session

logger = logging.getLogger(__name__)

HEADER_HEIGHT = 3
FOOTER_HEIGHT = 3
MODAL_HEIGHT = 8
MODAL_WIDTH = 50
# Panel borders plus the table header and its rule.
TABLE_CHROME = 4

HELP_TEXT: dict[Mode, str] = {
	Mode.BROWSING: "↑/↓ or j/k: Navigate | Space/Tab: Toggle | Enter: Confirm | q: Quit",
	Mode.CONFIRMING: "←/→ or Tab: Switch | Enter: Select | y/n: Yes/No | Esc: Cancel",
	Mode.EXECUTING: "↑/↓ or j/k: Scroll | q: Quit",
	Mode.FINISHED: "All done! Press q or Enter to exit.",
}


class KeySource(Protocol):
	def poll(self, timeout: float) -> str | None: ...


class Spinner:
	"""Frame counter that advances at most once per `interval` seconds."""

	def __init__(self, interval: float = SPINNER_INTERVAL, clock: Callable[[], float] = time.monotonic) -> None:
		self.interval = interval
		self._clock = clock
		self._index = 0
		self._last = clock()

	def tick(self) -> bool:
		now = self._clock()
		if now - self._last < self.interval:
			return False
		self._index = (self._index + 1) % len(SPINNER_FRAMES)
		self._last = now
		return True

	@property
	def frame(self) -> str:
		return SPINNER_FRAMES[self._index]


def visible_window(total: int, cursor: int | None, height: int) -> range:
	"""Rows to draw so the cursor stays on screen, roughly centered."""
	if total <= 0 or height <= 0:
		return range(0)
	if total <= height:
		return range(total)
	start = max((cursor or 0) - height // 2, 0)
	start = min(start, total - height)
	return range(start, start + height)


# -- Session view --


def _status_cell(item: CatalogItem, spinner: Spinner) -> Text:
	kind = item.status.kind
	if kind is StatusKind.IDLE:
		return Text("✓", style="green") if item.selected else Text(" ")
	if kind is StatusKind.PENDING:
		return Text("⏳", style="yellow")
	if kind is StatusKind.IN_PROGRESS:
		return Text(spinner.frame, style="cyan")
	if kind is StatusKind.SUCCEEDED:
		return Text("✓", style="green")
	return Text("✗", style="red")


def _row_style(item: CatalogItem) -> str:
	kind = item.status.kind
	if kind is StatusKind.SUCCEEDED:
		return "green"
	if kind is StatusKind.FAILED:
		return "red"
	if kind is StatusKind.IN_PROGRESS:
		return "cyan"
	return "white" if item.selected else "bright_black"


def render_title(session: Session) -> Panel:
	dry = " [DRY RUN]" if session.dry_run else ""
	if session.mode in (Mode.BROWSING, Mode.CONFIRMING):
		title = f"Repo Archiver{dry} ({session.catalog.selected_count} selected)"
	elif session.mode is Mode.EXECUTING:
		title = f"Archiving{dry} ({session.done_count}/{len(session.batch)})"
	else:
		counts = session.catalog.counts()
		title = f"Done! {counts['succeeded']} archived, {counts['failed']} failed"
	return Panel(Text(title, style="bold cyan"))


def render_table(session: Session, spinner: Spinner, rows: int) -> Panel:
	table = Table(box=box.SIMPLE_HEAD, expand=True, show_edge=False, pad_edge=False)
	table.add_column("", width=2, no_wrap=True)
	table.add_column("Status", width=6, no_wrap=True)
	table.add_column("Name", width=30, no_wrap=True, overflow="ellipsis")
	table.add_column("Created", width=12, no_wrap=True)
	table.add_column("Last Push", width=12, no_wrap=True)
	table.add_column("Description", min_width=20, no_wrap=True, overflow="ellipsis")
	for col in table.columns:
		col.header_style = "bold yellow"

	catalog = session.catalog
	for i in visible_window(len(catalog), catalog.cursor, rows):
		item = catalog.items[i]
		repo = item.repo
		highlighted = i == catalog.cursor
		style = _row_style(item) + (" reverse" if highlighted else "")
		table.add_row(
			"▶" if highlighted else "",
			_status_cell(item, spinner),
			repo.name,
			repo.created_day,
			repo.pushed_day,
			(repo.description or "-")[:DESCRIPTION_WIDTH],
			style=style,
		)
	return Panel(table, title="Repos", title_align="left")


def render_modal(session: Session) -> Panel:
	count = session.catalog.selected_count
	plural = "" if count == 1 else "s"
	if session.dry_run:
		warning = Text("(Dry run - no changes will be made)", style="yellow")
	else:
		warning = Text("This action cannot be undone.", style="red")

	def button(label: str, choice: ConfirmChoice) -> Text:
		style = "black on white" if session.choice is choice else "bright_black"
		return Text(f" {label} ", style=style)

	buttons = Text.assemble(button("Cancel", ConfirmChoice.CANCEL), "    ", button("Continue", ConfirmChoice.PROCEED))
	body = Group(
		Text(""),
		Align.center(Text(f"Archive {count} repo{plural}?")),
		Text(""),
		Align.center(warning),
		Text(""),
		Align.center(buttons),
	)
	return Panel(body, title="Confirm", border_style="cyan", width=MODAL_WIDTH)


def render_help(session: Session) -> Panel:
	text = Text(HELP_TEXT[session.mode], style="bright_black")
	current = session.catalog.current
	if session.mode in (Mode.EXECUTING, Mode.FINISHED) and current is not None:
		if current.status.kind is StatusKind.FAILED:
			text = Text(f"✗ {current.repo.name}: {current.status.message}", style="red")
	return Panel(text)


def render_session(session: Session, spinner: Spinner, height: int) -> Layout:
	body_height = max(height - HEADER_HEIGHT - FOOTER_HEIGHT, 0)
	confirming = session.mode is Mode.CONFIRMING
	table_height = body_height - MODAL_HEIGHT if confirming else body_height

	layout = Layout()
	layout.split_column(
		Layout(render_title(session), name="header", size=HEADER_HEIGHT),
		Layout(name="body"),
		Layout(render_help(session), name="footer", size=FOOTER_HEIGHT),
	)
	table = render_table(session, spinner, table_height - TABLE_CHROME)
	if confirming:
		layout["body"].split_column(
			Layout(table, name="table"),
			Layout(Align.center(render_modal(session)), name="modal", size=MODAL_HEIGHT),
		)
	else:
		layout["body"].update(table)
	return layout


def run_session(
	session: Session,
	keys: KeySource,
	config: ArchiverConfig,
	console: Console | None = None,
	screen: bool = True,
) -> Session:
	"""Drive the session until the user quits.

	Every cycle advances the spinner, applies all buffered executor events,
	repaints, then waits at most `config.poll_timeout` for one key.
	"""
	console = console or Console()
	events: queue.Queue[ArchiveEvent] = queue.Queue()
	executor = ArchiveExecutor(config, events)
	spinner = Spinner(config.spinner_interval)

	with Live(console=console, screen=screen, auto_refresh=False, transient=screen) as live:
		while True:
			spinner.tick()
			session.drain(events)
			live.update(render_session(session, spinner, console.size.height), refresh=True)

			key = keys.poll(config.poll_timeout)
			if key is None:
				continue
			action = session.handle_key(key)
			if action is Action.QUIT:
				if session.mode is Mode.EXECUTING:
					logger.info("Quit during execution; %d/%d finished", session.done_count, len(session.batch))
				break
			if action is Action.START:
				executor.start(session.batch)
	return session


# -- Age picker --


def apply_picker_key(stepper: AgeStepper, key: str) -> None:
	if key in (KEY_UP, "k", "+"):
		stepper.increment()
	elif key in (KEY_DOWN, "j", "-"):
		stepper.decrement()
	elif key in (KEY_LEFT, KEY_RIGHT, KEY_TAB, "h", "l"):
		stepper.toggle_unit()
	elif key == "m":
		stepper.set_unit(AgeUnit.MONTHS)
	elif key == "y":
		stepper.set_unit(AgeUnit.YEARS)


def render_age_picker(stepper: AgeStepper) -> RenderableType:
	units = Text.assemble(*[
		Text(f" {unit.noun}s ", style="black on cyan" if unit is stepper.unit else "bright_black")
		for unit in (AgeUnit.MONTHS, AgeUnit.YEARS)
	])
	body = Group(
		Align.center(Text("Select minimum repo age:")),
		Text(""),
		Align.center(Text(f"▲  {stepper.magnitude:>2}  ▼", style="bold cyan")),
		Align.center(units),
		Text(""),
		Align.center(Text(f"Older than {stepper.value.display()}", style="white")),
		Text(""),
		Align.center(Text("↑/↓: Change | ←/→: Unit | Enter: Confirm | q: Quit", style="bright_black")),
	)
	panel = Panel(body, title="Repo Archiver", border_style="cyan", width=60)
	return Align.center(panel, vertical="middle")


def run_age_picker(
	keys: KeySource,
	console: Console | None = None,
	screen: bool = True,
	stepper: AgeStepper | None = None,
) -> Age | None:
	"""Interactive stepper; returns the chosen age or None when cancelled."""
	console = console or Console()
	stepper = stepper or AgeStepper()
	with Live(console=console, screen=screen, auto_refresh=False, transient=screen) as live:
		while True:
			live.update(render_age_picker(stepper), refresh=True)
			key = keys.poll(INPUT_POLL_TIMEOUT)
			if key is None:
				continue
			if key in ("q", KEY_ESC, KEY_CTRL_C):
				return None
			if key == KEY_ENTER:
				return stepper.value
			apply_picker_key(stepper, key)


def print_summary(console: Console, session: Session) -> None:
	"""One-line outcome after the alternate screen is gone, plus any failures."""
	if not session.batch:
		return
	counts = session.catalog.counts()
	verb = "Would archive" if session.dry_run else "Archived"
	console.print(f"{verb} {counts['succeeded']} of {len(session.batch)} repositories.")
	if counts["in_flight"]:
		console.print(Text(f"{counts['in_flight']} still in flight when you quit.", style="yellow"))
	for item in session.catalog.failures():
		console.print(Text.assemble((f"✗ {item.repo.name}", "red"), f": {item.status.message}"))
