#!/usr/bin/env python3
"""Qitrack TUI — practice timer and energy log powered by Textual."""

from __future__ import annotations

import logging
import sys

from textual import on
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.widgets import DataTable, Footer, Header, Input, Label, ProgressBar, Static

from qitrack import (
    InvalidInput,
    PersistenceFailure,
    Tracker,
    compute_stats,
    format_duration,
    load_settings,
    now_local,
    open_tracker,
    workspace_root,
)
from qitrack import timer as practice_timer

logger = logging.getLogger(__name__)


# ── Stylesheet ─────────────────────────────────────────────────

CSS = """
Screen {
    background: $surface;
}

#energy-section {
    height: auto;
    padding: 0 2;
    border: tall $primary-background-darken-2;
}

#energy-label {
    text-style: bold;
}

#timer-display {
    height: 1;
    color: $warning;
    text-style: bold;
    margin: 1 0 0 0;
}

#stats-line {
    color: $text-muted;
}

.section-title {
    text-style: bold;
    color: $text;
    margin: 1 0 0 0;
    padding: 0 1;
}

#log-table {
    height: 1fr;
}

#edit-input {
    display: none;
    margin: 0 1;
}
"""


# ── Main app ───────────────────────────────────────────────────


class QitrackApp(App):
    """Qitrack — daily practice timer and energy log."""

    TITLE = "Qitrack"
    CSS = CSS
    AUTO_FOCUS = "#log-table"

    BINDINGS = [
        Binding("space", "toggle_timer", "Start/Pause"),
        Binding("s", "skip_day", "Skip Day"),
        Binding("n", "advance_day", "Finish Day"),
        Binding("e", "edit_minutes", "Edit Minutes"),
        Binding("x", "reset_log", "Reset"),
        Binding("escape", "cancel_edit", "Cancel", show=False),
        Binding("q", "quit_app", "Quit"),
    ]

    def __init__(self) -> None:
        super().__init__()
        self._root = workspace_root()
        self._settings = load_settings(self._root)
        self._tracker: Tracker = open_tracker(self._root)
        self._timer = practice_timer.load_timer(self._tracker.current_day, self._root)
        self._editing_day: int | None = None
        self._reset_armed = False

    def compose(self) -> ComposeResult:
        yield Header()
        yield Vertical(
            Label(id="energy-label"),
            ProgressBar(total=100, show_eta=False, id="energy-bar"),
            Static(id="timer-display"),
            Static(id="stats-line"),
            id="energy-section",
        )
        yield Label("Practice History", classes="section-title")
        yield DataTable(id="log-table", cursor_type="row")
        yield Input(placeholder="minutes…", id="edit-input")
        yield Footer()

    def on_mount(self) -> None:
        table: DataTable = self.query_one("#log-table", DataTable)
        table.add_columns("Day", "Activity", "Minutes", "Multiplier", "Energy")
        self._refresh()
        self.set_interval(1, self._update_timer_display)

    # ── Rendering ──────────────────────────────────────────────

    def _refresh(self) -> None:
        summary = self._tracker.summary(self._settings.target_energy)
        self.sub_title = f"Day {summary['currentDay']}  {summary['message']}"
        self.query_one("#energy-label", Label).update(
            f"Energy {summary['currentEnergy']:.2f} / {summary['targetEnergy']:g}  ({summary['percent']}%)"
        )
        self.query_one("#energy-bar", ProgressBar).update(progress=min(100.0, summary["percent"]))

        stats = compute_stats(self._tracker.log, self._settings.target_energy)
        eta = "n/a" if stats.days_to_target is None else f"{stats.days_to_target} days"
        self.query_one("#stats-line", Static).update(
            f"Practiced {stats.practice_days} / {stats.days_logged} days · "
            f"streak {stats.current_streak} (best {stats.best_streak}) · "
            f"avg {stats.average_minutes:.0f} min · target in {eta}"
        )

        table: DataTable = self.query_one("#log-table", DataTable)
        table.clear()
        for entry in self._tracker.log:
            table.add_row(
                str(entry.day),
                "Practiced" if entry.practice else "Skipped",
                str(entry.minutes) if entry.practice else "0",
                f"{entry.growth_factor:.4f}x" if entry.growth_factor is not None else "N/A",
                f"{entry.energy:.2f}",
                key=str(entry.day),
            )
        self._update_timer_display()

    def _update_timer_display(self) -> None:
        elapsed = practice_timer.elapsed_seconds(self._timer, now_local(self._root))
        if self._timer.is_running:
            status = "practice in progress…"
        elif elapsed:
            status = f"total today ({round(elapsed / 60)} min)"
        else:
            status = "ready to start"
        self.query_one("#timer-display", Static).update(
            f"Day {self._tracker.current_day}  {format_duration(elapsed)}  {status}"
        )

    def _fail(self, exc: Exception) -> None:
        if isinstance(exc, PersistenceFailure):
            logger.error("Operation not saved: %s", exc)
            self.notify(str(exc), title="Not saved", severity="error")
        else:
            self.notify(str(exc), title="Invalid", severity="warning")

    # ── Actions ────────────────────────────────────────────────

    def action_toggle_timer(self) -> None:
        try:
            if self._timer.is_running:
                self._timer, entry = practice_timer.pause_and_log(self._tracker, self._root)
                self.notify(f"Logged {entry.minutes} min → {entry.energy:.2f} energy", title="Practice")
            else:
                self._timer = practice_timer.start_timer(self._tracker, self._root)
        except (InvalidInput, PersistenceFailure) as e:
            self._fail(e)
        self._refresh()

    def action_skip_day(self) -> None:
        today = self._tracker.today_entry()
        if not practice_timer.can_skip(self._timer) or (today is not None and today.practice):
            self.notify("Cannot skip after practicing today.", severity="warning")
            return
        try:
            self._tracker.log_skip()
            self._advance()
        except PersistenceFailure as e:
            self._fail(e)
        self._refresh()

    def action_advance_day(self) -> None:
        if self._timer.is_running:
            self.notify("Pause the timer before advancing.", severity="warning")
            return
        try:
            self._advance()
        except PersistenceFailure as e:
            self._fail(e)
        self._refresh()

    def _advance(self) -> None:
        closed = self._tracker.advance_day()
        self._timer = practice_timer.clear_timer(self._tracker.current_day, self._root)
        activity = f"{closed.minutes} min practiced" if closed.practice else "skipped"
        self.notify(f"Day {closed.day} recorded ({activity}).", title="Day Finished")

    def action_edit_minutes(self) -> None:
        table: DataTable = self.query_one("#log-table", DataTable)
        if table.row_count == 0:
            return
        day = int(table.get_row_at(table.cursor_row)[0])
        entry = self._tracker.state.entry_for(day)
        if entry is None or not entry.practice:
            self.notify("Only practice days can be edited.", severity="warning")
            return
        self._editing_day = day
        edit = self.query_one("#edit-input", Input)
        edit.value = str(entry.minutes)
        edit.display = True
        edit.focus()

    @on(Input.Submitted, "#edit-input")
    def _on_edit_submitted(self, event: Input.Submitted) -> None:
        day = self._editing_day
        self.action_cancel_edit()
        if day is None:
            return
        try:
            minutes = int(event.value.strip())
            changed = self._tracker.edit_minutes(day, minutes)
            if changed:
                self.notify(f"Recalculated {len(changed)} day(s) from day {day}.", title="Edited")
        except ValueError:
            # InvalidInput is a ValueError too
            self.notify(f"Invalid minutes: {event.value!r}", severity="warning")
        except PersistenceFailure as e:
            self._fail(e)
        self._refresh()

    def action_cancel_edit(self) -> None:
        self._editing_day = None
        edit = self.query_one("#edit-input", Input)
        edit.display = False
        self.query_one("#log-table", DataTable).focus()

    def action_reset_log(self) -> None:
        if not self._reset_armed:
            self._reset_armed = True
            self.notify("Press x again to clear your entire practice history.",
                        title="Reset?", severity="warning")
            return
        self._reset_armed = False
        try:
            self._tracker.reset()
            self._timer = practice_timer.clear_timer(self._tracker.current_day, self._root)
        except PersistenceFailure as e:
            self._fail(e)
        self._refresh()

    def action_quit_app(self) -> None:
        self.exit()


# ── Entry point ────────────────────────────────────────────────


def main() -> None:
    (workspace_root() / "tracker").mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        filename=str(workspace_root() / "tracker" / "qitrack.log"),
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        app = QitrackApp()
    except PersistenceFailure as e:
        print(f"Cannot open the practice log: {e}")
        print("Fix or move tracker/log.json, or set QITRACK_ROOT.")
        sys.exit(1)
    app.run()


if __name__ == "__main__":
    main()
