import asyncio
import logging
import typing as tp

from rich.text import Text
from textual import on
from textual.pilot import Pilot
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import (
    Button, DataTable, Footer, Header, Input, Label, Select, Static,
)

from .config import Config
from .export import NoReadingsError
from .persistent import Persistent
from .recorder import Recorder
from .shared import (
    ACTIVITY_TYPES, formatTime, parseActivityType, parsePersonCount, titled,
)
from .view import (
    PROCESS_COLUMNS, READING_COLUMNS, ProcessRow, processRows, readingRows,
    timerCells,
)

log = logging.getLogger(__name__)

HIGHLIGHT_STYLE = 'bold #10b981'

class NoticeScreen(ModalScreen[None]):
    BINDINGS = [
        Binding("escape", "ok", "OK"),
        Binding("enter", "ok", "OK", show=False),
    ]

    def __init__(self, message: str) -> None:
        super().__init__()
        self.message = message

    def compose(self) -> ComposeResult:
        with Container(id="notice"):
            yield Label(self.message, id="notice-message")
            yield Button("OK", id="notice-ok-btn", variant="primary")

    def on_mount(self) -> None:
        self.query_one('#notice-ok-btn', Button).focus()

    @on(Button.Pressed, '#notice-ok-btn')
    def action_ok(self) -> None:
        self.dismiss(None)

class UI(App):
    CSS_PATH = "styles.tcss"
    BINDINGS = [
        Binding("t", "toggle_timer", "Start/Stop"),
        Binding("r", "reset_timer", "Reset"),
        Binding("l", "lap", "Lap"),
        Binding("e", "edit_process", "Edit"),
        Binding("delete", "delete_selected", "Delete"),
        Binding("x", "export", "Export"),
        Binding("ctrl+s", "save", "Save"),
    ]

    def __init__(self, config: Config | None = None) -> None:
        super().__init__()

        self.config = config or Config()
        self.persistent = Persistent(self.config.storage_path)
        self.recorder = Recorder(
            schedule=self.set_interval,
            tick_interval=self.config.tick_interval,
            onTick=self.onTick,
        )
        self.edit_index: int | None = None
        self.rows: list[ProcessRow] = []
        self.timer_texts: dict[str, tuple[str, str]] = {}

        self.title = self.config.study_name

    def run(
        self, *, headless: bool = False, inline: bool = False,
        inline_no_clear: bool = False, mouse: bool = True,
        size: tuple[int, int] | None = None,
        auto_pilot: tp.Callable[
            [Pilot[object]], tp.Coroutine[tp.Any, tp.Any, None]
        ] | None = None, loop: asyncio.AbstractEventLoop | None = None,
    ) -> tp.Any | None:
        with self.persistent.Context(self.recorder):
            return super().run(
                headless=headless, inline=inline,
                inline_no_clear=inline_no_clear, mouse=mouse,
                size=size, auto_pilot=auto_pilot, loop=loop,
            )

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)

        with titled(Horizontal(id="process-bar"), 'Process'):
            yield Input(placeholder="Enter process name", id="process-input")
            yield Button("Add", id="add-process-btn", variant="primary")
            yield Button("Update", id="update-process-btn", variant="primary")
            yield Button("Cancel", id="cancel-edit-btn")

        with titled(Vertical(id="process-pane"), 'Processes'):
            yield DataTable(id="process-table", cursor_type="row")
            with Horizontal(id="process-controls"):
                yield Button("Start", id="start-stop-btn", variant="success")
                yield Button("Reset", id="reset-btn")
                yield Button("Delete", id="delete-btn", variant="error")
                yield Input(placeholder="Enter subprocess name", id="subprocess-input")
                yield Button("Add", id="add-subprocess-btn", variant="primary")

        with titled(Horizontal(id="lap-form"), 'Lap'):
            yield Select(
                [(t, t) for t in ACTIVITY_TYPES if t],
                prompt="Activity", id="activity-type",
            )
            yield Input(placeholder="Add remarks", id="remarks-input")
            yield Input("1", placeholder="Persons", type="integer", id="person-count-input")
            yield Button("Lap", id="lap-btn", variant="primary")

        with titled(Vertical(id="readings-pane"), 'Recorded Times', skip_bottom=False):
            yield DataTable(id="readings-table", cursor_type="row")
            with Horizontal(id="readings-controls"):
                yield Static("", id="readings-count", classes="auto-width")
                yield Button("Export", id="export-btn")

        yield Footer()

    def on_mount(self) -> None:
        processTable = self.query_one('#process-table', DataTable)
        for key, label in PROCESS_COLUMNS:
            processTable.add_column(label, key=key)
        readingsTable = self.query_one('#readings-table', DataTable)
        readingsTable.add_columns(*READING_COLUMNS)
        self.setEditMode(None)
        self.recorder.resumeTickers()
        self.set_interval(self.config.autosave_interval, self.action_save)
        self.myUpdate()
        self.query_one('#process-input', Input).focus()

    def exit(self, result=None, return_code=0, message=None) -> None:
        self.recorder.shutdown()
        return super().exit(result, return_code, message)

    def action_save(self) -> None:
        self.persistent.save(self.recorder.state)

    # Selection

    def selectedRow(self) -> ProcessRow | None:
        if not self.rows:
            return None
        table = self.query_one('#process-table', DataTable)
        return self.rows[min(max(table.cursor_row, 0), len(self.rows) - 1)]

    def lapTarget(self) -> tuple[int, int] | None:
        row = self.selectedRow()
        if row is None:
            return None
        process = self.recorder.state.processes[row.process_index]
        si = row.subprocess_index
        if si is None:
            si = process.activeSubprocessIndex()
            if si is None:
                return None
        if not process.timer_running or si != process.activeSubprocessIndex():
            return None
        return row.process_index, si

    def moveCursorTo(self, key: str) -> None:
        for i, row in enumerate(self.rows):
            if row.key == key:
                self.query_one('#process-table', DataTable).move_cursor(row=i)
                return

    # Processes

    def setEditMode(self, index: int | None) -> None:
        self.edit_index = index
        editing = index is not None
        self.query_one('#add-process-btn', Button).display = not editing
        self.query_one('#update-process-btn', Button).display = editing
        self.query_one('#cancel-edit-btn', Button).display = editing

    @on(Input.Submitted, '#process-input')
    def onProcessInputSubmitted(self) -> None:
        if self.edit_index is None:
            self.addProcess()
        else:
            self.saveEditProcess()

    @on(Button.Pressed, '#add-process-btn')
    def addProcess(self) -> None:
        processInput = self.query_one('#process-input', Input)
        if not self.recorder.addProcess(processInput.value):
            return
        processInput.value = ''
        self.myUpdate()
        self.moveCursorTo(self.recorder.state.processes[-1].id)

    def action_edit_process(self) -> None:
        row = self.selectedRow()
        if row is None:
            return
        processInput = self.query_one('#process-input', Input)
        processInput.value = self.recorder.state.processes[row.process_index].name
        self.setEditMode(row.process_index)
        processInput.focus()

    @on(Button.Pressed, '#update-process-btn')
    def saveEditProcess(self) -> None:
        if self.edit_index is None:
            return
        processInput = self.query_one('#process-input', Input)
        if not processInput.value.strip():
            return
        self.recorder.renameProcess(self.edit_index, processInput.value)
        processInput.value = ''
        self.setEditMode(None)
        self.myUpdate()

    @on(Button.Pressed, '#cancel-edit-btn')
    def cancelEdit(self) -> None:
        self.query_one('#process-input', Input).value = ''
        self.setEditMode(None)

    @on(Button.Pressed, '#delete-btn')
    def action_delete_selected(self) -> None:
        row = self.selectedRow()
        if row is None:
            return
        if row.subprocess_index is None:
            if self.edit_index is not None:
                self.cancelEdit()
            self.recorder.deleteProcess(row.process_index)
        else:
            self.recorder.deleteSubprocess(row.process_index, row.subprocess_index)
        self.myUpdate()

    # Subprocesses

    @on(Input.Submitted, '#subprocess-input')
    @on(Button.Pressed, '#add-subprocess-btn')
    def addSubprocess(self) -> None:
        row = self.selectedRow()
        if row is None:
            return
        subprocessInput = self.query_one('#subprocess-input', Input)
        if not self.recorder.addSubprocess(row.process_index, subprocessInput.value):
            return
        subprocessInput.value = ''
        self.myUpdate()

    # Timer

    @on(Button.Pressed, '#start-stop-btn')
    def action_toggle_timer(self) -> None:
        row = self.selectedRow()
        if row is None:
            return
        self.recorder.toggleTimer(row.process_index)
        self.myUpdate()

    @on(Button.Pressed, '#reset-btn')
    def action_reset_timer(self) -> None:
        row = self.selectedRow()
        if row is None:
            return
        self.recorder.resetTimer(row.process_index)
        self.myUpdate()

    @on(Button.Pressed, '#lap-btn')
    def action_lap(self) -> None:
        target = self.lapTarget()
        if target is None:
            return
        pi, si = target
        select = self.query_one('#activity-type', Select)
        reading = self.recorder.recordLap(
            pi, si,
            activity_type=parseActivityType(select.value),
            remarks=self.query_one('#remarks-input', Input).value,
            person_count=parsePersonCount(
                self.query_one('#person-count-input', Input).value,
            ),
        )
        if reading is None:
            return
        self.notify(f'Time recorded: {formatTime(reading.lap_ms)}', timeout=1.5)
        self.myUpdate()

    def onTick(self, process_id: str) -> None:
        tick = self.recorder.ticks.get(process_id)
        i = self.recorder.state.indexOf(process_id)
        if tick is None or i is None:
            return
        texts = timerCells(self.recorder.state.processes[i], tick)
        if self.timer_texts.get(process_id) == texts:
            return
        self.timer_texts[process_id] = texts
        if not any(row.key == process_id for row in self.rows):
            return
        table = self.query_one('#process-table', DataTable)
        style = HIGHLIGHT_STYLE if self.recorder.state.processes[i].active else ''
        table.update_cell(process_id, 'lap', Text(texts[0], style=style))
        table.update_cell(process_id, 'total', Text(texts[1], style=style))

    # Export

    @on(Button.Pressed, '#export-btn')
    def action_export(self) -> None:
        try:
            path = self.recorder.export(
                self.config.export_path, self.config.study_name,
            )
        except NoReadingsError as e:
            log.warning('export skipped: %s', e)
            self.push_screen(NoticeScreen(str(e)))
            return
        except OSError as e:
            log.error('export to %s failed: %s', self.config.export_path, e)
            self.push_screen(NoticeScreen(f'Export failed: {e}'))
            return
        self.notify(f'Exported to {path}')

    # Rendering

    @on(DataTable.RowHighlighted, '#process-table')
    def onRowHighlighted(self) -> None:
        self.updateControls()
        self.fillLapForm()

    def fillLapForm(self) -> None:
        row = self.selectedRow()
        if row is None:
            return
        process = self.recorder.state.processes[row.process_index]
        si = row.subprocess_index
        if si is None:
            si = process.activeSubprocessIndex()
        if si is None:
            return
        subprocess = process.subprocesses[si]
        select = self.query_one('#activity-type', Select)
        if subprocess.activity_type:
            select.value = subprocess.activity_type
        else:
            select.clear()
        self.query_one('#remarks-input', Input).value = subprocess.remarks
        self.query_one('#person-count-input', Input).value = str(subprocess.person_count)

    def updateControls(self) -> None:
        row = self.selectedRow()
        bStartStop = self.query_one('#start-stop-btn', Button)
        running = (
            row is not None and
            self.recorder.state.processes[row.process_index].timer_running
        )
        bStartStop.label = 'Stop' if running else 'Start'
        bStartStop.variant = 'error' if running else 'success'
        for id_ in ('#start-stop-btn', '#reset-btn', '#delete-btn', '#add-subprocess-btn'):
            self.query_one(id_, Button).disabled = row is None
        self.query_one('#lap-btn', Button).disabled = self.lapTarget() is None

    def myUpdate(self) -> None:
        state = self.recorder.state
        processTable = self.query_one('#process-table', DataTable)
        cursor = processTable.cursor_row
        self.rows = processRows(
            state, self.recorder.ticks, self.recorder.last_lapped,
        )
        processTable.clear()
        for row in self.rows:
            style = HIGHLIGHT_STYLE if row.highlighted else ''
            processTable.add_row(
                *(Text(c, style=style) for c in row.cells), key=row.key,
            )
        self.timer_texts = {
            row.key: (row.cells[1], row.cells[2])
            for row in self.rows if row.is_process
        }
        if self.rows:
            processTable.move_cursor(row=min(max(cursor, 0), len(self.rows) - 1))

        readingsTable = self.query_one('#readings-table', DataTable)
        readingsTable.clear()
        readings = readingRows(state)
        for cells in readings:
            readingsTable.add_row(*cells)
        self.query_one('#readings-pane').display = bool(readings)
        self.query_one('#readings-count', Static).update(
            f'{len(readings)} readings',
        )
        self.updateControls()
