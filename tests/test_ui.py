from __future__ import annotations

from pathlib import Path

import pytest
from textual.widgets import Button, DataTable, Input

from time_motion_study.UI import UI, NoticeScreen
from time_motion_study.config import Config


def _app(tmp_path: Path) -> UI:
    return UI(Config(
        storage_path=str(tmp_path / "state.json"),
        export_path=str(tmp_path / "study.xlsx"),
        autosave_interval=3600,
    ))


async def _addProcess(app: UI, pilot, name: str) -> None:
    app.query_one("#process-input", Input).value = name
    app.query_one("#add-process-btn", Button).press()
    await pilot.pause()


@pytest.mark.asyncio
async def test_add_process_and_subprocess_starts_timer(tmp_path: Path) -> None:
    app = _app(tmp_path)
    async with app.run_test() as pilot:
        await _addProcess(app, pilot, "Assembly")
        assert [p.name for p in app.recorder.state.processes] == ["Assembly"]
        assert app.query_one("#process-input", Input).value == ""

        app.query_one("#subprocess-input", Input).value = "Pick"
        app.addSubprocess()
        await pilot.pause()

        process = app.recorder.state.processes[0]
        assert process.timer_running
        assert app.recorder.tickers.isTicking(process.id)
        assert app.query_one("#process-table", DataTable).row_count == 2
        assert not app.query_one("#lap-btn", Button).disabled


@pytest.mark.asyncio
async def test_lap_fills_recorded_times(tmp_path: Path) -> None:
    app = _app(tmp_path)
    async with app.run_test() as pilot:
        await _addProcess(app, pilot, "Assembly")
        app.query_one("#subprocess-input", Input).value = "Pick"
        app.addSubprocess()
        await pilot.pause()

        app.query_one("#remarks-input", Input).value = "smooth"
        app.query_one("#person-count-input", Input).value = "3"
        app.action_lap()
        await pilot.pause()

        readings = app.recorder.state.processes[0].readings
        assert len(readings) == 1
        assert readings[0].remarks == "smooth"
        assert readings[0].person_count == 3
        assert app.query_one("#readings-table", DataTable).row_count == 1


@pytest.mark.asyncio
async def test_export_without_readings_shows_notice(tmp_path: Path) -> None:
    app = _app(tmp_path)
    async with app.run_test() as pilot:
        await _addProcess(app, pilot, "Assembly")
        app.action_export()
        await pilot.pause()

        assert isinstance(app.screen, NoticeScreen)
        assert not (tmp_path / "study.xlsx").exists()

        await pilot.press("escape")
        await pilot.pause()
        assert not isinstance(app.screen, NoticeScreen)


@pytest.mark.asyncio
async def test_edit_then_delete_process(tmp_path: Path) -> None:
    app = _app(tmp_path)
    async with app.run_test() as pilot:
        await _addProcess(app, pilot, "Assembly")
        app.action_toggle_timer()
        await pilot.pause()
        process_id = app.recorder.state.processes[0].id
        assert app.recorder.tickers.isTicking(process_id)

        app.action_edit_process()
        assert app.query_one("#update-process-btn", Button).display
        app.query_one("#process-input", Input).value = "Final Assembly"
        app.saveEditProcess()
        await pilot.pause()
        assert app.recorder.state.processes[0].name == "Final Assembly"
        assert app.edit_index is None

        app.action_delete_selected()
        await pilot.pause()
        assert app.recorder.state.processes == []
        assert len(app.recorder.tickers) == 0


@pytest.mark.asyncio
async def test_save_action_writes_state(tmp_path: Path) -> None:
    app = _app(tmp_path)
    async with app.run_test() as pilot:
        await _addProcess(app, pilot, "Assembly")
        app.action_save()
    assert (tmp_path / "state.json").exists()
    assert app.persistent.load().processes[0].name == "Assembly"


@pytest.mark.asyncio
async def test_failed_export_write_keeps_app_running(tmp_path: Path) -> None:
    app = UI(Config(
        storage_path=str(tmp_path / "state.json"),
        export_path=str(tmp_path / "nodir" / "study.xlsx"),
        autosave_interval=3600,
    ))
    async with app.run_test() as pilot:
        await _addProcess(app, pilot, "Assembly")
        app.query_one("#subprocess-input", Input).value = "Pick"
        app.addSubprocess()
        await pilot.pause()
        app.action_lap()
        await pilot.pause()
        assert len(app.recorder.state.processes[0].readings) == 1

        app.action_export()
        await pilot.pause()

        assert app.is_running
        assert isinstance(app.screen, NoticeScreen)
        assert "Export failed" in app.screen.message
        assert app.recorder.tickers.isTicking(app.recorder.state.processes[0].id)
        assert not (tmp_path / "nodir").exists()
