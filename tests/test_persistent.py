from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from time_motion_study.persistent import Persistent
from time_motion_study.recorder import Recorder
from time_motion_study.study import StudyState


def _study() -> StudyState:
    state = StudyState().addProcess("Assembly").addProcess("Packing")
    state = state.addSubprocess(0, "Pick", 0).addSubprocess(0, "Place", 10)
    state = state.recordLap(0, 1, 1_500, activity_type="VA", remarks="r", person_count=2)
    state = state.recordLap(0, 1, 2_000)
    return state.stopTimer(0, 2_500)


def test_save_then_load_round_trip(tmp_path: Path) -> None:
    persistent = Persistent(str(tmp_path / "state.json"))
    state = _study()
    persistent.save(state)

    loaded = persistent.load()
    assert loaded.model_dump() == state.model_dump()
    assert [p.name for p in loaded.processes] == ["Assembly", "Packing"]
    assert [len(p.readings) for p in loaded.processes] == [2, 0]
    assert loaded.processes[0].readings[0].person_count == 2


def test_saved_document_shape(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    Persistent(str(path)).save(_study())
    raw = json.loads(path.read_text(encoding="utf-8"))
    assert list(raw) == ["processes"]
    assert raw["processes"][0]["name"] == "Assembly"


def test_missing_file_is_empty(tmp_path: Path) -> None:
    assert Persistent(str(tmp_path / "nope.json")).load() == StudyState()


@pytest.mark.parametrize("content", [
    "{not json",
    "[1, 2, 3]",
    '{"processes": [{"nom": 1}]}',
    '{"processes": [{"name": "A", "timer_running": true, "start_ms": null,'
    ' "subprocesses": [{"name": "s"}]}]}',
])
def test_malformed_file_falls_back_to_empty(tmp_path: Path, caplog, content: str) -> None:
    path = tmp_path / "state.json"
    path.write_text(content, encoding="utf-8")

    with caplog.at_level(logging.ERROR, logger="time_motion_study.persistent"):
        assert Persistent(str(path)).load() == StudyState()
    assert "Error loading saved data" in caplog.text


def test_context_restores_and_saves_on_exit(tmp_path: Path, scheduler) -> None:
    path = tmp_path / "state.json"
    persistent = Persistent(str(path))
    persistent.save(_study())

    recorder = Recorder(schedule=scheduler)
    with persistent.Context(recorder):
        assert persistent.is_in_context
        assert len(recorder.state.processes) == 2
        recorder.addProcess("Inspection")
    assert not persistent.is_in_context

    assert [p.name for p in persistent.load().processes] == [
        "Assembly", "Packing", "Inspection",
    ]


def test_context_saves_even_when_body_raises(tmp_path: Path, scheduler) -> None:
    persistent = Persistent(str(tmp_path / "state.json"))
    recorder = Recorder(schedule=scheduler)
    with pytest.raises(RuntimeError):
        with persistent.Context(recorder):
            recorder.addProcess("A")
            raise RuntimeError("boom")
    assert [p.name for p in persistent.load().processes] == ["A"]
