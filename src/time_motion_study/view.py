'''
State -> rows. Nothing here touches Textual.
'''

from __future__ import annotations

import typing as tp
from dataclasses import dataclass

from .shared import formatDateTime, formatTime
from .study import Process, StudyState, TimerTick

PROCESS_COLUMNS = (
    ('process', 'Process'),
    ('lap', 'Lap'),
    ('total', 'Total'),
    ('timer', 'Timer'),
    ('subprocess', 'Subprocess'),
    ('last-lap', 'Last lap'),
    ('activity', 'Activity'),
    ('persons', 'Persons'),
    ('remarks', 'Remarks'),
)

READING_COLUMNS = (
    'Process', 'Subprocess', 'Time', 'Activity Type', 'Persons',
    'Remarks', 'Start Time', 'End Time', 'Timestamp',
)

ACTIVE_MARK = '▶'
COMPLETED_MARK = '✓'

@dataclass(frozen=True)
class ProcessRow:
    key: str
    process_index: int
    subprocess_index: int | None
    cells: tuple[str, ...]
    highlighted: bool
    lap_enabled: bool

    @property
    def is_process(self) -> bool:
        return self.subprocess_index is None

def subprocessRowKey(process: Process, subprocess_index: int) -> str:
    return f'{process.id}/{subprocess_index}'

def timerCells(process: Process, tick: TimerTick | None) -> tuple[str, str]:
    if tick is None:
        tick = TimerTick(process.elapsed_ms, process.lap_elapsed_ms)
    return formatTime(tick.lap_ms), formatTime(tick.elapsed_ms)

def processRows(
    state: StudyState,
    ticks: tp.Mapping[str, TimerTick] | None = None,
    last_lapped: tuple[str, int] | None = None,
) -> list[ProcessRow]:
    ticks = ticks or {}
    rows: list[ProcessRow] = []
    for pi, process in enumerate(state.processes):
        lap, total = timerCells(process, ticks.get(process.id))
        rows.append(ProcessRow(
            key=process.id,
            process_index=pi,
            subprocess_index=None,
            cells=(
                process.name, lap, total,
                'Running' if process.timer_running else 'Stopped',
                '', '', '', '', '',
            ),
            highlighted=process.active,
            lap_enabled=False,
        ))
        active_si = process.activeSubprocessIndex()
        for si, subprocess in enumerate(process.subprocesses):
            is_active = si == active_si
            name = subprocess.name
            if subprocess.completed:
                name = f'{name} {COMPLETED_MARK}'
            if is_active:
                name = f'{ACTIVE_MARK} {name}'
            rows.append(ProcessRow(
                key=subprocessRowKey(process, si),
                process_index=pi,
                subprocess_index=si,
                cells=(
                    '', '', '', '',
                    name,
                    formatTime(subprocess.last_lap_ms)
                    if subprocess.last_lap_ms else '',
                    subprocess.activity_type,
                    str(subprocess.person_count),
                    subprocess.remarks,
                ),
                highlighted=last_lapped == (process.id, si),
                lap_enabled=process.timer_running and is_active,
            ))
    return rows

def readingRows(state: StudyState) -> list[tuple[str, ...]]:
    return [
        (
            process.name,
            reading.subprocess,
            formatTime(reading.lap_ms),
            reading.activity_type,
            str(reading.person_count),
            reading.remarks,
            formatDateTime(reading.started_at),
            formatDateTime(reading.ended_at),
            formatDateTime(reading.captured_at),
        )
        for process, reading in state.allReadings()
    ]
