from __future__ import annotations

import functools
import logging
import os
import typing as tp

from .export import DEFAULT_EXPORT_PATH, DEFAULT_STUDY_NAME, exportToExcel
from .shared import ActivityType, MIN_PERSONS, nowMs
from .study import Reading, StudyState, TimerTick
from .tickers import Schedule, Tickers

log = logging.getLogger(__name__)

class Recorder:
    '''
    Applies `StudyState` transitions and keeps one ticker per running
    process, keyed by process id.
    '''
    def __init__(
        self,
        schedule: Schedule,
        tick_interval: float = 0.01,
        clock: tp.Callable[[], int] = nowMs,
        state: StudyState | None = None,
        onTick: tp.Callable[[str], None] | None = None,
    ) -> None:
        self.state = state if state is not None else StudyState()
        self.clock = clock
        self.tickers = Tickers(schedule, tick_interval)
        self.ticks: dict[str, TimerTick] = {}
        self.onTick = onTick
        self.last_lapped: tuple[str, int] | None = None

    def restore(self, state: StudyState) -> None:
        self.tickers.cancelAll()
        self.ticks.clear()
        self.last_lapped = None
        self.state = state

    def resumeTickers(self) -> None:
        for p in self.state.processes:
            self.__sync(p.id)

    def shutdown(self) -> None:
        self.tickers.cancelAll()

    def tick(self, process_id: str) -> TimerTick | None:
        i = self.state.indexOf(process_id)
        if i is None:
            self.tickers.cancel(process_id)
            return None
        t = self.state.processes[i].clockAt(self.clock())
        self.ticks[process_id] = t
        if self.onTick is not None:
            self.onTick(process_id)
        return t

    def __sync(self, process_id: str) -> None:
        i = self.state.indexOf(process_id)
        if i is None:
            self.tickers.cancel(process_id)
            self.ticks.pop(process_id, None)
            return
        process = self.state.processes[i]
        if process.timer_running:
            if not self.tickers.isTicking(process_id):
                self.tickers.start(
                    process_id, functools.partial(self.tick, process_id),
                )
        else:
            self.tickers.cancel(process_id)
        self.ticks[process_id] = process.clockAt(self.clock())

    def __apply(self, new_state: StudyState) -> bool:
        changed = new_state is not self.state
        self.state = new_state
        return changed

    def addProcess(self, name: str) -> bool:
        if not self.__apply(self.state.addProcess(name)):
            return False
        log.info('process added: %s', name.strip())
        return True

    def renameProcess(self, index: int, name: str) -> bool:
        old = self.state.processes[index].name
        if not self.__apply(self.state.renameProcess(index, name)):
            return False
        log.info('process renamed: %s -> %s', old, name.strip())
        return True

    def deleteProcess(self, index: int) -> None:
        process = self.state.processes[index]
        self.tickers.cancel(process.id)
        self.ticks.pop(process.id, None)
        if self.last_lapped is not None and self.last_lapped[0] == process.id:
            self.last_lapped = None
        self.__apply(self.state.deleteProcess(index))
        log.info('process deleted: %s', process.name)

    def addSubprocess(self, index: int, name: str) -> bool:
        changed = self.__apply(
            self.state.addSubprocess(index, name, self.clock()),
        )
        self.__sync(self.state.processes[index].id)
        return changed

    def deleteSubprocess(self, index: int, subprocess_index: int) -> None:
        process_id = self.state.processes[index].id
        self.__apply(self.state.deleteSubprocess(index, subprocess_index))
        if self.last_lapped is None or self.last_lapped[0] != process_id:
            return
        lapped = self.last_lapped[1]
        if lapped == subprocess_index:
            self.last_lapped = None
        elif lapped > subprocess_index:
            self.last_lapped = (process_id, lapped - 1)

    def toggleTimer(self, index: int) -> bool:
        '''
        Returns whether the timer is now running.
        '''
        self.__apply(self.state.toggleTimer(index, self.clock()))
        process = self.state.processes[index]
        self.__sync(process.id)
        return process.timer_running

    def resetTimer(self, index: int) -> None:
        self.__apply(self.state.resetTimer(index))
        process = self.state.processes[index]
        self.__sync(process.id)
        if self.last_lapped is not None and self.last_lapped[0] == process.id:
            self.last_lapped = None
        log.info('process reset: %s', process.name)

    def recordLap(
        self, index: int, subprocess_index: int,
        activity_type: ActivityType = '',
        remarks: str = '',
        person_count: int = MIN_PERSONS,
    ) -> Reading | None:
        now = self.clock()
        if not self.__apply(self.state.recordLap(
            index, subprocess_index, now,
            activity_type=activity_type,
            remarks=remarks,
            person_count=person_count,
        )):
            return None
        process = self.state.processes[index]
        reading = process.readings[-1]
        self.last_lapped = (process.id, subprocess_index)
        self.ticks[process.id] = process.clockAt(now)
        log.info(
            'lap recorded: %s / %s = %d ms',
            process.name, reading.subprocess, reading.lap_ms,
        )
        return reading

    def export(
        self,
        path: str | os.PathLike = DEFAULT_EXPORT_PATH,
        study_name: str = DEFAULT_STUDY_NAME,
    ) -> str:
        return exportToExcel(self.state, path, study_name)
