from __future__ import annotations

import typing as tp
from datetime import datetime
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .shared import ActivityType, MIN_PERSONS, msToDatetime

def newProcessId() -> str:
    return uuid4().hex

class Subprocess(BaseModel):
    name: str
    last_lap_ms: int = 0
    completed: bool = False
    activity_type: ActivityType = ''
    remarks: str = ''
    person_count: int = Field(default=MIN_PERSONS, ge=MIN_PERSONS)

    model_config = ConfigDict(
        frozen=True,
    )

class Reading(BaseModel):
    process: str
    subprocess: str
    lap_ms: int
    activity_type: ActivityType
    remarks: str
    person_count: int = Field(ge=MIN_PERSONS)
    # Running-time axis: a lap spanning a pause starts that pause's length
    # later than the wall clock did, so ended_at - started_at == lap_ms.
    started_at: datetime
    ended_at: datetime
    captured_at: datetime

    model_config = ConfigDict(
        frozen=True,
    )

class TimerTick(tp.NamedTuple):
    elapsed_ms: int
    lap_ms: int

class Process(BaseModel):
    id: str = Field(default_factory=newProcessId)
    name: str
    subprocesses: list[Subprocess] = Field(default_factory=list)
    active: bool = False
    timer_running: bool = False
    elapsed_ms: int = 0
    start_ms: int | None = None
    last_lap_ms: int = 0
    lap_elapsed_ms: int = 0     # lap time frozen by the last stop
    readings: list[Reading] = Field(default_factory=list)

    model_config = ConfigDict(
        frozen=True,
    )

    @model_validator(mode='after')
    def checkRunningHasStart(self) -> Process:
        if self.timer_running and self.start_ms is None:
            raise ValueError('a running timer needs start_ms')
        return self

    def activeSubprocessIndex(self) -> int | None:
        '''
        The most recent uncompleted subprocess, or the last one if all
        are completed.
        '''
        for i in range(len(self.subprocesses) - 1, -1, -1):
            if not self.subprocesses[i].completed:
                return i
        if self.subprocesses:
            return len(self.subprocesses) - 1
        return None

    def clockAt(self, now: int) -> TimerTick:
        if self.timer_running and self.start_ms is not None:
            return TimerTick(now - self.start_ms, now - self.last_lap_ms)
        return TimerTick(self.elapsed_ms, self.lap_elapsed_ms)

    def started(self, now: int) -> Process:
        if self.timer_running:
            return self
        return self.model_copy(update=dict(
            timer_running=True,
            active=True,
            start_ms=now - self.elapsed_ms,
            last_lap_ms=now - self.lap_elapsed_ms,
        ))

    def stopped(self, now: int) -> Process:
        if not self.timer_running:
            return self
        elapsed_ms, lap_ms = self.clockAt(now)
        return self.model_copy(update=dict(
            timer_running=False,
            elapsed_ms=elapsed_ms,
            lap_elapsed_ms=lap_ms,
        ))

    def toggled(self, now: int) -> Process:
        if self.timer_running:
            return self.stopped(now)
        return self.started(now)

    def reset(self) -> Process:
        return self.model_copy(update=dict(
            timer_running=False,
            active=False,
            elapsed_ms=0,
            start_ms=None,
            last_lap_ms=0,
            lap_elapsed_ms=0,
            readings=[],
        ))

    def renamed(self, name: str) -> Process:
        return self.model_copy(update=dict(name=name))

    def withSubprocess(self, name: str, now: int) -> Process:
        name = name.strip()
        if not name:
            return self
        subprocesses = [*self.subprocesses]
        if subprocesses:
            subprocesses[-1] = subprocesses[-1].model_copy(
                update=dict(completed=True),
            )
        subprocesses.append(Subprocess(name=name))
        added = self.model_copy(update=dict(subprocesses=subprocesses))
        if len(subprocesses) == 1 and not added.timer_running:
            return added.started(now)
        return added

    def withoutSubprocess(self, index: int) -> Process:
        subprocesses = [*self.subprocesses]
        del subprocesses[index]
        return self.model_copy(update=dict(subprocesses=subprocesses))

    def withLap(
        self, index: int, now: int,
        activity_type: ActivityType = '',
        remarks: str = '',
        person_count: int = MIN_PERSONS,
        captured_at: datetime | None = None,
    ) -> Process:
        if not self.timer_running:
            return self
        if index != self.activeSubprocessIndex():
            return self
        subprocess = self.subprocesses[index]
        lap_ms = now - self.last_lap_ms
        reading = Reading(
            process=self.name,
            subprocess=subprocess.name,
            lap_ms=lap_ms,
            activity_type=activity_type,
            remarks=remarks,
            person_count=person_count,
            started_at=msToDatetime(self.last_lap_ms),
            ended_at=msToDatetime(now),
            captured_at=captured_at or msToDatetime(now),
        )
        subprocesses = [*self.subprocesses]
        subprocesses[index] = subprocess.model_copy(update=dict(
            last_lap_ms=lap_ms,
            activity_type=activity_type,
            remarks=remarks,
            person_count=reading.person_count,
        ))
        return self.model_copy(update=dict(
            subprocesses=subprocesses,
            readings=[*self.readings, reading],
            last_lap_ms=now,
        ))

class StudyState(BaseModel):
    '''
    Every transition returns a new state. Empty names and duplicate
    process names leave the state unchanged.
    '''
    processes: list[Process] = Field(default_factory=list)

    model_config = ConfigDict(
        frozen=True,
    )

    def indexOf(self, process_id: str) -> int | None:
        for i, p in enumerate(self.processes):
            if p.id == process_id:
                return i
        return None

    def hasName(self, name: str, ignore_index: int | None = None) -> bool:
        return any(
            p.name == name for i, p in enumerate(self.processes)
            if i != ignore_index
        )

    def allReadings(self) -> list[tuple[Process, Reading]]:
        return [(p, r) for p in self.processes for r in p.readings]

    def replaced(self, index: int, process: Process) -> StudyState:
        if process is self.processes[index]:
            return self
        processes = [*self.processes]
        processes[index] = process
        return self.model_copy(update=dict(processes=processes))

    def addProcess(self, name: str) -> StudyState:
        name = name.strip()
        if not name or self.hasName(name):
            return self
        return self.model_copy(update=dict(
            processes=[*self.processes, Process(name=name)],
        ))

    def renameProcess(self, index: int, name: str) -> StudyState:
        name = name.strip()
        if not name or self.hasName(name, ignore_index=index):
            return self
        return self.replaced(index, self.processes[index].renamed(name))

    def deleteProcess(self, index: int) -> StudyState:
        processes = [*self.processes]
        del processes[index]
        return self.model_copy(update=dict(processes=processes))

    def addSubprocess(self, index: int, name: str, now: int) -> StudyState:
        return self.replaced(
            index, self.processes[index].withSubprocess(name, now),
        )

    def deleteSubprocess(
        self, index: int, subprocess_index: int,
    ) -> StudyState:
        return self.replaced(
            index,
            self.processes[index].withoutSubprocess(subprocess_index),
        )

    def startTimer(self, index: int, now: int) -> StudyState:
        return self.replaced(index, self.processes[index].started(now))

    def stopTimer(self, index: int, now: int) -> StudyState:
        return self.replaced(index, self.processes[index].stopped(now))

    def toggleTimer(self, index: int, now: int) -> StudyState:
        return self.replaced(index, self.processes[index].toggled(now))

    def resetTimer(self, index: int) -> StudyState:
        return self.replaced(index, self.processes[index].reset())

    def recordLap(
        self, index: int, subprocess_index: int, now: int,
        activity_type: ActivityType = '',
        remarks: str = '',
        person_count: int = MIN_PERSONS,
    ) -> StudyState:
        return self.replaced(index, self.processes[index].withLap(
            subprocess_index, now,
            activity_type=activity_type,
            remarks=remarks,
            person_count=person_count,
        ))
