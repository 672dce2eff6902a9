from __future__ import annotations

import logging
import os
import re
import typing as tp

import pandas as pd

from .shared import formatDateTime, formatTime
from .study import StudyState

log = logging.getLogger(__name__)

DEFAULT_STUDY_NAME = 'Time Motion Study'
DEFAULT_EXPORT_PATH = 'time_motion_study.xlsx'

COLUMNS = (
    'Process',
    'Subprocess',
    'Time (hh:mm:ss)',
    'Activity Type',
    'Persons Required',
    'Remarks',
    'Start Time',
    'End Time',
    'Time (ms)',
    'Timestamp',
)

# Excel rejects these in sheet titles and caps them at 31 chars.
_SHEET_FORBIDDEN = re.compile(r'[\[\]:*?/\\]')
_SHEET_MAX_LEN = 31

class NoReadingsError(Exception):
    pass

def sheetTitle(study_name: str) -> str:
    title = _SHEET_FORBIDDEN.sub('', study_name).strip()[:_SHEET_MAX_LEN]
    return title or DEFAULT_STUDY_NAME

def exportRows(state: StudyState) -> list[dict[str, tp.Any]]:
    return [
        {
            'Process': process.name,
            'Subprocess': reading.subprocess,
            'Time (hh:mm:ss)': formatTime(reading.lap_ms),
            'Activity Type': reading.activity_type,
            'Persons Required': reading.person_count,
            'Remarks': reading.remarks,
            'Start Time': formatDateTime(reading.started_at),
            'End Time': formatDateTime(reading.ended_at),
            'Time (ms)': reading.lap_ms,
            'Timestamp': formatDateTime(reading.captured_at),
        }
        for process, reading in state.allReadings()
    ]

def exportToExcel(
    state: StudyState,
    path: str | os.PathLike = DEFAULT_EXPORT_PATH,
    study_name: str = DEFAULT_STUDY_NAME,
) -> str:
    '''
    Raises `NoReadingsError` without touching `path` when there is
    nothing recorded.
    '''
    rows = exportRows(state)
    if not rows:
        raise NoReadingsError('No data to export!')
    df = pd.DataFrame(rows, columns=list(COLUMNS))
    df.to_excel(
        path, sheet_name=sheetTitle(study_name), index=False,
        engine='openpyxl',
    )
    log.info('exported %d readings to %s', len(rows), path)
    return os.fspath(path)
