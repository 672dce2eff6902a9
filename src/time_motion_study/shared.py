from __future__ import annotations

import time
import typing as tp
from datetime import datetime, timezone

from textual.widget import Widget

ActivityType = tp.Literal['', 'VA', 'NVA']
ACTIVITY_TYPES: tuple[ActivityType, ...] = ('', 'VA', 'NVA')

MIN_PERSONS = 1
MAX_PERSONS = 100

def nowMs() -> int:
    return int(time.time() * 1000)

def msToDatetime(ms: int) -> datetime:
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc)

def formatTime(ms: int | float) -> str:
    '''
    `hh:mm:ss`. Negative durations are shown by magnitude.
    '''
    ms = abs(int(ms))
    hours = ms // 3600_000
    minutes = (ms % 3600_000) // 60_000
    seconds = (ms % 60_000) // 1000
    return f'{hours:02}:{minutes:02}:{seconds:02}'

def formatDateTime(dt: datetime) -> str:
    if dt.tzinfo is not None:
        dt = dt.astimezone()
    return dt.strftime('%m/%d/%Y, %H:%M:%S')

def parsePersonCount(text: str) -> int:
    try:
        n = int(text.strip())
    except ValueError:
        return MIN_PERSONS
    if n < MIN_PERSONS:
        return MIN_PERSONS
    return min(n, MAX_PERSONS)

def parseActivityType(value: tp.Any) -> ActivityType:
    if value in ACTIVITY_TYPES:
        return value
    return ''

def titled(
    w: Widget, /, title: str, skip_bottom: bool = True,
    style = ('round', '#999'), padding = (0, 1),
):
    w.styles.border = style
    if skip_bottom:
        w.styles.border_bottom = None
    w.border_title = title
    w.styles.padding = padding
    return w
