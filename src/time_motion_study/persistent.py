from __future__ import annotations

import json
import logging
import typing as tp
from contextlib import contextmanager

from pydantic import ValidationError

from .study import StudyState

if tp.TYPE_CHECKING:
    from .recorder import Recorder

log = logging.getLogger(__name__)

DEFAULT_STORAGE_PATH = 'timeMotionData.json'

class Persistent:
    '''
    One JSON document, `{"processes": [...]}`.
    '''
    def __init__(self, /, path: str = DEFAULT_STORAGE_PATH) -> None:
        self.path = path
        self.is_in_context = False

    def load(self) -> StudyState:
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                raw = json.load(f)
        except FileNotFoundError:
            return StudyState()
        except json.JSONDecodeError as e:
            log.error('Error loading saved data from %s: %s', self.path, e)
            return StudyState()
        try:
            state = StudyState.model_validate(raw)
        except ValidationError as e:
            log.error('Error loading saved data from %s: %s', self.path, e)
            return StudyState()
        log.info(
            'loaded %d processes from %s', len(state.processes), self.path,
        )
        return state

    def save(self, state: StudyState) -> None:
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump(state.model_dump(mode='json'), f, indent=2)
        log.debug('saved %d processes to %s', len(state.processes), self.path)

    @contextmanager
    def Context(self, recorder: Recorder) -> tp.Generator[Recorder, None, None]:
        assert not self.is_in_context
        recorder.restore(self.load())
        self.is_in_context = True
        try:
            yield recorder
        finally:
            self.is_in_context = False
            self.save(recorder.state)
