from .UI import UI as TimeMotionStudyUI
from .config import Config, loadConfig
from .export import NoReadingsError, exportToExcel
from .persistent import Persistent
from .recorder import Recorder
from .study import Process, Reading, StudyState, Subprocess

__all__ = [
    "TimeMotionStudyUI", "Config", "loadConfig", "NoReadingsError",
    "exportToExcel", "Persistent", "Recorder", "Process", "Reading",
    "StudyState", "Subprocess",
]
