from __future__ import annotations

import logging
import os

import dotenv
from pydantic import BaseModel, ConfigDict, Field

from .export import DEFAULT_EXPORT_PATH, DEFAULT_STUDY_NAME
from .persistent import DEFAULT_STORAGE_PATH

class Config(BaseModel):
    storage_path: str = DEFAULT_STORAGE_PATH
    export_path: str = DEFAULT_EXPORT_PATH
    study_name: str = DEFAULT_STUDY_NAME
    tick_interval: float = Field(default=0.01, gt=0)      # seconds
    autosave_interval: float = Field(default=10.0, gt=0)  # seconds
    log_level: str = 'INFO'
    log_file: str | None = None

    model_config = ConfigDict(
        frozen=True,
    )

ENV_VARS = {
    'storage_path': 'TMS_STORAGE_PATH',
    'export_path': 'TMS_EXPORT_PATH',
    'study_name': 'TMS_STUDY_NAME',
    'tick_interval': 'TMS_TICK_INTERVAL',
    'autosave_interval': 'TMS_AUTOSAVE_INTERVAL',
    'log_level': 'TMS_LOG_LEVEL',
    'log_file': 'TMS_LOG_FILE',
}

def loadConfig(**overrides) -> Config:
    '''
    `.env`, then the environment, then `overrides` (`None` values are
    skipped so argparse defaults can be passed straight through).
    '''
    dotenv.load_dotenv()
    values = {}
    for field, var in ENV_VARS.items():
        v = os.getenv(var)
        if v:
            values[field] = v
    values.update({k: v for k, v in overrides.items() if v is not None})
    return Config.model_validate(values)

def setupLogging(config: Config) -> None:
    level = getattr(logging, config.log_level.upper(), logging.INFO)
    if config.log_file:
        logging.basicConfig(
            level=level, filename=config.log_file,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        )
    else:
        # stderr belongs to the terminal UI
        from textual.logging import TextualHandler
        logging.basicConfig(level=level, handlers=[TextualHandler()])
