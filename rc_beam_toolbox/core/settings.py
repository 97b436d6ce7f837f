from __future__ import annotations

import os
from typing import Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

LogLevel = Literal["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]

ENV_PREFIX = "RC_BEAM_"


class AppSettings(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    log_level: LogLevel = Field("INFO", description="Console log level")
    log_to_file: bool = Field(False, description="Also write a rotating log file under the user data dir")
    data_dir: Optional[str] = Field(None, description="Override for the user data base directory")

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper(cls, v):
        return v.strip().upper() if isinstance(v, str) else v


def load_settings(environ: Optional[Mapping[str, str]] = None) -> AppSettings:
    """Read RC_BEAM_LOG_LEVEL / RC_BEAM_LOG_TO_FILE / RC_BEAM_DATA_DIR from the environment."""
    env = os.environ if environ is None else environ
    raw = {}
    for field in AppSettings.model_fields:
        key = ENV_PREFIX + field.upper()
        if key in env and env[key] != "":
            raw[field] = env[key]
    return AppSettings.model_validate(raw)
