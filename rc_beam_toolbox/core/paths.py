from __future__ import annotations
import os
from pathlib import Path
from typing import Optional

APP_NAME = "RCBeamToolbox"

def user_data_dir(base: Optional[str] = None) -> Path:
    """
    Writable location for logs.
    Windows default: %LOCALAPPDATA%\\RCBeamToolbox\\
    """
    base = base or os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA") or str(Path.home())
    p = Path(base) / APP_NAME
    p.mkdir(parents=True, exist_ok=True)
    return p

def logs_dir(base: Optional[str] = None) -> Path:
    p = user_data_dir(base) / "logs"
    p.mkdir(parents=True, exist_ok=True)
    return p
