from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol, Type, runtime_checkable

from pydantic import BaseModel

@dataclass(frozen=True)
class ToolMeta:
    id: str
    name: str
    category: str
    version: str
    description: str

@runtime_checkable
class ToolBase(Protocol):
    """
    Tool contract.

    A tool declares a pydantic `InputModel` so the host can build its form and
    report validation errors, and returns a JSON-ready dict from `run()`:
      {"ok": True, ...results...} or {"ok": False, "errors": [...]}
    """
    meta: ToolMeta
    InputModel: Optional[Type[BaseModel]]

    def default_inputs(self) -> Dict[str, Any]:
        ...

    def run(self, inputs: Dict[str, Any]) -> Dict[str, Any]:
        ...
