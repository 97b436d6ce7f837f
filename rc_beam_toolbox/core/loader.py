from __future__ import annotations
import importlib
import pkgutil
from typing import Dict, List
from loguru import logger
from .tool_base import ToolBase

TOOLS_PKG = "rc_beam_toolbox.tools"

def discover_tools(package: str = TOOLS_PKG) -> List[ToolBase]:
    """
    Collect the `TOOL` object exported by each sub-package of `package`.
    Pattern:
      rc_beam_toolbox/tools/<tool_id>/__init__.py defines TOOL = SomeTool()
    A tool that fails to import is logged and skipped.
    """
    tools: List[ToolBase] = []
    pkg = importlib.import_module(package)
    for m in pkgutil.iter_modules(pkg.__path__):
        if not m.ispkg:
            continue
        mod_name = f"{package}.{m.name}"
        try:
            mod = importlib.import_module(mod_name)
        except Exception as e:
            logger.exception(f"Failed loading tool {mod_name}: {e}")
            continue
        tool = getattr(mod, "TOOL", None)
        if tool is None:
            logger.warning(f"Module {mod_name} has no TOOL export; skipping.")
            continue
        tools.append(tool)
    tools.sort(key=lambda t: (t.meta.category.lower(), t.meta.name.lower()))
    return tools

def tools_by_id(package: str = TOOLS_PKG) -> Dict[str, ToolBase]:
    return {t.meta.id: t for t in discover_tools(package)}
