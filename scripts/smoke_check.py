from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger


def main() -> int:
    root = Path(__file__).resolve().parents[1]
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))

    from rc_beam_toolbox.core.loader import discover_tools
    from rc_beam_toolbox.core.logging import configure_logging

    configure_logging()
    ok = True
    tools = discover_tools()
    if not tools:
        logger.error("No tools discovered")
        return 1

    for tool in tools:
        res = tool.run(tool.default_inputs())
        status = "OK" if res.get("ok") else "FAIL"
        logger.info(f"[{status}] {tool.meta.id} ({tool.meta.name} v{tool.meta.version})")
        ok &= bool(res.get("ok"))

    return 0 if ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
