from __future__ import annotations

from typing import Any, Dict, Optional

from loguru import logger
from pydantic import ValidationError

from rc_beam_toolbox.core.tool_base import ToolMeta

from .calc_trace import json_safe, new_trace
from .constants import TOOL_ID, TOOL_VERSION
from .errors import BeamDesignError
from .evaluation import evaluate_with_trace
from .models import BeamCapacityResult, BeamFlexureInputs


def ratio_scale(result: BeamCapacityResult) -> Dict[str, float]:
    """Positions on a 0..rho_max bar, in percent, plus rho / rho_b."""
    if result.rho_max > 0.0:
        rho_min_pct = 100.0 * result.rho_min / result.rho_max
        rho_pct = 100.0 * result.rho / result.rho_max
    else:
        rho_min_pct = rho_pct = float("nan")
    return {
        "rho_min_pct": rho_min_pct,
        "rho_pct": rho_pct,
        "acceptable_band_pct": max(0.0, 100.0 - rho_min_pct),
        "rho_over_rho_balanced": result.rho / result.rho_balanced if result.rho_balanced > 0.0 else float("nan"),
    }


def summarize(result: BeamCapacityResult) -> Dict[str, Any]:
    return {
        "status": "Valid Design" if result.is_valid else "Design Issues",
        "min_steel": "Passed" if result.meets_min_steel else "Failed",
        "ductility": "Under-reinforced" if result.is_under_reinforced else "Over-reinforced",
        "strain_condition": result.strain_condition.label,
        "ratio_scale": ratio_scale(result),
    }


class BeamFlexureTool:
    """Host entry point: singly reinforced rectangular beam flexure per ACI 318."""

    InputModel = BeamFlexureInputs

    def __init__(self, meta: Optional[ToolMeta] = None):
        self.meta = meta or ToolMeta(
            id=TOOL_ID,
            name="RC Beam Flexural Strength",
            category="Concrete",
            version=TOOL_VERSION,
            description="Nominal and design moment capacity of a rectangular RC beam with code checks (ACI 318).",
        )

    def default_inputs(self) -> Dict[str, Any]:
        return BeamFlexureInputs().model_dump()

    def run(self, inputs: Dict[str, Any]) -> Dict[str, Any]:
        log = logger.bind(tool_id=self.meta.id)
        try:
            model = BeamFlexureInputs.model_validate(inputs)
        except ValidationError as e:
            errors = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
            log.warning("Input validation failed: {}", errors)
            return {"ok": False, "errors": errors}

        clean = model.model_dump()
        trace = new_trace(clean)
        log = log.bind(input_hash=trace.meta.input_hash)
        try:
            section = model.to_section()
            result = evaluate_with_trace(trace, section)
        except BeamDesignError as e:
            log.warning("Beam flexure evaluation rejected inputs: {}", e)
            return {"ok": False, "errors": getattr(e, "problems", None) or [str(e)]}

        log.info(
            "Beam flexure solved: phiMn={:.2f} kip-ft, phi={:.3f}, valid={}",
            result.phiMn_kipft, result.phi, result.is_valid,
        )
        return {
            "ok": True,
            "inputs": clean,
            "section": section.model_dump(),
            "results": json_safe(result.model_dump(mode="json")),
            "summary": summarize(result),
            "calc_trace": trace.to_json_dict(),
        }


TOOL = BeamFlexureTool()
