"""ACI 318 flexural strength of singly reinforced rectangular concrete beams.

Exports:
  - TOOL: BeamFlexureTool instance discovered by the host
  - evaluate / evaluate_with_trace: capacity engine
  - area_of / list_available_sizes: standard bar catalog
"""
from __future__ import annotations

from .bar_table import BarSize, area_of, bar_area, bar_diameter, list_available_sizes, total_steel_area
from .calc_trace import CalcTrace, new_trace
from .errors import BeamDesignError, InvalidInputError, UnknownBarSizeError
from .evaluation import evaluate, evaluate_with_trace, validate_section
from .flexure import (
    ReinforcementLimits,
    StrainCondition,
    classify_strain,
    phi_from_strain,
    reinforcement_limits,
    resolve_beta1,
    tensile_strain,
)
from .models import BeamCapacityResult, BeamFlexureInputs, BeamSection
from .tool import TOOL, BeamFlexureTool

__all__ = [
    "TOOL",
    "BeamFlexureTool",
    "BeamSection",
    "BeamCapacityResult",
    "BeamFlexureInputs",
    "BarSize",
    "area_of",
    "bar_area",
    "bar_diameter",
    "list_available_sizes",
    "total_steel_area",
    "CalcTrace",
    "new_trace",
    "BeamDesignError",
    "InvalidInputError",
    "UnknownBarSizeError",
    "evaluate",
    "evaluate_with_trace",
    "validate_section",
    "ReinforcementLimits",
    "StrainCondition",
    "classify_strain",
    "phi_from_strain",
    "reinforcement_limits",
    "resolve_beta1",
    "tensile_strain",
]
