from __future__ import annotations

import hashlib
import json
import math
import re
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field

from .constants import CODE_BASIS, REPORT_VERSION, TOOL_ID, TOOL_VERSION, UNITS_SYSTEM


class CalcVariable(BaseModel):
    model_config = ConfigDict(extra="forbid")
    symbol: str
    description: str
    value: float
    units: str
    source: str  # input:<id> | step:<step_id> | const:<name>


class CalcReference(BaseModel):
    model_config = ConfigDict(extra="forbid")
    type: str  # code/table/derived
    ref: str


class CalcCheck(BaseModel):
    model_config = ConfigDict(extra="forbid")
    label: str
    demand: float
    capacity: float
    ratio: float
    pass_fail: str


class CalcValue(BaseModel):
    model_config = ConfigDict(extra="forbid")
    value: float
    units: str


class Rounding(BaseModel):
    model_config = ConfigDict(extra="forbid")
    rule: str  # "decimals" | "sigfigs" | "none"
    decimals_or_sigfigs: int


class CalcStep(BaseModel):
    model_config = ConfigDict(extra="forbid")
    id: str
    section: str
    title: str

    output_symbol: str
    output_description: str

    equation_latex: str
    substitution_latex: str

    variables: List[CalcVariable]

    result_unrounded: CalcValue
    rounding: Rounding
    result_rounded: CalcValue

    references: List[CalcReference]

    checks: Optional[List[CalcCheck]] = None
    warnings: Optional[List[str]] = None


class TraceMeta(BaseModel):
    model_config = ConfigDict(extra="forbid")
    tool_id: str
    tool_version: str
    report_version: str
    timestamp: str
    units_system: str
    code_basis: Optional[str] = None
    input_hash: str


class TraceInput(BaseModel):
    model_config = ConfigDict(extra="forbid")
    id: str
    label: str
    value: Union[float, int, str, bool]
    units: str
    source: str  # user/default/derived


class TraceSummary(BaseModel):
    model_config = ConfigDict(extra="forbid")
    governing_checks: List[Dict[str, Any]] = Field(default_factory=list)
    controlling_step_ids: List[str] = Field(default_factory=list)
    key_outputs: Dict[str, Any] = Field(default_factory=dict)
    warnings: List[str] = Field(default_factory=list)


class CalcTrace(BaseModel):
    model_config = ConfigDict(extra="forbid")
    meta: TraceMeta
    inputs: List[TraceInput] = Field(default_factory=list)
    steps: List[CalcStep] = Field(default_factory=list)
    summary: TraceSummary = Field(default_factory=TraceSummary)

    def step(self, step_id: str) -> CalcStep:
        for s in self.steps:
            if s.id == step_id:
                return s
        raise KeyError(step_id)

    def to_json_dict(self) -> Dict[str, Any]:
        """JSON-ready dump; non-finite floats (epsilon_t = inf at zero steel) become None."""
        return json_safe(self.model_dump(mode="json"))


def json_safe(value: Any) -> Any:
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, dict):
        return {k: json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [json_safe(v) for v in value]
    return value


def input_hash(inputs: Dict[str, Any]) -> str:
    """Deterministic short hash of an input dict (sorted keys, floats at 12 significant digits)."""
    norm: Dict[str, Any] = {}
    for k in sorted(inputs.keys()):
        v = inputs[k]
        if isinstance(v, float) and math.isfinite(v):
            norm[k] = float(f"{v:.12g}")
        elif isinstance(v, float):
            norm[k] = repr(v)
        else:
            norm[k] = v
    payload = json.dumps(norm, sort_keys=True, separators=(",", ":"), ensure_ascii=True, default=str)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:12]


def new_trace(inputs: Dict[str, Any], *, timestamp: Optional[str] = None) -> CalcTrace:
    meta = TraceMeta(
        tool_id=TOOL_ID,
        tool_version=TOOL_VERSION,
        report_version=REPORT_VERSION,
        timestamp=timestamp or datetime.now().isoformat(timespec="seconds"),
        units_system=UNITS_SYSTEM,
        code_basis=CODE_BASIS,
        input_hash=input_hash(inputs),
    )
    return CalcTrace(meta=meta)


def _format_num(value: float) -> str:
    if math.isnan(value) or math.isinf(value):
        return str(value)
    return f"{value:.12g}"


def _latex_value_with_units(value: float, units: str) -> str:
    u = units.strip()
    if u == "":
        return _format_num(value)
    return f"{_format_num(value)}\\,\\mathrm{{{u}}}"


def _substitute(equation_latex: str, values: Dict[str, str]) -> str:
    # Single pass, longest symbol first; a symbol only matches as a whole token so that
    # "b" does not hit "\beta_1" and "c" does not hit "\varepsilon_c".
    symbols = sorted(values, key=len, reverse=True)
    pattern = re.compile(
        r"(?<![A-Za-z\\_])(?:" + "|".join(re.escape(s) for s in symbols) + r")(?![A-Za-z_])"
    )
    return pattern.sub(lambda m: values[m.group(0)], equation_latex)


def apply_rounding(value: float, rule: str, n: int) -> float:
    if rule == "none" or not math.isfinite(value):
        return float(value)
    if rule == "decimals":
        return float(round(value, int(n)))
    if rule == "sigfigs":
        if value == 0:
            return 0.0
        sign = -1.0 if value < 0 else 1.0
        v = abs(float(value))
        exp = math.floor(math.log10(v))
        factor = 10 ** (n - 1 - exp)
        return sign * round(v * factor) / factor
    raise ValueError(f"Unknown rounding rule: {rule!r}")


def compute_step(
    trace: CalcTrace,
    *,
    id: str,
    section: str,
    title: str,
    output_symbol: str,
    output_description: str,
    equation_latex: str,
    variables: Sequence[Dict[str, Any]],
    compute_fn: Callable[[], float],
    units: str,
    rounding_rule: Dict[str, Any],
    references: Sequence[Dict[str, str]],
    checks_builder: Optional[Callable[[float], List[Dict[str, Any]]]] = None,
    warnings: Optional[List[str]] = None,
) -> float:
    """
    Evaluate one calculation and append it to the trace.

    The unrounded value is returned; the rounded value is kept for display only.
    Substitution text is generated by replacing each variable symbol (longest first)
    with its value and units.
    """
    if not id or not section or not title:
        raise ValueError("compute_step requires non-empty id/section/title")
    if not equation_latex:
        raise ValueError("compute_step requires equation_latex")
    if not variables:
        raise ValueError("compute_step requires variables (non-empty)")
    if not references:
        raise ValueError("compute_step requires references (non-empty)")

    var_models = [CalcVariable(**v) for v in variables]

    unrounded = float(compute_fn())

    rule = rounding_rule.get("rule", "none")
    n = int(rounding_rule.get("decimals_or_sigfigs", 6))
    rounded = apply_rounding(unrounded, rule, n)

    sub = _substitute(equation_latex, {vm.symbol: _latex_value_with_units(vm.value, vm.units) for vm in var_models})

    step_checks = None
    if checks_builder is not None:
        step_checks = [CalcCheck(**c) for c in checks_builder(unrounded)]

    trace.steps.append(
        CalcStep(
            id=id,
            section=section,
            title=title,
            output_symbol=output_symbol,
            output_description=output_description,
            equation_latex=equation_latex,
            substitution_latex=sub,
            variables=var_models,
            result_unrounded=CalcValue(value=unrounded, units=units),
            rounding=Rounding(rule=rule, decimals_or_sigfigs=n),
            result_rounded=CalcValue(value=rounded, units=units),
            references=[CalcReference(**r) for r in references],
            checks=step_checks,
            warnings=warnings,
        )
    )
    return unrounded
