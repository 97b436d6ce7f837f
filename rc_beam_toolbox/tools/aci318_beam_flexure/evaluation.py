from __future__ import annotations

import math
from typing import Any, Dict, List, Mapping, Union

from loguru import logger
from pydantic import ValidationError

from .calc_trace import CalcTrace, TraceInput, compute_step
from .constants import (
    ALPHA1,
    EPS_CU,
    EPS_T_COMPRESSION_CONTROLLED,
    EPS_T_TENSION_CONTROLLED,
    ES_PSI,
    LBIN_PER_KIPFT,
    RHO_MAX_FRACTION,
)
from .errors import InvalidInputError
from .flexure import (
    classify_strain,
    phi_from_strain,
    reinforcement_limits,
    resolve_beta1,
    steel_yield_strain,
    tensile_strain,
)
from .models import BeamCapacityResult, BeamSection

SectionLike = Union[BeamSection, Mapping[str, Any]]

_POSITIVE_FIELDS = (
    ("b_in", "width b"),
    ("h_in", "total depth h"),
    ("d_in", "effective depth d"),
    ("fc_psi", "concrete strength f'c"),
    ("fy_psi", "steel yield strength fy"),
)


def _coerce_section(section: SectionLike) -> BeamSection:
    if isinstance(section, BeamSection):
        return section
    try:
        return BeamSection.model_validate(dict(section))
    except ValidationError as e:
        problems = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
        raise InvalidInputError(problems) from e


def validate_section(section: BeamSection) -> None:
    """Reject sections whose capacity would involve division by zero or non-finite numbers."""
    problems: List[str] = []
    for field, label in _POSITIVE_FIELDS:
        v = getattr(section, field)
        if not math.isfinite(v) or v <= 0.0:
            problems.append(f"{label} must be a finite value > 0 (got {v!r})")
    if not math.isfinite(section.As_in2) or section.As_in2 < 0.0:
        problems.append(f"steel area As must be a finite value >= 0 (got {section.As_in2!r})")
    if section.num_bars < 1:
        problems.append(f"number of bars must be >= 1 (got {section.num_bars!r})")
    if problems:
        raise InvalidInputError(problems)


def evaluate(section: SectionLike) -> BeamCapacityResult:
    """
    Flexural capacity of a singly reinforced rectangular section (ACI 318 strength design).

    Steel is assumed to yield (fs = fy); the strain check and phi report whether that holds.
    fy is in psi, so As*fy is a force in lb and As*fy*(d - a/2) is lb-in; Mn divides by 12000 to give kip-ft.
    Raises InvalidInputError for non-physical geometry or material values.
    """
    sec = _coerce_section(section)
    validate_section(sec)

    b, h, d = sec.b_in, sec.h_in, sec.d_in
    fc, fy, As = sec.fc_psi, sec.fy_psi, sec.As_in2

    rho = As / (b * d)
    limits = reinforcement_limits(fc, fy)

    # T = C  ->  As fy = 0.85 f'c a b
    a = As * fy / (ALPHA1 * fc * b)
    beta1 = resolve_beta1(fc)
    c = a / beta1

    eps_c = EPS_CU
    eps_t = tensile_strain(c, d)
    phi = phi_from_strain(eps_t)

    Mn = As * fy * (d - a / 2.0) / LBIN_PER_KIPFT
    phiMn = phi * Mn

    is_under_reinforced = rho <= limits.rho_max
    meets_min_steel = rho >= limits.rho_min
    is_valid = is_under_reinforced and meets_min_steel and d < h and As > 0.0

    logger.debug(
        "beam flexure: rho={:.5f} a={:.4f} c={:.4f} eps_t={:.5f} phi={:.3f} phiMn={:.2f} valid={}",
        rho, a, c, eps_t, phi, phiMn, is_valid,
    )

    return BeamCapacityResult(
        rho=rho,
        rho_min=limits.rho_min,
        rho_max=limits.rho_max,
        rho_balanced=limits.rho_balanced,
        beta1=beta1,
        a_in=a,
        c_in=c,
        Mn_kipft=Mn,
        phiMn_kipft=phiMn,
        phi=phi,
        strain_condition=classify_strain(eps_t),
        is_under_reinforced=is_under_reinforced,
        meets_min_steel=meets_min_steel,
        is_valid=is_valid,
        epsilon_t=eps_t,
        epsilon_c=eps_c,
    )


def _ratio(demand: float, capacity: float) -> float:
    if capacity == 0.0:
        return math.inf
    return demand / capacity


def _pf(ok: bool) -> str:
    return "PASS" if ok else "FAIL"


def _add_section_inputs(trace: CalcTrace, sec: BeamSection) -> None:
    units = {"b_in": "in", "h_in": "in", "d_in": "in", "fc_psi": "psi", "fy_psi": "psi", "As_in2": "in^2", "num_bars": ""}
    for k, v in sec.model_dump().items():
        trace.inputs.append(TraceInput(id=k, label=k, value=v, units=units[k], source="user"))


def evaluate_with_trace(trace: CalcTrace, section: SectionLike) -> BeamCapacityResult:
    """
    Same result as `evaluate`, with each derived quantity recorded as a calc step.

    Steps report the values computed by `evaluate`, so the trace and the result never disagree.
    """
    sec = _coerce_section(section)
    r = evaluate(sec)
    _add_section_inputs(trace, sec)

    b, h, d = sec.b_in, sec.h_in, sec.d_in
    fc, fy, As = sec.fc_psi, sec.fy_psi, sec.As_in2
    eps_y = steel_yield_strain(fy)

    v_b = {"symbol": "b", "description": "Beam width", "value": b, "units": "in", "source": "input:b_in"}
    v_d = {"symbol": "d", "description": "Effective depth", "value": d, "units": "in", "source": "input:d_in"}
    v_fc = {"symbol": "f'_c", "description": "Specified compressive strength of concrete", "value": fc, "units": "psi", "source": "input:fc_psi"}
    v_fy = {"symbol": "f_y", "description": "Specified yield strength of reinforcement", "value": fy, "units": "psi", "source": "input:fy_psi"}
    v_As = {"symbol": "A_s", "description": "Area of tension reinforcement", "value": As, "units": "in^2", "source": "input:As_in2"}
    v_beta1 = {"symbol": "\\beta_1", "description": "Stress block factor", "value": r.beta1, "units": "", "source": "step:beta1"}

    compute_step(
        trace,
        id="rho",
        section="Reinforcement ratios",
        title="Tension reinforcement ratio ρ",
        output_symbol="\\rho",
        output_description="Reinforcement ratio",
        equation_latex="\\rho = \\frac{A_s}{b d}",
        variables=[v_As, v_b, v_d],
        compute_fn=lambda: r.rho,
        units="",
        rounding_rule={"rule": "sigfigs", "decimals_or_sigfigs": 4},
        references=[{"type": "derived", "ref": "Definition of ρ"}],
    )
    compute_step(
        trace,
        id="rho_min",
        section="Reinforcement ratios",
        title="Minimum flexural reinforcement ratio",
        output_symbol="\\rho_{min}",
        output_description="Minimum reinforcement ratio",
        equation_latex="\\rho_{min} = \\max\\left(\\frac{3\\sqrt{f'_c}}{f_y}, \\frac{200}{f_y}\\right)",
        variables=[v_fc, v_fy],
        compute_fn=lambda: r.rho_min,
        units="",
        rounding_rule={"rule": "sigfigs", "decimals_or_sigfigs": 4},
        references=[{"type": "code", "ref": "ACI 318-14 9.6.1.2"}],
        checks_builder=lambda v: [{
            "label": "ρ >= ρmin",
            "demand": v,
            "capacity": r.rho,
            "ratio": _ratio(v, r.rho),
            "pass_fail": _pf(r.meets_min_steel),
        }],
    )
    compute_step(
        trace,
        id="beta1",
        section="Concrete stress block",
        title="Equivalent rectangular stress block factor β1",
        output_symbol="\\beta_1",
        output_description="Stress block factor",
        equation_latex=(
            "\\beta_1 = 0.85\\;(f'_c \\le 4000);\\;"
            "0.85 - 0.20\\frac{f'_c - 4000}{4000}\\;(4000 < f'_c < 8000);\\;"
            "0.65\\;(f'_c \\ge 8000)"
        ),
        variables=[v_fc],
        compute_fn=lambda: r.beta1,
        units="",
        rounding_rule={"rule": "decimals", "decimals_or_sigfigs": 3},
        references=[{"type": "code", "ref": "ACI 318-14 Table 22.2.2.4.3"}],
    )
    compute_step(
        trace,
        id="rho_b",
        section="Reinforcement ratios",
        title="Balanced reinforcement ratio",
        output_symbol="\\rho_b",
        output_description="Balanced reinforcement ratio",
        equation_latex="\\rho_b = \\frac{0.85 f'_c \\beta_1}{f_y}\\cdot\\frac{\\varepsilon_{cu}}{\\varepsilon_{cu} + \\varepsilon_y}",
        variables=[
            v_fc,
            v_fy,
            v_beta1,
            {"symbol": "\\varepsilon_{cu}", "description": "Ultimate concrete strain", "value": EPS_CU, "units": "", "source": "const:EPS_CU"},
            {"symbol": "\\varepsilon_y", "description": "Steel yield strain fy/Es", "value": eps_y, "units": "", "source": f"const:Es={ES_PSI:.0f}psi"},
        ],
        compute_fn=lambda: r.rho_balanced,
        units="",
        rounding_rule={"rule": "sigfigs", "decimals_or_sigfigs": 4},
        references=[{"type": "code", "ref": "ACI 318-14 22.2.2.1, 22.2.2.4.1"}],
    )
    compute_step(
        trace,
        id="rho_max",
        section="Reinforcement ratios",
        title="Maximum reinforcement ratio (ductility)",
        output_symbol="\\rho_{max}",
        output_description="Maximum reinforcement ratio",
        equation_latex=f"\\rho_{{max}} = {RHO_MAX_FRACTION}\\,\\rho_b",
        variables=[{"symbol": "\\rho_b", "description": "Balanced reinforcement ratio", "value": r.rho_balanced, "units": "", "source": "step:rho_b"}],
        compute_fn=lambda: r.rho_max,
        units="",
        rounding_rule={"rule": "sigfigs", "decimals_or_sigfigs": 4},
        references=[{"type": "derived", "ref": "0.75 ρb ductility limit"}],
        checks_builder=lambda v: [{
            "label": "ρ <= ρmax",
            "demand": r.rho,
            "capacity": v,
            "ratio": _ratio(r.rho, v),
            "pass_fail": _pf(r.is_under_reinforced),
        }],
    )
    compute_step(
        trace,
        id="a",
        section="Concrete stress block",
        title="Depth of equivalent rectangular stress block",
        output_symbol="a",
        output_description="Stress block depth",
        equation_latex="a = \\frac{A_s f_y}{0.85 f'_c b}",
        variables=[v_As, v_fy, v_fc, v_b],
        compute_fn=lambda: r.a_in,
        units="in",
        rounding_rule={"rule": "decimals", "decimals_or_sigfigs": 3},
        references=[{"type": "code", "ref": "ACI 318-14 22.2.2.4.1"}],
    )
    compute_step(
        trace,
        id="c",
        section="Concrete stress block",
        title="Depth to neutral axis",
        output_symbol="c",
        output_description="Neutral axis depth",
        equation_latex="c = \\frac{a}{\\beta_1}",
        variables=[
            {"symbol": "a", "description": "Stress block depth", "value": r.a_in, "units": "in", "source": "step:a"},
            v_beta1,
        ],
        compute_fn=lambda: r.c_in,
        units="in",
        rounding_rule={"rule": "decimals", "decimals_or_sigfigs": 3},
        references=[{"type": "code", "ref": "ACI 318-14 22.2.2.4.2"}],
    )

    eps_warnings = None
    if r.epsilon_t < EPS_T_TENSION_CONTROLLED:
        eps_warnings = [
            f"εt = {r.epsilon_t:.5f} < {EPS_T_TENSION_CONTROLLED}: section is not tension-controlled."
        ]
    compute_step(
        trace,
        id="eps_t",
        section="Strain compatibility",
        title="Net tensile strain in extreme tension steel",
        output_symbol="\\varepsilon_t",
        output_description="Net tensile strain",
        equation_latex="\\varepsilon_t = \\varepsilon_{cu}\\frac{d - c}{c}",
        variables=[
            {"symbol": "\\varepsilon_{cu}", "description": "Ultimate concrete strain", "value": r.epsilon_c, "units": "", "source": "const:EPS_CU"},
            v_d,
            {"symbol": "c", "description": "Neutral axis depth", "value": r.c_in, "units": "in", "source": "step:c"},
        ],
        compute_fn=lambda: r.epsilon_t,
        units="",
        rounding_rule={"rule": "sigfigs", "decimals_or_sigfigs": 4},
        references=[{"type": "code", "ref": "ACI 318-14 22.2.1.2"}],
        warnings=eps_warnings,
    )
    compute_step(
        trace,
        id="phi",
        section="Strength reduction factor",
        title="Strength reduction factor φ from net tensile strain εt",
        output_symbol="\\phi",
        output_description="Strength reduction factor",
        equation_latex=(
            "\\phi = 0.90\\;(\\varepsilon_t \\ge 0.005);\\;"
            "0.65 + 0.25\\frac{\\varepsilon_t - 0.002}{0.003}\\;(0.002 < \\varepsilon_t < 0.005);\\;"
            "0.65\\;(\\varepsilon_t \\le 0.002)"
        ),
        variables=[
            {"symbol": "\\varepsilon_t", "description": "Net tensile strain", "value": r.epsilon_t, "units": "", "source": "step:eps_t"},
        ],
        compute_fn=lambda: r.phi,
        units="",
        rounding_rule={"rule": "decimals", "decimals_or_sigfigs": 3},
        references=[{"type": "code", "ref": "ACI 318-14 Table 21.2.2"}],
    )
    compute_step(
        trace,
        id="Mn",
        section="Flexural strength",
        title="Nominal moment strength",
        output_symbol="M_n",
        output_description="Nominal flexural strength",
        equation_latex="M_n = \\frac{A_s f_y (d - a/2)}{12000}",
        variables=[
            v_As,
            v_fy,
            v_d,
            {"symbol": "a", "description": "Stress block depth", "value": r.a_in, "units": "in", "source": "step:a"},
        ],
        compute_fn=lambda: r.Mn_kipft,
        units="kip-ft",
        rounding_rule={"rule": "decimals", "decimals_or_sigfigs": 2},
        references=[{"type": "code", "ref": "ACI 318-14 22.2"}],
    )
    compute_step(
        trace,
        id="phiMn",
        section="Flexural strength",
        title="Design moment strength",
        output_symbol="\\phi M_n",
        output_description="Design flexural strength",
        equation_latex="\\phi M_n = \\phi \\cdot M_n",
        variables=[
            {"symbol": "\\phi", "description": "Strength reduction factor", "value": r.phi, "units": "", "source": "step:phi"},
            {"symbol": "M_n", "description": "Nominal flexural strength", "value": r.Mn_kipft, "units": "kip-ft", "source": "step:Mn"},
        ],
        compute_fn=lambda: r.phiMn_kipft,
        units="kip-ft",
        rounding_rule={"rule": "decimals", "decimals_or_sigfigs": 2},
        references=[{"type": "code", "ref": "ACI 318-14 9.5.1.1, 21.2.1"}],
    )

    warnings: List[str] = []
    if not r.meets_min_steel:
        warnings.append("Provided steel is below the minimum flexural reinforcement (9.6.1.2).")
    if not r.is_under_reinforced:
        warnings.append("Section is over-reinforced: ρ exceeds 0.75 ρb.")
    if not d < h:
        warnings.append("Effective depth d must be less than total depth h.")
    if As <= 0.0:
        warnings.append("No tension reinforcement provided.")
    if r.epsilon_t <= EPS_T_COMPRESSION_CONTROLLED:
        warnings.append("Section is compression-controlled; assumed steel yield is not reached.")

    checks: List[Dict[str, Any]] = [
        {"label": "Minimum steel", "demand": r.rho_min, "capacity": r.rho, "ratio": _ratio(r.rho_min, r.rho), "pass_fail": _pf(r.meets_min_steel), "step_id": "rho_min"},
        {"label": "Maximum steel (ductility)", "demand": r.rho, "capacity": r.rho_max, "ratio": _ratio(r.rho, r.rho_max), "pass_fail": _pf(r.is_under_reinforced), "step_id": "rho_max"},
    ]
    governing = max(checks, key=lambda ch: ch["ratio"])

    trace.summary.governing_checks = [governing]
    trace.summary.controlling_step_ids = [governing["step_id"], "phiMn"]
    trace.summary.key_outputs = {
        "phiMn_kipft": r.phiMn_kipft,
        "Mn_kipft": r.Mn_kipft,
        "phi": r.phi,
        "strain_condition": r.strain_condition.value,
        "is_valid": r.is_valid,
    }
    trace.summary.warnings = warnings
    return r
