from __future__ import annotations

import json
import math

import pytest

from .calc_trace import CalcTrace, TraceMeta
from .errors import InvalidInputError
from .evaluation import evaluate, evaluate_with_trace
from .flexure import StrainCondition
from .models import BeamSection


def _section(**overrides) -> BeamSection:
    # Four #8 bars in a 12 x 24 beam
    values = dict(b_in=12.0, h_in=24.0, d_in=21.5, fc_psi=4000.0, fy_psi=60000.0, As_in2=3.16, num_bars=4)
    values.update(overrides)
    return BeamSection(**values)


def _trace() -> CalcTrace:
    meta = TraceMeta(
        tool_id="aci318_beam_flexure",
        tool_version="test",
        report_version="test",
        timestamp="2000-01-01T00:00:00",
        units_system="US",
        input_hash="testhash",
    )
    return CalcTrace(meta=meta)


def test_tension_controlled_reference_beam() -> None:
    r = evaluate(_section())
    assert r.rho == pytest.approx(3.16 / (12.0 * 21.5))
    assert r.a_in == pytest.approx(4.6471, abs=1e-4)
    assert r.c_in == pytest.approx(4.6471 / 0.85, abs=1e-3)
    assert r.beta1 == 0.85
    assert r.epsilon_c == 0.003
    assert r.epsilon_t == pytest.approx(0.008798, abs=1e-5)
    assert r.phi == 0.90
    assert r.strain_condition is StrainCondition.TENSION_CONTROLLED
    assert r.Mn_kipft == pytest.approx(302.99, abs=0.01)
    assert r.phiMn_kipft == pytest.approx(272.69, abs=0.01)
    assert r.is_under_reinforced is True
    assert r.meets_min_steel is True
    assert r.is_valid is True


def test_below_minimum_steel_is_invalid() -> None:
    r = evaluate(_section(As_in2=0.10, num_bars=1))
    assert r.meets_min_steel is False
    assert r.is_under_reinforced is True
    assert r.is_valid is False


def test_over_reinforced_section() -> None:
    r = evaluate(_section(As_in2=20.0))
    assert r.is_under_reinforced is False
    assert r.is_valid is False
    assert r.epsilon_t < 0.002
    assert r.phi == 0.65
    assert r.strain_condition is StrainCondition.COMPRESSION_CONTROLLED


def test_transition_zone_phi() -> None:
    # rho close to rho_max lands in the transition zone for fy = 60 ksi
    r = evaluate(_section(As_in2=5.4))
    assert 0.002 < r.epsilon_t < 0.005
    assert 0.65 < r.phi < 0.90
    assert r.strain_condition is StrainCondition.TRANSITION
    assert r.phiMn_kipft == pytest.approx(r.phi * r.Mn_kipft)


def test_effective_depth_not_less_than_height_is_invalid() -> None:
    r = evaluate(_section(h_in=21.5))
    assert r.is_under_reinforced is True
    assert r.meets_min_steel is True
    assert r.is_valid is False


def test_zero_steel_gives_zero_capacity() -> None:
    r = evaluate(_section(As_in2=0.0))
    assert r.a_in == 0.0
    assert r.c_in == 0.0
    assert r.epsilon_t == math.inf
    assert r.phi == 0.90
    assert r.Mn_kipft == 0.0
    assert r.phiMn_kipft == 0.0
    assert r.meets_min_steel is False
    assert r.is_valid is False


def test_high_strength_concrete_uses_reduced_beta1() -> None:
    r = evaluate(_section(fc_psi=8000.0))
    assert r.beta1 == 0.65
    assert r.c_in == pytest.approx(r.a_in / 0.65)
    r = evaluate(_section(fc_psi=6000.0))
    assert r.beta1 == pytest.approx(0.75)


def test_rho_max_is_three_quarters_of_balanced() -> None:
    r = evaluate(_section(fc_psi=5000.0, fy_psi=75000.0))
    assert r.rho_max == 0.75 * r.rho_balanced


def test_force_equilibrium() -> None:
    for b in (8.0, 12.0, 18.0):
        for fc in (3000.0, 4000.0, 6500.0, 9000.0):
            for fy in (40000.0, 60000.0, 80000.0):
                for As in (0.4, 2.0, 7.5):
                    r = evaluate(_section(b_in=b, fc_psi=fc, fy_psi=fy, As_in2=As))
                    assert r.a_in * 0.85 * fc * b == pytest.approx(As * fy, rel=1e-9)


def test_evaluate_is_deterministic() -> None:
    s = _section(fc_psi=5250.0, As_in2=4.74)
    r1 = evaluate(s)
    r2 = evaluate(s)
    assert r1 == r2
    assert r1.model_dump() == r2.model_dump()


def test_evaluate_accepts_mapping() -> None:
    r = evaluate({"b_in": 12, "h_in": 24, "d_in": 21.5, "fc_psi": 4000, "fy_psi": 60000, "As_in2": 3.16, "num_bars": 4})
    assert r == evaluate(_section())


def test_results_are_immutable() -> None:
    r = evaluate(_section())
    with pytest.raises(Exception):
        r.phi = 0.5  # type: ignore[misc]


@pytest.mark.parametrize(
    "overrides",
    [
        {"b_in": 0.0},
        {"d_in": 0.0},
        {"fc_psi": 0.0},
        {"fy_psi": -60000.0},
        {"h_in": -1.0},
        {"As_in2": -0.5},
        {"fc_psi": float("nan")},
        {"b_in": float("inf")},
        {"num_bars": 0},
    ],
)
def test_invalid_sections_are_rejected(overrides) -> None:
    with pytest.raises(InvalidInputError) as exc:
        evaluate(_section(**overrides))
    assert exc.value.problems
    assert isinstance(exc.value, ValueError)


def test_invalid_mapping_reports_every_problem() -> None:
    with pytest.raises(InvalidInputError) as exc:
        evaluate({"b_in": 0.0, "h_in": 24.0, "d_in": 0.0, "fc_psi": 4000.0, "fy_psi": 60000.0, "As_in2": 1.0})
    assert len(exc.value.problems) == 2


def test_malformed_mapping_is_invalid_input() -> None:
    with pytest.raises(InvalidInputError):
        evaluate({"b_in": "wide", "h_in": 24.0, "d_in": 21.5, "fc_psi": 4000.0, "fy_psi": 60000.0, "As_in2": 1.0})
    with pytest.raises(InvalidInputError):
        evaluate({"b_in": 12.0, "h_in": 24.0, "d_in": 21.5, "fc_psi": 4000.0, "fy_psi": 60000.0})
    with pytest.raises(InvalidInputError):
        evaluate({**_section().model_dump(), "cover_in": 1.5})


def test_trace_matches_result() -> None:
    tr = _trace()
    r = evaluate_with_trace(tr, _section())
    assert r == evaluate(_section())
    assert [s.id for s in tr.steps] == ["rho", "rho_min", "beta1", "rho_b", "rho_max", "a", "c", "eps_t", "phi", "Mn", "phiMn"]
    assert tr.step("phiMn").result_unrounded.value == r.phiMn_kipft
    assert tr.step("phiMn").result_rounded.value == pytest.approx(272.69, abs=0.005)
    assert tr.step("Mn").result_unrounded.units == "kip-ft"
    assert {i.id for i in tr.inputs} == {"b_in", "h_in", "d_in", "fc_psi", "fy_psi", "As_in2", "num_bars"}
    assert tr.summary.key_outputs["is_valid"] is True
    assert tr.summary.key_outputs["strain_condition"] == "tension-controlled"
    assert tr.summary.warnings == []


def test_trace_substitution_does_not_touch_latex_commands() -> None:
    tr = _trace()
    evaluate_with_trace(tr, _section())
    c_step = tr.step("c")
    assert "\\beta_1" not in c_step.substitution_latex
    assert "\\frac{" in c_step.substitution_latex
    assert "0.85" in c_step.substitution_latex
    a_step = tr.step("a")
    assert "3.16\\,\\mathrm{in^2}" in a_step.substitution_latex
    assert a_step.substitution_latex.startswith("a = ")


def test_trace_checks_and_warnings_for_deficient_section() -> None:
    tr = _trace()
    r = evaluate_with_trace(tr, _section(As_in2=0.10))
    assert r.is_valid is False
    min_check = tr.step("rho_min").checks[0]
    assert min_check.pass_fail == "FAIL"
    assert min_check.ratio > 1.0
    assert tr.summary.governing_checks[0]["label"] == "Minimum steel"
    assert any("minimum flexural reinforcement" in w for w in tr.summary.warnings)


def test_trace_flags_over_reinforced_section() -> None:
    tr = _trace()
    evaluate_with_trace(tr, _section(As_in2=20.0))
    assert tr.step("rho_max").checks[0].pass_fail == "FAIL"
    assert tr.step("eps_t").warnings
    assert tr.summary.governing_checks[0]["label"] == "Maximum steel (ductility)"
    assert any("over-reinforced" in w for w in tr.summary.warnings)
    assert any("compression-controlled" in w for w in tr.summary.warnings)


def test_moment_is_reported_in_kip_ft() -> None:
    s = _section()
    r = evaluate(s)
    lb_in = s.As_in2 * s.fy_psi * (s.d_in - r.a_in / 2.0)
    assert r.Mn_kipft == pytest.approx(lb_in / 12000.0)
    assert lb_in / 12.0 == pytest.approx(1000.0 * r.Mn_kipft)


def test_zero_steel_trace_is_strict_json() -> None:
    tr = _trace()
    r = evaluate_with_trace(tr, _section(As_in2=0.0))
    assert r.epsilon_t == math.inf
    assert tr.step("eps_t").result_unrounded.value == math.inf
    data = tr.to_json_dict()
    json.dumps(data, allow_nan=False)
    eps_step = next(s for s in data["steps"] if s["id"] == "eps_t")
    assert eps_step["result_unrounded"]["value"] is None
    assert eps_step["result_rounded"]["value"] is None
