from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

from .constants import (
    ALPHA1,
    BETA1_FC_HIGH_PSI,
    BETA1_FC_LOW_PSI,
    BETA1_MAX,
    BETA1_MIN,
    EPS_CU,
    EPS_T_COMPRESSION_CONTROLLED,
    EPS_T_TENSION_CONTROLLED,
    ES_PSI,
    PHI_COMPRESSION,
    PHI_TENSION,
    RHO_MAX_FRACTION,
    RHO_MIN_FLOOR_PSI,
    RHO_MIN_SQRT_COEF,
)


class StrainCondition(str, Enum):
    TENSION_CONTROLLED = "tension-controlled"
    TRANSITION = "transition"
    COMPRESSION_CONTROLLED = "compression-controlled"

    @property
    def label(self) -> str:
        return {
            StrainCondition.TENSION_CONTROLLED: "Tension-controlled",
            StrainCondition.TRANSITION: "Transition zone",
            StrainCondition.COMPRESSION_CONTROLLED: "Compression-controlled",
        }[self]


@dataclass(frozen=True)
class ReinforcementLimits:
    rho_min: float
    rho_balanced: float
    rho_max: float


def resolve_beta1(fc_psi: float) -> float:
    """
    Table 22.2.2.4.3 - beta1 as a function of f'c.
    Linear between 0.85 at 4000 psi and 0.65 at 8000 psi; both ends inclusive.
    """
    if fc_psi <= BETA1_FC_LOW_PSI:
        return BETA1_MAX
    if fc_psi >= BETA1_FC_HIGH_PSI:
        return BETA1_MIN
    span = BETA1_FC_HIGH_PSI - BETA1_FC_LOW_PSI
    return BETA1_MAX - ((fc_psi - BETA1_FC_LOW_PSI) / span) * (BETA1_MAX - BETA1_MIN)


def steel_yield_strain(fy_psi: float) -> float:
    return fy_psi / ES_PSI


def rho_min(fc_psi: float, fy_psi: float) -> float:
    """9.6.1.2 - larger of 3*sqrt(f'c)/fy and 200/fy."""
    return max(RHO_MIN_SQRT_COEF * math.sqrt(fc_psi) / fy_psi, RHO_MIN_FLOOR_PSI / fy_psi)


def rho_balanced(fc_psi: float, fy_psi: float) -> float:
    """Steel ratio at which concrete crushing and steel yield occur together."""
    beta1 = resolve_beta1(fc_psi)
    eps_y = steel_yield_strain(fy_psi)
    return (ALPHA1 * fc_psi * beta1 / fy_psi) * (EPS_CU / (EPS_CU + eps_y))


def rho_max(fc_psi: float, fy_psi: float) -> float:
    return RHO_MAX_FRACTION * rho_balanced(fc_psi, fy_psi)


def reinforcement_limits(fc_psi: float, fy_psi: float) -> ReinforcementLimits:
    rho_b = rho_balanced(fc_psi, fy_psi)
    return ReinforcementLimits(
        rho_min=rho_min(fc_psi, fy_psi),
        rho_balanced=rho_b,
        rho_max=RHO_MAX_FRACTION * rho_b,
    )


def tensile_strain(c_in: float, d_in: float) -> float:
    """Net tensile strain at the steel centroid from the linear strain diagram.

    c = 0 means no compression zone (no steel); the strain is unbounded.
    """
    if c_in == 0.0:
        return math.inf
    return EPS_CU * (d_in - c_in) / c_in


def phi_from_strain(eps_t: float) -> float:
    """Table 21.2.2 - phi for members with other than spiral transverse reinforcement."""
    if eps_t >= EPS_T_TENSION_CONTROLLED:
        return PHI_TENSION
    if eps_t <= EPS_T_COMPRESSION_CONTROLLED:
        return PHI_COMPRESSION
    span = EPS_T_TENSION_CONTROLLED - EPS_T_COMPRESSION_CONTROLLED
    return PHI_COMPRESSION + (eps_t - EPS_T_COMPRESSION_CONTROLLED) / span * (PHI_TENSION - PHI_COMPRESSION)


def classify_strain(eps_t: float) -> StrainCondition:
    if eps_t >= EPS_T_TENSION_CONTROLLED:
        return StrainCondition.TENSION_CONTROLLED
    if eps_t <= EPS_T_COMPRESSION_CONTROLLED:
        return StrainCondition.COMPRESSION_CONTROLLED
    return StrainCondition.TRANSITION
