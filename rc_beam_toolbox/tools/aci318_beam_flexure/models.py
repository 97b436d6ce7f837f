from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, confloat

from .bar_table import total_steel_area
from .flexure import StrainCondition

BarSizeNumber = Literal[3, 4, 5, 6, 7, 8, 9, 10, 11, 14, 18]


class BeamSection(BaseModel):
    """
    Singly reinforced rectangular section, as handed to the capacity engine.
    Units are US customary (in, psi).

    Ranges are not enforced here; `evaluate` checks them and raises InvalidInputError.
    d < h is expected but only reported through BeamCapacityResult.is_valid.
    """
    model_config = ConfigDict(extra="forbid", frozen=True)

    b_in: float = Field(..., description="Beam width b", json_schema_extra={"units": "in"})
    h_in: float = Field(..., description="Total depth h", json_schema_extra={"units": "in"})
    d_in: float = Field(..., description="Effective depth d", json_schema_extra={"units": "in"})
    fc_psi: float = Field(..., description="Specified concrete compressive strength f'c", json_schema_extra={"units": "psi"})
    fy_psi: float = Field(..., description="Steel yield strength fy", json_schema_extra={"units": "psi"})
    As_in2: float = Field(..., description="Tension reinforcement area As", json_schema_extra={"units": "in^2"})
    num_bars: int = Field(1, description="Number of tension bars (display only)")


class BeamCapacityResult(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    # Reinforcement ratios
    rho: float
    rho_min: float
    rho_max: float
    rho_balanced: float

    # Stress block / neutral axis
    beta1: float
    a_in: float
    c_in: float

    # Capacity
    Mn_kipft: float
    phiMn_kipft: float
    phi: float
    strain_condition: StrainCondition

    # Checks
    is_under_reinforced: bool
    meets_min_steel: bool
    is_valid: bool

    # Strains
    epsilon_t: float
    epsilon_c: float


class BeamFlexureInputs(BaseModel):
    """
    Beam properties form: rectangular singly reinforced beam, flexure only.
    Steel area is derived from the bar size and count.
    Units are US customary (in, psi, kip-ft).
    """
    model_config = ConfigDict(extra="forbid")

    # Geometry
    b_in: confloat(gt=0) = Field(12.0, description="Beam width b", json_schema_extra={"units": "in"})
    h_in: confloat(gt=0) = Field(24.0, description="Total depth h", json_schema_extra={"units": "in"})
    d_in: confloat(gt=0) = Field(21.5, description="Effective depth d (h minus cover to bar centroid)", json_schema_extra={"units": "in"})

    # Materials
    fc_psi: confloat(gt=0) = Field(4000.0, description="Specified concrete compressive strength f'c", json_schema_extra={"units": "psi"})
    fy_psi: confloat(gt=0) = Field(60000.0, description="Steel yield strength fy", json_schema_extra={"units": "psi"})

    # Reinforcement
    bar_size: BarSizeNumber = Field(8, description="Tension bar size (#)")
    num_bars: int = Field(4, ge=1, description="Number of tension bars")

    def to_section(self) -> BeamSection:
        return BeamSection(
            b_in=self.b_in,
            h_in=self.h_in,
            d_in=self.d_in,
            fc_psi=self.fc_psi,
            fy_psi=self.fy_psi,
            As_in2=total_steel_area(self.bar_size, self.num_bars),
            num_bars=self.num_bars,
        )
