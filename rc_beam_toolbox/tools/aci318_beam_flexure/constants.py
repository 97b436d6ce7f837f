from __future__ import annotations

TOOL_ID = "aci318_beam_flexure"
TOOL_VERSION = "1.0.0"
REPORT_VERSION = "1.0.0"
CODE_BASIS = "ACI 318-14"
UNITS_SYSTEM = "US"

# Materials
ES_PSI = 29_000_000.0
EPS_CU = 0.003  # ultimate concrete strain, 22.2.2.1

# Stress block (22.2.2.4.3)
ALPHA1 = 0.85
BETA1_MAX = 0.85
BETA1_MIN = 0.65
BETA1_FC_LOW_PSI = 4000.0
BETA1_FC_HIGH_PSI = 8000.0

# Minimum flexural steel (9.6.1.2)
RHO_MIN_SQRT_COEF = 3.0
RHO_MIN_FLOOR_PSI = 200.0

# Ductility cap on reinforcement
RHO_MAX_FRACTION = 0.75

# Strength reduction factor (21.2.2)
EPS_T_TENSION_CONTROLLED = 0.005
EPS_T_COMPRESSION_CONTROLLED = 0.002
PHI_TENSION = 0.90
PHI_COMPRESSION = 0.65

LBIN_PER_KIPFT = 12_000.0
