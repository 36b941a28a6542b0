"""Physiological and numerical constants for the alveolar gas exchange model.

Units follow the rest of the package: lengths in µm, volumes in µm³,
pressures in mmHg, velocities in mm/s, masses in ng.
"""

# Capillary geometry.

# Mean length of the capillary path around an alveolus [µm] (Weibel et al., 1993)
MEAN_CAPILLARY_LENGTH_UM = 500.0

# Blood volume of the fully recruited capillary network around an alveolus [µm³]
MAX_BLOOD_VOLUME_UM3 = 808000.0

# Number of capillaries surrounding one alveolus
NUMBER_CAPILLARIES = 52.0

# Default discretization of the representative capillary
DEFAULT_NUMBER_SECTIONS = 50

# Gas properties.

# Water vapour pressure in alveolar air [mmHg]
WATER_VAPOUR_PRESSURE_MMHG = 45.0

# Krogh's permeability coefficient for oxygen [µm²/(s*mmHg)] (Weibel et al., 1993)
PERM_COEFFICIENT_O2 = 0.055

# Respiratory exchange ratio, CO2 produced per O2 consumed (Sharma et al., 2020)
RESPIRATORY_QUOTIENT = 0.82

# Hemoglobin dissociation (Dash et al., 2016).

HILL_ALPHA = 2.82
HILL_BETA = 1.2
HILL_GAMMA_MMHG = 29.25

# pO2 at 50 % saturation under standard pCO2, pH, [DPG] and temperature [mmHg]
P50_STANDARD_MMHG = 26.8

PCO2_STANDARD_MMHG = 40.0
PH_RBC_STANDARD = 7.24
DPG_STANDARD_MOL_L = 0.00465
TEMPERATURE_STANDARD_C = 37.0

# Oxygen uptake accounting.

# Hemoglobin molecules per erythrocyte (Pierigè et al., 2008)
HB_PER_ERYTHROCYTE = 270_000_000

# O2 binding sites per hemoglobin molecule
HB_BINDING_SITES = 4

# Molecular weight of O2 [g/mol]
O2_MOLECULAR_WEIGHT = 31.9988

AVOGADRO = 6.022e23

# Specific volume of O2 at 37 °C and 1 bar, converted from [m³/kg] to [µm³/ng]
O2_SPECIFIC_VOLUME_UM3_PER_NG = 1.0 / 1.237 * 1e6

# Transit time reported while blood flow is stopped [s]
ZERO_FLOW_TRANSIT_TIME_S = 1000.0

# Visualization particles.

# Number of gas particles representing the alveolar gas content
TOTAL_PARTICLES = 15000

# O2 and CO2 volume in a mean alveolus (4.2e6 µm³, Ochs et al., 2004) at
# default alveolar partial pressures and 760 mmHg [µm³]
ALVEOLAR_O2_VOLUME_UM3 = 552631.57
ALVEOLAR_CO2_VOLUME_UM3 = 221052.63

# Real-time playback; the interactive application slowed blood flow down 40x
DEFAULT_PLAYBACK_SLOWDOWN = 1.0

# Range of the dissociation curve offered to graphs [mmHg]
DISSOCIATION_CURVE_PO2_MIN = 0.0
DISSOCIATION_CURVE_PO2_MAX = 150.0

# Whole-lung extrapolation.

# Number of alveoli in the human lung (Ochs et al., 2004)
NUMBER_ALVEOLI = 480_000_000

# Conversion from µm³ to ml
ML_PER_UM3 = 1e-12
