"""Core physical model helpers."""

import math

import numpy as np

from .constants import (
    AVOGADRO,
    DPG_STANDARD_MOL_L,
    HB_BINDING_SITES,
    HB_PER_ERYTHROCYTE,
    HILL_ALPHA,
    HILL_BETA,
    HILL_GAMMA_MMHG,
    MAX_BLOOD_VOLUME_UM3,
    MEAN_CAPILLARY_LENGTH_UM,
    ML_PER_UM3,
    NUMBER_ALVEOLI,
    O2_MOLECULAR_WEIGHT,
    P50_STANDARD_MMHG,
    PCO2_STANDARD_MMHG,
    PERM_COEFFICIENT_O2,
    PH_RBC_STANDARD,
    TEMPERATURE_STANDARD_C,
    TOTAL_PARTICLES,
)


def compute_section_length_um(number_sections: int) -> float:
    return MEAN_CAPILLARY_LENGTH_UM / number_sections


def compute_section_volume_um3(number_sections: int) -> float:
    """Blood volume of one section, summed over the capillary network."""

    return MAX_BLOOD_VOLUME_UM3 / number_sections


def compute_residence_time_s(section_length_um: float, flow_velocity_mm_s: float) -> float:
    """Time blood spends in one section; infinite while flow is stopped."""

    velocity_um_s = flow_velocity_mm_s * 1000.0
    if velocity_um_s <= 0.0:
        return math.inf
    return section_length_um / velocity_um_s


def compute_transit_time_s(flow_velocity_mm_s: float, zero_flow_transit_time_s: float) -> float:
    """Time an erythrocyte needs to pass the whole capillary."""

    if flow_velocity_mm_s <= 0.0:
        return zero_flow_transit_time_s
    return MEAN_CAPILLARY_LENGTH_UM / (flow_velocity_mm_s * 1000.0)


def compute_max_diffusible_volume(gradient_mmhg: float, section_volume_um3: float, atmospheric_pressure: float) -> float:
    """Gas volume that would fully equalize the gradient in one section."""

    return gradient_mmhg * section_volume_um3 / atmospheric_pressure


def compute_fick_volume(
    section_area_um2: float,
    barrier_thickness_um: float,
    gradient_mmhg: float,
    residence_time_s: float,
) -> float:
    """O2 volume crossing the barrier during the residence time (Fick's law).

    nu = K_O2 * (s / tau) * dP, integrated over the residence time.
    """

    if gradient_mmhg == 0.0:
        return 0.0
    o2_flow_um3_s = PERM_COEFFICIENT_O2 * (section_area_um2 / barrier_thickness_um) * gradient_mmhg
    return o2_flow_um3_s * residence_time_s


def clamp_gain(gain: float, max_gain: float) -> float:
    """Cap a gain by the equalizing volume, then floor it at zero.

    Gas is never allowed to diffuse back against the modeled direction.
    """

    if gain > max_gain:
        gain = max_gain
    if gain < 0.0:
        gain = 0.0
    return gain


def compute_volume_per_particle(alveolar_gas_volume_um3: float, gas_ratio: float) -> float:
    """Gas volume represented by one visualization particle."""

    particle_count = gas_ratio * TOTAL_PARTICLES
    if not particle_count > 0.0:
        return math.inf
    return alveolar_gas_volume_um3 / particle_count


def compute_crossing_rates(
    gains_um3: np.ndarray,
    volume_per_particle_um3: float,
    residence_time_s: float,
    playback_slowdown: float,
) -> np.ndarray:
    """Convert per-section gains into particles per second."""

    if math.isinf(volume_per_particle_um3) or math.isinf(residence_time_s):
        return np.zeros_like(gains_um3)
    return (gains_um3 / volume_per_particle_um3) / (residence_time_s * playback_slowdown)


def hill_coefficient(po2_mmhg):
    """Hill coefficient for the given pO2 (scalar or array)."""

    return HILL_ALPHA - HILL_BETA * np.power(10.0, -(np.asarray(po2_mmhg, dtype=float) / HILL_GAMMA_MMHG))


def p50_ph_correction(ph_rbc: float) -> float:
    delta = ph_rbc - PH_RBC_STANDARD
    return P50_STANDARD_MMHG - 25.535 * delta + 10.646 * delta**2 - 1.764 * delta**3


def p50_dpg_correction(dpg_concentration_mol_l: float) -> float:
    delta = dpg_concentration_mol_l - DPG_STANDARD_MOL_L
    return P50_STANDARD_MMHG + 795.63 * delta - 19660.89 * delta**2


def p50_temperature_correction(temperature_c: float) -> float:
    delta = temperature_c - TEMPERATURE_STANDARD_C
    return P50_STANDARD_MMHG + 1.435 * delta + 0.04163 * delta**2 + 0.000686 * delta**3


def p50_pco2_correction(pco2_mmhg):
    delta = np.asarray(pco2_mmhg, dtype=float) - PCO2_STANDARD_MMHG
    return P50_STANDARD_MMHG + 0.1273 * delta + 0.0001083 * delta**2


def compute_p50(pco2_mmhg, ph_term: float, dpg_term: float, temperature_term: float):
    """Combine the correction polynomials into P50 (Dash et al., 2016)."""

    return (
        P50_STANDARD_MMHG
        * (ph_term / P50_STANDARD_MMHG)
        * (p50_pco2_correction(pco2_mmhg) / P50_STANDARD_MMHG)
        * (dpg_term / P50_STANDARD_MMHG)
        * (temperature_term / P50_STANDARD_MMHG)
    )


def hill_saturation(po2_mmhg, p50_mmhg):
    """HbO2 saturation S = x / (1 + x) with x = (pO2 / P50) ** nH."""

    po2 = np.clip(np.asarray(po2_mmhg, dtype=float), 0.0, None)
    x = np.power(po2 / p50_mmhg, hill_coefficient(po2))
    return x / (1.0 + x)


def compute_o2_uptake_mass_ng(saturation_delta: float, capillary_count: float) -> float:
    """Mass of O2 bound by the blood of all capillaries for one saturation step."""

    molecules = capillary_count * HB_PER_ERYTHROCYTE * (HB_BINDING_SITES * saturation_delta)
    moles = molecules / AVOGADRO
    return moles * O2_MOLECULAR_WEIGHT * 1e9


def compute_half_saturation_time_s(saturation, residence_time_s: float) -> float:
    """Reaction half-time: time until half of the capillary's saturation rise is complete.

    The first section whose saturation exceeds the midpoint between entry and
    exit saturation marks the half-time; if none does, the result is 0.
    """

    saturation = np.asarray(saturation, dtype=float)
    half = saturation[0] + (saturation[-1] - saturation[0]) / 2.0
    above = np.flatnonzero(saturation > half)
    if above.size == 0 or above[0] == 0:
        return 0.0
    return float(above[0]) * residence_time_s


def compute_diffusing_capacity(
    o2_uptake_volume_um3: float,
    simulation_time_s: float,
    alveolar_po2_mmhg: float,
    mean_capillary_po2_mmhg: float,
) -> float:
    """Lung diffusing capacity for O2 [ml/(mmHg*min)] extrapolated from one alveolus.

    DLO2 = (uptake volume * alveoli in the lung / minutes) / mean pO2 gradient.
    No elapsed time or no gradient gives 0.
    """

    gradient_mmhg = alveolar_po2_mmhg - mean_capillary_po2_mmhg
    if simulation_time_s <= 0.0 or gradient_mmhg == 0.0:
        return 0.0
    uptake_ml = o2_uptake_volume_um3 * NUMBER_ALVEOLI * ML_PER_UM3
    return (uptake_ml / (simulation_time_s / 60.0)) / gradient_mmhg
