"""Partial pressure diffusion along the discretized capillary."""

import logging

from .constants import (
    ALVEOLAR_CO2_VOLUME_UM3,
    ALVEOLAR_O2_VOLUME_UM3,
    DEFAULT_NUMBER_SECTIONS,
    DEFAULT_PLAYBACK_SLOWDOWN,
    RESPIRATORY_QUOTIENT,
)
from .errors import ConfigurationError
from .model import (
    clamp_gain,
    compute_crossing_rates,
    compute_fick_volume,
    compute_max_diffusible_volume,
    compute_residence_time_s,
    compute_section_length_um,
    compute_section_volume_um3,
    compute_volume_per_particle,
)
from .params import ParameterValues, validate_parameters
from .results import SectionArrays, freeze_array

logger = logging.getLogger(__name__)


def _scan_partial_pressures(
    values: ParameterValues,
    number_sections: int,
    section_volume_um3: float,
    section_area_um2: float,
    residence_time_s: float,
) -> tuple[list[float], list[float], list[float], list[float]]:
    """Sequential section-by-section diffusion; section i+1 starts where section i ends."""

    atm = values.atmospheric_pressure
    p_o2 = [0.0 for _ in range(number_sections)]
    p_co2 = [0.0 for _ in range(number_sections)]
    gain_o2 = [0.0 for _ in range(number_sections)]
    gain_co2 = [0.0 for _ in range(number_sections)]
    p_o2[0] = values.blood_po2
    p_co2[0] = values.blood_pco2

    for seg in range(number_sections):
        delta_po2 = values.alveolar_po2 - p_o2[seg]
        delta_pco2 = p_co2[seg] - values.alveolar_pco2
        max_o2 = compute_max_diffusible_volume(delta_po2, section_volume_um3, atm)
        max_co2 = compute_max_diffusible_volume(delta_pco2, section_volume_um3, atm)

        fick_o2 = compute_fick_volume(section_area_um2, values.barrier_thickness, delta_po2, residence_time_s)
        # CO2 release follows the O2 flow through the respiratory quotient.
        seg_gain_o2 = clamp_gain(fick_o2, max_o2)
        seg_gain_co2 = clamp_gain(fick_o2 * RESPIRATORY_QUOTIENT, max_co2)
        gain_o2[seg] = seg_gain_o2
        gain_co2[seg] = seg_gain_co2

        if seg + 1 < number_sections:
            p_o2[seg + 1] = p_o2[seg] + (seg_gain_o2 / section_volume_um3) * atm
            p_co2[seg + 1] = p_co2[seg] - (seg_gain_co2 / section_volume_um3) * atm

    return p_o2, p_co2, gain_o2, gain_co2


class PartialPressureSolver:
    """Computes per-section O2/CO2 partial pressures from a parameter snapshot.

    Blood enters section 0 with the venous partial pressures. In every
    section the alveolar-capillary gradient drives an O2 volume through the
    tissue barrier for as long as the blood resides there; the resulting
    pressure is handed to the next section. CO2 leaves the blood in
    proportion to the O2 taken up.
    """

    def __init__(
        self,
        number_sections: int = DEFAULT_NUMBER_SECTIONS,
        playback_slowdown: float = DEFAULT_PLAYBACK_SLOWDOWN,
    ) -> None:
        self.number_sections = number_sections
        if playback_slowdown <= 0.0:
            raise ValueError("playback_slowdown must be > 0")
        self.playback_slowdown = playback_slowdown

    @property
    def number_sections(self) -> int:
        return self._number_sections

    @number_sections.setter
    def number_sections(self, value: int) -> None:
        if int(value) != value or value < 1:
            raise ConfigurationError(f"number_sections must be an integer >= 1, got {value}")
        self._number_sections = int(value)

    def recompute(self, values: ParameterValues) -> SectionArrays:
        """Run the pressure scan and return freshly allocated section arrays."""

        validate_parameters(values)

        n = self._number_sections
        section_length_um = compute_section_length_um(n)
        section_volume_um3 = compute_section_volume_um3(n)
        section_area_um2 = values.surface_area / n
        residence_time_s = compute_residence_time_s(section_length_um, values.blood_flow_velocity)

        p_o2, p_co2, gain_o2, gain_co2 = _scan_partial_pressures(
            values=values,
            number_sections=n,
            section_volume_um3=section_volume_um3,
            section_area_um2=section_area_um2,
            residence_time_s=residence_time_s,
        )

        volume_per_particle_o2 = compute_volume_per_particle(ALVEOLAR_O2_VOLUME_UM3, values.oxygen_ratio)
        volume_per_particle_co2 = compute_volume_per_particle(ALVEOLAR_CO2_VOLUME_UM3, values.co2_ratio)
        o2_gain_volume = freeze_array(gain_o2)
        co2_gain_volume = freeze_array(gain_co2)
        crossing_o2 = compute_crossing_rates(
            o2_gain_volume, volume_per_particle_o2, residence_time_s, self.playback_slowdown
        )
        crossing_co2 = compute_crossing_rates(
            co2_gain_volume, volume_per_particle_co2, residence_time_s, self.playback_slowdown
        )

        logger.debug(
            "pressure scan: %d sections, pO2 %.3f -> %.3f mmHg, pCO2 %.3f -> %.3f mmHg",
            n,
            p_o2[0],
            p_o2[-1],
            p_co2[0],
            p_co2[-1],
        )

        metadata = {
            "number_sections": n,
            "section_length_um": section_length_um,
            "section_volume_um3": section_volume_um3,
            "section_area_um2": section_area_um2,
            "volume_per_particle_o2_um3": volume_per_particle_o2,
            "volume_per_particle_co2_um3": volume_per_particle_co2,
            "playback_slowdown": self.playback_slowdown,
        }
        return SectionArrays(
            o2_partial_pressure=freeze_array(p_o2),
            co2_partial_pressure=freeze_array(p_co2),
            o2_gain_volume=o2_gain_volume,
            co2_gain_volume=co2_gain_volume,
            crossing_rate_o2=freeze_array(crossing_o2),
            crossing_rate_co2=freeze_array(crossing_co2),
            residence_time_s=residence_time_s,
            metadata=metadata,
        )
