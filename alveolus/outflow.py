"""Oxygen uptake of erythrocytes leaving the capillary."""

import logging

from .constants import NUMBER_CAPILLARIES, O2_SPECIFIC_VOLUME_UM3_PER_NG, ZERO_FLOW_TRANSIT_TIME_S
from .model import compute_o2_uptake_mass_ng, compute_transit_time_s

logger = logging.getLogger(__name__)


class ErythrocyteTracker:
    """Saturation history of one simulated red blood cell.

    The cell takes the saturation of section 0 on entry and the saturation
    of whichever section it currently occupies afterwards.
    """

    def __init__(self, entry_saturation: float) -> None:
        self.entry_saturation = float(entry_saturation)
        self.saturation = self.entry_saturation
        self.section = 0

    def enter_section(self, section: int, saturations) -> None:
        if not 0 <= section < len(saturations):
            raise IndexError(f"section {section} outside capillary with {len(saturations)} sections")
        self.section = section
        self.saturation = float(saturations[section])

    @property
    def saturation_delta(self) -> float:
        return max(0.0, self.saturation - self.entry_saturation)


class OutflowAggregator:
    """Accumulates O2 uptake and tracks capillary transit time.

    Every erythrocyte arriving at the end of the representative capillary
    reports how much its saturation rose on the way. That rise is
    extrapolated to all capillaries around the alveolus and converted to a
    mass and volume of O2, which add up until ``reset``.
    """

    def __init__(
        self,
        capillary_count: float = NUMBER_CAPILLARIES,
        zero_flow_transit_time_s: float = ZERO_FLOW_TRANSIT_TIME_S,
    ) -> None:
        self.capillary_count = capillary_count
        self.zero_flow_transit_time_s = zero_flow_transit_time_s
        self._flow_velocity: float | None = None
        self.blood_transit_time = zero_flow_transit_time_s
        self.o2_uptake_total_mass = 0.0
        self.o2_uptake_total_volume = 0.0
        self.last_saturation_delta = 0.0
        self.last_uptake_mass = 0.0
        self.transit_count = 0

    def reset(self) -> None:
        """Zero accumulated uptake; transit time is left as is."""

        self.o2_uptake_total_mass = 0.0
        self.o2_uptake_total_volume = 0.0
        self.last_saturation_delta = 0.0
        self.last_uptake_mass = 0.0
        self.transit_count = 0

    def update_flow_velocity(self, flow_velocity_mm_s: float) -> bool:
        """Recompute transit time if the velocity changed; return whether it did."""

        if flow_velocity_mm_s == self._flow_velocity:
            return False
        self._flow_velocity = flow_velocity_mm_s
        self.blood_transit_time = compute_transit_time_s(flow_velocity_mm_s, self.zero_flow_transit_time_s)
        return True

    def on_erythrocyte_transit_complete(self, saturation_delta: float) -> float:
        """Add the uptake of one erythrocyte and return the mass added [ng]."""

        # Discretization can make the delta slightly negative.
        delta = max(0.0, float(saturation_delta))
        mass_ng = compute_o2_uptake_mass_ng(delta, self.capillary_count)
        self.last_saturation_delta = delta
        self.last_uptake_mass = mass_ng
        self.o2_uptake_total_mass += mass_ng
        self.o2_uptake_total_volume = self.o2_uptake_total_mass * O2_SPECIFIC_VOLUME_UM3_PER_NG
        self.transit_count += 1
        logger.debug("transit %d: dS=%.5f, +%.6g ng O2", self.transit_count, delta, mass_ng)
        return mass_ng
