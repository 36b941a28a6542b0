"""Hemoglobin oxygen saturation along the capillary (Dash et al., 2016)."""

from dataclasses import dataclass
import logging

import numpy as np

from .constants import DPG_STANDARD_MOL_L, PH_RBC_STANDARD, TEMPERATURE_STANDARD_C
from .errors import ConfigurationError, ContractViolation
from .model import (
    compute_p50,
    hill_saturation,
    p50_dpg_correction,
    p50_ph_correction,
    p50_temperature_correction,
)
from .params import ParameterValues
from .results import freeze_array

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BloodChemistry:
    ph_rbc: float = PH_RBC_STANDARD
    dpg_concentration: float = DPG_STANDARD_MOL_L
    temperature: float = TEMPERATURE_STANDARD_C

    @classmethod
    def from_parameters(cls, values: ParameterValues) -> "BloodChemistry":
        return cls(
            ph_rbc=values.ph_rbc,
            dpg_concentration=values.dpg_concentration,
            temperature=values.blood_temperature,
        )


class HbSaturationModel:
    """Hill-equation saturation with P50 shifted by blood chemistry.

    The pH, DPG and temperature corrections to P50 only change when their
    own input changes, so each is cached together with the input it was
    computed from. The pCO2 correction varies per section and is evaluated
    on every call.
    """

    def __init__(self, chemistry: BloodChemistry | None = None) -> None:
        chemistry = chemistry if chemistry is not None else BloodChemistry()
        self._ph_rbc = chemistry.ph_rbc
        self._dpg_concentration = chemistry.dpg_concentration
        self._temperature = chemistry.temperature
        self._p50_delta_ph = p50_ph_correction(self._ph_rbc)
        self._p50_delta_dpg = p50_dpg_correction(self._dpg_concentration)
        self._p50_delta_t = p50_temperature_correction(self._temperature)

    @property
    def chemistry(self) -> BloodChemistry:
        return BloodChemistry(self._ph_rbc, self._dpg_concentration, self._temperature)

    @property
    def p50_delta_ph(self) -> float:
        return self._p50_delta_ph

    @property
    def p50_delta_dpg(self) -> float:
        return self._p50_delta_dpg

    @property
    def p50_delta_temperature(self) -> float:
        return self._p50_delta_t

    def update_chemistry(self, chemistry: BloodChemistry) -> bool:
        """Refresh only the corrections whose input changed; return whether any did."""

        changed = False
        if chemistry.ph_rbc != self._ph_rbc:
            self._ph_rbc = chemistry.ph_rbc
            self._p50_delta_ph = p50_ph_correction(self._ph_rbc)
            changed = True
        if chemistry.dpg_concentration != self._dpg_concentration:
            self._dpg_concentration = chemistry.dpg_concentration
            self._p50_delta_dpg = p50_dpg_correction(self._dpg_concentration)
            changed = True
        if chemistry.temperature != self._temperature:
            self._temperature = chemistry.temperature
            self._p50_delta_t = p50_temperature_correction(self._temperature)
            changed = True
        if changed:
            logger.debug("P50 corrections refreshed for %s", chemistry)
        return changed

    def p50(self, pco2):
        """P50 [mmHg] at ``pco2``; raises ConfigurationError if the chemistry gives no positive P50."""

        terms = (self._p50_delta_ph, self._p50_delta_dpg, self._p50_delta_t)
        if min(terms) <= 0.0:
            raise ConfigurationError(
                "blood chemistry gives a non-positive P50 correction: "
                f"pH term {terms[0]:g}, DPG term {terms[1]:g}, temperature term {terms[2]:g} mmHg"
            )
        p50 = compute_p50(pco2, *terms)
        if not np.all(p50 > 0.0):
            raise ConfigurationError(f"P50 must be > 0 mmHg, got minimum {np.min(p50):g}")
        return p50

    def saturation_at(self, po2, pco2):
        """Saturation for scalar or array pressures; scalars give a float."""

        saturation = hill_saturation(po2, self.p50(pco2))
        if np.ndim(saturation) == 0:
            return float(saturation)
        return saturation

    def recompute(
        self,
        po2,
        pco2,
        chemistry: BloodChemistry | None = None,
        expected_length: int | None = None,
    ) -> np.ndarray:
        """Saturation for each section from its O2 and CO2 partial pressures.

        With ``expected_length`` both arrays must also have exactly that many
        sections.
        """

        po2 = np.asarray(po2, dtype=float)
        pco2 = np.asarray(pco2, dtype=float)
        if po2.shape != pco2.shape or po2.ndim != 1:
            raise ContractViolation(
                f"Input arrays are different size: pO2 is size {po2.size}, pCO2 is size {pco2.size}"
            )
        if expected_length is not None and po2.size != expected_length:
            raise ContractViolation(
                f"Input arrays do not match the capillary: expected {expected_length} sections, got {po2.size}"
            )
        if chemistry is not None:
            self.update_chemistry(chemistry)
        return freeze_array(hill_saturation(po2, self.p50(pco2)))

    def evaluate_curve(
        self,
        pco2: float,
        po2_min: float,
        po2_max: float,
        num_points: int,
    ) -> tuple[np.ndarray, np.ndarray]:
        """Sample the oxygen dissociation curve at a fixed pCO2.

        Returns ``num_points`` evenly spaced pO2 values from ``po2_min`` to
        ``po2_max`` (both inclusive) and the saturation at each of them.
        """

        if po2_min > po2_max:
            raise ValueError(
                f"Range minimum must not be greater than maximum: po2_min is {po2_min}, po2_max is {po2_max}"
            )
        if int(num_points) != num_points:
            raise ValueError(f"num_points must be an integer, got {num_points}")
        if num_points < 2:
            raise ValueError(f"num_points is {num_points}, must be at least 2")

        po2 = np.linspace(po2_min, po2_max, int(num_points))
        # Pin both ends to the requested bounds.
        po2[0] = po2_min
        po2[-1] = po2_max
        saturation = hill_saturation(po2, self.p50(pco2))
        return freeze_array(po2), freeze_array(saturation)
