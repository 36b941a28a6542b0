"""Recalculation of the gas exchange stages for one simulation instance."""

from enum import Enum
import logging

import numpy as np
import pandas as pd

from .constants import (
    DEFAULT_NUMBER_SECTIONS,
    DEFAULT_PLAYBACK_SLOWDOWN,
    DISSOCIATION_CURVE_PO2_MAX,
    DISSOCIATION_CURVE_PO2_MIN,
    ZERO_FLOW_TRANSIT_TIME_S,
)
from .errors import ConfigurationError
from .events import Listener, Notifier
from .model import compute_diffusing_capacity, compute_half_saturation_time_s
from .outflow import ErythrocyteTracker, OutflowAggregator
from .params import ParameterSet, ParameterValues
from .results import CapillaryProfile
from .saturation import BloodChemistry, HbSaturationModel
from .solver import PartialPressureSolver

logger = logging.getLogger(__name__)


class OrchestratorState(Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"


class RecalculationOrchestrator:
    """Owns the pipeline stages of one simulation instance and keeps them in step.

    Lifecycle:
    - ``reset(parameters)`` binds a ParameterSet, computes baseline arrays,
      clears the outflow totals and moves to READY.
    - While READY every parameter edit reruns the pressure solver and then
      the saturation model, publishes the new profile in one assignment and
      notifies ``recomputed`` subscribers.
    - Erythrocyte transit events only touch the outflow aggregator and
      notify ``outflow`` subscribers.
    - ``dispose()`` unsubscribes from the ParameterSet, drops all
      subscribers and returns to UNINITIALIZED.

    A recompute that fails validation raises and leaves the previously
    published profile in place without notifying anyone.
    """

    def __init__(
        self,
        number_sections: int = DEFAULT_NUMBER_SECTIONS,
        playback_slowdown: float = DEFAULT_PLAYBACK_SLOWDOWN,
        zero_flow_transit_time_s: float = ZERO_FLOW_TRANSIT_TIME_S,
    ) -> None:
        self.solver = PartialPressureSolver(number_sections=number_sections, playback_slowdown=playback_slowdown)
        self.saturation_model = HbSaturationModel()
        self.outflow_aggregator = OutflowAggregator(zero_flow_transit_time_s=zero_flow_transit_time_s)
        self.state = OrchestratorState.UNINITIALIZED
        self._parameters: ParameterSet | None = None
        self._profile: CapillaryProfile | None = None
        self._recomputed = Notifier()
        self._outflow_updated = Notifier()

    def __enter__(self) -> "RecalculationOrchestrator":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.dispose()

    @property
    def is_ready(self) -> bool:
        return self.state is OrchestratorState.READY

    @property
    def parameters(self) -> ParameterSet | None:
        return self._parameters

    # Lifecycle

    def reset(self, parameters: ParameterSet | None = None) -> None:
        """Bind to ``parameters`` (or keep the current set) and establish baseline arrays."""

        if parameters is None:
            parameters = self._parameters if self._parameters is not None else ParameterSet()
        self._unbind()
        self._parameters = parameters
        try:
            self._profile = self._compute_profile(parameters.snapshot())
        except ConfigurationError:
            logger.warning("reset rejected, orchestrator stays uninitialized", exc_info=True)
            self._parameters = None
            self._profile = None
            self.state = OrchestratorState.UNINITIALIZED
            raise
        parameters.add_observer(self)
        self.outflow_aggregator.reset()
        self.state = OrchestratorState.READY
        logger.debug("reset complete with %d sections", self.solver.number_sections)
        self._recomputed.notify()
        self._outflow_updated.notify()

    def dispose(self) -> None:
        """Release the ParameterSet and all subscribers."""

        self._unbind()
        self._parameters = None
        self._profile = None
        self._recomputed.clear()
        self._outflow_updated.clear()
        self.state = OrchestratorState.UNINITIALIZED

    def _unbind(self) -> None:
        if self._parameters is not None:
            self._parameters.remove_observer(self)

    # Recalculation

    def on_parameters_changed(self) -> None:
        if not self.is_ready:
            return
        self.recompute()

    def recompute(self) -> None:
        """Rerun solver and saturation model for the current parameters."""

        self._require_ready()
        try:
            profile = self._compute_profile(self._parameters.snapshot())
        except ConfigurationError as exc:
            logger.warning("recompute rejected, keeping previous profile: %s", exc)
            raise
        self._profile = profile
        self._recomputed.notify()

    def set_number_sections(self, number_sections: int) -> None:
        """Change the capillary discretization; arrays are rebuilt at the new size."""

        self.solver.number_sections = number_sections
        if self.is_ready:
            self.recompute()

    def _compute_profile(self, values: ParameterValues) -> CapillaryProfile:
        sections = self.solver.recompute(values)
        saturation = self.saturation_model.recompute(
            sections.o2_partial_pressure,
            sections.co2_partial_pressure,
            BloodChemistry.from_parameters(values),
            expected_length=self.solver.number_sections,
        )
        self.outflow_aggregator.capillary_count = values.number_capillaries
        self.outflow_aggregator.update_flow_velocity(values.blood_flow_velocity)
        return CapillaryProfile(sections=sections, hb_o2_saturation=saturation)

    # Erythrocyte transit

    def track_erythrocyte(self) -> ErythrocyteTracker:
        """Start following a cell entering the capillary at section 0."""

        return ErythrocyteTracker(self.hb_o2_saturation[0])

    def advance_erythrocyte(self, tracker: ErythrocyteTracker, section: int) -> None:
        tracker.enter_section(section, self.hb_o2_saturation)

    def complete_erythrocyte_transit(self, tracker: ErythrocyteTracker) -> float:
        return self.on_erythrocyte_transit_complete(tracker.saturation_delta)

    def on_erythrocyte_transit_complete(self, saturation_delta: float) -> float:
        self._require_ready()
        mass_ng = self.outflow_aggregator.on_erythrocyte_transit_complete(saturation_delta)
        self._outflow_updated.notify()
        return mass_ng

    # Subscriptions

    def subscribe(self, listener: Listener) -> None:
        """Be called after every completed recompute."""

        self._recomputed.subscribe(listener)

    def unsubscribe(self, listener: Listener) -> None:
        self._recomputed.unsubscribe(listener)

    def subscribe_outflow(self, listener: Listener) -> None:
        self._outflow_updated.subscribe(listener)

    def unsubscribe_outflow(self, listener: Listener) -> None:
        self._outflow_updated.unsubscribe(listener)

    # Read accessors

    def _require_ready(self) -> None:
        if not self.is_ready:
            raise RuntimeError("orchestrator is not ready; call reset() first")

    @property
    def profile(self) -> CapillaryProfile:
        self._require_ready()
        return self._profile

    @property
    def o2_partial_pressures(self) -> np.ndarray:
        return self.profile.sections.o2_partial_pressure

    @property
    def co2_partial_pressures(self) -> np.ndarray:
        return self.profile.sections.co2_partial_pressure

    @property
    def hb_o2_saturation(self) -> np.ndarray:
        return self.profile.hb_o2_saturation

    @property
    def residence_time(self) -> float:
        """Time blood spends in one section [s]."""

        return self.profile.sections.residence_time_s

    @property
    def partial_pressure_at_end(self) -> float:
        return float(self.o2_partial_pressures[-1])

    @property
    def venous_co2_partial_pressure(self) -> float:
        return float(self.co2_partial_pressures[0])

    @property
    def co2_partial_pressure_at_end(self) -> float:
        return float(self.co2_partial_pressures[-1])

    @property
    def saturation_at_end(self) -> float:
        return float(self.hb_o2_saturation[-1])

    @property
    def o2_uptake_mass(self) -> float:
        """Total O2 mass [ng] taken up since the last reset."""

        self._require_ready()
        return self.outflow_aggregator.o2_uptake_total_mass

    @property
    def o2_uptake_volume(self) -> float:
        self._require_ready()
        return self.outflow_aggregator.o2_uptake_total_volume

    @property
    def blood_transit_time(self) -> float:
        self._require_ready()
        return self.outflow_aggregator.blood_transit_time

    @property
    def half_saturation_time(self) -> float:
        """Time [s] until half of the saturation rise along the capillary is complete."""

        return compute_half_saturation_time_s(self.hb_o2_saturation, self.residence_time)

    def diffusing_capacity(self, simulation_time_s: float) -> float:
        """Whole-lung DLO2 [ml/(mmHg*min)] from the uptake accumulated over ``simulation_time_s``."""

        return compute_diffusing_capacity(
            self.o2_uptake_volume,
            simulation_time_s,
            self._parameters.alveolar_po2,
            float(np.mean(self.o2_partial_pressures)),
        )

    def dissociation_curve(
        self,
        num_points: int,
        pco2: float | None = None,
        po2_min: float = DISSOCIATION_CURVE_PO2_MIN,
        po2_max: float = DISSOCIATION_CURVE_PO2_MAX,
    ) -> tuple[np.ndarray, np.ndarray]:
        """Dissociation curve at ``pco2``, defaulting to the incoming blood's pCO2."""

        if pco2 is None:
            pco2 = self.venous_co2_partial_pressure
        return self.saturation_model.evaluate_curve(pco2, po2_min, po2_max, num_points)

    def to_frame(self) -> pd.DataFrame:
        return self.profile.to_frame()
