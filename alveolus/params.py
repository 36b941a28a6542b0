"""Parameter schema, validation and the mutable per-instance parameter set."""

from dataclasses import asdict, dataclass, fields, replace
import math

from .constants import (
    MAX_BLOOD_VOLUME_UM3,
    NUMBER_CAPILLARIES,
    PERM_COEFFICIENT_O2,
    WATER_VAPOUR_PRESSURE_MMHG,
)
from .errors import ConfigurationError
from .events import Listener, Notifier, ParameterObserver


def _ratio(numerator: float, denominator: float) -> float:
    if denominator == 0.0:
        return math.nan
    return numerator / denominator


@dataclass(frozen=True, slots=True)
class ParameterValues:
    """Snapshot of the user-adjustable physiological inputs.

    Defaults are the reference values of the interactive application:
    alveolar pressures from Sharma et al. (2020), venous blood gases from
    Dash et al. (2016) and barrier morphology from Weibel et al. (1993).
    """

    atmospheric_pressure: float = 760.0
    alveolar_po2: float = 100.0
    alveolar_pco2: float = 40.0
    blood_po2: float = 40.0
    blood_pco2: float = 45.0
    ph_rbc: float = 7.24
    blood_volume: float = 404000.0
    blood_flow_velocity: float = 1.0
    blood_temperature: float = 37.0
    dpg_concentration: float = 0.00465
    surface_area: float = 121000.0
    barrier_thickness: float = 1.11
    number_capillaries: float = NUMBER_CAPILLARIES

    @property
    def oxygen_ratio(self) -> float:
        """Alveolar O2 fraction of the dry gas pressure."""

        return _ratio(self.alveolar_po2, self.atmospheric_pressure - WATER_VAPOUR_PRESSURE_MMHG)

    @property
    def co2_ratio(self) -> float:
        return _ratio(self.alveolar_pco2, self.atmospheric_pressure - WATER_VAPOUR_PRESSURE_MMHG)

    @property
    def dm_o2(self) -> float:
        """Membrane diffusing capacity for O2 [µm³/(s*mmHg)]."""

        return PERM_COEFFICIENT_O2 * _ratio(self.surface_area, self.barrier_thickness)

    @property
    def capillary_recruitment(self) -> float:
        return self.blood_volume / MAX_BLOOD_VOLUME_UM3

    @property
    def capillaries_perfused(self) -> float:
        return self.capillary_recruitment * self.number_capillaries


PARAMETER_NAMES = tuple(f.name for f in fields(ParameterValues))


def validate_parameters(values: ParameterValues) -> None:
    """Validate a parameter snapshot and raise ConfigurationError on failures."""

    errors: list[str] = []

    for name, value in asdict(values).items():
        if not math.isfinite(value):
            errors.append(f"{name} must be finite")

    if values.atmospheric_pressure <= WATER_VAPOUR_PRESSURE_MMHG:
        errors.append(
            f"atmospheric_pressure must be > water vapour pressure ({WATER_VAPOUR_PRESSURE_MMHG:g} mmHg)"
        )
    if values.barrier_thickness <= 0.0:
        errors.append("barrier_thickness must be > 0")
    if values.surface_area <= 0.0:
        errors.append("surface_area must be > 0")
    if values.blood_volume <= 0.0:
        errors.append("blood_volume must be > 0")
    if values.number_capillaries <= 0.0:
        errors.append("number_capillaries must be > 0")

    if values.alveolar_po2 < 0.0:
        errors.append("alveolar_po2 must be >= 0")
    if values.alveolar_pco2 < 0.0:
        errors.append("alveolar_pco2 must be >= 0")
    if values.blood_po2 < 0.0:
        errors.append("blood_po2 must be >= 0")
    if values.blood_pco2 < 0.0:
        errors.append("blood_pco2 must be >= 0")
    if values.blood_flow_velocity < 0.0:
        errors.append("blood_flow_velocity must be >= 0")
    if values.dpg_concentration < 0.0:
        errors.append("dpg_concentration must be >= 0")

    if errors:
        raise ConfigurationError("; ".join(errors))


def _parameter_property(name: str) -> property:
    def getter(self: "ParameterSet") -> float:
        return getattr(self._values, name)

    def setter(self: "ParameterSet", value: float) -> None:
        self.set(name, value)

    return property(getter, setter, doc=f"Current ``{name}``; assigning notifies subscribers once.")


class ParameterSet:
    """Mutable parameter holder owned by one simulation instance.

    The current values are kept as an immutable ``ParameterValues`` which is
    swapped on every edit, so ``snapshot()`` can be handed to the stages
    without copying. Derived quantities are read from the snapshot and
    therefore always agree with the raw fields they depend on.
    """

    atmospheric_pressure = _parameter_property("atmospheric_pressure")
    alveolar_po2 = _parameter_property("alveolar_po2")
    alveolar_pco2 = _parameter_property("alveolar_pco2")
    blood_po2 = _parameter_property("blood_po2")
    blood_pco2 = _parameter_property("blood_pco2")
    ph_rbc = _parameter_property("ph_rbc")
    blood_volume = _parameter_property("blood_volume")
    blood_flow_velocity = _parameter_property("blood_flow_velocity")
    blood_temperature = _parameter_property("blood_temperature")
    dpg_concentration = _parameter_property("dpg_concentration")
    surface_area = _parameter_property("surface_area")
    barrier_thickness = _parameter_property("barrier_thickness")
    number_capillaries = _parameter_property("number_capillaries")

    def __init__(self, values: ParameterValues | None = None, defaults: ParameterValues | None = None) -> None:
        self._defaults = defaults if defaults is not None else ParameterValues()
        self._values = values if values is not None else self._defaults
        self._changed = Notifier()

    @classmethod
    def from_template(cls, template: "ParameterSet") -> "ParameterSet":
        """Copy current values and defaults of another set; subscribers are not copied."""

        return cls(template.snapshot(), template.defaults)

    @property
    def defaults(self) -> ParameterValues:
        return self._defaults

    @property
    def oxygen_ratio(self) -> float:
        return self._values.oxygen_ratio

    @property
    def co2_ratio(self) -> float:
        return self._values.co2_ratio

    @property
    def dm_o2(self) -> float:
        return self._values.dm_o2

    @property
    def capillary_recruitment(self) -> float:
        return self._values.capillary_recruitment

    @property
    def capillaries_perfused(self) -> float:
        return self._values.capillaries_perfused

    def snapshot(self) -> ParameterValues:
        return self._values

    def set(self, name: str, value: float) -> None:
        """Set one raw field and notify subscribers once."""

        if name not in PARAMETER_NAMES:
            raise KeyError(f"Unknown parameter: {name}")
        self._values = replace(self._values, **{name: float(value)})
        self._changed.notify()

    def set_values(self, values: ParameterValues) -> None:
        """Replace all fields at once with a single notification."""

        self._values = values
        self._changed.notify()

    def reset_to_defaults(self) -> None:
        self.set_values(self._defaults)

    def subscribe(self, listener: Listener) -> None:
        self._changed.subscribe(listener)

    def unsubscribe(self, listener: Listener) -> None:
        self._changed.unsubscribe(listener)

    def add_observer(self, observer: ParameterObserver) -> None:
        """Subscribe ``observer.on_parameters_changed``."""

        self._changed.subscribe(observer.on_parameters_changed)

    def remove_observer(self, observer: ParameterObserver) -> None:
        self._changed.unsubscribe(observer.on_parameters_changed)

    @property
    def subscriber_count(self) -> int:
        return len(self._changed)
