from dataclasses import FrozenInstanceError, replace
import math

import pytest

from alveolus.errors import ConfigurationError
from alveolus.params import ParameterSet, ParameterValues, validate_parameters


def _baseline_values() -> ParameterValues:
    return ParameterValues(
        atmospheric_pressure=760.0,
        alveolar_po2=100.0,
        alveolar_pco2=40.0,
        blood_po2=40.0,
        blood_pco2=45.0,
        ph_rbc=7.24,
        blood_volume=404000.0,
        blood_flow_velocity=1.0,
        blood_temperature=37.0,
        dpg_concentration=0.00465,
        surface_area=121000.0,
        barrier_thickness=1.11,
    )


def _counting_set() -> tuple[ParameterSet, list[int]]:
    params = ParameterSet(_baseline_values())
    calls: list[int] = []
    params.subscribe(lambda: calls.append(1))
    return params, calls


def test_defaults_match_reference_values() -> None:
    assert ParameterValues() == _baseline_values()


def test_validate_parameters_accepts_baseline() -> None:
    validate_parameters(_baseline_values())


def test_validate_parameters_rejects_pressure_at_water_vapour_pressure() -> None:
    invalid = replace(_baseline_values(), atmospheric_pressure=45.0)
    with pytest.raises(ConfigurationError) as exc:
        validate_parameters(invalid)
    assert "atmospheric_pressure must be > water vapour pressure" in str(exc.value)


def test_validate_parameters_rejects_non_positive_barrier_thickness() -> None:
    invalid = replace(_baseline_values(), barrier_thickness=0.0)
    with pytest.raises(ConfigurationError) as exc:
        validate_parameters(invalid)
    assert "barrier_thickness must be > 0" in str(exc.value)


def test_validate_parameters_rejects_negative_flow_velocity() -> None:
    invalid = replace(_baseline_values(), blood_flow_velocity=-0.5)
    with pytest.raises(ConfigurationError) as exc:
        validate_parameters(invalid)
    assert "blood_flow_velocity must be >= 0" in str(exc.value)


def test_validate_parameters_accepts_zero_flow_velocity() -> None:
    validate_parameters(replace(_baseline_values(), blood_flow_velocity=0.0))


def test_validate_parameters_rejects_non_finite_values() -> None:
    invalid = replace(_baseline_values(), ph_rbc=math.nan)
    with pytest.raises(ConfigurationError) as exc:
        validate_parameters(invalid)
    assert "ph_rbc must be finite" in str(exc.value)


def test_validate_parameters_reports_all_failures() -> None:
    invalid = replace(_baseline_values(), surface_area=0.0, blood_po2=-1.0, dpg_concentration=-0.001)
    with pytest.raises(ConfigurationError) as exc:
        validate_parameters(invalid)
    msg = str(exc.value)
    assert "surface_area must be > 0" in msg
    assert "blood_po2 must be >= 0" in msg
    assert "dpg_concentration must be >= 0" in msg


def test_configuration_error_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        validate_parameters(replace(_baseline_values(), blood_volume=0.0))


def test_parameter_values_are_immutable() -> None:
    values = _baseline_values()
    with pytest.raises(FrozenInstanceError):
        values.blood_po2 = 50.0


def test_derived_values_at_defaults() -> None:
    values = _baseline_values()
    assert values.oxygen_ratio == pytest.approx(100.0 / 715.0)
    assert values.co2_ratio == pytest.approx(40.0 / 715.0)
    assert values.dm_o2 == pytest.approx(0.055 * 121000.0 / 1.11)
    assert values.capillary_recruitment == pytest.approx(0.5)
    assert values.capillaries_perfused == pytest.approx(26.0)


def test_degenerate_denominators_give_nan_derived_values() -> None:
    values = replace(_baseline_values(), atmospheric_pressure=45.0, barrier_thickness=0.0)
    assert math.isnan(values.oxygen_ratio)
    assert math.isnan(values.co2_ratio)
    assert math.isnan(values.dm_o2)


def test_atmospheric_pressure_updates_both_ratios_only() -> None:
    params = ParameterSet(_baseline_values())
    dm_before = params.dm_o2
    params.atmospheric_pressure = 600.0
    assert params.oxygen_ratio == pytest.approx(100.0 / 555.0)
    assert params.co2_ratio == pytest.approx(40.0 / 555.0)
    assert params.dm_o2 == dm_before


def test_barrier_thickness_updates_dm_o2_only() -> None:
    params = ParameterSet(_baseline_values())
    o2_before, co2_before = params.oxygen_ratio, params.co2_ratio
    params.barrier_thickness = 2.22
    assert params.dm_o2 == pytest.approx(0.055 * 121000.0 / 2.22)
    assert params.oxygen_ratio == o2_before
    assert params.co2_ratio == co2_before


def test_alveolar_po2_updates_oxygen_ratio_only() -> None:
    params = ParameterSet(_baseline_values())
    co2_before = params.co2_ratio
    params.alveolar_po2 = 143.0
    assert params.oxygen_ratio == pytest.approx(0.2)
    assert params.co2_ratio == co2_before


def test_each_setter_notifies_exactly_once() -> None:
    params, calls = _counting_set()
    params.blood_temperature = 39.0
    assert len(calls) == 1
    params.set("ph_rbc", 7.3)
    assert len(calls) == 2
    assert params.ph_rbc == 7.3
    assert params.snapshot().blood_temperature == 39.0


def test_bulk_updates_notify_once() -> None:
    params, calls = _counting_set()
    params.set_values(replace(_baseline_values(), blood_po2=30.0, blood_pco2=50.0))
    assert len(calls) == 1
    assert params.blood_po2 == 30.0
    params.reset_to_defaults()
    assert len(calls) == 2
    assert params.snapshot() == ParameterValues()


def test_unknown_parameter_name_is_rejected() -> None:
    params, calls = _counting_set()
    with pytest.raises(KeyError):
        params.set("heart_rate", 70.0)
    assert calls == []


def test_unsubscribed_listener_is_not_called() -> None:
    params = ParameterSet()
    calls: list[int] = []

    def listener() -> None:
        calls.append(1)

    params.subscribe(listener)
    params.unsubscribe(listener)
    params.blood_po2 = 35.0
    assert calls == []
    assert params.subscriber_count == 0


def test_from_template_copies_values_but_not_subscribers() -> None:
    template, calls = _counting_set()
    template.blood_po2 = 30.0
    copy = ParameterSet.from_template(template)
    assert copy.snapshot() == template.snapshot()
    assert copy.subscriber_count == 0

    copy.blood_po2 = 55.0
    assert template.blood_po2 == 30.0
    assert len(calls) == 1


def test_snapshot_is_stable_after_edit() -> None:
    params = ParameterSet()
    before = params.snapshot()
    params.blood_flow_velocity = 2.0
    assert before.blood_flow_velocity == 1.0
    assert params.snapshot().blood_flow_velocity == 2.0


class _RecordingObserver:
    def __init__(self) -> None:
        self.calls = 0

    def on_parameters_changed(self) -> None:
        self.calls += 1


def test_observer_is_notified_until_removed() -> None:
    params = ParameterSet()
    observer = _RecordingObserver()
    params.add_observer(observer)
    params.add_observer(observer)
    params.blood_pco2 = 47.0
    assert observer.calls == 1

    params.remove_observer(observer)
    params.blood_pco2 = 46.0
    assert observer.calls == 1
    assert params.subscriber_count == 0
