"""Alveolar-capillary gas exchange simulation package."""

from .errors import ConfigurationError, ContractViolation
from .events import Notifier, ParameterObserver
from .orchestrator import OrchestratorState, RecalculationOrchestrator
from .outflow import ErythrocyteTracker, OutflowAggregator
from .params import PARAMETER_NAMES, ParameterSet, ParameterValues, validate_parameters
from .results import CapillaryProfile, SectionArrays, dissociation_curve_frame
from .saturation import BloodChemistry, HbSaturationModel
from .solver import PartialPressureSolver

__all__ = [
    "BloodChemistry",
    "CapillaryProfile",
    "ConfigurationError",
    "ContractViolation",
    "ErythrocyteTracker",
    "HbSaturationModel",
    "Notifier",
    "OrchestratorState",
    "OutflowAggregator",
    "PARAMETER_NAMES",
    "ParameterObserver",
    "ParameterSet",
    "ParameterValues",
    "PartialPressureSolver",
    "RecalculationOrchestrator",
    "SectionArrays",
    "dissociation_curve_frame",
    "validate_parameters",
]
