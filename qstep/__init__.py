# qstep/__init__.py
from .circuit import Circuit, InputState, SimulationStep, demo_circuit
from .config import DEFAULT_CONFIG, SimulatorConfig
from .engine import Simulator, apply_column, register_gate, simulate, unregister_gate
from .errors import (BackendUnavailableError, ConfigurationError, GateParameterError,
                     QStepError, UnsupportedGateError)
from .gates import Gate, GateKind
from .measurement import MeasurementSummary, marginal_probabilities, measure_column
from .rng import SeededRNG
from .shots import counts_to_probs, run_shots, total_variation
from .state import State

__all__ = [
    "Circuit", "InputState", "SimulationStep", "demo_circuit",
    "DEFAULT_CONFIG", "SimulatorConfig",
    "Simulator", "apply_column", "register_gate", "simulate", "unregister_gate",
    "BackendUnavailableError", "ConfigurationError", "GateParameterError",
    "QStepError", "UnsupportedGateError",
    "Gate", "GateKind",
    "MeasurementSummary", "marginal_probabilities", "measure_column",
    "SeededRNG", "counts_to_probs", "run_shots", "total_variation", "State",
]
