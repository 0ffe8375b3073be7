# qstep/engine.py
"""Statevector engine: per-column gate dispatch and the column-by-column driver.

Every gate kind maps to one handler ``handler(psi, gate, kernels)`` that
updates a private copy of the state in place using a kernel backend
(``apply_serial`` or ``apply_numba``). New kinds are added with
``register_gate``; the kernels themselves never change.
"""
from types import ModuleType
from typing import Callable, Dict, List, Optional, Sequence, Union

import numpy as np

from .circuit import Circuit, InputState, SimulationStep
from .config import DEFAULT_CONFIG, SimulatorConfig
from .errors import BackendUnavailableError, ConfigurationError, UnsupportedGateError
from .gates import FIXED_MATRICES, ROTATIONS, Gate, GateKind, single_qubit_matrix
from .logging import get_logger
from .measurement import MODES, PROBABILITY, SHOT, measure_column
from .rng import SeededRNG
from .shots import run_shots
from .state import as_vector

logger = get_logger(__name__)

Handler = Callable[[np.ndarray, Gate, ModuleType], None]

_HANDLERS: Dict[Union[GateKind, str], Handler] = {}


def _normalize_kind(kind) -> Union[GateKind, str]:
    try:
        return GateKind.parse(kind)
    except UnsupportedGateError:
        return str(kind)


def register_gate(kind, handler: Optional[Handler] = None, *, replace: bool = False):
    """Register ``handler`` for ``kind``. Also usable as ``@register_gate(kind)``.

    Re-registering a kind raises ValueError unless ``replace=True``.
    """
    key = _normalize_kind(kind)

    def _register(fn: Handler) -> Handler:
        if key in _HANDLERS and not replace:
            raise ValueError(f"Gate {kind!r} already has a handler")
        _HANDLERS[key] = fn
        return fn

    if handler is None:
        return _register
    return _register(handler)


def unregister_gate(kind) -> Handler:
    return _HANDLERS.pop(_normalize_kind(kind))


def registered_kinds():
    return list(_HANDLERS)


# ----------------------------- core handlers -----------------------------

def _single_qubit(psi, gate, kernels):
    kernels.apply_single_qubit(psi, single_qubit_matrix(gate), gate.targets[0])


def _control_mask(gate: Gate) -> int:
    if not gate.controls:
        raise ConfigurationError(f"Gate {gate.name} needs at least one control qubit")
    mask = 0
    for c in gate.controls:
        mask |= 1 << c
    return mask


def _controlled_x(psi, gate, kernels):
    kernels.apply_controlled_x(psi, _control_mask(gate), gate.targets[0])


def _controlled_z(psi, gate, kernels):
    kernels.apply_controlled_z(psi, _control_mask(gate), gate.targets[0])


def _swap(psi, gate, kernels):
    a, b = gate.targets
    kernels.apply_swap(psi, a, b)


def _measure(psi, gate, kernels):
    pass


for _kind in list(FIXED_MATRICES) + list(ROTATIONS):
    register_gate(_kind, _single_qubit)
register_gate(GateKind.CX, _controlled_x)
register_gate(GateKind.CNOT, _controlled_x)
register_gate(GateKind.CZ, _controlled_z)
register_gate(GateKind.SWAP, _swap)
register_gate(GateKind.MEASURE, _measure)


# ----------------------------- column application -----------------------------

def load_backend(name: str) -> ModuleType:
    if name == "serial":
        from . import apply_serial
        return apply_serial
    if name == "numba":
        try:
            from . import apply_numba
        except ImportError as e:
            raise BackendUnavailableError("Numba backend not available. Did you `pip install numba`?") from e
        return apply_numba
    raise ValueError(f"Unknown backend: {name}")


def _check_qubits(gate: Gate, num_qubits: int):
    for q in gate.qubits:
        if not 0 <= q < num_qubits:
            raise ConfigurationError(f"Gate {gate.name} touches qubit {q}, outside 0..{num_qubits - 1}")
    if len(set(gate.qubits)) != len(gate.qubits):
        raise ConfigurationError(f"Gate {gate.name} uses a qubit twice: {gate.qubits}")


def apply_column(state, gates: Sequence[Gate], num_qubits: int, backend: str = "serial") -> np.ndarray:
    """Apply one column of gates and return a new vector.

    Gates in a column act on disjoint qubits, so they are applied one after
    another in list order. ``state`` is copied and never modified.
    """
    psi = as_vector(state, num_qubits)
    kernels = load_backend(backend)
    for gate in gates:
        _check_qubits(gate, num_qubits)
        handler = _HANDLERS.get(gate.kind)
        if handler is None:
            raise UnsupportedGateError(f"No handler registered for gate {gate.name!r}")
        handler(psi, gate, kernels)
    return psi


# ----------------------------- driver -----------------------------

def _snapshot(psi: np.ndarray) -> np.ndarray:
    snap = psi.copy()
    snap.flags.writeable = False
    return snap


class Simulator:
    """Runs circuits column by column, recording a snapshot per column."""

    def __init__(self, config: Optional[SimulatorConfig] = None):
        self.config = config or DEFAULT_CONFIG

    def _initial_vector(self, circuit: Circuit, input_state) -> np.ndarray:
        n = circuit.num_qubits
        if input_state is None:
            return InputState(n).to_state_vector()
        if isinstance(input_state, InputState):
            if input_state.is_mixed:
                raise ConfigurationError("Mixed input state: use qstep.density for density-matrix evolution")
            if input_state.num_qubits != n:
                raise ConfigurationError(
                    f"Input state has {input_state.num_qubits} qubits, circuit has {n}")
            return input_state.to_state_vector()
        return as_vector(input_state, n)

    def _check_norm(self, psi: np.ndarray, col: int):
        if not self.config.check_norm:
            return
        n2 = float(np.vdot(psi, psi).real)
        if abs(1.0 - n2) > self.config.norm_tol:
            logger.warning("Column %d: ||psi||^2 = %.12f drifted from 1", col, n2)

    def simulate(self, circuit: Circuit, input_state=None, mode: str = PROBABILITY,
                 seed: Optional[int] = None) -> List[SimulationStep]:
        """Snapshot list: the initial state (col -1) then one step per column.

        In shot mode measured qubits collapse and the collapsed vector is
        carried forward; sampling uses SeededRNG(seed or config.seed).
        """
        if mode not in MODES:
            raise ValueError(f"Unknown measurement mode {mode!r}; expected one of {MODES}")
        n = circuit.num_qubits
        if n > self.config.max_qubits:
            raise ConfigurationError(f"{n} qubits exceeds the limit of {self.config.max_qubits}")

        psi = self._initial_vector(circuit, input_state)
        rng = SeededRNG(self.config.seed if seed is None else seed)
        num_cols = max([circuit.num_cols] + [g.col + 1 for g in circuit.gates])
        logger.info("Simulating %d qubit(s), %d column(s), mode=%s, seed=%d", n, num_cols, mode, rng.seed)

        self._check_norm(psi, -1)
        history = [SimulationStep(-1, _snapshot(psi), ())]
        for col in range(num_cols):
            gates = circuit.gates_at_col(col)
            unitaries = [g for g in gates if not g.is_measure]
            measures = [g for g in gates if g.is_measure]

            if unitaries:
                psi = apply_column(psi, unitaries, n, self.config.backend)
                self._check_norm(psi, col)

            summary = None
            if measures:
                summary = measure_column(psi, [g.targets[0] for g in measures], n,
                                         mode, rng, self.config.collapse_eps)
                if mode == SHOT:
                    psi = summary.post_state.copy()

            logger.debug("Column %d: %d unitary, %d measure", col, len(unitaries), len(measures))
            history.append(SimulationStep(col, _snapshot(psi), tuple(gates), summary))

        logger.info("Simulation finished: %d step(s)", len(history))
        return history

    def run_shots(self, circuit: Circuit, input_state, shots: int,
                  seed: Optional[int] = None) -> Dict[str, int]:
        """Sample the terminal state of a probability-mode run ``shots`` times."""
        steps = self.simulate(circuit, input_state, PROBABILITY, seed)
        return run_shots(steps[-1].state, circuit.num_qubits, shots,
                         self.config.seed if seed is None else seed)


def simulate(circuit: Circuit, input_state=None, mode: str = PROBABILITY,
             seed: Optional[int] = None, config: Optional[SimulatorConfig] = None) -> List[SimulationStep]:
    return Simulator(config).simulate(circuit, input_state, mode, seed)


# CP, CRZ and CSWAP register themselves through register_gate
from . import gates_extra  # noqa: E402,F401
