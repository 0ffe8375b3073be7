# qstep/circuit.py
"""Circuit grid, initial-state model and simulation snapshots.

A circuit is a grid of qubit wires x columns. Gates in one column touch
disjoint qubits, which ``Circuit.add_gate`` enforces so the engine never
has to.
"""
import numbers
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from .errors import ConfigurationError
from .gates import Gate, GateKind, PARAM_NAMES
from .state import State, as_vector

MAX_QUBITS = 5

# kind -> (targets, controls); controls None means "one or more"
ARITY = {
    GateKind.CX: (1, None),
    GateKind.CNOT: (1, None),
    GateKind.CZ: (1, None),
    GateKind.SWAP: (2, 0),
    GateKind.CP: (1, 1),
    GateKind.CRZ: (1, 1),
    GateKind.CSWAP: (2, 1),
}


@dataclass
class Circuit:
    num_qubits: int = 2
    num_cols: int = 6
    gates: List[Gate] = field(default_factory=list)

    def __post_init__(self):
        if not 1 <= self.num_qubits <= MAX_QUBITS:
            raise ConfigurationError(f"num_qubits must be in 1..{MAX_QUBITS}, got {self.num_qubits}")

    @staticmethod
    def empty(n: int, num_cols: int = 6) -> "Circuit":
        return Circuit(n, num_cols)

    # ---------------------------------------------------------------- editing

    def add_gate(self, gate: Gate) -> Gate:
        self._validate(gate)
        self.gates.append(gate)
        # keep one empty column after the last used one
        if gate.col >= self.num_cols - 1:
            self.num_cols = gate.col + 2
        return gate

    def remove_gate(self, gate: Gate):
        self.gates = [g for g in self.gates if g is not gate]

    def gates_at_col(self, col: int) -> List[Gate]:
        return [g for g in self.gates if g.col == col]

    def add_qubit(self):
        if self.num_qubits < MAX_QUBITS:
            self.num_qubits += 1

    def remove_qubit(self):
        """Drop the last wire together with every gate that touches it."""
        if self.num_qubits <= 1:
            return
        self.num_qubits -= 1
        self.gates = [g for g in self.gates if all(q < self.num_qubits for q in g.qubits)]

    def _validate(self, gate: Gate):
        qubits = gate.qubits
        for q in qubits:
            if q < 0 or q >= self.num_qubits:
                raise ConfigurationError(f"Qubit {q} out of range (0-{self.num_qubits - 1})")
        if len(set(qubits)) != len(qubits):
            raise ConfigurationError(f"Gate {gate.name} uses a qubit twice: {qubits}")
        if gate.col < 0:
            raise ConfigurationError(f"Column {gate.col} is negative")
        arity = ARITY.get(gate.kind)
        if arity is None and isinstance(gate.kind, GateKind):
            arity = (1, 0)
        if arity is not None:
            n_targets, n_controls = arity
            if len(gate.targets) != n_targets or (
                    len(gate.controls) == 0 if n_controls is None else len(gate.controls) != n_controls):
                raise ConfigurationError(
                    f"Gate {gate.name} expects {n_targets} target(s) and "
                    f"{'>= 1' if n_controls is None else n_controls} control(s)")
        for eg in self.gates_at_col(gate.col):
            for q in qubits:
                if q in eg.qubits:
                    raise ConfigurationError(f"Cell collision at col {gate.col}, qubit {q}")
        if gate.kind in PARAM_NAMES:
            gate.param(PARAM_NAMES[gate.kind])

    # ---------------------------------------------------------------- builders

    def _next_col(self, qubits: Sequence[int]) -> int:
        used = [g.col for g in self.gates if set(g.qubits) & set(qubits)]
        return max(used) + 1 if used else 0

    def _place(self, kind, targets, controls=(), params=None, col=None) -> "Circuit":
        if col is None:
            col = self._next_col(tuple(controls) + tuple(targets))
        self.add_gate(Gate(kind, tuple(targets), tuple(controls), params or {}, col))
        return self

    def i(self, k: int, col=None): return self._place(GateKind.I, (k,), col=col)
    def x(self, k: int, col=None): return self._place(GateKind.X, (k,), col=col)
    def y(self, k: int, col=None): return self._place(GateKind.Y, (k,), col=col)
    def z(self, k: int, col=None): return self._place(GateKind.Z, (k,), col=col)
    def h(self, k: int, col=None): return self._place(GateKind.H, (k,), col=col)
    def s(self, k: int, col=None): return self._place(GateKind.S, (k,), col=col)
    def t(self, k: int, col=None): return self._place(GateKind.T, (k,), col=col)

    def rx(self, k: int, theta: float, col=None):
        return self._place(GateKind.RX, (k,), params={"theta": theta}, col=col)

    def ry(self, k: int, theta: float, col=None):
        return self._place(GateKind.RY, (k,), params={"theta": theta}, col=col)

    def rz(self, k: int, theta: float, col=None):
        return self._place(GateKind.RZ, (k,), params={"theta": theta}, col=col)

    def cx(self, c, t: int, col=None):
        controls = (c,) if isinstance(c, numbers.Integral) else tuple(c)
        return self._place(GateKind.CX, (t,), controls, col=col)

    cnot = cx

    def cz(self, c, t: int, col=None):
        controls = (c,) if isinstance(c, numbers.Integral) else tuple(c)
        return self._place(GateKind.CZ, (t,), controls, col=col)

    def swap(self, a: int, b: int, col=None):
        return self._place(GateKind.SWAP, (a, b), col=col)

    def cp(self, c: int, t: int, phi: float, col=None):
        return self._place(GateKind.CP, (t,), (c,), {"phi": phi}, col=col)

    def crz(self, c: int, t: int, theta: float, col=None):
        return self._place(GateKind.CRZ, (t,), (c,), {"theta": theta}, col=col)

    def cswap(self, c: int, a: int, b: int, col=None):
        return self._place(GateKind.CSWAP, (a, b), (c,), col=col)

    def measure(self, k: int, col=None):
        return self._place(GateKind.MEASURE, (k,), col=col)

    def run(self, input_state=None, backend: str = "serial", mode: str = "probability",
            seed=None, check_norm: bool = True) -> State:
        """Simulate the whole circuit and return only the final state."""
        from .config import SimulatorConfig
        from .engine import Simulator
        sim = Simulator(SimulatorConfig(backend=backend, check_norm=check_norm))
        steps = sim.simulate(self, input_state, mode, seed)
        return State(self.num_qubits, steps[-1].state.copy())

    # ---------------------------------------------------------------- serialisation

    def to_dict(self) -> Dict[str, Any]:
        return {
            "numQubits": self.num_qubits,
            "numCols": self.num_cols,
            "gates": [g.to_dict() for g in self.gates],
        }

    @staticmethod
    def from_dict(obj: Dict[str, Any]) -> "Circuit":
        c = Circuit(int(obj["numQubits"]), int(obj.get("numCols", 6)))
        for g in obj.get("gates", []):
            c.add_gate(Gate.from_dict(g))
        return c


# ---------------------------------------------------------------------------
# initial state

_S2 = 1.0 / np.sqrt(2.0)

# alpha|0> + beta|1>
PRESETS = {
    "0": (1.0, 0.0),
    "1": (0.0, 1.0),
    "+": (_S2, _S2),
    "-": (_S2, -_S2),
    "+i": (_S2, 1j * _S2),
    "-i": (_S2, -1j * _S2),
}

_ALIASES = {
    "|0⟩": "0", "|1⟩": "1", "|+⟩": "+", "|−⟩": "-", "|-⟩": "-",
    "|i⟩": "+i", "i": "+i", "|−i⟩": "-i", "|-i⟩": "-i",
    "Φ+": "Phi+", "Φ-": "Phi-", "Ψ+": "Psi+", "Ψ-": "Psi-",
}


def _cluster_vector(size: int, preset: str) -> np.ndarray:
    dim = 1 << size
    if size == 1:
        if preset not in PRESETS:
            raise ConfigurationError(f"Preset {preset!r} needs linked qubits or is unknown")
        return np.array(PRESETS[preset], dtype=np.complex128)

    vec = np.zeros(dim, dtype=np.complex128)
    if preset in ("Phi+", "GHZ"):
        vec[0] = vec[dim - 1] = _S2
    elif preset == "Phi-":
        vec[0], vec[dim - 1] = _S2, -_S2
    elif preset == "Psi+":
        vec[1] = vec[dim - 2] = _S2
    elif preset == "Psi-":
        vec[1], vec[dim - 2] = _S2, -_S2
    elif preset == "W":
        for q in range(size):
            vec[1 << q] = 1.0 / np.sqrt(size)
    else:
        raise ConfigurationError(f"Preset {preset!r} cannot describe {size} linked qubits")
    return vec


class InputState:
    """Initial state of a run: a pure vector, or a density matrix for mixed input.

    Presets are per qubit; ``links[i]`` joins qubit i and i+1 into one cluster
    whose state is named by the preset of its lowest qubit.
    """

    def __init__(self, num_qubits: int):
        self.num_qubits = num_qubits
        self.presets: Optional[List[str]] = ["0"] * num_qubits
        self.links: List[bool] = [False] * max(0, num_qubits - 1)
        self.vector = np.zeros(1 << num_qubits, dtype=np.complex128)
        self.vector[0] = 1.0
        self.density_matrix: Optional[np.ndarray] = None

    @property
    def is_mixed(self) -> bool:
        return self.density_matrix is not None

    def set_vector(self, vec):
        self.vector = as_vector(vec, self.num_qubits)
        self.density_matrix = None
        self.presets = None

    def set_density_matrix(self, rho):
        rho = np.array(rho, dtype=np.complex128)
        dim = 1 << self.num_qubits
        if rho.shape != (dim, dim):
            raise ConfigurationError(f"Density matrix shape {rho.shape} does not match ({dim}, {dim})")
        self.density_matrix = rho
        self.presets = None

    def set_presets(self, presets: Sequence[str], links: Optional[Sequence[bool]] = None):
        if len(presets) != self.num_qubits:
            raise ConfigurationError(f"Expected {self.num_qubits} presets, got {len(presets)}")
        if links is not None:
            if len(links) != max(0, self.num_qubits - 1):
                raise ConfigurationError(f"Expected {self.num_qubits - 1} links, got {len(links)}")
            self.links = [bool(x) for x in links]
        self.presets = [_ALIASES.get(p, p) for p in presets]
        self.vector = self._presets_to_vector()
        self.density_matrix = None

    def _clusters(self) -> List[List[int]]:
        clusters, current = [], [0]
        for i in range(self.num_qubits - 1):
            if self.links[i]:
                current.append(i + 1)
            else:
                clusters.append(current)
                current = [i + 1]
        clusters.append(current)
        return clusters

    def _presets_to_vector(self) -> np.ndarray:
        # tensor from the highest cluster down so qubit 0 ends up in the LSB
        full = np.ones(1, dtype=np.complex128)
        for cluster in reversed(self._clusters()):
            full = np.kron(full, _cluster_vector(len(cluster), self.presets[cluster[0]]))
        return full

    def to_state_vector(self) -> np.ndarray:
        return self.vector.copy()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "numQubits": self.num_qubits,
            "vector": [[float(z.real), float(z.imag)] for z in self.vector],
            "presets": list(self.presets) if self.presets is not None else None,
            "links": list(self.links),
        }

    @staticmethod
    def from_dict(obj: Dict[str, Any]) -> "InputState":
        s = InputState(int(obj["numQubits"]))
        if obj.get("links"):
            s.links = [bool(x) for x in obj["links"]]
        if obj.get("vector") is not None:
            s.set_vector(obj["vector"])
            s.presets = obj.get("presets")
        elif obj.get("presets"):
            s.set_presets(obj["presets"])
        return s


# ---------------------------------------------------------------------------
# snapshots

@dataclass(frozen=True)
class SimulationStep:
    """State after one column; ``col == -1`` is the initial, pre-gate state.

    ``state`` is a read-only copy.
    """
    col: int
    state: np.ndarray
    gates: Tuple[Gate, ...] = ()
    measurement: Optional[Any] = None  # MeasurementSummary


def demo_circuit(name: str) -> Circuit:
    if name == "h-measure":
        return Circuit(1, 4).h(0).measure(0)
    if name == "bell":
        return Circuit(2, 6).h(0).cx(0, 1).measure(0).measure(1)
    if name == "ghz":
        return Circuit(3, 8).h(0).cx(0, 1).cx(1, 2).measure(0, col=3).measure(1, col=3).measure(2, col=3)
    raise ConfigurationError(f"Unknown demo circuit {name!r}")
