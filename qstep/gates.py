# qstep/gates.py
"""Gate vocabulary, gate descriptors and 2x2 matrices.

Matrices are complex128 and act on a single qubit in the basis |0>, |1>.
Multi-qubit kinds (CX, CZ, SWAP, CP, CRZ, CSWAP) have no dense matrix here;
the engine applies them by bit-masking.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Tuple, Union

import numpy as np

from .errors import GateParameterError, UnsupportedGateError

_S2 = 1.0 / np.sqrt(2.0)


class GateKind(str, Enum):
    I = "I"
    X = "X"
    Y = "Y"
    Z = "Z"
    H = "H"
    S = "S"
    T = "T"
    RX = "Rx"
    RY = "Ry"
    RZ = "Rz"
    CX = "CX"
    CNOT = "CNOT"
    CZ = "CZ"
    SWAP = "SWAP"
    CP = "CP"
    CRZ = "CRZ"
    CSWAP = "CSWAP"
    MEASURE = "Measure"

    @classmethod
    def parse(cls, name: Union[str, "GateKind"]) -> "GateKind":
        """Accept editor spellings case-insensitively ("rx", "Rx", "RX", "measure", "M")."""
        if isinstance(name, GateKind):
            return name
        key = str(name).strip().upper()
        if key == "M":
            key = "MEASURE"
        try:
            return cls[key]
        except KeyError:
            raise UnsupportedGateError(f"Unknown gate type {name!r}") from None


# kinds that take a numeric parameter, and its name
PARAM_NAMES = {
    GateKind.RX: "theta",
    GateKind.RY: "theta",
    GateKind.RZ: "theta",
    GateKind.CRZ: "theta",
    GateKind.CP: "phi",
}

ROTATIONS = (GateKind.RX, GateKind.RY, GateKind.RZ)


@dataclass(frozen=True)
class Gate:
    """Read-only gate descriptor as placed by the circuit editor.

    ``kind`` is a GateKind, or a plain string for kinds added with
    ``engine.register_gate``.
    """
    kind: Union[GateKind, str]
    targets: Tuple[int, ...]
    controls: Tuple[int, ...] = ()
    params: Mapping[str, float] = field(default_factory=dict, hash=False)
    col: int = 0

    def __post_init__(self):
        kind = self.kind
        if not isinstance(kind, GateKind):
            try:
                kind = GateKind.parse(kind)
            except UnsupportedGateError:
                kind = str(kind)
        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "targets", tuple(int(q) for q in self.targets))
        object.__setattr__(self, "controls", tuple(int(q) for q in self.controls))
        object.__setattr__(self, "params", MappingProxyType(dict(self.params or {})))

    @property
    def qubits(self) -> Tuple[int, ...]:
        return self.controls + self.targets

    @property
    def is_measure(self) -> bool:
        return self.kind is GateKind.MEASURE

    def param(self, name: str) -> float:
        value = self.params.get(name)
        if value is None:
            raise GateParameterError(f"Gate {self.name} requires parameter {name!r}")
        value = float(value)
        if math.isnan(value):
            raise GateParameterError(f"Gate {self.name} parameter {name!r} is NaN")
        return value

    @property
    def name(self) -> str:
        return self.kind.value if isinstance(self.kind, GateKind) else self.kind

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.name,
            "targets": list(self.targets),
            "controls": list(self.controls),
            "params": dict(self.params),
            "col": self.col,
        }

    @staticmethod
    def from_dict(obj: Mapping[str, Any]) -> "Gate":
        return Gate(
            kind=obj["type"],
            targets=tuple(obj.get("targets", ())),
            controls=tuple(obj.get("controls", ()) or ()),
            params=dict(obj.get("params", {}) or {}),
            col=int(obj.get("col", 0)),
        )


def _mat(*rows) -> np.ndarray:
    return np.array(rows, dtype=np.complex128)


# ── 1-qubit fixed ───────────────────────────────────────────────────
def I() -> np.ndarray:
    return _mat([1, 0], [0, 1])

def X() -> np.ndarray:
    return _mat([0, 1], [1, 0])

def Y() -> np.ndarray:
    return _mat([0, -1j], [1j, 0])

def Z() -> np.ndarray:
    return _mat([1, 0], [0, -1])

def H() -> np.ndarray:
    return _mat([_S2, _S2], [_S2, -_S2])

def S() -> np.ndarray:
    return _mat([1, 0], [0, 1j])

def T() -> np.ndarray:
    return _mat([1, 0], [0, complex(_S2, _S2)])


# ── 1-qubit parameterised ──────────────────────────────────────────
def RX(theta: float) -> np.ndarray:
    c = np.cos(theta / 2.0)
    s = -1j * np.sin(theta / 2.0)
    return _mat([c, s], [s, c])

def RY(theta: float) -> np.ndarray:
    c, s = np.cos(theta / 2.0), np.sin(theta / 2.0)
    return _mat([c, -s], [s, c])

def RZ(theta: float) -> np.ndarray:
    return _mat([np.exp(-0.5j * theta), 0], [0, np.exp(0.5j * theta)])


FIXED_MATRICES = {
    GateKind.I: I,
    GateKind.X: X,
    GateKind.Y: Y,
    GateKind.Z: Z,
    GateKind.H: H,
    GateKind.S: S,
    GateKind.T: T,
}

_ROTATION_MATRICES = {
    GateKind.RX: RX,
    GateKind.RY: RY,
    GateKind.RZ: RZ,
}


def is_single_qubit(kind) -> bool:
    return kind in FIXED_MATRICES or kind in _ROTATION_MATRICES


def single_qubit_matrix(gate: Gate) -> np.ndarray:
    """2x2 matrix for a fixed or rotation gate; rotations need ``theta``."""
    if gate.kind in FIXED_MATRICES:
        return FIXED_MATRICES[gate.kind]()
    if gate.kind in _ROTATION_MATRICES:
        return _ROTATION_MATRICES[gate.kind](gate.param("theta"))
    raise UnsupportedGateError(f"{gate.name} is not a single-qubit gate")
