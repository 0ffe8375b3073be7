# qstep/gates_extra.py
"""Controlled-phase, controlled-Rz and Fredkin gates.

Registered through ``engine.register_gate`` like any third-party gate would be.
"""
from .engine import register_gate
from .gates import GateKind


@register_gate(GateKind.CP)
def controlled_phase(psi, gate, kernels):
    """|11> on (control, target) picks up e^{i phi}."""
    kernels.apply_controlled_phase(psi, gate.controls[0], gate.targets[0], gate.param("phi"))


@register_gate(GateKind.CRZ)
def controlled_rz(psi, gate, kernels):
    kernels.apply_controlled_rz(psi, gate.controls[0], gate.targets[0], gate.param("theta"))


@register_gate(GateKind.CSWAP)
def controlled_swap(psi, gate, kernels):
    a, b = gate.targets
    kernels.apply_controlled_swap(psi, gate.controls[0], a, b)
