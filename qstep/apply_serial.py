# qstep/apply_serial.py
"""Plain-Python bit-mask kernels. All of them update ``psi`` in place.

Little-endian: qubit k is bit k of the basis index (qubit 0 is the LSB).
"""
import cmath

import numpy as np


def apply_single_qubit(psi: np.ndarray, U2: np.ndarray, k: int):
    """Apply 2x2 gate U2 to qubit k."""
    assert U2.shape == (2, 2)
    N = psi.shape[0]
    step = 1 << k
    block = step << 1
    u00, u01, u10, u11 = U2[0, 0], U2[0, 1], U2[1, 0], U2[1, 1]
    # iterate blocks of size 2^(k+1), update pairs (i0, i1=i0+step)
    for base in range(0, N, block):
        for off in range(step):
            i0 = base + off
            i1 = i0 + step
            a0 = psi[i0]
            a1 = psi[i1]
            psi[i0] = u00*a0 + u01*a1
            psi[i1] = u10*a0 + u11*a1


def apply_controlled_x(psi: np.ndarray, control_mask: int, target: int):
    """Flip the target wherever every bit of control_mask is set."""
    N = psi.shape[0]
    mt = 1 << target
    for i0 in range(N):
        if (i0 & control_mask) == control_mask and not (i0 & mt):
            i1 = i0 | mt
            a0 = psi[i0]
            psi[i0] = psi[i1]
            psi[i1] = a0


def apply_controlled_z(psi: np.ndarray, control_mask: int, target: int):
    mask = control_mask | (1 << target)
    for i in range(psi.shape[0]):
        if (i & mask) == mask:
            psi[i] = -psi[i]


def apply_swap(psi: np.ndarray, a: int, b: int):
    """Exchange qubits a and b.

    Only indices with (bit a, bit b) == (0, 1) start a swap, so every
    (01, 10) pair is visited exactly once.
    """
    if a == b:
        raise ValueError("a and b must differ")
    ma = 1 << a
    mb = 1 << b
    for i in range(psi.shape[0]):
        if not (i & ma) and (i & mb):
            j = (i | ma) & ~mb
            tmp = psi[i]
            psi[i] = psi[j]
            psi[j] = tmp


def apply_controlled_phase(psi: np.ndarray, control: int, target: int, phi: float):
    """|11> picks up e^{i phi}; everything else is untouched."""
    mask = (1 << control) | (1 << target)
    phase = cmath.exp(1j * phi)
    for i in range(psi.shape[0]):
        if (i & mask) == mask:
            psi[i] = psi[i] * phase


def apply_controlled_rz(psi: np.ndarray, control: int, target: int, theta: float):
    mc = 1 << control
    mt = 1 << target
    lo = cmath.exp(-0.5j * theta)
    hi = cmath.exp(0.5j * theta)
    for i in range(psi.shape[0]):
        if i & mc:
            psi[i] = psi[i] * (hi if i & mt else lo)


def apply_controlled_swap(psi: np.ndarray, control: int, a: int, b: int):
    """Fredkin gate; same single-visit rule as apply_swap, restricted to control=1."""
    if a == b:
        raise ValueError("a and b must differ")
    mc = 1 << control
    ma = 1 << a
    mb = 1 << b
    for i in range(psi.shape[0]):
        if (i & mc) and not (i & ma) and (i & mb):
            j = i ^ ma ^ mb
            tmp = psi[i]
            psi[i] = psi[j]
            psi[j] = tmp
