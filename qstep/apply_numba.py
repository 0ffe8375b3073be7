# qstep/apply_numba.py
# Same kernels as apply_serial, JIT-compiled. Single-threaded: no prange.
import numpy as np
from numba import njit

# ---------- low-level kernels (Numba JIT) ----------

@njit(fastmath=True)
def _single_qubit_kernel(psi, U2, k):
    N = psi.shape[0]
    step = 1 << k
    block = step << 1
    for base in range(0, N, block):
        for off in range(step):
            i0 = base + off
            i1 = i0 + step
            a0 = psi[i0]
            a1 = psi[i1]
            psi[i0] = U2[0,0]*a0 + U2[0,1]*a1
            psi[i1] = U2[1,0]*a0 + U2[1,1]*a1

@njit
def _controlled_x_kernel(psi, control_mask, target):
    N = psi.shape[0]
    mt = 1 << target
    for i0 in range(N):
        if (i0 & control_mask) == control_mask and (i0 & mt) == 0:
            i1 = i0 | mt
            a0 = psi[i0]
            psi[i0] = psi[i1]
            psi[i1] = a0

@njit
def _controlled_z_kernel(psi, mask):
    for i in range(psi.shape[0]):
        if (i & mask) == mask:
            psi[i] = -psi[i]

@njit
def _swap_kernel(psi, control_mask, ma, mb):
    # (bit a, bit b) == (0, 1) is the canonical member of each pair
    for i in range(psi.shape[0]):
        if (i & control_mask) == control_mask and (i & ma) == 0 and (i & mb) != 0:
            j = i ^ ma ^ mb
            tmp = psi[i]
            psi[i] = psi[j]
            psi[j] = tmp

@njit(fastmath=True)
def _phase_kernel(psi, mask, phase):
    for i in range(psi.shape[0]):
        if (i & mask) == mask:
            psi[i] = psi[i] * phase

@njit(fastmath=True)
def _controlled_rz_kernel(psi, mc, mt, lo, hi):
    for i in range(psi.shape[0]):
        if (i & mc) != 0:
            if (i & mt) != 0:
                psi[i] = psi[i] * hi
            else:
                psi[i] = psi[i] * lo

# ---------- user-facing apply helpers ----------

def apply_single_qubit(psi: np.ndarray, U2: np.ndarray, k: int):
    _single_qubit_kernel(psi, U2.astype(psi.dtype), k)

def apply_controlled_x(psi: np.ndarray, control_mask: int, target: int):
    _controlled_x_kernel(psi, control_mask, target)

def apply_controlled_z(psi: np.ndarray, control_mask: int, target: int):
    _controlled_z_kernel(psi, control_mask | (1 << target))

def apply_swap(psi: np.ndarray, a: int, b: int):
    if a == b:
        raise ValueError("a and b must differ")
    _swap_kernel(psi, 0, 1 << a, 1 << b)

def apply_controlled_phase(psi: np.ndarray, control: int, target: int, phi: float):
    phase = complex(np.cos(phi), np.sin(phi))
    _phase_kernel(psi, (1 << control) | (1 << target), phase)

def apply_controlled_rz(psi: np.ndarray, control: int, target: int, theta: float):
    half = 0.5 * theta
    lo = complex(np.cos(half), -np.sin(half))
    hi = complex(np.cos(half), np.sin(half))
    _controlled_rz_kernel(psi, 1 << control, 1 << target, lo, hi)

def apply_controlled_swap(psi: np.ndarray, control: int, a: int, b: int):
    if a == b:
        raise ValueError("a and b must differ")
    _swap_kernel(psi, 1 << control, 1 << a, 1 << b)
