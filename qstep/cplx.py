# qstep/cplx.py
"""(re, im) pair arithmetic and conversions to complex128 arrays.

Amplitudes cross the engine boundary as pairs of floats, e.g.
``[[0.7071, 0.0], [0.0, 0.7071]]``; inside the engine they are numpy complex.
"""
import math
from typing import Iterable, List, Tuple, Union

import numpy as np

Pair = Tuple[float, float]


def c_add(a: Pair, b: Pair) -> Pair:
    return (a[0] + b[0], a[1] + b[1])


def c_sub(a: Pair, b: Pair) -> Pair:
    return (a[0] - b[0], a[1] - b[1])


def c_mul(a: Pair, b: Pair) -> Pair:
    # (a+bi)(c+di)
    return (a[0] * b[0] - a[1] * b[1], a[0] * b[1] + a[1] * b[0])


def c_scale(a: Pair, s: float) -> Pair:
    return (a[0] * s, a[1] * s)


def c_abs2(a: Pair) -> float:
    return a[0] * a[0] + a[1] * a[1]


def c_abs(a: Pair) -> float:
    return math.sqrt(a[0] * a[0] + a[1] * a[1])


def c_conj(a: Pair) -> Pair:
    return (a[0], -a[1])


def c_exp_i(phi: float) -> Pair:
    """e^{i phi} as a pair."""
    return (math.cos(phi), math.sin(phi))


def to_complex(a: Pair) -> complex:
    return complex(a[0], a[1])


def to_pair(z: complex) -> Pair:
    return (float(z.real), float(z.imag))


def pairs_to_array(values: Iterable[Union[Pair, complex, float]]) -> np.ndarray:
    """Build a complex128 vector from pairs or plain numbers.

    Raises ValueError for anything that is neither a number nor a 2-element pair.
    """
    out = []
    for i, v in enumerate(values):
        if isinstance(v, (int, float, complex, np.number)):
            out.append(complex(v))
            continue
        try:
            re, im = v
        except (TypeError, ValueError):
            raise ValueError(f"Amplitude {i} is not a (re, im) pair: {v!r}") from None
        out.append(complex(float(re), float(im)))
    return np.asarray(out, dtype=np.complex128)


def array_to_pairs(arr: np.ndarray) -> List[Pair]:
    return [to_pair(z) for z in np.asarray(arr).ravel()]
