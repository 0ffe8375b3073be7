# qstep/tests/test_density.py
import numpy as np
import pytest
from qstep import density as dm
from qstep.circuit import Circuit, InputState
from qstep.engine import apply_column, simulate
from qstep.errors import ConfigurationError, UnsupportedGateError
from qstep.gates import Gate, GateKind, H, RY

def random_state(n, seed):
    rng = np.random.default_rng(seed)
    psi = rng.normal(size=1 << n) + 1j * rng.normal(size=1 << n)
    return psi / np.linalg.norm(psi)

@pytest.mark.parametrize("seed", range(4))
def test_pure_state_round_trip(seed):
    psi = random_state(3, seed)
    rho = dm.from_pure_state(psi)
    assert dm.is_hermitian(rho)
    assert abs(dm.trace(rho) - 1.0) < 1e-9
    assert np.allclose(dm.diagonal_probabilities(rho), np.abs(psi)**2, atol=1e-12)

def test_pure_state_accepts_pairs():
    rho = dm.from_pure_state([[0.0, 0.0], [1.0, 0.0]])
    assert np.allclose(rho, [[0, 0], [0, 1]])

def test_ensemble_maximally_mixed():
    rho = dm.from_ensemble([(0.5, [1, 0]), (0.5, [0, 1])])
    assert np.allclose(rho, np.eye(2) / 2)
    assert dm.marginal_probability_of_one(rho, 0) == pytest.approx(0.5)

def test_ensemble_errors():
    with pytest.raises(ConfigurationError):
        dm.from_ensemble([])
    with pytest.raises(ConfigurationError):
        dm.from_ensemble([(0.5, [1, 0]), (0.5, [1, 0, 0, 0])])

@pytest.mark.parametrize("target", [0, 1, 2])
def test_conjugation_matches_pure_evolution(target):
    psi = random_state(3, 10 + target)
    U = RY(0.7) @ H()
    rho = dm.from_pure_state(psi)
    out = dm.apply_single_qubit_gate(rho, U, target)
    g1 = Gate(GateKind.H, (target,))
    g2 = Gate(GateKind.RY, (target,), params={"theta": 0.7})
    evolved = apply_column(apply_column(psi, [g1], 3), [g2], 3)
    assert np.allclose(out, dm.from_pure_state(evolved), atol=1e-12)
    assert dm.is_hermitian(out)
    # input untouched
    assert np.allclose(rho, dm.from_pure_state(psi))

def test_marginal_probability_of_one():
    rho = dm.from_pure_state(Circuit.empty(2).x(0).run().as_numpy())
    assert dm.marginal_probability_of_one(rho, 0) == pytest.approx(1.0)
    assert dm.marginal_probability_of_one(rho, 1) == pytest.approx(0.0)

def test_hadamard_on_mixed_state_keeps_it_mixed():
    rho = dm.from_ensemble([(0.5, [1, 0]), (0.5, [0, 1])])
    out = dm.apply_column_density(rho, [Gate(GateKind.H, (0,))], 1)
    assert np.allclose(out, np.eye(2) / 2)

def test_column_density_skips_measure_rejects_controlled():
    rho = dm.from_pure_state([1, 0, 0, 0])
    out = dm.apply_column_density(rho, [Gate(GateKind.X, (1,)), Gate(GateKind.MEASURE, (0,))], 2)
    assert dm.marginal_probability_of_one(out, 1) == pytest.approx(1.0)
    with pytest.raises(UnsupportedGateError):
        dm.apply_column_density(rho, [Gate(GateKind.CX, (1,), (0,))], 2)

def test_bad_shapes_fail_loudly():
    with pytest.raises(ConfigurationError):
        dm.apply_single_qubit_gate(np.eye(3), H(), 0)
    with pytest.raises(ConfigurationError):
        dm.apply_single_qubit_gate(np.eye(4) / 4, H(), 2)
    with pytest.raises(ConfigurationError):
        dm.apply_column_density(np.eye(2) / 2, [], 2)

def test_statevector_engine_rejects_mixed_input():
    inp = InputState(1)
    inp.set_density_matrix(np.eye(2) / 2)
    assert inp.is_mixed
    with pytest.raises(ConfigurationError):
        simulate(Circuit.empty(1).h(0), inp)

def test_marginal_rejects_out_of_range_target():
    rho = dm.from_pure_state([0, 1])
    with pytest.raises(ConfigurationError):
        dm.marginal_probability_of_one(rho, 5)
    with pytest.raises(ConfigurationError):
        dm.marginal_probability_of_one(rho, -1)

def test_gate_matrix_may_be_nested_list():
    rho = dm.from_pure_state([1, 0])
    out = dm.apply_single_qubit_gate(rho, [[0, 1], [1, 0]], 0)
    assert np.allclose(out, [[0, 0], [0, 1]])
