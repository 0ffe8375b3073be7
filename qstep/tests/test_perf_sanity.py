# qstep/tests/test_perf_sanity.py
import csv
import numpy as np
import pytest
from qstep import bench
from qstep.circuit import Circuit

def build_chain(n, depth):
    c = Circuit.empty(n)
    for _ in range(depth):
        for k in range(n):
            c.h(k)
        for k in range(0, n-1, 2):
            c.cnot(k, k+1)
    return c

def test_bench_runs_and_times():
    c = build_chain(5, 5)
    t1 = bench.time_run(c, "serial")
    assert t1 > 0
    assert c.run().norm2() == pytest.approx(1.0)

def test_serial_vs_numba_timing():
    pytest.importorskip("numba")
    c = build_chain(5, 5)
    bench.time_run(c, "numba")  # JIT warmup
    t2 = bench.time_run(c, "numba")
    assert t2 > 0
    assert np.allclose(c.run(backend="serial").as_numpy(), c.run(backend="numba").as_numpy(),
                       atol=1e-12, rtol=0)

def test_random_circuit_columns_are_disjoint():
    c = bench.random_circuit(5, 12, seed=3)
    for col in range(c.num_cols):
        qubits = [q for g in c.gates_at_col(col) for q in g.qubits]
        assert len(qubits) == len(set(qubits))

def test_bench_cli_writes_csv(tmp_path):
    bench.main(["--data-dir", str(tmp_path), "qubits", "--ns", "1,2", "--depth", "4"])
    with open(tmp_path / "serial" / "qubits.csv") as f:
        rows = list(csv.DictReader(f))
    assert [int(r["qubits"]) for r in rows] == [1, 2]
    assert all(float(r["wall_ms"]) >= 0 for r in rows)
