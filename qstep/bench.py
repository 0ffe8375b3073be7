# qstep/bench.py
import argparse, csv, os, platform, socket, subprocess, time
from datetime import datetime
import numpy as np
from .circuit import Circuit
from .config import SimulatorConfig
from .engine import Simulator

DATA_DIR = os.path.join(os.path.dirname(__file__), "..", "data")

HEADER = ["qubits","depth","backend","gates","wall_ms","hostname","commit","timestamp"]


def backend_dir(backend, data_dir=None):
    path = os.path.join(data_dir or DATA_DIR, backend)
    os.makedirs(path, exist_ok=True)
    return path


def meta_row():
    commit = ""
    try:
        commit = subprocess.check_output(["git", "rev-parse", "--short", "HEAD"],
                                         stderr=subprocess.DEVNULL).decode().strip()
    except (OSError, subprocess.CalledProcessError):
        pass
    return {
        "hostname": socket.gethostname(),
        "commit": commit,
        "timestamp": datetime.now().isoformat(timespec="seconds"),
        "python": platform.python_version(),
    }


def new_csv(path):
    """Create/overwrite CSV with header."""
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", newline="") as f:
        csv.DictWriter(f, fieldnames=HEADER).writeheader()


def write_row(path, row):
    with open(path, "a", newline="") as f:
        csv.DictWriter(f, fieldnames=HEADER).writerow(row)

# ---------------------------------------------------------------------

def random_circuit(n, depth, seed=0):
    """Alternating layers: single-qubit gates on every wire, then CX/SWAP/CP pairs."""
    rng = np.random.default_rng(seed)
    c = Circuit.empty(n)
    for layer in range(depth):
        if layer % 2 == 0:
            for k in range(n):
                g = rng.integers(0, 3)
                if g == 0:
                    c.h(k, col=layer)
                elif g == 1:
                    c.x(k, col=layer)
                else:
                    c.ry(k, float(rng.uniform(0, 2 * np.pi)), col=layer)
        else:
            for k in range(0, n-1, 2):
                g = rng.integers(0, 3)
                if g == 0:
                    c.cx(k, k+1, col=layer)
                elif g == 1:
                    c.swap(k, k+1, col=layer)
                else:
                    c.cp(k+1, k, float(rng.uniform(0, np.pi)), col=layer)
    return c


def time_run(circ, backend):
    sim = Simulator(SimulatorConfig(backend=backend, check_norm=False))
    t0 = time.perf_counter()
    sim.simulate(circ)
    return (time.perf_counter() - t0) * 1e3  # ms


def bench_qubits(ns, depth, backend, out_path):
    print(f"[run] Qubits scaling → {out_path}")
    new_csv(out_path)
    # one run to JIT-compile the numba kernels
    time_run(random_circuit(max(ns), 2, seed=42), backend)
    for n in ns:
        circ = random_circuit(n, depth, seed=42)
        wall = time_run(circ, backend)
        m = meta_row()
        write_row(out_path, {
            "qubits": n, "depth": depth, "backend": backend,
            "gates": len(circ.gates), "wall_ms": f"{wall:.3f}",
            "hostname": m["hostname"], "commit": m["commit"], "timestamp": m["timestamp"],
        })
        print(f"  n={n}  wall={wall:.2f} ms")
    print("✓ done.\n")


def bench_depth(n, depths, backend, out_path):
    print(f"[run] Depth scaling → {out_path}")
    new_csv(out_path)
    time_run(random_circuit(n, 2, seed=7), backend)
    for d in depths:
        circ = random_circuit(n, d, seed=7)
        wall = time_run(circ, backend)
        m = meta_row()
        write_row(out_path, {
            "qubits": n, "depth": d, "backend": backend,
            "gates": len(circ.gates), "wall_ms": f"{wall:.3f}",
            "hostname": m["hostname"], "commit": m["commit"], "timestamp": m["timestamp"],
        })
        print(f"  depth={d}  wall={wall:.2f} ms")
    print("✓ done.\n")

# ---------------------------------------------------------------------
def main(argv=None):
    p = argparse.ArgumentParser(description="qstep benchmarks → data/<backend>/*.csv")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_qubits = sub.add_parser("qubits")
    p_qubits.add_argument("--ns", type=str, default="1,2,3,4,5")
    p_qubits.add_argument("--depth", type=int, default=100)
    p_qubits.add_argument("--backend", type=str, default="serial", choices=["serial","numba"])

    p_depth = sub.add_parser("depth")
    p_depth.add_argument("--n", type=int, default=5)
    p_depth.add_argument("--depths", type=str, default="10,50,100,300")
    p_depth.add_argument("--backend", type=str, default="serial", choices=["serial","numba"])

    p.add_argument("--data-dir", type=str, default=None)

    args = p.parse_args(argv)
    base = backend_dir(args.backend, args.data_dir)

    if args.cmd == "qubits":
        ns = [int(x) for x in args.ns.split(",")]
        bench_qubits(ns, args.depth, args.backend, os.path.join(base, "qubits.csv"))

    elif args.cmd == "depth":
        ds = [int(x) for x in args.depths.split(",")]
        bench_depth(args.n, ds, args.backend, os.path.join(base, "depth.csv"))


if __name__ == "__main__":
    main()
