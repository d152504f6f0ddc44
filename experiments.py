# experiments.py

"""
Huffman header codec experiments

Runs repeated compress/decompress round trips over synthetic data and
reports how close the code gets to the entropy of each distribution, and
what the textual header costs on small inputs.

Outputs (in --outdir):
  - metrics.csv     (raw row per run)
  - summary.csv     (grouped mean/stdev)
  - *.png           (charts)

How to run:
  python experiments.py --outdir results --runs 5
  python experiments.py --outdir results --runs 3 --exp1_size_kb 256 --exp2_max_kb 2048
  python experiments.py --outdir results --exp1_generators uniform256,zipf128,english_like --no_exp3

Notes:
  Timings include the pure-Python bit loop, so absolute numbers are only
  comparable against each other.
"""

from __future__ import annotations

import argparse
import csv
import io
import logging
import math
import random
import statistics
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Sequence, Tuple

import matplotlib.pyplot as plt

import huffman as huff
from huffman_bitio import HuffmanOutput
from huffman_codec import compress, decompress_bytes
from huffman_errors import HuffmanError
from huffman_header import flatten_tree_to_header

logger = logging.getLogger(__name__)


# Utilities

def now_ns() -> int:
    return time.perf_counter_ns()

def ns_to_ms(ns: int) -> float:
    return ns / 1_000_000.0

def safe_mkdir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)

def shannon_entropy(ft: Dict[int, int]) -> float:
    """Bits per symbol of an ideal code for this frequency table."""
    total = sum(ft.values())
    if total == 0:
        return 0.0
    return -sum((c / total) * math.log2(c / total) for c in ft.values())


# Synthetic dataset generators

def _sample_cdf(rng: random.Random, weights: Sequence[float], size: int) -> List[int]:
    # Returns indices drawn in proportion to weights
    total = sum(weights)
    cdf = []
    acc = 0.0
    for w in weights:
        acc += w / total
        cdf.append(acc)

    out = []
    for _ in range(size):
        r = rng.random()
        lo, hi = 0, len(cdf) - 1
        while lo < hi:
            mid = (lo + hi) // 2
            if r <= cdf[mid]:
                hi = mid
            else:
                lo = mid + 1
        out.append(lo)
    return out

def gen_uniform(size: int, alphabet: int = 256, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    return bytes(rng.randrange(0, alphabet) for _ in range(size))

def gen_repetitive(size: int, dominant: int = ord('A'), dom_frac: float = 0.90, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    other_symbols = [i for i in range(256) if i != dominant]
    return bytes(dominant if rng.random() < dom_frac else rng.choice(other_symbols) for _ in range(size))

def gen_zipf_like(size: int, alphabet: int = 128, s: float = 1.2, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    weights = [1.0 / ((i + 1) ** s) for i in range(alphabet)]
    return bytes(_sample_cdf(rng, weights, size))

def gen_english_like(size: int, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    chars = (
        " etaoinshrdlcumwfgypbvkjxq"
        "ETAOINSHRDLCUMWFGYPBVKJXQ"
        "\n"
    )
    weights = []
    for ch in chars:
        if ch == ' ':
            weights.append(13.0)
        elif ch == '\n':
            weights.append(1.5)
        elif ch.lower() in "etaoinshrdlu":
            weights.append(6.0)
        elif ch.lower() in "cmfwgypbvk":
            weights.append(2.5)
        else:
            weights.append(1.2)
    return bytes(ord(chars[i]) for i in _sample_cdf(rng, weights, size))

def gen_single_symbol(size: int, seed: int = 0) -> bytes:
    return b"a" * size

GENERATOR_REGISTRY: Dict[str, Callable[[int, int], bytes]] = {
    "uniform256": lambda size, seed: gen_uniform(size, alphabet=256, seed=seed),
    "uniform128": lambda size, seed: gen_uniform(size, alphabet=128, seed=seed),
    "zipf128": lambda size, seed: gen_zipf_like(size, alphabet=128, s=1.2, seed=seed),
    "zipf64": lambda size, seed: gen_zipf_like(size, alphabet=64, s=1.2, seed=seed),
    "repetitive90": lambda size, seed: gen_repetitive(size, dominant=ord('A'), dom_frac=0.90, seed=seed),
    "repetitive99": lambda size, seed: gen_repetitive(size, dominant=ord('A'), dom_frac=0.99, seed=seed),
    "english_like": lambda size, seed: gen_english_like(size, seed=seed),
    "single_symbol": lambda size, seed: gen_single_symbol(size, seed=seed),
}

def generate_dataset(name: str, size_bytes: int, seed: int) -> Tuple[str, bytes]:
    """
    Unknown dataset names fall back to uniform256 so a typo does not end the run
    """
    fn = GENERATOR_REGISTRY.get(name)
    if fn is None:
        logger.warning("unknown generator %r, using uniform256", name)
        return f"{name}_fallback_uniform256", gen_uniform(size_bytes, alphabet=256, seed=seed)
    return name, fn(size_bytes, seed)


# Experiment runner

@dataclass
class MetricRow:
    exp_name: str
    dataset_name: str
    file_size_bytes: int
    run_id: int
    unique_symbols: int

    build_tree_ms: float
    encode_ms: float
    decode_ms: float
    total_ms: float

    header_bytes: int
    compressed_bytes: int
    pad_bits: int
    compression_ratio: float

    avg_code_bits: float
    entropy_bits: float
    max_code_bits: int
    correctness_ok: int  # 1 or 0


def run_one(data: bytes) -> MetricRow:
    # Tree build on its own, for timing and code statistics
    t0 = now_ns()
    ft = huff.build_frequency_table(data)
    code_map: Dict[int, str] = {}
    header = ""
    if ft:
        root = huff.build_huffman_tree(ft)
        header = flatten_tree_to_header(root)
        code_map = huff.generate_huffman_codes(root)
    t1 = now_ns()

    # Full compression, which counts and builds again
    sink = HuffmanOutput()
    compress(io.BytesIO(data), sink)
    packed = sink.getvalue()
    t2 = now_ns()

    try:
        decoded = decompress_bytes(packed)
    except HuffmanError as exc:
        logger.error("round trip failed on %d bytes: %s", len(data), exc)
        decoded = None
    t3 = now_ns()

    n = max(1, len(data))
    avg_bits = sum(ft[s] * len(code_map[s]) for s in ft) / n

    return MetricRow(
        exp_name="",
        dataset_name="",
        file_size_bytes=len(data),
        run_id=0,
        unique_symbols=len(ft),
        build_tree_ms=ns_to_ms(t1 - t0),
        encode_ms=ns_to_ms(t2 - t1),
        decode_ms=ns_to_ms(t3 - t2),
        total_ms=ns_to_ms(t3 - t0),
        header_bytes=len(header),
        compressed_bytes=len(packed),
        pad_bits=sink.pad_bits,
        compression_ratio=len(packed) / n,
        avg_code_bits=avg_bits,
        entropy_bits=shannon_entropy(ft),
        max_code_bits=max((len(c) for c in code_map.values()), default=0),
        correctness_ok=1 if decoded == data else 0,
    )


def write_csv(path: Path, rows: List[MetricRow]) -> None:
    fields = list(MetricRow.__dataclass_fields__.keys())
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=fields)
        w.writeheader()
        for r in rows:
            w.writerow({k: getattr(r, k) for k in fields})


SUMMARY_METRICS = (
    "compression_ratio", "avg_code_bits", "entropy_bits", "header_bytes",
    "build_tree_ms", "encode_ms", "decode_ms", "total_ms",
)

def mean_stdev(vals: List[float]) -> Tuple[float, float]:
    if len(vals) == 1:
        return vals[0], 0.0
    return statistics.mean(vals), statistics.stdev(vals)

def group_summary(rows: List[MetricRow], out_path: Path) -> None:
    """
    Group by exp_name, dataset_name, file_size_bytes and compute mean/stdev
    """
    key_to: Dict[Tuple[str, str, int], List[MetricRow]] = {}
    for r in rows:
        key = (r.exp_name, r.dataset_name, r.file_size_bytes)
        key_to.setdefault(key, []).append(r)

    summary_fields = ["exp_name", "dataset_name", "file_size_bytes", "n_runs"]
    for m in SUMMARY_METRICS:
        summary_fields += [f"{m}_mean", f"{m}_stdev"]
    summary_fields.append("correctness_ok_rate")

    with out_path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=summary_fields)
        w.writeheader()
        for key, items in sorted(key_to.items()):
            exp_name, dataset_name, size_b = key
            row = {
                "exp_name": exp_name,
                "dataset_name": dataset_name,
                "file_size_bytes": size_b,
                "n_runs": len(items),
                "correctness_ok_rate": sum(x.correctness_ok for x in items) / len(items),
            }
            for m in SUMMARY_METRICS:
                row[f"{m}_mean"], row[f"{m}_stdev"] = mean_stdev([getattr(x, m) for x in items])
            w.writerow(row)


# Plotting

def _save(outdir: Path, name: str) -> None:
    plt.tight_layout()
    plt.savefig(outdir / name, dpi=200)
    plt.close()


def plot_experiment_1(rows: List[MetricRow], outdir: Path) -> None:
    exp_rows = [r for r in rows if r.exp_name == "exp1_distribution"]
    if not exp_rows:
        return

    datasets = sorted(set(r.dataset_name for r in exp_rows))

    def mean_for(dataset: str, field: str) -> float:
        vals = [getattr(r, field) for r in exp_rows if r.dataset_name == dataset]
        return statistics.mean(vals) if vals else float("nan")

    x = list(range(len(datasets)))

    plt.figure()
    plt.bar(x, [mean_for(d, "compression_ratio") for d in datasets])
    plt.xticks(x, datasets, rotation=20, ha="right")
    plt.ylabel("Compressed Bytes / Original Bytes")
    plt.title("Experiment 1: Compression Ratio by Distribution")
    _save(outdir, "exp1_compression_ratio.png")

    plt.figure()
    plt.plot(x, [mean_for(d, "avg_code_bits") for d in datasets], marker="o", label="huffman")
    plt.plot(x, [mean_for(d, "entropy_bits") for d in datasets], marker="x", label="entropy")
    plt.xticks(x, datasets, rotation=20, ha="right")
    plt.ylabel("Bits per Symbol")
    plt.title("Experiment 1: Average Code Length vs Entropy")
    plt.legend()
    _save(outdir, "exp1_code_length.png")


def plot_experiment_2(rows: List[MetricRow], outdir: Path) -> None:
    exp_rows = [r for r in rows if r.exp_name == "exp2_size_scaling"]
    if not exp_rows:
        return

    for dist in sorted(set(r.dataset_name for r in exp_rows)):
        dist_rows = [r for r in exp_rows if r.dataset_name == dist]
        sizes = sorted(set(r.file_size_bytes for r in dist_rows))

        def mean_size(size: int, field: str) -> float:
            vals = [getattr(r, field) for r in dist_rows if r.file_size_bytes == size]
            return statistics.mean(vals) if vals else float("nan")

        plt.figure()
        plt.plot(sizes, [mean_size(s, "encode_ms") for s in sizes], marker="o", label="compress")
        plt.plot(sizes, [mean_size(s, "decode_ms") for s in sizes], marker="o", label="decompress")
        plt.xlabel("File Size (bytes)")
        plt.ylabel("Time (ms)")
        plt.title(f"Experiment 2: Time vs Size ({dist})")
        plt.legend()
        _save(outdir, f"exp2_time_{dist}.png")

        plt.figure()
        plt.plot(sizes, [mean_size(s, "compression_ratio") for s in sizes], marker="o")
        plt.xlabel("File Size (bytes)")
        plt.ylabel("Compressed Bytes / Original Bytes")
        plt.title(f"Experiment 2: Compression Ratio vs Size ({dist})")
        _save(outdir, f"exp2_compression_ratio_{dist}.png")


def plot_experiment_3(rows: List[MetricRow], outdir: Path) -> None:
    exp_rows = [r for r in rows if r.exp_name == "exp3_header_overhead"]
    if not exp_rows:
        return

    plt.figure()
    for dist in sorted(set(r.dataset_name for r in exp_rows)):
        dist_rows = [r for r in exp_rows if r.dataset_name == dist]
        sizes = sorted(set(r.file_size_bytes for r in dist_rows))
        y = []
        for s in sizes:
            at_size = [r for r in dist_rows if r.file_size_bytes == s]
            y.append(statistics.mean(r.header_bytes / max(1, r.compressed_bytes) for r in at_size))
        plt.plot(sizes, y, marker="o", label=dist)
    plt.xscale("log", base=2)
    plt.xlabel("File Size (bytes)")
    plt.ylabel("Header Bytes / Compressed Bytes")
    plt.title("Experiment 3: Header Overhead vs Size")
    plt.legend()
    _save(outdir, "exp3_header_overhead.png")


# Main

def parse_csv_list(s: str) -> List[str]:
    return [x.strip() for x in s.split(",") if x.strip()]

def power_of_two_sizes(min_bytes: int, max_bytes: int) -> List[int]:
    sizes: List[int] = []
    s = min_bytes
    while s <= max_bytes:
        sizes.append(s)
        s *= 2
    return sizes

def main(argv: List[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Benchmark the Huffman header codec on synthetic data.")
    ap.add_argument("--outdir", type=str, default="results", help="Output directory for CSV and plots")
    ap.add_argument("--runs", type=int, default=5, help="Repetitions per configuration (>=3 recommended for timing)")
    ap.add_argument("--seed", type=int, default=123, help="Base random seed")
    ap.add_argument("--verbose", action="store_true", help="Log codec progress at debug level")

    # Experiment toggles
    ap.add_argument("--no_exp1", action="store_true", help="Disable experiment 1 (distribution)")
    ap.add_argument("--no_exp2", action="store_true", help="Disable experiment 2 (size scaling)")
    ap.add_argument("--no_exp3", action="store_true", help="Disable experiment 3 (header overhead)")

    # Experiment 1 controls
    ap.add_argument("--exp1_size_kb", type=int, default=128, help="Experiment 1 fixed file size in KB")
    ap.add_argument("--exp1_generators", type=str, default="uniform256,zipf128,repetitive90,english_like,single_symbol",
                    help="Comma-separated dataset generator names for experiment 1")

    # Experiment 2 controls
    ap.add_argument("--exp2_min_kb", type=int, default=4, help="Experiment 2 min size in KB (power-of-two growth)")
    ap.add_argument("--exp2_max_kb", type=int, default=1024, help="Experiment 2 max size in KB (power-of-two growth)")
    ap.add_argument("--exp2_generators", type=str, default="uniform256,zipf128,repetitive90",
                    help="Comma-separated dataset generator names for experiment 2")

    # Experiment 3 controls
    ap.add_argument("--exp3_max_kb", type=int, default=64, help="Experiment 3 max size in KB, starting from 16 bytes")
    ap.add_argument("--exp3_generators", type=str, default="uniform256,english_like",
                    help="Comma-separated dataset generator names for experiment 3")

    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    outdir = Path(args.outdir)
    safe_mkdir(outdir)

    rows: List[MetricRow] = []

    def record(exp_name: str, gen_name: str, size_b: int, seed: int, run_id: int) -> None:
        dataset_name, data = generate_dataset(gen_name, size_b, seed)
        row = run_one(data)
        row.exp_name = exp_name
        row.dataset_name = dataset_name
        row.run_id = run_id
        rows.append(row)

    # Experiment 1: distributions (fixed size)
    if not args.no_exp1:
        fixed_size = max(1, args.exp1_size_kb) * 1024
        for gen_name in parse_csv_list(args.exp1_generators):
            logger.info("exp1: %s at %d bytes", gen_name, fixed_size)
            for run_id in range(1, args.runs + 1):
                record("exp1_distribution", gen_name, fixed_size, args.seed + run_id, run_id)

    # Experiment 2: size scaling (multiple sizes, powers of 2)
    if not args.no_exp2:
        sizes = power_of_two_sizes(max(1, args.exp2_min_kb) * 1024, max(1, args.exp2_max_kb) * 1024)
        for gen_name in parse_csv_list(args.exp2_generators):
            for size_b in sizes:
                logger.info("exp2: %s at %d bytes", gen_name, size_b)
                for run_id in range(1, args.runs + 1):
                    record("exp2_size_scaling", gen_name, size_b, args.seed + 10_000 + size_b + run_id, run_id)

    # Experiment 3: header overhead on small inputs
    if not args.no_exp3:
        sizes = power_of_two_sizes(16, max(1, args.exp3_max_kb) * 1024)
        for gen_name in parse_csv_list(args.exp3_generators):
            logger.info("exp3: %s over %d sizes", gen_name, len(sizes))
            for size_b in sizes:
                for run_id in range(1, args.runs + 1):
                    record("exp3_header_overhead", gen_name, size_b, args.seed + 200_000 + size_b + run_id, run_id)

    # Write raw and summary
    metrics_csv = outdir / "metrics.csv"
    summary_csv = outdir / "summary.csv"
    write_csv(metrics_csv, rows)
    group_summary(rows, summary_csv)

    # Plots
    plot_experiment_1(rows, outdir)
    plot_experiment_2(rows, outdir)
    plot_experiment_3(rows, outdir)

    ok_rate = sum(r.correctness_ok for r in rows) / len(rows) if rows else 1.0
    print(f"Wrote {len(rows)} rows to {metrics_csv}")
    print(f"Wrote grouped summary to {summary_csv}")
    print(f"Correctness rate across all runs: {ok_rate:.3f}")
    print("Charts saved in:", outdir.resolve())
    return 0 if ok_rate == 1.0 else 1


if __name__ == "__main__":
    raise SystemExit(main())
