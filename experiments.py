"""
Benchmark for the Huffman text codec.

Every run goes through the same path a caller uses: codec.compress_to_container,
container.serialize / deserialize, codec.decompress_container. Codec errors
are not caught; a run that decodes to different text is recorded with
correctness_ok = 0.

Outputs (in --outdir): metrics.csv, summary.csv, bits_per_symbol.png, timing.png

  python experiments.py --outdir results --runs 3
  python experiments.py --datasets zipf128,unicode_mixed --max_kb 512 --verbose
"""

from __future__ import annotations

import argparse
import csv
import dataclasses
import logging
import math
import random
import statistics
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import matplotlib.pyplot as plt

import codec
import container as container_mod

logger = logging.getLogger(__name__)


def shannon_entropy(ft: Dict[str, int]) -> float:
    """
    Bits per symbol lower bound for a memoryless source with these counts
    """
    total = sum(ft.values())
    if total == 0:
        return 0.0
    return -sum((c / total) * math.log2(c / total) for c in ft.values() if c)


# Synthetic text sources: name -> (alphabet, weights)

def _zipf(alphabet: str, s: float = 1.2) -> Tuple[str, List[float]]:
    return alphabet, [1.0 / ((i + 1) ** s) for i in range(len(alphabet))]

_PRINTABLE = "".join(chr(c) for c in range(0x21, 0x7F))

SOURCES: Dict[str, Tuple[str, List[float]]] = {
    "uniform64": (_PRINTABLE[:64], [1.0] * 64),
    "zipf128": _zipf(_PRINTABLE + "".join(chr(c) for c in range(0xC0, 0xC0 + 34))),
    "repetitive90": ("A" + _PRINTABLE.replace("A", ""), [0.90 * 93] + [0.10] * 93),
    "english_like": (" etaoinshrdlucmfwgypbvkjxq.,\n",
                     [13.0] + [6.0] * 12 + [2.5] * 10 + [1.2] * 3 + [1.5] * 3),
    "unicode_mixed": ("abcdefgh " + "éüßçñ" + "αβγδλπ" + "日本語中文" + "😀🚀✓—",
                      [8.0] * 9 + [1.0] * 20),
}


def generate_text(name: str, size: int, seed: int) -> str:
    if name not in SOURCES:
        raise ValueError(f"unknown dataset {name!r}, expected one of {sorted(SOURCES)}")
    alphabet, weights = SOURCES[name]
    return "".join(random.Random(seed).choices(alphabet, weights=weights, k=size))


@dataclass
class MetricRow:
    dataset_name: str
    text_symbols: int
    run_id: int
    unique_symbols: int
    utf8_bytes: int
    container_bytes: int
    encoded_bits: int
    pad_bits: int
    bits_per_symbol: float
    entropy_bits_per_symbol: float
    compression_ratio: float
    compress_ms: float
    serialize_ms: float
    deserialize_ms: float
    decompress_ms: float
    correctness_ok: int  # 1 or 0


def _timed(fn, *args):
    t0 = time.perf_counter_ns()
    result = fn(*args)
    return result, (time.perf_counter_ns() - t0) / 1_000_000.0


def run_one(text: str, dataset_name: str = "", run_id: int = 0) -> MetricRow:
    packed, compress_ms = _timed(codec.compress_to_container, text)
    blob, serialize_ms = _timed(container_mod.serialize,
                                packed.original_bit_length, packed.frequency_table, packed.packed)
    restored, deserialize_ms = _timed(container_mod.deserialize, blob)
    decoded, decompress_ms = _timed(codec.decompress_container, restored)

    correctness_ok = int(decoded == text)
    if not correctness_ok:
        logger.error("round trip mismatch on %s run %d: %d symbols in, %d out",
                     dataset_name, run_id, len(text), len(decoded))

    utf8_bytes = len(text.encode("utf-8"))
    bits = packed.original_bit_length
    return MetricRow(
        dataset_name=dataset_name,
        text_symbols=len(text),
        run_id=run_id,
        unique_symbols=len(packed.frequency_table),
        utf8_bytes=utf8_bytes,
        container_bytes=len(blob),
        encoded_bits=bits,
        pad_bits=len(packed.packed) * 8 - bits,
        bits_per_symbol=bits / max(1, len(text)),
        entropy_bits_per_symbol=shannon_entropy(packed.frequency_table),
        compression_ratio=len(blob) / max(1, utf8_bytes),
        compress_ms=compress_ms,
        serialize_ms=serialize_ms,
        deserialize_ms=deserialize_ms,
        decompress_ms=decompress_ms,
        correctness_ok=correctness_ok,
    )


SUMMARY_METRICS = ["compression_ratio", "bits_per_symbol", "compress_ms", "decompress_ms"]


def write_results(rows: List[MetricRow], outdir: Path) -> None:
    fields = [f.name for f in dataclasses.fields(MetricRow)]
    with (outdir / "metrics.csv").open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=fields)
        w.writeheader()
        w.writerows(dataclasses.asdict(r) for r in rows)

    groups: Dict[Tuple[str, int], List[MetricRow]] = {}
    for r in rows:
        groups.setdefault((r.dataset_name, r.text_symbols), []).append(r)

    summary_fields = ["dataset_name", "text_symbols", "n_runs", "correctness_ok_rate"]
    summary_fields += [f"{m}_{s}" for m in SUMMARY_METRICS for s in ("mean", "stdev")]
    with (outdir / "summary.csv").open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=summary_fields)
        w.writeheader()
        for (name, size), items in sorted(groups.items()):
            row = {
                "dataset_name": name,
                "text_symbols": size,
                "n_runs": len(items),
                "correctness_ok_rate": sum(x.correctness_ok for x in items) / len(items),
            }
            for m in SUMMARY_METRICS:
                vals = [getattr(x, m) for x in items]
                row[f"{m}_mean"] = statistics.mean(vals)
                row[f"{m}_stdev"] = statistics.stdev(vals) if len(vals) > 1 else 0.0
            w.writerow(row)


def plot_results(rows: List[MetricRow], outdir: Path) -> None:
    datasets = sorted({r.dataset_name for r in rows})
    largest = max(r.text_symbols for r in rows)

    def mean_of(field: str, dataset: str, size: int) -> float:
        return statistics.mean(getattr(r, field) for r in rows
                               if r.dataset_name == dataset and r.text_symbols == size)

    x = list(range(len(datasets)))
    plt.figure()
    plt.bar([i - 0.2 for i in x], [mean_of("bits_per_symbol", d, largest) for d in datasets],
            width=0.4, label="huffman")
    plt.bar([i + 0.2 for i in x], [mean_of("entropy_bits_per_symbol", d, largest) for d in datasets],
            width=0.4, label="entropy")
    plt.xticks(x, datasets, rotation=20, ha="right")
    plt.ylabel("Bits per Symbol")
    plt.title(f"Code Length vs Entropy ({largest} symbols)")
    plt.legend()
    plt.tight_layout()
    plt.savefig(outdir / "bits_per_symbol.png", dpi=150)
    plt.close()

    plt.figure()
    for d in datasets:
        sizes = sorted({r.text_symbols for r in rows if r.dataset_name == d})
        plt.plot(sizes, [mean_of("compress_ms", d, s) for s in sizes], marker="o", label=f"{d} compress")
        plt.plot(sizes, [mean_of("decompress_ms", d, s) for s in sizes], marker="x",
                 linestyle="--", label=f"{d} decompress")
    plt.xscale("log", base=2)
    plt.xlabel("Text Size (symbols)")
    plt.ylabel("Time (ms)")
    plt.title("Codec Time vs Size")
    plt.legend(fontsize="small")
    plt.tight_layout()
    plt.savefig(outdir / "timing.png", dpi=150)
    plt.close()


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Benchmark the Huffman text codec on synthetic text.")
    ap.add_argument("--outdir", type=str, default="results", help="Output directory for CSV and plots")
    ap.add_argument("--runs", type=int, default=3, help="Repetitions per dataset and size")
    ap.add_argument("--seed", type=int, default=123, help="Base random seed")
    ap.add_argument("--datasets", type=str, default=",".join(SOURCES),
                    help=f"Comma-separated dataset names from: {', '.join(SOURCES)}")
    ap.add_argument("--min_kb", type=int, default=1, help="Smallest text size in K symbols")
    ap.add_argument("--max_kb", type=int, default=128, help="Largest text size in K symbols (doubling from --min_kb)")
    ap.add_argument("--verbose", action="store_true", help="Log codec debug output")
    args = ap.parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        )

    datasets = [x.strip() for x in args.datasets.split(",") if x.strip()]
    unknown = [d for d in datasets if d not in SOURCES]
    if unknown:
        ap.error(f"unknown datasets: {', '.join(unknown)}")

    sizes = []
    size = max(1, args.min_kb) * 1024
    while size <= max(1, args.max_kb) * 1024:
        sizes.append(size)
        size *= 2

    rows: List[MetricRow] = []
    for name in datasets:
        for size in sizes:
            for run_id in range(1, args.runs + 1):
                text = generate_text(name, size, args.seed + size + run_id)
                rows.append(run_one(text, name, run_id))

    outdir = Path(args.outdir)
    outdir.mkdir(parents=True, exist_ok=True)
    write_results(rows, outdir)
    if rows:
        plot_results(rows, outdir)

    ok_rate = sum(r.correctness_ok for r in rows) / max(1, len(rows))
    print(f"Wrote {len(rows)} rows to {outdir / 'metrics.csv'}")
    print(f"Correctness rate across all runs: {ok_rate:.3f}")
    print("Charts saved in:", outdir.resolve())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
