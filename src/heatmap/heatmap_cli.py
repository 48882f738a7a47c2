#!/usr/bin/env python3
"""
heatmap_cli.py: inspect the heatmap of a blob and draw offsets from it.

Usage:
    heatmap-scan <input> [--b64] [--gzip] [--draws N] [--seed S]
                 [--show-segments] [--debug] [--profile]

- <input>: file holding the raw blob. Corpus entries stored as Base64 and/or
  gzip can be unwrapped with --b64 / --gzip (Base64 is undone first).

Prints a one-line summary (raw length, interesting length, segment count),
optionally the segment table, then one drawn offset per line.
"""

import argparse
import os
import time

import numpy as np

from heatmap.compression import decode_b64, decompress
from heatmap.heatmap_tty import format_heatmap
from heatmap.sampler import make_generic_heatmap


def _ms(s: float) -> str:
    """Format seconds -> milliseconds string with 3 decimals."""
    return f"{s * 1000:.3f} ms"


def _info(msg: str):
    print(msg, flush=True)


def load_blob(path: str, b64: bool = False, gz: bool = False) -> bytes:
    with open(path, "rb") as f:
        data = f.read()
    if b64:
        data = decode_b64(data.strip())
    if gz:
        data = decompress(data)
    return data


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Heatmap offset sampler")
    p.add_argument("input", type=str, help="Path to the blob to scan")
    p.add_argument("--b64", action="store_true", help="Input is Base64 encoded")
    p.add_argument("--gzip", action="store_true", help="Input is gzip compressed")
    p.add_argument("--draws", type=int, default=10, help="Number of offsets to draw (default: 10)")
    p.add_argument("--seed", type=int, default=None, help="Seed for the random generator")
    p.add_argument("--show-segments", action="store_true", help="Print the segment table")
    p.add_argument("--debug", action="store_true", help="Enable debug output")
    p.add_argument("--profile", action="store_true", help="Enable profiling")
    return p.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    if not os.path.isfile(args.input):
        _info(f"[error] Input file not found: {args.input}")
        raise SystemExit(2)
    if args.draws < 0:
        _info(f"[error] --draws must be >= 0, got {args.draws}")
        raise SystemExit(2)

    t0 = time.perf_counter()
    try:
        data = load_blob(args.input, b64=args.b64, gz=args.gzip)
    except ValueError as e:
        _info(f"[error] {e}")
        raise SystemExit(2)
    if not data:
        _info(f"[error] Input is empty: {args.input}")
        raise SystemExit(2)
    t1 = time.perf_counter()

    hm = make_generic_heatmap(data, debug=args.debug)
    t2 = time.perf_counter()

    _info(f"[heatmap-scan] raw_length={hm.raw_length} interesting={hm.length} "
          f"segments={len(hm.segments)}")
    if hm.length == 0:
        _info("[heatmap-scan] data is a single repeated byte; drawing uniformly over all of it")
    if args.show_segments:
        _info(format_heatmap(hm))

    rng = np.random.default_rng(args.seed)
    for _ in range(args.draws):
        _info(str(hm.choose_location(rng)))
    t3 = time.perf_counter()

    if args.profile:
        _info(f"[Profile] load: {_ms(t1 - t0)} | scan: {_ms(t2 - t1)} | draws: {_ms(t3 - t2)}")
    return 0


if __name__ == "__main__":
    main()
