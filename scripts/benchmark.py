"""Benchmark script for measuring pixel filter throughput."""

from __future__ import annotations

import argparse
import time

import numpy as np

from modules.pipelines.image_editor import EditSettings, render_adjustments
from modules.pipelines.pixel_filters import EFFECTS, PixelBuffer, apply_effect


def run_benchmark(effect: str, size: int, repeat: int) -> None:
    """Time an effect (or the adjustment pass) on a random square image."""
    rng = np.random.default_rng(0)
    buffer = PixelBuffer(rng.integers(0, 256, size=(size, size, 4), dtype=np.uint8))
    settings = EditSettings(brightness=120, contrast=90, saturation=130, blur=2, rotation=15)

    start = time.perf_counter()
    for _ in range(repeat):
        if effect == "adjust":
            render_adjustments(buffer, settings)
        else:
            apply_effect(buffer, effect)
    elapsed = time.perf_counter() - start
    print(f"{effect} {size}x{size}: {elapsed / repeat * 1000:.1f} ms per run ({repeat} runs)")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Benchmark local image filters.")
    parser.add_argument("--effect", choices=("adjust", *EFFECTS), default="adjust")
    parser.add_argument("--size", type=int, default=1024)
    parser.add_argument("--repeat", type=int, default=5)
    return parser.parse_args()


if __name__ == "__main__":
    args = parse_args()
    run_benchmark(args.effect, args.size, args.repeat)
