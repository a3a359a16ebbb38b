"""
Performance demonstration for threaded stroke resolution.

Resolves the same brush stroke sequentially and with the row-band thread
pool, checks that both produce identical pixels, and prints the timings.
"""

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import time
from PIL import Image

from MR_Libs.RasterLib.raster_io import new_blank_raster
from MR_Libs.SelectionLib.selection_painter import paint_stroke
from MR_Libs.SelectionLib.smart_selection import SmartSelectionResolver


def build_stroke(size):
    """Paint a diagonal stroke of discs across a blank selection."""
    selection = new_blank_raster((size, size))
    brush = max(10, size // 10)
    for offset in range(0, size, brush // 2):
        paint_stroke(selection, (offset, offset), brush, "erase")
    return selection


def time_resolve(resolver, original, selection, iterations):
    times = []
    result = None
    for _ in range(iterations):
        edited = original.copy()
        stroke = selection.copy()
        start = time.time()
        resolver.resolve(original, edited, stroke, "erase")
        times.append(time.time() - start)
        result = edited
    return sum(times) / len(times), result


def benchmark_resolve(size, iterations=3):
    print(f"\nBenchmarking {size}x{size} stroke resolution")
    print("-" * 60)

    original = Image.new("RGBA", (size, size), (200, 100, 50, 255))
    selection = build_stroke(size)

    sequential = SmartSelectionResolver(parallel_threshold=size * size + 1)
    threaded = SmartSelectionResolver(parallel_threshold=0, max_workers=4)

    avg_seq, seq_image = time_resolve(sequential, original, selection, iterations)
    avg_thr, thr_image = time_resolve(threaded, original, selection, iterations)

    print(f"  Sequential: {avg_seq:.3f}s")
    print(f"  Threaded:   {avg_thr:.3f}s")

    identical = seq_image.tobytes() == thr_image.tobytes()
    print(f"  Identical output: {'yes' if identical else 'NO'}")
    if avg_thr < avg_seq:
        print(f"  Speedup: {avg_seq / avg_thr:.2f}x")

    return avg_seq, avg_thr, identical


def main():
    print("=" * 60)
    print("Smart Selection Performance Demonstration")
    print("=" * 60)

    results = []
    for size in (500, 1000, 2000):
        try:
            results.append((size,) + benchmark_resolve(size))
        except KeyboardInterrupt:
            print("\n\nBenchmark interrupted by user")
            break

    print("\n" + "=" * 60)
    print("Summary")
    print("=" * 60)
    print(f"{'Size':<10} {'Sequential':<12} {'Threaded':<12} {'Identical':<10}")
    for size, avg_seq, avg_thr, identical in results:
        print(f"{size:<10} {avg_seq:<12.3f} {avg_thr:<12.3f} {str(identical):<10}")


if __name__ == "__main__":
    main()
