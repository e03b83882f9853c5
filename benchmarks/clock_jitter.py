"""Timer wheel jitter benchmark.

Schedules a self-rescheduling callback on one wheel and measures how late each
firing is relative to its scheduled time. Lateness is bounded by the wheel's
resolution; this shows how close to that bound a given machine gets.

Usage:
    python benchmarks/clock_jitter.py [--bpm BPM] [--beats N] [--divisor D]
                                      [--compare]

Options:
    --bpm BPM           Tempo in BPM (default: 120)
    --beats N           Number of beats to measure (default: 64)
    --divisor D         Wheel resolution = beat / D (default: 10)
    --compare           Run divisors 4, 10 and 40 and print each report
"""

import argparse
import logging
import statistics
import threading
import time

# Only errors from the wheels during the benchmark.
logging.basicConfig(level=logging.ERROR)

import hotbeat.scheduler


def _run_benchmark (bpm: float, beats: int, divisor: int) -> list[float]:

	"""Fire one callback per beat for *beats* beats and return per-beat lateness (seconds)."""

	interval = 60.0 / bpm
	registry = hotbeat.scheduler.WheelRegistry()
	wheel = registry.get(interval / divisor)

	lateness: list[float] = []
	done = threading.Event()

	def beat (at: float) -> None:

		lateness.append(time.monotonic() - at)

		if len(lateness) >= beats:
			done.set()
			return

		wheel.schedule(at + interval, beat)

	wheel.schedule(time.monotonic(), beat)

	try:
		done.wait(timeout = beats * interval + 5.0)
	finally:
		registry.stop_all()

	return lateness


def _print_report (lateness: list[float], bpm: float, divisor: int) -> None:

	if not lateness:
		print("No jitter data collected.")
		return

	ms = [value * 1000 for value in lateness]
	resolution_ms = 60.0 / bpm / divisor * 1000

	mean_ms   = statistics.mean(ms)
	median_ms = statistics.median(ms)
	stdev_ms  = statistics.stdev(ms) if len(ms) > 1 else 0.0
	p95_ms    = sorted(ms)[int(len(ms) * 0.95)]
	max_ms    = max(ms)

	print(f"\nTimer Wheel Jitter: {len(ms)} beats at {bpm:.0f} BPM (resolution {resolution_ms:.1f} ms)")
	print(f"{'─' * 62}")
	print(f"  Mean lateness   : {mean_ms:>8.3f} ms")
	print(f"  Median lateness : {median_ms:>8.3f} ms")
	print(f"  Std deviation   : {stdev_ms:>8.3f} ms")
	print(f"  P95 lateness    : {p95_ms:>8.3f} ms")
	print(f"  Max lateness    : {max_ms:>8.3f} ms")
	print(f"  Within bound    : {sum(1 for value in ms if value <= resolution_ms)}/{len(ms)}")
	print(f"{'─' * 62}")
	print()


def main () -> None:

	parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
	parser.add_argument("--bpm",     type=float, default=120, help="Tempo in BPM (default: 120)")
	parser.add_argument("--beats",   type=int,   default=64,  help="Beats to measure (default: 64)")
	parser.add_argument("--divisor", type=int,   default=10,  help="Wheel resolution = beat / divisor (default: 10)")
	parser.add_argument("--compare", action="store_true",     help="Run several divisors and compare")
	args = parser.parse_args()

	divisors = [4, 10, 40] if args.compare else [args.divisor]

	for divisor in divisors:
		print(f"\nRunning with divisor {divisor} ...")
		lateness = _run_benchmark(args.bpm, args.beats, divisor)
		_print_report(lateness, args.bpm, divisor)


if __name__ == "__main__":
	main()
