"""
Replay a load trace through the decision engine without touching real CPUs.

Trace format: one sample per line, ``load`` or ``load,io_wait``.
A ``-`` stands for an unreadable sample. Lines starting with # are skipped.

    python scripts/simulate_trace.py trace.txt --capacity 8
    python scripts/simulate_trace.py --synthetic 200 --seed 3 --json
"""

import argparse
import json
import logging
import random
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from tqdm import tqdm

# Allow running from the repository root without installing
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from autoplug.core.config import load_config
from autoplug.core.errors import MetricUnavailable
from autoplug.core.interfaces import ILoadSource, LoadReading
from autoplug.engine import IntervalController, build_state, run_tick
from autoplug.sources.units import SimulatedUnitDriver
from autoplug.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)

Sample = Tuple[Optional[int], int]


class TraceLoadSource(ILoadSource):
    """Feeds recorded samples to the sampler, one per tick."""

    def __init__(self, samples: List[Sample]):
        self.samples = samples
        self.position = 0

    def read_load(self) -> LoadReading:
        load, io_wait = self.samples[self.position]
        self.position += 1
        if load is None:
            raise MetricUnavailable(f"sample {self.position} missing")
        return LoadReading(load=load, io_wait=io_wait)

    def unit_utilization(self, unit: int) -> int:
        raise MetricUnavailable("trace has no per-unit data")


def read_trace(path: Path) -> List[Sample]:
    samples = []
    for line in path.read_text(encoding='utf-8').splitlines():
        line = line.strip()
        if not line or line.startswith('#'):
            continue
        fields = line.split(',')
        load = None if fields[0].strip() == '-' else int(fields[0])
        io_wait = int(fields[1]) if len(fields) > 1 else 0
        samples.append((load, io_wait))
    return samples


def synthetic_trace(count: int, seed: int) -> List[Sample]:
    """Bursty load: idle stretches, ramps and the odd spike."""
    rng = random.Random(seed)
    samples = []
    load = 50
    for _ in range(count):
        roll = rng.random()
        if roll < 0.05:
            load = rng.randint(700, 1200)
        elif roll < 0.15:
            load = rng.randint(0, 60)
        else:
            load = max(0, load + rng.randint(-60, 60))
        io_wait = rng.choice([0, 0, 0, 0, 3])
        samples.append((None if rng.random() < 0.02 else load, io_wait))
    return samples


def simulate(
    samples: List[Sample],
    capacity: int,
    config_path: Optional[str] = None,
    progress: bool = False
) -> List[dict]:
    config = load_config(config_path)
    config.pool.capacity = capacity
    config.pool.selection = "fixed"

    driver = SimulatedUnitDriver(capacity)
    state = build_state(config, driver, TraceLoadSource(samples))
    intervals = IntervalController(
        floor_ms=config.control.interval_floor_ms,
        scale_up_interval_ms=config.control.scale_up_interval_ms,
    )

    rows = []
    clock_ms = config.control.startup_delay_ms
    for _ in tqdm(samples, unit="tick", disable=not progress):
        result = run_tick(state, intervals, config.control.io_wait_veto)
        rows.append({
            "t_ms": clock_ms,
            "load": result.load,
            "io_wait": result.io_wait,
            "decision": result.decision.value,
            "action": result.action.value,
            "online": state.pool.online_count,
            "onlined": result.onlined,
            "offlined": result.offlined,
            "next_ms": result.next_delay_ms,
        })
        clock_ms += result.next_delay_ms
    return rows


def main():
    parser = argparse.ArgumentParser(description="Replay a load trace through the hotplug engine")
    parser.add_argument('trace', nargs='?', help='Trace file (load[,io_wait] per line)')
    parser.add_argument('--synthetic', type=int, metavar='N', help='Generate N synthetic samples instead')
    parser.add_argument('--seed', type=int, default=1)
    parser.add_argument('--capacity', type=int, default=4)
    parser.add_argument('--config', help='YAML config with thresholds to use')
    parser.add_argument('--json', action='store_true', help='Print JSON lines')
    parser.add_argument('--verbose', action='store_true')
    parser.add_argument('--progress', action='store_true', help='Show a progress bar')
    args = parser.parse_args()

    if not args.trace and not args.synthetic:
        parser.error("give a trace file or --synthetic N")

    setup_logging(args.verbose, "DEBUG" if args.verbose else "WARNING", log_dir=None)

    samples = read_trace(Path(args.trace)) if args.trace else synthetic_trace(args.synthetic, args.seed)
    rows = simulate(samples, args.capacity, args.config, progress=args.progress)

    if args.json:
        for row in rows:
            print(json.dumps(row))
        return

    print(f"{'t_ms':>8} {'load':>6} {'io':>3} {'decision':>15} {'action':>15} {'online':>6}")
    for row in rows:
        load = '-' if row["load"] is None else row["load"]
        print(
            f"{row['t_ms']:>8} {load:>6} {row['io_wait']:>3} {row['decision']:>15} "
            f"{row['action']:>15} {row['online']:>6}"
        )

    changes = sum(len(r["onlined"]) + len(r["offlined"]) for r in rows)
    print(f"\n{len(rows)} ticks, {changes} unit transitions, "
          f"final online {rows[-1]['online'] if rows else 0}/{args.capacity}")


if __name__ == "__main__":
    main()
