"""
3D Boids Simulation (headless)
==============================

Runs the flocking engine without a window and prints flock statistics.

Usage:
    python main.py                              # 50 boids, 500 ticks
    python main.py --count 120 --world Forest   # Different population/world
    python main.py --dropoff exponential --dropoff-constant 1.05
    python main.py --leaders --grid --seed 7    # Leaders + spatial grid
    python main.py --list-worlds                # Show available worlds
"""

import argparse
import logging
import sys
import time

from config import boids as config
from boids import (
    BoidsError,
    ConfigurationError,
    Flock,
    GridNeighbours,
    SimulationParams,
    default_registry,
    default_rules,
)
from boids.dropoffs import DROPOFF_TYPES
from boids.metrics import summarise


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Run the 3D boids flocking engine headless",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--ticks", type=int, default=500, help="Number of ticks to run")
    parser.add_argument("--count", type=int, default=config.BOIDS["count"], help="Boid count target")
    parser.add_argument("--world", default=config.BOIDS["world"], help="World name")
    parser.add_argument("--list-worlds", action="store_true", help="List worlds and exit")
    parser.add_argument("--dropoff", default=config.DROPOFFS["active"],
                        choices=sorted(DROPOFF_TYPES), help="Neighbour distance dropoff")
    parser.add_argument("--dropoff-constant", type=float, default=config.DROPOFFS["constant"])
    parser.add_argument("--max-speed", type=float, default=config.BOIDS["max_speed"])
    parser.add_argument("--visibility", type=float, default=config.BOIDS["visibility_threshold"],
                        help="Neighbour radius")
    parser.add_argument("--angle", type=float, default=config.BOIDS["angular_threshold"],
                        help="Visibility angle in degrees (180 = all round)")
    parser.add_argument("--leaders", action="store_true", help="Enable the leader role")
    parser.add_argument("--predator", type=float, nargs=3, metavar=("X", "Y", "Z"),
                        help="Place a predator the boids flee from")
    parser.add_argument("--grid", action="store_true", help="Use the spatial grid neighbour search")
    parser.add_argument("--seed", type=int, default=config.BOIDS["seed"])
    parser.add_argument("--report-every", type=int, default=100, help="Ticks between status lines")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser


def list_worlds():
    print(f"\n{'=' * 60}")
    print("  AVAILABLE WORLDS")
    print(f"{'=' * 60}\n")
    for world in default_registry():
        b = world.bounds
        print(f"  {world.name:12s} | {b.x_size:6.0f} x {b.y_size:5.0f} x {b.z_size:6.0f} "
              f"| {len(world.obstacles)} obstacles")
    print()


def make_flock(args) -> Flock:
    params = SimulationParams.from_config(
        boid_count=args.count,
        max_speed=args.max_speed,
        visibility_threshold=args.visibility,
        angular_threshold=args.angle,
        world_name=args.world,
        dropoff_name=args.dropoff,
        dropoff_constant=args.dropoff_constant,
        seed=args.seed,
    )
    params.leadership.enabled = args.leaders

    rules = default_rules(leaders=args.leaders, predators=args.predator is not None)
    neighbour_query = GridNeighbours() if args.grid else None
    flock = Flock(params=params, rules=rules, neighbour_query=neighbour_query)
    if args.predator is not None:
        flock.set_predators([args.predator])
    return flock


def report(flock: Flock):
    stats = summarise(flock)
    cx, cy, cz = stats.centroid
    print(f"[Boids] tick {stats.tick:5d} | boids {stats.count:3d} | leaders {stats.leaders:2d} | "
          f"speed {stats.mean_speed:.3f} | polarisation {stats.polarisation:.2f} | "
          f"nearest {stats.mean_nearest_neighbour_distance:6.2f} | centre ({cx:6.1f}, {cy:5.1f}, {cz:6.1f})")


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(levelname)s %(name)s: %(message)s")

    if args.list_worlds:
        list_worlds()
        return 0

    try:
        flock = make_flock(args)
    except ConfigurationError as e:
        print(f"[Boids] Error: {e}")
        return 2

    print(f"[Boids] World: {flock.world.name} | Boids: {args.count} | Ticks: {args.ticks} | "
          f"Dropoff: {args.dropoff} | Search: {'grid' if args.grid else 'brute force'}")

    start = time.time()
    try:
        for tick in range(1, args.ticks + 1):
            flock.update()
            if args.report_every > 0 and tick % args.report_every == 0:
                report(flock)
    except KeyboardInterrupt:
        print("\n[Boids] Cancelled by user")
        return 1
    except BoidsError as e:
        print(f"[Boids] Error: {e}")
        return 2

    elapsed = time.time() - start
    rate = args.ticks / elapsed if elapsed > 0 else float("inf")
    print(f"[Boids] Done: {args.ticks} ticks in {elapsed:.2f}s ({rate:.0f} ticks/s)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
