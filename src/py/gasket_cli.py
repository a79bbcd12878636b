#!/usr/bin/env python3

import copy
import json
import logging
import sys
import time
from pathlib import Path
from typing import Dict, List, Optional

import matplotlib

from sierpinski_gasket import (DEFAULT_COUNT, DEFAULT_VERTICES, InvalidArgument, as_point,
                               as_triangle, edge_midpoint_seed, generate, random_interior_seed,
                               resolve_rng)

logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
logger = logging.getLogger(__name__)

MODES = ('immediate', 'retained', 'buffered')
CONFIG_KEYS = ('count', 'random_state', 'seed', 'vertices')


def print_usage():
    """Print usage information for the script"""
    print("\n📖 USAGE:")
    print("python run_sierpinski.py [OPTIONS]")
    print()
    print("🔧 OPTIONS:")
    print("  --count=N            Points to generate after the seed (default 5000)")
    print("  --random-state=N     Seed the random vertex choices")
    print("  --seed=MODE          edge (default), random, or X,Y")
    print("  --vertices=x0,y0,x1,y1,x2,y2")
    print("  --config=FILE        JSON file with count/random_state/seed/vertices")
    print("  --mode=MODE          immediate, retained (default) or buffered")
    print("  --plot=FILE          Write a scatter plot PNG")
    print("  --save[=DIR]         Save the run (default dir: gasket_data)")
    print("  --batch=N            Generate N independent sequences in parallel")
    print()
    print("💡 EXAMPLES:")
    print("  python run_sierpinski.py --count=20000 --plot=gasket.png")
    print("  python run_sierpinski.py --seed=random --random-state=7 --save")
    print("  python run_sierpinski.py --batch=4 --count=10000 --save")


def load_config(path) -> Dict:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with open(path, 'r') as f:
        config = json.load(f)
    if not isinstance(config, dict):
        raise ValueError(f"Config file must hold a JSON object: {path}")
    unknown = set(config) - set(CONFIG_KEYS)
    if unknown:
        logger.warning(f"Ignoring unknown config keys: {sorted(unknown)}")
    return {k: v for k, v in config.items() if k in CONFIG_KEYS}


def parse_args(argv: List[str]) -> Dict:
    options = {}

    for arg in argv:
        if arg in ("--help", "-h"):
            options['help'] = True
            continue
        if not arg.startswith("--"):
            raise ValueError(f"Unexpected argument: {arg}")

        key, _, value = arg[2:].partition("=")
        if key == "count":
            options['count'] = int(value)
        elif key == "random-state":
            options['random_state'] = int(value)
        elif key == "seed":
            options['seed'] = value
        elif key == "vertices":
            coords = [float(v) for v in value.split(",")]
            if len(coords) != 6:
                raise InvalidArgument(f"--vertices needs 6 numbers, got {len(coords)}")
            options['vertices'] = [coords[0:2], coords[2:4], coords[4:6]]
        elif key == "config":
            options['config'] = value
        elif key == "mode":
            if value not in MODES:
                raise ValueError(f"--mode must be one of {', '.join(MODES)}, got {value!r}")
            options['mode'] = value
        elif key == "plot":
            options['plot'] = value
        elif key == "save":
            options['save'] = value or "gasket_data"
        elif key == "batch":
            options['batch'] = int(value)
        else:
            raise ValueError(f"Unknown option: --{key}")

    return options


def resolve_seed(seed, vertices, random_state=None):
    if seed is None or seed == "edge":
        return edge_midpoint_seed(vertices)
    if seed == "random":
        return random_interior_seed(vertices, random_state)
    if isinstance(seed, str):
        return as_point(seed.split(","))
    return as_point(seed)


def run(options: Dict) -> int:
    if 'config' in options:
        config = load_config(options['config'])
        options = {**config, **{k: v for k, v in options.items() if k != 'config'}}

    vertices = as_triangle(options.get('vertices', DEFAULT_VERTICES))
    count = options.get('count', DEFAULT_COUNT)
    random_state = options.get('random_state')
    mode = options.get('mode', 'retained')
    batch = options.get('batch')

    if batch is not None and batch < 1:
        raise InvalidArgument(f"--batch must be >= 1, got {batch}")

    rng = resolve_rng(random_state)

    start_time = time.time()
    if batch:
        from gasket_batch import generate_batch

        seeds = [resolve_seed(options.get('seed'), vertices, rng) for _ in range(batch)]
        states = [int(s) for s in rng.integers(0, 2**32, size=batch)]
        sequences = generate_batch(vertices, count, seeds, random_states=states)
    else:
        seed_point = resolve_seed(options.get('seed'), vertices, rng)
        # the streamed plot must replay the same walk
        walk_rng = copy.deepcopy(rng)
        sequences = [generate(vertices, count, seed_point, random_state=rng)]
    elapsed = time.time() - start_time

    print(f"✅ Generated {len(sequences)} sequence(s) of {len(sequences[0])} points ({elapsed:.2f}s)")

    if 'plot' in options:
        matplotlib.use("Agg")
        from gasket_display import DisplayMode, GasketPlotter

        plotter = GasketPlotter(mode=DisplayMode[mode.upper()])
        if plotter.mode is DisplayMode.IMMEDIATE and not batch:
            plotter.stream(vertices, count, seed_point, random_state=walk_rng)
        else:
            for points in sequences:
                plotter.show(points)
        plotter.save(options['plot'])
        print(f"✅ Saved plot: {options['plot']}")

    if 'save' in options:
        from gasket_store import GasketDataManager

        data_mgr = GasketDataManager(options['save'])
        for i, points in enumerate(sequences):
            metadata = {
                'generation_time': time.time(),
                'count': count,
                'seed': list(points[0]),
                'random_state': random_state,
                'vertices': [list(v) for v in vertices],
                'batch_index': i if batch else None,
            }
            path = data_mgr.save_run(points, metadata, vertices)
            print(f"📁 Saved run: {path}")

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv

    try:
        options = parse_args(argv)
    except ValueError as e:
        logger.error(f"❌ {e}")
        print_usage()
        return 1

    if options.get('help'):
        print_usage()
        return 0

    print("🔬 Sierpinski Gasket Point Generator")
    print("=" * 50)

    try:
        return run(options)
    except (ValueError, FileNotFoundError) as e:
        logger.error(f"❌ Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
