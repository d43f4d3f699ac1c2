"""CLI experiment runner."""

import argparse
import glob
import sys
import time
from pathlib import Path
from typing import List, Optional

from ..heuristics.config import OptimizerConfig, load_config
from ..heuristics.ils import optimize
from ..model.errors import NetworkError
from ..model.network_io import load_network, save_network
from .report import print_network_details
from .run_all import BASELINES, run_all_experiments


def find_instances(source: str) -> List[str]:
    """
    Resolve an instance source to a list of files.

    Args:
        source: A single file, a directory (all *.txt files), or a glob pattern

    Raises:
        ValueError: if nothing matches
    """
    path = Path(source)
    if path.is_file():
        files = [str(path)]
    elif path.is_dir():
        files = sorted(glob.glob(str(path / '*.txt')))
    elif '*' in source:
        files = sorted(glob.glob(source))
    else:
        raise ValueError(f"Invalid instances source: {source}")

    if not files:
        raise ValueError(f"No instance files found matching: {source}")
    return files


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Balance house loads across generators (greedy + adaptive SA + ILS)',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Optimize one network and print the per-generator report
  python -m src.experiments.run_experiment instances/small_00.txt --penalty 10

  # Compare baselines and ILS on a set of instances
  python -m src.experiments.run_experiment "instances/medium_*.txt" --compare --name medium

  # Custom parameters from a JSON file
  python -m src.experiments.run_experiment instances/ --compare --config ils.json --plots
        """
    )
    parser.add_argument(
        'instances',
        type=str,
        help='Path to instances: file, directory, or glob pattern (e.g., "instances/large_*.txt")'
    )
    parser.add_argument('--penalty', type=float, default=10.0,
                        help='Overload penalty coefficient (default: 10.0)')
    parser.add_argument('--seed', type=int, default=None,
                        help='Random seed (default: none, i.e. non-deterministic)')
    parser.add_argument('--restarts', type=int, default=None,
                        help='Total ILS phases including the first (default: 5)')
    parser.add_argument('--config', type=str, default=None,
                        help='JSON file with optimizer parameter overrides')
    parser.add_argument('--compare', action='store_true',
                        help='Run baselines and ILS on every instance and write a results table')
    parser.add_argument('--baseline', dest='baselines', action='append', choices=list(BASELINES),
                        help='Baselines to include with --compare (can be repeated; default: all)')
    parser.add_argument('--name', type=str, default=None,
                        help='Experiment name; results go to experiments/<name>/results')
    parser.add_argument('--output', type=str, default=None,
                        help='Write the optimized network here (single instance mode)')
    parser.add_argument('--save-solutions', action='store_true',
                        help='With --compare, save every optimized network')
    parser.add_argument('--plots', action='store_true', help='Create plots')
    parser.add_argument('--verbose', action='store_true', help='Verbose output')
    return parser


def make_config(args: argparse.Namespace) -> OptimizerConfig:
    config = load_config(args.config) if args.config else OptimizerConfig()
    overrides = {'verbose': args.verbose}
    if args.seed is not None:
        overrides['seed'] = args.seed
    if args.restarts is not None:
        overrides['restarts'] = args.restarts
    config = config.replace(**overrides)
    config.validate()
    return config


def optimize_single(instance_file: str, args: argparse.Namespace, config: OptimizerConfig) -> float:
    network = load_network(instance_file, penalty=args.penalty)
    print(f"Loaded {instance_file}: {network.generator_count} generators, "
          f"{network.house_count} houses, demand {network.total_demand}/{network.total_capacity}kW")

    start = time.perf_counter()
    cost = optimize(network, config)
    elapsed = time.perf_counter() - start

    print_network_details(network)
    print(f"Optimized in {elapsed:.2f}s, final cost {cost:.5f}")

    if args.output:
        save_network(network, args.output)
        print(f"Saved optimized network to {args.output}")
    if args.plots:
        from .plots import plot_utilization
        plot_utilization(network, str(Path(args.output or instance_file).with_suffix('.png')))
    return cost


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = make_config(args)
        instance_files = find_instances(args.instances)

        if not args.compare:
            if len(instance_files) != 1:
                parser.error("several instances given; use --compare to run them all")
            optimize_single(instance_files[0], args, config)
            return 0

        name = args.name or Path(args.instances.replace('*', '')).stem or 'experiment'
        output_dir = Path('experiments') / name / 'results'
        print(f"\n{'='*70}")
        print(f"Running experiment: {name}")
        print(f"{'='*70}")

        start_time = time.time()
        run_all_experiments(
            instance_files,
            str(output_dir),
            penalty=args.penalty,
            config=config,
            baseline_names=args.baselines,
            seed=config.seed if config.seed is not None else 42,
            save_solutions=args.save_solutions,
            make_plots=args.plots,
        )
        elapsed = time.time() - start_time
        print(f"Total time: {elapsed:.1f} seconds")
        return 0
    except (NetworkError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
