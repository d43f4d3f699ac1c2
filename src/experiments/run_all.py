"""Experimental harness for running all algorithms on network instances."""

import json
import random
import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import pandas as pd

from ..model.network import Network
from ..model.network_io import load_network, save_network
from ..baselines import naive_solver, random_assignment
from ..heuristics.config import OptimizerConfig
from ..heuristics.construction import greedy_constructor
from ..heuristics.ils import iterated_local_search

BASELINES = ('random', 'naive')


def _ils_runner(config: OptimizerConfig) -> Callable[[Network, random.Random], Dict[str, Any]]:
    def run(network: Network, rng: random.Random) -> Dict[str, Any]:
        cost, _, cost_log = iterated_local_search(network, config, rng)
        return {'cost': cost, 'cost_log': cost_log}
    return run


def _greedy(network: Network, rng: random.Random) -> Dict[str, Any]:
    greedy_constructor(network)
    return {'cost': network.cost()}


def _random(network: Network, rng: random.Random) -> Dict[str, Any]:
    cost, _ = random_assignment(network, rng)
    return {'cost': cost}


def _naive(network: Network, rng: random.Random) -> Dict[str, Any]:
    cost, _ = naive_solver(network, rng)
    return {'cost': cost}


def run_all_algorithms_on_instance(
    instance_file: Path,
    penalty: float,
    config: OptimizerConfig,
    baseline_names: Optional[List[str]] = None,
    seed: int = 42,
    solutions_dir: Optional[Path] = None,
) -> Dict[str, Dict[str, Any]]:
    """
    Run the baselines, the greedy constructor and the ILS on one instance.

    Every algorithm works on a freshly loaded copy of the network and gets its
    own random stream seeded with `seed`.

    Args:
        instance_file: Network file in the text format
        penalty: Overload penalty coefficient
        config: ILS parameters
        baseline_names: Baselines to include, from {'random', 'naive'}
        seed: Random seed for every algorithm
        solutions_dir: If given, the optimized networks are written there

    Returns:
        Dictionary mapping algorithm name to results
        Each result contains: cost, runtime, the cost snapshot fields
        (mean_utilization, dispersion, overload, penalty, total_cost) and
        overloaded_generators (plus cost_log for the ILS)
    """
    if baseline_names is None:
        baseline_names = list(BASELINES)

    alg_dict: Dict[str, Callable[[Network, random.Random], Dict[str, Any]]] = {}
    if 'random' in baseline_names:
        alg_dict['random'] = _random
    if 'naive' in baseline_names:
        alg_dict['naive'] = _naive
    alg_dict['greedy'] = _greedy
    alg_dict['ils'] = _ils_runner(config)

    results: Dict[str, Dict[str, Any]] = {}
    for alg_name, alg_func in alg_dict.items():
        network = load_network(instance_file, penalty=penalty)
        rng = random.Random(seed)

        start = time.perf_counter()
        outcome = alg_func(network, rng)
        runtime = time.perf_counter() - start

        snapshot = network.recompute_cost()
        results[alg_name] = {
            **outcome,
            **snapshot.as_dict(),
            'runtime': runtime,
            'overloaded_generators': int((network.utilizations() > 1.0).sum()),
            'seed': seed,
        }

        if solutions_dir is not None:
            save_network(network, solutions_dir / f"{instance_file.stem}_{alg_name}.txt")

    return results


def save_results(results: Dict[str, Any], filepath: str) -> None:
    """
    Save results to JSON file.

    Args:
        results: Results dictionary
        filepath: Path to save file
    """
    with open(filepath, 'w') as f:
        json.dump(results, f, indent=2)


def load_results(filepath: str) -> Dict[str, Any]:
    with open(filepath, 'r') as f:
        return json.load(f)


def run_all_experiments(
    instance_files: List[str],
    output_dir: str,
    penalty: float = 10.0,
    config: Optional[OptimizerConfig] = None,
    baseline_names: Optional[List[str]] = None,
    seed: int = 42,
    save_solutions: bool = False,
    make_plots: bool = False,
) -> pd.DataFrame:
    """
    Run all algorithms on all instances and save results.

    Writes one `<instance>_results.json` per instance plus `all_results.csv`
    in `output_dir`; optimized networks go to `output_dir/solutions/`.

    Args:
        instance_files: Network files to process
        output_dir: Directory to save results
        penalty: Overload penalty coefficient
        config: ILS parameters (default: OptimizerConfig())
        baseline_names: Baselines to include (default: all)
        seed: Random seed
        save_solutions: Save the optimized networks in the text format
        make_plots: Create the summary plots

    Returns:
        Summary DataFrame (one row per instance and algorithm)
    """
    config = config or OptimizerConfig()
    output_path = Path(output_dir)
    output_path.mkdir(exist_ok=True, parents=True)
    solutions_dir = output_path / 'solutions' if save_solutions else None

    if not instance_files:
        print("No instance files to process")
        return pd.DataFrame()

    print(f"Running experiments on {len(instance_files)} instances...")

    all_results = []
    for instance_file in sorted(Path(f) for f in instance_files):
        print(f"\nProcessing {instance_file.name}...")
        results = run_all_algorithms_on_instance(
            instance_file,
            penalty,
            config,
            baseline_names=baseline_names,
            seed=seed,
            solutions_dir=solutions_dir,
        )
        save_results(results, str(output_path / f"{instance_file.stem}_results.json"))

        for alg_name, alg_results in results.items():
            print(f"  {alg_name:<8} cost = {alg_results['cost']:.4f} ({alg_results['runtime']:.2f}s)")
            all_results.append({
                'instance': instance_file.stem,
                'algorithm': alg_name,
                'cost': alg_results['cost'],
                'runtime': alg_results['runtime'],
                'mean_utilization': alg_results['mean_utilization'],
                'dispersion': alg_results['dispersion'],
                'overload': alg_results['overload'],
                'overloaded_generators': alg_results['overloaded_generators'],
            })

    df = pd.DataFrame(all_results)
    df.to_csv(output_path / 'all_results.csv', index=False)
    print(f"\nSaved summary to {output_path / 'all_results.csv'}")

    if make_plots:
        from .plots import create_all_plots
        print("\nCreating plots...")
        create_all_plots(df, str(output_path))

    print(f"\nExperiments complete! Results saved to {output_dir}/")
    return df
