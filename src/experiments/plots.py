"""Plotting functions for experiment results."""

import matplotlib.pyplot as plt
import pandas as pd
from pathlib import Path
from typing import List, Optional

from ..model.network import Network


def plot_cost_comparison(results_df: pd.DataFrame, output_path: str = 'results/cost_comparison.png'):
    """
    Bar chart of the mean cost per algorithm.

    Args:
        results_df: DataFrame with columns: algorithm, cost
        output_path: Path to save plot
    """
    if results_df.empty or 'cost' not in results_df.columns:
        print("No cost data to plot")
        return

    plt.figure(figsize=(10, 6))
    results_df.groupby('algorithm')['cost'].mean().plot(kind='bar')
    plt.ylabel('Mean Total Cost')
    plt.title('Cost Comparison Across Algorithms')
    plt.xticks(rotation=45)
    plt.tight_layout()

    Path(output_path).parent.mkdir(exist_ok=True, parents=True)
    plt.savefig(output_path)
    plt.close()
    print(f"Saved plot to {output_path}")


def plot_runtime_comparison(results_df: pd.DataFrame, output_path: str = 'results/runtime_comparison.png'):
    """
    Compare mean runtime across algorithms (log scale).

    Args:
        results_df: DataFrame with columns: algorithm, runtime
        output_path: Path to save plot
    """
    if results_df.empty or 'runtime' not in results_df.columns:
        print("No runtime data to plot")
        return

    plt.figure(figsize=(10, 6))
    results_df.groupby('algorithm')['runtime'].mean().plot(kind='bar')
    plt.ylabel('Runtime (seconds)')
    plt.title('Runtime Comparison')
    plt.xticks(rotation=45)
    plt.yscale('log')
    plt.tight_layout()

    Path(output_path).parent.mkdir(exist_ok=True, parents=True)
    plt.savefig(output_path)
    plt.close()
    print(f"Saved plot to {output_path}")


def plot_utilization(network: Network, output_path: str = 'results/utilization.png'):
    """
    Utilization of every generator, with the mean and the 100% line.

    Args:
        network: Network holding the assignment to draw
        output_path: Path to save plot
    """
    if network.generator_count == 0:
        print("No generator to plot")
        return

    names = [g.name for g in network.generators()]
    util = network.utilizations()
    colors = ['tab:red' if u > 1.0 else 'tab:blue' for u in util]

    plt.figure(figsize=(10, 6))
    plt.bar(names, util, color=colors)
    plt.axhline(util.mean(), color='gray', linestyle='--', label='mean')
    plt.axhline(1.0, color='tab:red', linestyle=':', label='capacity')
    plt.ylabel('Utilization (load / capacity)')
    plt.title(f'Generator Utilization {network.name}'.strip())
    plt.legend()
    plt.xticks(rotation=45)
    plt.tight_layout()

    Path(output_path).parent.mkdir(exist_ok=True, parents=True)
    plt.savefig(output_path)
    plt.close()
    print(f"Saved plot to {output_path}")


def plot_ils_progress(cost_log: List[float], output_path: str = 'results/ils_progress.png'):
    """
    Global best cost after each ILS phase.

    Args:
        cost_log: Best cost per phase, as returned by iterated_local_search
        output_path: Path to save plot
    """
    if not cost_log:
        print("No ILS history to plot")
        return

    plt.figure(figsize=(8, 5))
    plt.plot(range(1, len(cost_log) + 1), cost_log, marker='o')
    plt.xlabel('ILS phase')
    plt.ylabel('Best cost')
    plt.title('ILS Progress')
    plt.tight_layout()

    Path(output_path).parent.mkdir(exist_ok=True, parents=True)
    plt.savefig(output_path)
    plt.close()
    print(f"Saved plot to {output_path}")


def create_all_plots(results_df: Optional[pd.DataFrame], output_dir: str = 'results'):
    """
    Create the summary plots from the results table.

    Args:
        results_df: DataFrame with columns: instance, algorithm, cost, runtime
        output_dir: Directory to save plots
    """
    Path(output_dir).mkdir(exist_ok=True, parents=True)
    if results_df is None or results_df.empty:
        print("No data to plot")
        return

    plot_cost_comparison(results_df, f'{output_dir}/cost_comparison.png')
    plot_runtime_comparison(results_df, f'{output_dir}/runtime_comparison.png')
