"""Instance generator for creating synthetic networks."""

from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .network import Consumption, Network
from .network_io import save_network

CATEGORIES = (Consumption.BASSE, Consumption.NORMAL, Consumption.FORTE)


def generate_network(
    n_generators: int = 5,
    n_houses: int = 30,
    seed: int = 42,
    penalty: float = 10.0,
    capacity_range: Tuple[int, int] = (40, 200),
    consumption_weights: Sequence[float] = (0.3, 0.5, 0.2),
    slack: float = 1.2,
    name: Optional[str] = None,
) -> Network:
    """
    Generate a random unassigned network.

    Houses draw their consumption category with `consumption_weights`
    (BASSE, NORMAL, FORTE). Generator capacities are drawn uniformly from
    `capacity_range`, then scaled up when needed so that total capacity is at
    least `slack` times total demand.

    Args:
        n_generators: Number of generators (>= 1)
        n_houses: Number of houses
        seed: Random seed for reproducibility
        penalty: Overload penalty coefficient
        capacity_range: Inclusive range of raw generator capacities
        consumption_weights: Probabilities of the three consumption categories
        slack: Minimum ratio total capacity / total demand (>= 1)
        name: Network label (default: derived from the sizes and seed)

    Returns:
        Network with all houses unassigned
    """
    if n_generators < 1:
        raise ValueError("n_generators must be at least 1")
    if slack < 1.0:
        raise ValueError("slack must be >= 1 so that the demand fits the capacity")

    rng = np.random.default_rng(seed)

    weights = np.asarray(consumption_weights, dtype=float)
    weights = weights / weights.sum()
    categories = rng.choice(len(CATEGORIES), size=n_houses, p=weights)
    demands = np.array([CATEGORIES[c].value for c in categories], dtype=np.int64)

    low, high = capacity_range
    capacities = rng.integers(low, high + 1, size=n_generators).astype(float)

    # Scale capacities so the demand always fits
    required = slack * demands.sum()
    if capacities.sum() < required:
        capacities *= required / capacities.sum()
    capacities = np.ceil(capacities).astype(np.int64)

    if name is None:
        name = f"gen{n_generators}_houses{n_houses}_seed{seed}"
    network = Network(penalty, name=name)
    for j, capacity in enumerate(capacities):
        network.add_generator(f"g{j + 1}", int(capacity))
    for i, category in enumerate(categories):
        network.add_house(f"m{i + 1}", CATEGORIES[category])

    return network


def generate_instance_set(
    output_dir: str = 'instances',
    n_small: int = 5,
    n_medium: int = 5,
    n_large: int = 0,
    penalty: float = 10.0,
) -> List[Path]:
    """
    Generate small, medium and large networks and save them in the text format.

    Args:
        output_dir: Directory to save instances
        n_small: Number of small instances (3 generators, 12 houses)
        n_medium: Number of medium instances (6 generators, 40 houses)
        n_large: Number of large instances (12 generators, 150 houses)
        penalty: Penalty used while generating (not persisted)

    Returns:
        Paths of the written files
    """
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    sizes = [
        ('small', n_small, 3, 12, 100),
        ('medium', n_medium, 6, 40, 200),
        ('large', n_large, 12, 150, 300),
    ]
    written = []
    for label, count, n_generators, n_houses, base_seed in sizes:
        if count <= 0:
            continue
        print(f"Generating {count} {label} instances...")
        for i in range(count):
            network = generate_network(
                n_generators=n_generators,
                n_houses=n_houses,
                seed=base_seed + i,
                penalty=penalty,
            )
            filepath = output_path / f'{label}_{i:02d}.txt'
            save_network(network, filepath)
            written.append(filepath)
            print(f"  Saved {filepath}")

    print(f"\nGenerated instances in {output_dir}/")
    return written
