"""Human-readable report of an assignment."""

from typing import List

import pandas as pd

from ..model.network import Network


def generator_table(network: Network) -> pd.DataFrame:
    """
    One row per generator, sorted by name.

    Columns: generator, capacity, load, utilization, houses, overloaded
    """
    rows = []
    util = network.utilizations()
    all_houses = network.houses()
    for g, generator in enumerate(network.generators()):
        houses = sorted(
            f"{all_houses[h].name}({all_houses[h].demand}kW)" for h in network.houses_on(g)
        )
        rows.append({
            'generator': generator.name,
            'capacity': generator.capacity,
            'load': network.load(g),
            'utilization': float(util[g]),
            'houses': ", ".join(houses),
            'overloaded': bool(util[g] > 1.0),
        })
    df = pd.DataFrame(rows, columns=['generator', 'capacity', 'load', 'utilization', 'houses', 'overloaded'])
    return df.sort_values('generator', kind='stable').reset_index(drop=True)


def network_details(network: Network) -> str:
    """Per-generator loads and houses, followed by the global cost statistics."""
    lines: List[str] = ["=== OPTIMIZED NETWORK DETAILS ===", ""]

    for row in generator_table(network).itertuples(index=False):
        lines.append(f"{row.generator} (capacity: {row.capacity}kW)")
        lines.append(f"  Load: {row.load}/{row.capacity}kW | Utilization: {row.utilization:.3f}")
        lines.append(f"  Houses: {row.houses or '(none)'}")
        if row.overloaded:
            lines.append("  /!\\ OVERLOAD")
        lines.append("")

    snapshot = network.recompute_cost()
    lines.append("--- GLOBAL STATISTICS ---")
    lines.append(f"Mean utilization : {snapshot.mean_utilization:.5f}")
    lines.append(f"Dispersion       : {snapshot.dispersion:.5f}")
    lines.append(f"Overload         : {snapshot.overload:.5f}")
    lines.append(f"Penalty lambda   : {snapshot.penalty:.5f}")
    lines.append(f"TOTAL COST       : {snapshot.total_cost:.5f}")
    return "\n".join(lines)


def print_network_details(network: Network) -> None:
    print(network_details(network))
    print()
