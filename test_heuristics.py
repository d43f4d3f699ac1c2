"""Tests for construction, neighborhoods, annealing, descent and ILS."""

import json
import random

import numpy as np
import pytest

from src.model import Consumption, Network, StructuralError, generate_network
from src.baselines import naive_solver, random_assignment
from src.heuristics.sa import _cool
from src.heuristics import (
    OptimizerConfig,
    adaptive_simulated_annealing,
    best_generator_for,
    choose_generator,
    choose_house,
    choose_swap_pair,
    config_from_dict,
    greedy_constructor,
    iterated_local_search,
    load_config,
    local_descent,
    metropolis_accept,
    move,
    optimize,
    perturb,
    rank_generators,
    swap,
)

# Short schedule: cools from 1.0 to 0.001 in about 1300 iterations
FAST = OptimizerConfig(
    t0=1.0,
    window=20,
    max_iterations=3000,
    reheat_threshold=200,
    max_descent_passes=50,
    restarts=3,
)


@pytest.fixture
def small_network() -> Network:
    net = Network(penalty=50.0)
    net.add_generator("g1", 100)
    net.add_generator("g2", 50)
    net.add_house("m1", Consumption.NORMAL)
    net.add_house("m2", Consumption.BASSE)
    net.add_house("m3", Consumption.FORTE)
    return net


def _assigned(seed: int, n_generators: int = 4, n_houses: int = 24) -> Network:
    net = generate_network(n_generators=n_generators, n_houses=n_houses, seed=seed)
    greedy_constructor(net)
    return net


# ── Construction ──────────────────────────────────────────────────


def test_greedy_assignment(small_network):
    greedy_constructor(small_network)
    # m3 (40) first -> g1, m1 (20) -> g2, m2 (10) -> g1
    assert small_network.connections() == {"m1": "g2", "m2": "g1", "m3": "g1"}
    assert small_network.cost() == pytest.approx(0.1)


def test_greedy_is_deterministic_and_clears_previous_state():
    a = generate_network(n_generators=5, n_houses=40, seed=1)
    b = generate_network(n_generators=5, n_houses=40, seed=1)
    random_assignment(b, random.Random(3))

    greedy_constructor(a)
    greedy_constructor(b)
    assert np.array_equal(a.assignment_copy(), b.assignment_copy())
    assert a.cost() == b.cost()
    assert all(a.is_assigned(h) for h in range(a.house_count))


def test_best_generator_ties_keep_registration_order():
    net = Network()
    net.add_generator("a", 50)
    net.add_generator("b", 50)
    net.add_house("m1", Consumption.BASSE)
    assert best_generator_for(net, 0) == 0


def test_best_generator_avoids_overload():
    net = Network()
    net.add_generator("tiny", 10)
    net.add_generator("big", 60)
    net.add_house("m1", Consumption.FORTE)
    # tiny scores 10 - malus, big scores 60
    assert best_generator_for(net, 0) == 1


# ── Neighborhoods ─────────────────────────────────────────────────


def test_move_and_inverse(small_network):
    greedy_constructor(small_network)
    before = small_network.assignment_copy()
    loads = small_network.loads()

    move(small_network, 0, 1, 0)
    assert small_network.current_generator(0) == 0
    move(small_network, 0, 0, 1)

    assert np.array_equal(small_network.assignment_copy(), before)
    assert np.array_equal(small_network.loads(), loads)


def test_move_from_wrong_generator_raises(small_network):
    greedy_constructor(small_network)
    with pytest.raises(StructuralError):
        move(small_network, 0, 0, 1)  # m1 is on g2


def test_swap_equals_two_moves():
    a = _assigned(seed=4)
    b = _assigned(seed=4)

    h_a, h_b = next(
        (x, y)
        for x in range(a.house_count)
        for y in range(a.house_count)
        if a.current_generator(x) != a.current_generator(y)
    )
    g_a, g_b = a.current_generator(h_a), a.current_generator(h_b)

    assert swap(a, h_a, h_b)
    move(b, h_a, g_a, g_b)
    move(b, h_b, g_b, g_a)

    assert np.array_equal(a.assignment_copy(), b.assignment_copy())
    assert np.array_equal(a.loads(), b.loads())
    assert a.recompute_cost() == b.recompute_cost()


def test_swap_is_its_own_inverse():
    net = _assigned(seed=6)
    before = net.assignment_copy()
    h_a, h_b = next(
        (x, y)
        for x in range(net.house_count)
        for y in range(net.house_count)
        if net.current_generator(x) != net.current_generator(y)
    )
    swap(net, h_a, h_b)
    swap(net, h_a, h_b)
    assert np.array_equal(net.assignment_copy(), before)


def test_swap_noop_cases(small_network):
    small_network.connect("m1", "g1")
    small_network.connect("m2", "g1")
    before = small_network.assignment_copy()

    assert not swap(small_network, 0, 1)  # same generator
    assert not swap(small_network, 0, 2)  # m3 unassigned
    assert np.array_equal(small_network.assignment_copy(), before)


def _ranking_network():
    """Four generators and the index of an extra NORMAL house on 'a'."""
    net = Network()
    for name, capacity in [("a", 100), ("b", 100), ("c", 100), ("d", 10)]:
        net.add_generator(name, capacity)
    net.add_house("target", Consumption.NORMAL)
    for name, consumption, generator in [
        ("b1", Consumption.FORTE, "b"),
        ("b2", Consumption.BASSE, "b"),
        ("c1", Consumption.FORTE, "c"),
        ("c2", Consumption.FORTE, "c"),
        ("c3", Consumption.NORMAL, "c"),
    ]:
        net.add_house(name, consumption)
        net.connect(name, generator)
    net.connect("target", "a")
    return net, net.house_index("target")


def test_rank_generators():
    net, target = _ranking_network()
    net.unassign(target, 0)
    net.recompute_cost()
    # utilizations a=0, b=0.5, c=1.0, d=0; mean 0.375; target demand 20
    # a: 0.125, b: -0.125, d: 0.125 - 10 (would overload), c: -0.625 - 10
    assert rank_generators(net, target) == [0, 1, 3, 2]


def test_choose_generator_prefers_top_ranked():
    net, target = _ranking_network()
    net.recompute_cost()
    config = OptimizerConfig(top_generator_probability=1.0, top_generators=2)
    top_two = set(rank_generators(net, target, config)[:2])

    rng = random.Random(0)
    picks = {choose_generator(net, target, rng, config) for _ in range(200)}
    assert picks <= top_two


def test_choose_house_prefers_imbalanced_generators():
    net = Network()
    for name in ("g1", "g2", "g3"):
        net.add_generator(name, 100)
    for name, consumption, generator in [
        ("m1", Consumption.FORTE, "g1"),
        ("m2", Consumption.BASSE, "g1"),
        ("m3", Consumption.FORTE, "g2"),
        ("m4", Consumption.BASSE, "g2"),
        ("m5", Consumption.BASSE, "g3"),
    ]:
        net.add_house(name, consumption)
        net.connect(name, generator)
    net.recompute_cost()
    # utilizations 0.5, 0.5, 0.1 around a mean of 0.367: only g3 deviates by more than 0.15
    config = OptimizerConfig(priority_house_probability=1.0)
    rng = random.Random(1)
    picks = {choose_house(net, rng, config) for _ in range(100)}
    assert picks == {net.house_index("m5")}


def test_choose_house_falls_back_to_uniform(small_network):
    assert choose_house(Network(), random.Random(0)) is None

    greedy_constructor(small_network)
    rng = random.Random(2)
    picks = {choose_house(small_network, rng) for _ in range(200)}
    assert picks <= {0, 1, 2}


def test_choose_swap_pair_draws_distinct_houses(small_network):
    rng = random.Random(5)
    for _ in range(50):
        h_a, h_b = choose_swap_pair(small_network, rng)
        assert h_a != h_b

    single = Network()
    single.add_generator("g", 10)
    single.add_house("m", Consumption.BASSE)
    assert choose_swap_pair(single, rng) is None


def test_perturb_moves_a_share_of_houses():
    net = _assigned(seed=8, n_houses=20)
    before = net.assignment_copy()

    moved = perturb(net, random.Random(3), ratio=0.25)
    assert moved == 5
    assert int((net.assignment_copy() != before).sum()) == 5
    assert net.cost() == net.recompute_cost().total_cost


def test_perturb_moves_at_least_one_house(small_network):
    greedy_constructor(small_network)
    assert perturb(small_network, random.Random(0), ratio=0.0) == 1


# ── Simulated annealing ───────────────────────────────────────────


def test_metropolis_accept():
    rng = random.Random(0)
    assert metropolis_accept(-1.0, 1e-9, rng)
    assert not metropolis_accept(1.0, 1e-6, rng)
    assert all(metropolis_accept(1e-9, 1e6, rng) for _ in range(100))


def test_annealing_is_reproducible():
    a = _assigned(seed=12)
    b = _assigned(seed=12)

    stats_a = adaptive_simulated_annealing(a, random.Random(7), FAST, record_trace=True)
    stats_b = adaptive_simulated_annealing(b, random.Random(7), FAST, record_trace=True)

    assert stats_a.trace == stats_b.trace
    assert len(stats_a.trace) == stats_a.iterations
    assert sum(stats_a.trace) == stats_a.acceptations
    assert np.array_equal(a.assignment_copy(), b.assignment_copy())
    assert stats_a.final_cost == stats_b.final_cost


def test_annealing_stops_and_keeps_consistent_state():
    net = _assigned(seed=13)
    stats = adaptive_simulated_annealing(net, random.Random(1), FAST)

    assert stats.iterations <= FAST.max_iterations
    assert stats.final_temperature <= FAST.t_min or stats.iterations == FAST.max_iterations
    assert stats.reheats <= FAST.max_reheats
    assert stats.best_cost <= stats.final_cost
    assert stats.final_cost == net.recompute_cost().total_cost
    assert all(net.is_assigned(h) for h in range(net.house_count))


def test_annealing_iteration_cap():
    net = _assigned(seed=14)
    stats = adaptive_simulated_annealing(net, random.Random(1), FAST.replace(max_iterations=50))
    assert stats.iterations == 50


def test_annealing_on_empty_network():
    net = Network()
    net.add_generator("g", 10)
    stats = adaptive_simulated_annealing(net, random.Random(0), FAST)
    assert stats.iterations == 0
    assert stats.final_cost == 0.0


@pytest.mark.parametrize("acceptance_rate, factor", [
    (0.9, 0.95),
    (0.5, 0.97),
    (0.85, 0.97),
    (0.15, 0.97),
    (0.1, 0.985),
    (0.0, 0.985),
])
def test_window_cooling_factor(acceptance_rate, factor):
    assert _cool(100.0, acceptance_rate, OptimizerConfig()) == pytest.approx(100.0 * factor)


def _frozen_schedule(config: OptimizerConfig):
    """Temperature schedule of a run where no proposal is ever accepted."""
    temperature = config.t0
    iterations = since_improvement = reheats = 0
    while temperature > config.t_min and iterations < config.max_iterations:
        iterations += 1
        since_improvement += 1
        if iterations % config.window == 0:
            temperature *= config.slow_cooling
        if since_improvement > config.reheat_threshold and reheats < config.max_reheats:
            temperature = min(temperature * config.reheat_factor, config.t0 * config.reheat_cap_ratio)
            since_improvement = 0
            reheats += 1
    return iterations, temperature


def _anneal_stuck_network(config: OptimizerConfig):
    # A single generator: every move targets the current generator and every
    # swap pairs houses on the same generator, so nothing is ever accepted
    net = Network()
    net.add_generator("g", 100)
    net.add_house("m1", Consumption.NORMAL)
    net.add_house("m2", Consumption.BASSE)
    greedy_constructor(net)
    return adaptive_simulated_annealing(net, random.Random(3), config)


@pytest.mark.parametrize("cap_ratio", [0.4, 100.0])
def test_reheats_on_a_network_that_cannot_improve(cap_ratio):
    config = FAST.replace(reheat_threshold=50, reheat_cap_ratio=cap_ratio, max_iterations=50000)
    stats = _anneal_stuck_network(config)
    expected_iterations, expected_temperature = _frozen_schedule(config)

    assert stats.acceptations == 0
    assert stats.reheats == config.max_reheats
    assert stats.iterations == expected_iterations
    assert stats.final_temperature == pytest.approx(expected_temperature)
    assert stats.final_temperature <= config.t_min


def test_reheated_temperature_is_capped():
    config = FAST.replace(reheat_threshold=50, max_iterations=50000)
    capped = _anneal_stuck_network(config)
    uncapped = _anneal_stuck_network(config.replace(reheat_cap_ratio=100.0))
    # Capped reheats land on t0 * 0.4 instead of T * 15, so cooling finishes sooner
    assert capped.reheats == uncapped.reheats == config.max_reheats
    assert capped.iterations < uncapped.iterations


def test_no_reheat_below_the_stagnation_threshold():
    config = FAST.replace(reheat_threshold=50, max_iterations=50)
    assert _anneal_stuck_network(config).reheats == 0
    assert _anneal_stuck_network(config.replace(max_iterations=51)).reheats == 1


# ── Local descent ─────────────────────────────────────────────────


def test_descent_never_increases_cost():
    net = generate_network(n_generators=4, n_houses=24, seed=15)
    random_assignment(net, random.Random(15))
    start = net.cost()

    stats = local_descent(net, random.Random(15), max_passes=100)

    log = stats.cost_log
    assert log[0] == start
    assert all(later < earlier for earlier, later in zip(log, log[1:]))
    assert net.cost() == log[-1]
    assert stats.improvements == len(log) - 1


def test_descent_reaches_a_local_optimum():
    net = generate_network(n_generators=3, n_houses=15, seed=16)
    random_assignment(net, random.Random(16))
    stats = local_descent(net, random.Random(16), max_passes=1000)
    assert stats.passes < 1000

    cost = net.recompute_cost().total_cost
    for h in range(net.house_count):
        current = net.current_generator(h)
        for g in range(net.generator_count):
            if g == current:
                continue
            move(net, h, current, g)
            assert net.recompute_cost().total_cost >= cost
            move(net, h, g, current)
            net.recompute_cost()


# ── Iterated local search ─────────────────────────────────────────


def test_ils_finds_the_optimum_of_the_small_network(small_network):
    cost = optimize(small_network, FAST.replace(seed=21))
    assert cost == pytest.approx(0.1)
    assert small_network.connections() == {"m1": "g2", "m2": "g1", "m3": "g1"}


def test_ils_cost_log_and_final_state():
    net = generate_network(n_generators=4, n_houses=20, seed=17)
    config = FAST.replace(restarts=4)

    best_cost, best_assignment, cost_log = iterated_local_search(net, config, random.Random(17))

    assert len(cost_log) == config.restarts
    assert all(later <= earlier for earlier, later in zip(cost_log, cost_log[1:]))
    assert cost_log[-1] == best_cost
    assert np.array_equal(net.assignment_copy(), best_assignment)
    assert net.cost() == best_cost


def test_ils_is_reproducible_with_a_seed():
    a = generate_network(n_generators=4, n_houses=20, seed=18)
    b = generate_network(n_generators=4, n_houses=20, seed=18)
    config = FAST.replace(seed=99)

    assert optimize(a, config) == optimize(b, config)
    assert np.array_equal(a.assignment_copy(), b.assignment_copy())


def test_ils_rejects_network_without_generators():
    with pytest.raises(StructuralError):
        optimize(Network(), FAST)


def test_ils_rejects_invalid_config(small_network):
    with pytest.raises(ValueError):
        optimize(small_network, FAST.replace(restarts=0))


# ── Baselines ─────────────────────────────────────────────────────


def test_random_assignment_connects_every_house():
    net = generate_network(n_generators=3, n_houses=12, seed=19)
    cost, assignment = random_assignment(net, random.Random(0))
    assert (assignment >= 0).all()
    assert cost == net.cost()


def test_naive_solver_never_worsens():
    net = generate_network(n_generators=3, n_houses=12, seed=20)
    start, _ = random_assignment(net, random.Random(0))
    cost, assignment = naive_solver(net, random.Random(0), iterations=300)
    assert cost <= start
    assert np.array_equal(assignment, net.assignment_copy())


# ── Configuration ─────────────────────────────────────────────────


def test_default_config_is_valid():
    OptimizerConfig().validate()


@pytest.mark.parametrize("changes", [
    {"t_min": 2000.0},
    {"fast_cooling": 1.5},
    {"swap_probability": -0.1},
    {"window": 0},
    {"perturbation_ratio": 2.0},
])
def test_invalid_configs(changes):
    with pytest.raises(ValueError):
        OptimizerConfig().replace(**changes).validate()


def test_config_from_dict_rejects_unknown_keys():
    with pytest.raises(ValueError, match="temperature"):
        config_from_dict({"temperature": 5})


def test_load_config(tmp_path):
    path = tmp_path / "ils.json"
    path.write_text(json.dumps({"restarts": 8, "t0": 500.0, "seed": 7}))

    config = load_config(path)
    assert config.restarts == 8
    assert config.t0 == 500.0
    assert config.seed == 7
    assert config.window == OptimizerConfig().window
    assert config.as_dict()["restarts"] == 8

    path.write_text("[1, 2]")
    with pytest.raises(ValueError):
        load_config(path)
