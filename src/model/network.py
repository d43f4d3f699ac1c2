"""Network data structure: houses, generators and the house -> generator assignment."""

import numbers
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

import numpy as np

from .errors import NetworkFormatError, StructuralError
from .result import CostSnapshot

# Assignment sentinel for a house that is not connected to any generator
UNASSIGNED = -1


def _is_integer(value) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


class Consumption(Enum):
    """Consumption categories of a house and their fixed demand (kW)."""
    BASSE = 10
    NORMAL = 20
    FORTE = 40

    @classmethod
    def parse(cls, label: str) -> "Consumption":
        """Parse a consumption label (case-insensitive)."""
        try:
            return cls[label.strip().upper()]
        except KeyError:
            raise NetworkFormatError(
                f"consumption must be BASSE, NORMAL or FORTE, got {label.strip()!r}"
            ) from None

    @classmethod
    def from_demand(cls, demand: int) -> Optional["Consumption"]:
        try:
            return cls(demand)
        except ValueError:
            return None


@dataclass(frozen=True)
class House:
    """A demand unit. Immutable once created."""
    name: str
    demand: int

    def __post_init__(self):
        if not self.name:
            raise StructuralError("house name must not be empty")
        if not _is_integer(self.demand):
            raise StructuralError(f"house {self.name!r}: demand must be an integer, got {self.demand!r}")
        object.__setattr__(self, "demand", int(self.demand))
        if self.demand <= 0:
            raise StructuralError(f"house {self.name!r}: demand must be positive, got {self.demand}")


@dataclass(frozen=True)
class Generator:
    """
    A capacitated resource.

    The current load is not stored here: the owning Network keeps it in a
    load array parallel to its generator list, so it can only change through
    the network's assignment operations.
    """
    name: str
    capacity: int

    def __post_init__(self):
        if not self.name:
            raise StructuralError("generator name must not be empty")
        if not _is_integer(self.capacity):
            raise StructuralError(
                f"generator {self.name!r}: capacity must be an integer, got {self.capacity!r}"
            )
        object.__setattr__(self, "capacity", int(self.capacity))
        if self.capacity < 0:
            raise StructuralError(
                f"generator {self.name!r}: capacity must not be negative, got {self.capacity}"
            )


class Network:
    """
    Houses, generators and the current assignment between them.

    Storage is arena-style: houses and generators live in registration-ordered
    lists, the assignment is an int array parallel to the houses holding a
    generator index (or UNASSIGNED), and the loads are an int array parallel
    to the generators, updated on every assignment change.

    Houses and generators are referred to by their index everywhere below;
    `house_index` / `generator_index` map names to indices.

    Attributes:
        penalty: Penalty coefficient applied to the overload in the cost
        name: Optional label, used in reports
    """

    def __init__(self, penalty: float = 10.0, name: str = ""):
        if penalty < 0:
            raise StructuralError(f"penalty must be non-negative, got {penalty}")
        self.penalty = float(penalty)
        self.name = name

        self._houses: List[House] = []
        self._generators: List[Generator] = []
        self._house_by_name: Dict[str, int] = {}
        self._generator_by_name: Dict[str, int] = {}

        self._demands = np.zeros(0, dtype=np.int64)
        self._capacities = np.zeros(0, dtype=np.int64)
        self._assignment = np.zeros(0, dtype=np.int64)
        self._loads = np.zeros(0, dtype=np.int64)

        self._snapshot = CostSnapshot(0.0, 0.0, 0.0, self.penalty, 0.0)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def add_generator(self, name: str, capacity: int) -> Generator:
        """
        Register a generator.

        Raises:
            StructuralError: duplicate name, non-integer or negative capacity
        """
        if name in self._generator_by_name:
            raise StructuralError(f"generator {name!r} already exists")
        generator = Generator(name, capacity)

        self._generator_by_name[name] = len(self._generators)
        self._generators.append(generator)
        self._capacities = np.append(self._capacities, generator.capacity)
        self._loads = np.append(self._loads, 0)
        return generator

    def add_house(self, name: str, demand: Union[int, Consumption]) -> House:
        """
        Register an (unassigned) house.

        Raises:
            StructuralError: duplicate name, non-integer or non-positive demand, or the total
                registered demand would exceed the total registered capacity
        """
        if isinstance(demand, Consumption):
            demand = demand.value
        if name in self._house_by_name:
            raise StructuralError(f"house {name!r} already exists")
        house = House(name, demand)

        if self.total_demand + house.demand > self.total_capacity:
            raise StructuralError(
                f"cannot add house {name!r}: total demand {self.total_demand + house.demand} "
                f"would exceed total capacity {self.total_capacity}; add a generator first"
            )

        self._house_by_name[name] = len(self._houses)
        self._houses.append(house)
        self._demands = np.append(self._demands, house.demand)
        self._assignment = np.append(self._assignment, UNASSIGNED)
        return house

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def houses(self) -> Tuple[House, ...]:
        return tuple(self._houses)

    def generators(self) -> Tuple[Generator, ...]:
        return tuple(self._generators)

    @property
    def house_count(self) -> int:
        return len(self._houses)

    @property
    def generator_count(self) -> int:
        return len(self._generators)

    @property
    def total_demand(self) -> int:
        return int(self._demands.sum())

    @property
    def total_capacity(self) -> int:
        return int(self._capacities.sum())

    def house_index(self, name: str) -> int:
        try:
            return self._house_by_name[name]
        except KeyError:
            raise StructuralError(f"unknown house {name!r}") from None

    def generator_index(self, name: str) -> int:
        try:
            return self._generator_by_name[name]
        except KeyError:
            raise StructuralError(f"unknown generator {name!r}") from None

    def has_house(self, name: str) -> bool:
        return name in self._house_by_name

    def has_generator(self, name: str) -> bool:
        return name in self._generator_by_name

    def demand(self, h: int) -> int:
        return int(self._demands[h])

    def capacity(self, g: int) -> int:
        return int(self._capacities[g])

    def load(self, g: int) -> int:
        return int(self._loads[g])

    def loads(self) -> np.ndarray:
        return self._loads.copy()

    def utilization(self, g: int) -> float:
        """load / capacity, or 0.0 for a zero-capacity generator."""
        capacity = int(self._capacities[g])
        if capacity == 0:
            return 0.0
        return int(self._loads[g]) / capacity

    def utilizations(self) -> np.ndarray:
        """Utilization of every generator, shape (generator_count,)."""
        util = np.zeros(len(self._capacities), dtype=float)
        np.divide(self._loads, self._capacities, out=util, where=self._capacities > 0)
        return util

    def current_generator(self, h: int) -> Optional[int]:
        """Index of the generator house `h` is connected to, or None."""
        g = int(self._assignment[h])
        return None if g == UNASSIGNED else g

    def is_assigned(self, h: int) -> bool:
        return int(self._assignment[h]) != UNASSIGNED

    def houses_on(self, g: int) -> List[int]:
        return np.flatnonzero(self._assignment == g).tolist()

    def connections(self) -> Dict[str, Optional[str]]:
        """House name -> generator name (None when unassigned), in registration order."""
        return {
            house.name: (None if g == UNASSIGNED else self._generators[g].name)
            for house, g in zip(self._houses, self._assignment.tolist())
        }

    # ------------------------------------------------------------------
    # Assignment mutation
    # ------------------------------------------------------------------

    def _check_house(self, h: int) -> None:
        if not 0 <= h < len(self._houses):
            raise StructuralError(f"house index {h} out of range")

    def _check_generator(self, g: int) -> None:
        if not 0 <= g < len(self._generators):
            raise StructuralError(f"generator index {g} out of range")

    def assign(self, h: int, g: int) -> None:
        """Connect an unassigned house to generator g."""
        self._check_house(h)
        self._check_generator(g)
        if self._assignment[h] != UNASSIGNED:
            raise StructuralError(
                f"house {self._houses[h].name!r} is already connected to "
                f"{self._generators[self._assignment[h]].name!r}"
            )
        self._assignment[h] = g
        self._loads[g] += self._demands[h]

    def unassign(self, h: int, g: int) -> None:
        """Disconnect house h from generator g."""
        self._check_house(h)
        self._check_generator(g)
        if self._assignment[h] != g:
            raise StructuralError(
                f"house {self._houses[h].name!r} is not connected to generator index {g}"
            )
        self._assignment[h] = UNASSIGNED
        self._loads[g] -= self._demands[h]

    def reassign(self, h: int, src: int, dst: int) -> None:
        """Move house h from generator src to generator dst."""
        self._check_house(h)
        self._check_generator(src)
        self._check_generator(dst)
        if self._assignment[h] != src:
            raise StructuralError(
                f"house {self._houses[h].name!r} is not connected to generator index {src}"
            )
        demand = self._demands[h]
        self._assignment[h] = dst
        self._loads[src] -= demand
        self._loads[dst] += demand

    def connect(self, house_name: str, generator_name: str) -> None:
        self.assign(self.house_index(house_name), self.generator_index(generator_name))

    def clear_assignment(self) -> None:
        self._assignment.fill(UNASSIGNED)
        self._loads.fill(0)

    def assignment_copy(self) -> np.ndarray:
        """Deep copy of the assignment array (generator index per house)."""
        return self._assignment.copy()

    @property
    def assignment(self) -> np.ndarray:
        """Read-only view of the live assignment array; changes with the network."""
        view = self._assignment.view()
        view.flags.writeable = False
        return view

    def restore_assignment(self, assignment: np.ndarray) -> None:
        """Bring the live assignment back to a copy taken with `assignment_copy`."""
        assignment = np.asarray(assignment, dtype=np.int64)
        if assignment.shape != self._assignment.shape:
            raise StructuralError(
                f"assignment shape {assignment.shape} != {self._assignment.shape}"
            )
        valid = (assignment >= UNASSIGNED) & (assignment < len(self._generators))
        if not valid.all():
            h = int(np.flatnonzero(~valid)[0])
            raise StructuralError(
                f"assignment of house index {h} refers to unknown generator index {int(assignment[h])}"
            )
        for h in np.flatnonzero(assignment != self._assignment).tolist():
            current = int(self._assignment[h])
            target = int(assignment[h])
            if current == UNASSIGNED:
                self.assign(h, target)
            elif target == UNASSIGNED:
                self.unassign(h, current)
            else:
                self.reassign(h, current, target)

    # ------------------------------------------------------------------
    # Cost
    # ------------------------------------------------------------------

    def recompute_cost(self) -> CostSnapshot:
        """
        Recompute the cost statistics from the live assignment.

        cost = sum_g |u_g - mean(u)| + penalty * sum_g max(0, u_g - 1)

        Must be called after every mutation before any cost accessor is read.
        """
        util = self.utilizations()
        if util.size == 0:
            self._snapshot = CostSnapshot(0.0, 0.0, 0.0, self.penalty, 0.0)
            return self._snapshot

        mean = float(util.mean())
        dispersion = float(np.abs(util - mean).sum())
        overload = float(np.maximum(util - 1.0, 0.0).sum())
        self._snapshot = CostSnapshot(
            mean_utilization=mean,
            dispersion=dispersion,
            overload=overload,
            penalty=self.penalty,
            total_cost=dispersion + self.penalty * overload,
        )
        return self._snapshot

    @property
    def snapshot(self) -> CostSnapshot:
        return self._snapshot

    def cost(self) -> float:
        return self._snapshot.total_cost

    def mean_utilization(self) -> float:
        return self._snapshot.mean_utilization

    def dispersion(self) -> float:
        return self._snapshot.dispersion

    def overload(self) -> float:
        return self._snapshot.overload

    def __repr__(self) -> str:
        return (
            f"Network(name={self.name!r}, penalty={self.penalty}, "
            f"generators={len(self._generators)}, houses={len(self._houses)})"
        )

    def __str__(self) -> str:
        return "\n".join(
            f"{house} ----- {generator}"
            for house, generator in self.connections().items()
            if generator is not None
        )
