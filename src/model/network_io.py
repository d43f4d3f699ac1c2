"""Reading and writing networks in the line-oriented declaration format.

One fact per line, terminated by a period, grouped in this order::

    generateur(name,capacity).
    maison(name,CONSUMPTION).
    connexion(houseName,generatorName).

Unconnected houses have no `connexion` line.
"""

from pathlib import Path
from typing import Iterable, List, Union

from .errors import NetworkError, NetworkFormatError
from .network import Consumption, Network

GENERATOR = "generateur"
HOUSE = "maison"
CONNECTION = "connexion"


def _declaration_type(line: str) -> str:
    if "(" not in line:
        raise NetworkFormatError("missing opening parenthesis")
    return line[:line.index("(")].strip()


def _fields(line: str, expected: int) -> List[str]:
    """Split `type(a,b).` into its stripped fields, checking the field count."""
    if not line.endswith("."):
        raise NetworkFormatError("missing final period")
    if "(" not in line or ")" not in line:
        raise NetworkFormatError("missing parenthesis")

    start = line.index("(")
    end = line.rindex(")")
    if start >= end:
        raise NetworkFormatError("misplaced parentheses")

    fields = [field.strip() for field in line[start + 1:end].split(",")]
    if len(fields) != expected:
        raise NetworkFormatError(
            f"wrong number of fields: found {len(fields)}, expected {expected}"
        )
    return fields


def _parse_generator(line: str, network: Network) -> None:
    name, capacity_text = _fields(line, 2)
    try:
        capacity = int(capacity_text)
    except ValueError:
        raise NetworkFormatError("capacity must be an integer") from None
    if capacity <= 0:
        raise NetworkFormatError("capacity must be greater than 0")
    network.add_generator(name, capacity)


def _parse_house(line: str, network: Network) -> None:
    name, label = _fields(line, 2)
    network.add_house(name, Consumption.parse(label))


def _parse_connection(line: str, network: Network) -> None:
    first, second = _fields(line, 2)
    if network.has_house(first) and network.has_generator(second):
        network.connect(first, second)
    elif network.has_house(second) and network.has_generator(first):
        network.connect(second, first)
    else:
        raise NetworkFormatError(f"unknown house and/or generator: {first}, {second}")


def parse_network(lines: Iterable[str], penalty: float = 10.0, name: str = "") -> Network:
    """
    Build a network from declaration lines.

    Args:
        lines: Lines of the text representation (newlines allowed)
        penalty: Overload penalty coefficient of the new network
        name: Optional network label

    Returns:
        Fully built network

    Raises:
        NetworkFormatError: on any malformed or out-of-order line, with the
            1-based line number. Structural errors raised while registering
            entities are reported the same way.
    """
    network = Network(penalty, name=name)
    houses_started = False
    connections_started = False

    for line_number, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line:
            continue

        try:
            kind = _declaration_type(line)
            if kind == GENERATOR:
                if houses_started or connections_started:
                    raise NetworkFormatError(
                        "generators must be declared before houses and connections"
                    )
                _parse_generator(line, network)
            elif kind == HOUSE:
                if connections_started:
                    raise NetworkFormatError("houses must be declared before connections")
                houses_started = True
                _parse_house(line, network)
            elif kind == CONNECTION:
                connections_started = True
                _parse_connection(line, network)
            else:
                raise NetworkFormatError(
                    f"invalid declaration type {kind!r}; expected generateur, maison or connexion"
                )
        except NetworkFormatError as e:
            raise NetworkFormatError(e.reason, line_number) from None
        except NetworkError as e:
            raise NetworkFormatError(str(e), line_number) from e

    return network


def load_network(filepath: Union[str, Path], penalty: float = 10.0) -> Network:
    """Load a network from a text file (see `parse_network`)."""
    path = Path(filepath)
    with path.open("r", encoding="utf-8") as f:
        return parse_network(f, penalty=penalty, name=path.stem)


def format_network(network: Network) -> str:
    """
    Text representation of a network: generators, houses, then connections.

    A house whose demand matches a consumption category is written with the
    category label, otherwise with its raw demand.
    """
    lines = [f"{GENERATOR}({g.name},{g.capacity})." for g in network.generators()]

    for house in network.houses():
        category = Consumption.from_demand(house.demand)
        label = category.name if category is not None else str(house.demand)
        lines.append(f"{HOUSE}({house.name},{label}).")

    for house_name, generator_name in network.connections().items():
        if generator_name is not None:
            lines.append(f"{CONNECTION}({house_name},{generator_name}).")

    return "\n".join(lines) + "\n" if lines else ""


def save_network(network: Network, filepath: Union[str, Path]) -> None:
    """Write a network to a text file."""
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        f.write(format_network(network))
