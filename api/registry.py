from __future__ import annotations
from typing import Dict

from routing import RoutingAlgorithm

# Display labels for the routing heuristics, keyed by RoutingAlgorithm value
_ALGORITHMS: Dict[str, str] = {
    RoutingAlgorithm.NEAREST.value: "Nearest neighbour",
    RoutingAlgorithm.S_PATTERN.value: "Serpentine (S-pattern)",
    RoutingAlgorithm.LEVEL_FIRST.value: "Level first",
}


def list_algorithms():
    return [{"value": value, "label": label} for value, label in _ALGORITHMS.items()]


def is_known(algorithm: str) -> bool:
    return algorithm == "best" or algorithm in _ALGORITHMS
