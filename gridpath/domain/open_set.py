"""Open set for the A* search with insertion-order tie-breaking."""

from typing import Dict, List, Optional, Tuple

from .types import Coord


class OpenSet:
    """
    Candidate cells discovered but not yet finalized.

    Members are kept in insertion order and the minimum is found by a linear
    scan with a strict comparison, so among equal f costs the earliest
    inserted member wins. Updating a member's cost keeps its position.
    Membership checks use a dict keyed by coordinate.
    """

    def __init__(self):
        self._order: List[Coord] = []
        self._f_costs: Dict[Coord, float] = {}

    def is_empty(self) -> bool:
        return not self._order

    def size(self) -> int:
        return len(self._order)

    def __len__(self) -> int:
        return len(self._order)

    def __contains__(self, coord: Coord) -> bool:
        return coord in self._f_costs

    def contains(self, coord: Coord) -> bool:
        return coord in self._f_costs

    def put(self, coord: Coord, f_cost: float):
        """Insert a new member at the back, or update the cost of an existing one in place."""
        if coord not in self._f_costs:
            self._order.append(coord)
        self._f_costs[coord] = f_cost

    def get_cost(self, coord: Coord) -> Optional[float]:
        return self._f_costs.get(coord)

    def peek(self) -> Optional[Tuple[Coord, float]]:
        """
        Return the member with the lowest f cost without removing it.
        Returns None if the set is empty.
        """
        if not self._order:
            return None
        best = self._order[0]
        best_cost = self._f_costs[best]
        for coord in self._order[1:]:
            cost = self._f_costs[coord]
            if cost < best_cost:
                best, best_cost = coord, cost
        return best, best_cost

    def remove(self, coord: Coord):
        """Remove a member; raises KeyError if it is not present."""
        del self._f_costs[coord]
        self._order.remove(coord)

    def pop(self) -> Optional[Coord]:
        """Remove and return the member with the lowest f cost."""
        lowest = self.peek()
        if lowest is None:
            return None
        self.remove(lowest[0])
        return lowest[0]

    def clear(self):
        self._order.clear()
        self._f_costs.clear()

    def get_all_items(self) -> List[Coord]:
        """All members in insertion order."""
        return list(self._order)
