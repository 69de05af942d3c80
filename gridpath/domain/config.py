"""
Serializable grid configuration.

Only cells that differ from the default (weight 1, no obstacle) are listed,
so a configuration grows with the number of painted cells, not the grid area.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .errors import InvalidConfig
from .types import Coord


def _require_int(value: Any, field_name: str) -> int:
    # bool is an int subclass, but True is never a usable row or size
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidConfig(f"'{field_name}' must be an integer, got {value!r}", field=field_name)
    return value


def _position_from_dict(data: Any, field_name: str) -> Optional[Coord]:
    if data is None:
        return None
    if not isinstance(data, Mapping) or "row" not in data or "col" not in data:
        raise InvalidConfig(f"'{field_name}' must be null or an object with row and col",
                            field=field_name)
    return (_require_int(data["row"], f"{field_name}.row"),
            _require_int(data["col"], f"{field_name}.col"))


def _position_to_dict(coord: Optional[Coord]) -> Optional[Dict[str, int]]:
    if coord is None:
        return None
    return {"row": coord[0], "col": coord[1]}


@dataclass(frozen=True)
class NodeConfig:
    """One non-default cell."""
    row: int
    col: int
    is_obstacle: bool = False
    weight: int = 1

    @property
    def coord(self) -> Coord:
        return (self.row, self.col)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "row": self.row,
            "col": self.col,
            "isObstacle": self.is_obstacle,
            "weight": self.weight,
        }

    @classmethod
    def from_dict(cls, data: Any, index: int = 0) -> 'NodeConfig':
        prefix = f"nodes[{index}]"
        if not isinstance(data, Mapping):
            raise InvalidConfig(f"{prefix} must be an object", field=prefix)
        if "row" not in data or "col" not in data:
            raise InvalidConfig(f"{prefix} is missing row or col", field=prefix)

        is_obstacle = data.get("isObstacle", False)
        if not isinstance(is_obstacle, bool):
            raise InvalidConfig(f"{prefix}.isObstacle must be a boolean",
                                field=f"{prefix}.isObstacle")

        weight = _require_int(data.get("weight", 1), f"{prefix}.weight")
        if weight < 1:
            raise InvalidConfig(f"{prefix}.weight must be at least 1, got {weight}",
                                field=f"{prefix}.weight")

        return cls(
            row=_require_int(data["row"], f"{prefix}.row"),
            col=_require_int(data["col"], f"{prefix}.col"),
            is_obstacle=is_obstacle,
            weight=weight,
        )


@dataclass
class GridConfig:
    """Sparse description of a grid plus the optional start/end designation."""
    size: int
    nodes: List[NodeConfig] = field(default_factory=list)
    start_position: Optional[Coord] = None
    end_position: Optional[Coord] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON-compatible schema."""
        return {
            "size": self.size,
            "nodes": [node.to_dict() for node in self.nodes],
            "startPosition": _position_to_dict(self.start_position),
            "endPosition": _position_to_dict(self.end_position),
        }

    def validated(self) -> 'GridConfig':
        """
        Checked copy of a configuration built in code, with the same rules
        as from_dict().

        Raises:
            InvalidConfig: If the size, node list or any entry is unusable
        """
        try:
            data = self.to_dict()
        except (AttributeError, IndexError, TypeError) as e:
            raise InvalidConfig(f"Configuration cannot be serialized: {e}") from e
        return GridConfig.from_dict(data)

    @classmethod
    def from_dict(cls, data: Any) -> 'GridConfig':
        """
        Parse and validate a configuration mapping.

        Raises:
            InvalidConfig: If the size or node list is missing or unusable,
                or any entry is malformed
        """
        if not isinstance(data, Mapping):
            raise InvalidConfig("Configuration must be an object")

        if "size" not in data:
            raise InvalidConfig("Configuration is missing 'size'", field="size")
        size = _require_int(data["size"], "size")
        if size <= 0:
            raise InvalidConfig(f"'size' must be positive, got {size}", field="size")

        raw_nodes = data.get("nodes")
        if not isinstance(raw_nodes, list):
            raise InvalidConfig("Configuration is missing the 'nodes' list", field="nodes")

        nodes = [NodeConfig.from_dict(entry, index) for index, entry in enumerate(raw_nodes)]

        return cls(
            size=size,
            nodes=nodes,
            start_position=_position_from_dict(data.get("startPosition"), "startPosition"),
            end_position=_position_from_dict(data.get("endPosition"), "endPosition"),
        )

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, text: str) -> 'GridConfig':
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise InvalidConfig(f"Configuration is not valid JSON: {e}") from e
        return cls.from_dict(data)
