"""Tests for sparse grid export and import."""

import json

import pytest

from gridpath.domain.config import GridConfig, NodeConfig
from gridpath.domain.errors import InvalidConfig
from gridpath.domain.grid import Grid


def cell_states(grid):
    return [(cell.coord, cell.is_obstacle, cell.weight) for cell in grid]


class TestExport:
    """Only painted cells are exported."""

    def test_empty_grid_exports_no_nodes(self):
        config = Grid(6).export_config()

        assert config.size == 6
        assert config.nodes == []

    def test_lists_non_default_cells_in_row_major_order(self, make_grid):
        grid = make_grid("..#", "3..", ".#2")

        nodes = grid.export_config().nodes

        assert nodes == [
            NodeConfig(0, 2, True, 1),
            NodeConfig(1, 0, False, 3),
            NodeConfig(2, 1, True, 1),
            NodeConfig(2, 2, False, 2),
        ]

    def test_weighted_obstacle_keeps_its_weight(self):
        grid = Grid(2)
        grid.set_weight(1, 1, 6)
        grid.set_obstacle(1, 1, True)

        assert grid.export_config().nodes == [NodeConfig(1, 1, True, 6)]

    def test_to_dict_uses_the_serialized_schema(self, make_grid):
        grid = make_grid("#.", ".4")
        config = grid.export_config()
        config.start_position = (0, 1)

        assert config.to_dict() == {
            "size": 2,
            "nodes": [
                {"row": 0, "col": 0, "isObstacle": True, "weight": 1},
                {"row": 1, "col": 1, "isObstacle": False, "weight": 4},
            ],
            "startPosition": {"row": 0, "col": 1},
            "endPosition": None,
        }


class TestImport:
    """Applying a configuration to a grid."""

    def test_round_trip_into_fresh_grid(self, make_grid):
        painted = make_grid("#..2", ".9..", "..#.", "3..#")

        restored = Grid(1)
        restored.import_config(painted.export_config())

        assert restored.size == painted.size
        assert cell_states(restored) == cell_states(painted)

    def test_round_trip_through_json(self, make_grid):
        painted = make_grid(".#.", "5..", "..#")
        text = painted.export_config().to_json()

        restored = Grid(8)
        restored.import_config(json.loads(text))

        assert cell_states(restored) == cell_states(painted)

    def test_round_trip_into_the_same_grid(self, make_grid):
        grid = make_grid("#.", ".7")
        before = cell_states(grid)

        grid.import_config(grid.export_config())

        assert cell_states(grid) == before

    def test_import_resizes_and_keeps_overlapping_unlisted_state(self):
        grid = Grid(3)
        grid.set_obstacle(0, 0, True)

        grid.import_config({"size": 5, "nodes": [{"row": 4, "col": 4, "isObstacle": True,
                                                  "weight": 1}]})

        assert grid.size == 5
        assert grid.get_cell(0, 0).is_obstacle
        assert grid.get_cell(4, 4).is_obstacle

    def test_returns_parsed_endpoints(self):
        parsed = Grid(2).import_config({
            "size": 4,
            "nodes": [],
            "startPosition": {"row": 0, "col": 0},
            "endPosition": {"row": 3, "col": 2},
        })

        assert parsed.start_position == (0, 0)
        assert parsed.end_position == (3, 2)

    def test_missing_optional_fields_use_defaults(self):
        grid = Grid(2)
        parsed = grid.import_config({"size": 2, "nodes": [{"row": 1, "col": 0,
                                                          "isObstacle": True}]})

        assert grid.get_cell(1, 0).is_obstacle
        assert grid.get_cell(1, 0).weight == 1
        assert parsed.start_position is None
        assert parsed.end_position is None

    def test_entries_outside_the_grid_are_skipped(self):
        grid = Grid(2)
        grid.import_config({"size": 2, "nodes": [
            {"row": 5, "col": 5, "isObstacle": True, "weight": 1},
            {"row": 1, "col": 1, "isObstacle": False, "weight": 3},
        ]})

        assert grid.count_obstacles() == 0
        assert grid.get_cell(1, 1).weight == 3

    @pytest.mark.parametrize("payload", [
        None,
        [],
        {},
        {"nodes": []},
        {"size": 0, "nodes": []},
        {"size": -4, "nodes": []},
        {"size": "5", "nodes": []},
        {"size": True, "nodes": []},
        {"size": 3},
        {"size": 3, "nodes": None},
        {"size": 3, "nodes": {"row": 0}},
        {"size": 3, "nodes": ["oops"]},
        {"size": 3, "nodes": [{"row": 0}]},
        {"size": 3, "nodes": [{"row": 0, "col": 0, "weight": 0}]},
        {"size": 3, "nodes": [{"row": 0, "col": 0, "weight": 2.5}]},
        {"size": 3, "nodes": [{"row": 0, "col": 0, "isObstacle": "yes"}]},
        {"size": 3, "nodes": [], "startPosition": {"row": 1}},
    ])
    def test_malformed_payload_raises_and_leaves_grid_untouched(self, payload):
        grid = Grid(2)
        grid.set_obstacle(0, 0, True)

        with pytest.raises(InvalidConfig):
            grid.import_config(payload)

        assert grid.size == 2
        assert grid.get_cell(0, 0).is_obstacle

    def test_invalid_config_object_raises(self):
        with pytest.raises(InvalidConfig):
            Grid(2).import_config(GridConfig(size=0))

    @pytest.mark.parametrize("config", [
        GridConfig(size=True),
        GridConfig(size=3, nodes=None),
        GridConfig(size=3, nodes=[NodeConfig("a", 0, True)]),
        GridConfig(size=3, nodes=[NodeConfig(0, 1.5, True)]),
        GridConfig(size=3, nodes=[NodeConfig(0, 0, "yes")]),
        GridConfig(size=3, nodes=[NodeConfig(0, 0, False, 0)]),
        GridConfig(size=3, nodes=[{"row": 0, "col": 0}]),
        GridConfig(size=3, start_position=(1,)),
        GridConfig(size=3, end_position=("1", 2)),
    ])
    def test_malformed_config_object_raises_and_leaves_grid_untouched(self, config):
        grid = Grid(2)
        grid.set_weight(1, 1, 4)

        with pytest.raises(InvalidConfig):
            grid.import_config(config)

        assert grid.size == 2
        assert grid.get_cell(1, 1).weight == 4

    def test_validated_copy_of_a_config_object(self):
        config = GridConfig(size=3, nodes=[NodeConfig(2, 1, True, 3)], start_position=(0, 0))

        checked = config.validated()

        assert checked == config
        assert checked is not config

    def test_invalid_json_raises_invalid_config(self):
        with pytest.raises(InvalidConfig):
            GridConfig.from_json("{not json")

    def test_error_names_the_offending_field(self):
        with pytest.raises(InvalidConfig) as excinfo:
            GridConfig.from_dict({"size": 3, "nodes": [{"row": 0, "col": 0, "weight": -1}]})

        assert excinfo.value.field == "nodes[0].weight"
        assert "INVALID_CONFIG" in str(excinfo.value)
