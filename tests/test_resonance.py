"""Resonance propagation tests."""

import pytest

from aethergard.board_manager import BoardManager
from aethergard.errors import RulesViolationError
from aethergard.models import Core, Direction, Player, StoneType
from aethergard.rules.resonance import (
    activate_resonance,
    core_owner,
    propagate_resonance,
)

from conftest import P

CORE = Core.at(8, 8)
BLACK_CORE = {
    (8, 8): StoneType.BLACK_CONDUCTOR,
    (8, 9): StoneType.BLACK_CONDUCTOR,
    (9, 8): StoneType.BLACK_CONDUCTOR,
    (9, 9): StoneType.BLACK_CONDUCTOR,
}


def _board(board_factory, extra=None):
    stones = dict(BLACK_CORE)
    stones.update(extra or {})
    return board_factory(stones)


def test_open_board_rays_record_empty_cells_only(board_factory):
    board = _board(board_factory)
    new_board, paths = activate_resonance(board, CORE, P(8, 8))

    up, down, left, right = paths
    assert up == [P(7, 8), P(6, 8), P(5, 8), P(4, 8), P(3, 8)]
    # The core cell below the focus uses up one of the five steps.
    assert down == [P(10, 8), P(11, 8), P(12, 8), P(13, 8)]
    assert left == [P(8, 7), P(8, 6), P(8, 5), P(8, 4), P(8, 3)]
    assert right == [P(8, 10), P(8, 11), P(8, 12), P(8, 13)]

    assert BoardManager.get_stone(new_board, P(8, 8)) is StoneType.BLACK_KEYSTONE
    assert BoardManager.changed_positions(board, new_board) == [P(8, 8)]


def test_input_board_is_not_mutated(board_factory):
    board = _board(board_factory, {(6, 8): StoneType.BLACK_CONDUCTOR})
    digest = BoardManager.hash_board(board)
    activate_resonance(board, CORE, P(8, 8))
    assert BoardManager.hash_board(board) == digest


def test_adjacent_opponent_blocks_ray_completely(board_factory):
    board = _board(board_factory, {(7, 8): StoneType.WHITE_CONDUCTOR})
    new_board, paths = activate_resonance(board, CORE, P(8, 8))
    assert paths[0] == []
    assert BoardManager.get_stone(new_board, P(7, 8)) is StoneType.WHITE_CONDUCTOR


def test_first_own_conductor_is_recorded_converted_and_stops_ray(board_factory):
    board = _board(
        board_factory,
        {
            (5, 8): StoneType.BLACK_CONDUCTOR,
            (4, 8): StoneType.BLACK_CONDUCTOR,
        },
    )
    new_board, paths = activate_resonance(board, CORE, P(8, 8))
    assert paths[0] == [P(7, 8), P(6, 8), P(5, 8)]
    assert BoardManager.get_stone(new_board, P(5, 8)) is StoneType.BLACK_KEYSTONE
    assert BoardManager.get_stone(new_board, P(4, 8)) is StoneType.BLACK_CONDUCTOR


def test_at_most_one_conversion_per_direction(board_factory):
    board = _board(
        board_factory,
        {
            (8, 7): StoneType.BLACK_CONDUCTOR,
            (8, 6): StoneType.BLACK_CONDUCTOR,
        },
    )
    new_board, paths = activate_resonance(board, CORE, P(8, 8))
    assert paths[2] == [P(8, 7)]
    assert BoardManager.changed_positions(board, new_board) == [P(8, 7), P(8, 8)]


def test_own_keystone_stops_ray_without_being_recorded(board_factory):
    board = _board(board_factory, {(6, 8): StoneType.BLACK_KEYSTONE})
    _, paths = activate_resonance(board, CORE, P(8, 8))
    assert paths[0] == [P(7, 8)]


def test_conductor_beyond_range_is_untouched(board_factory):
    board = _board(board_factory, {(2, 8): StoneType.BLACK_CONDUCTOR})
    new_board, paths = activate_resonance(board, CORE, P(8, 8))
    assert len(paths[0]) == 5
    assert P(2, 8) not in paths[0]
    assert BoardManager.get_stone(new_board, P(2, 8)) is StoneType.BLACK_CONDUCTOR


def test_opponent_conductor_is_never_converted(board_factory):
    board = _board(board_factory, {(8, 11): StoneType.WHITE_CONDUCTOR})
    new_board, paths = activate_resonance(board, CORE, P(8, 8))
    assert paths[3] == [P(8, 10)]
    assert BoardManager.get_stone(new_board, P(8, 11)) is StoneType.WHITE_CONDUCTOR


@pytest.mark.parametrize("focus", CORE.positions)
def test_core_cells_are_transparent_and_never_recorded(board_factory, focus):
    board = _board(board_factory)
    new_board, paths = activate_resonance(board, CORE, focus)

    recorded = [p for path in paths for p in path]
    assert not set(recorded) & set(CORE.positions)
    assert len(recorded) == len(set(recorded))
    for position in CORE.positions:
        expected = (
            StoneType.BLACK_KEYSTONE if position == focus else StoneType.BLACK_CONDUCTOR
        )
        assert BoardManager.get_stone(new_board, position) is expected
    # Two rays cross a core cell, so they record one cell fewer.
    assert sorted(len(path) for path in paths) == [4, 4, 5, 5]


def test_keystone_focus_is_idempotent(board_factory):
    board = _board(
        board_factory,
        {
            (8, 8): StoneType.BLACK_KEYSTONE,
            (7, 8): StoneType.BLACK_CONDUCTOR,
        },
    )
    new_board, paths = activate_resonance(board, CORE, P(8, 8))
    assert BoardManager.get_stone(new_board, P(8, 8)) is StoneType.BLACK_KEYSTONE
    assert paths[0] == [P(7, 8)]
    assert BoardManager.changed_positions(board, new_board) == [P(7, 8)]


def test_rays_stop_at_board_edge(diagram_board):
    board = diagram_board(["ww", "ww"], origin=(0, 0))
    core = Core.at(0, 0)
    new_board, paths = activate_resonance(board, core, P(0, 0))
    up, down, left, right = paths
    assert up == []
    assert left == []
    assert down == [P(2, 0), P(3, 0), P(4, 0), P(5, 0)]
    assert right == [P(0, 2), P(0, 3), P(0, 4), P(0, 5)]
    assert BoardManager.get_stone(new_board, P(0, 0)) is StoneType.WHITE_KEYSTONE


def test_propagate_single_ray(board_factory):
    board = _board(board_factory, {(13, 8): StoneType.BLACK_CONDUCTOR})
    path = propagate_resonance(board, P(8, 8), Direction.DOWN, CORE, Player.BLACK)
    assert path == [P(10, 8), P(11, 8), P(12, 8), P(13, 8)]
    # Conversion is the caller's job.
    assert BoardManager.get_stone(board, P(13, 8)) is StoneType.BLACK_CONDUCTOR


def test_focus_outside_core_is_rejected(board_factory):
    board = _board(board_factory)
    with pytest.raises(RulesViolationError) as exc_info:
        activate_resonance(board, CORE, P(7, 8))
    assert exc_info.value.rule_ref == "focus-in-core"


def test_core_owner_requires_single_owner(board_factory):
    board = _board(board_factory, {(9, 9): StoneType.WHITE_CONDUCTOR})
    with pytest.raises(RulesViolationError):
        core_owner(board, CORE)
    assert core_owner(_board(board_factory), CORE) is Player.BLACK
