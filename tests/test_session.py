"""GameSession tests: state holding and change notification."""

import unittest

from aethergard.models import GamePhase, Player, Position
from aethergard.session import GameSession


class TestGameSession(unittest.TestCase):
    def setUp(self):
        self.session = GameSession()
        self.seen = []
        self.unsubscribe = self.session.subscribe(self.seen.append)

    def test_listeners_see_every_new_state(self):
        state = self.session.place_stone(Position(row=8, col=8))
        self.assertEqual(self.seen, [state])
        self.assertIs(self.session.state, state)
        self.assertIs(state.current_player, Player.WHITE)

    def test_ignored_commands_do_not_notify(self):
        self.session.place_stone(Position(row=8, col=8))
        before = self.session.state
        self.session.place_stone(Position(row=8, col=8))
        self.session.redo()
        self.assertIs(self.session.state, before)
        self.assertEqual(len(self.seen), 1)

    def test_unsubscribe_stops_notifications(self):
        self.unsubscribe()
        self.session.place_stone(Position(row=0, col=0))
        self.assertEqual(self.seen, [])
        # A second call is harmless.
        self.unsubscribe()

    def test_undo_and_reset_notify(self):
        self.session.place_stone(Position(row=0, col=0))
        self.session.undo()
        self.assertTrue(self.session.state.is_history_mode)
        self.session.confirm_undo()
        self.assertFalse(self.session.state.is_history_mode)
        self.session.reset()
        self.assertEqual(len(self.seen), 4)
        self.assertEqual(self.session.state.move_history, [])
        self.assertIs(self.session.state.game_phase, GamePhase.PLACING)

    def test_sessions_are_independent(self):
        other = GameSession()
        self.session.place_stone(Position(row=4, col=4))
        self.assertEqual(other.state.move_history, [])


if __name__ == "__main__":
    unittest.main()
