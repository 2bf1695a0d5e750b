import unittest
from fractions import Fraction

from fair_dice.core.actions import ChooseNumber, Help
from fair_dice.core.die import Die
from fair_dice.core.engine import GameEngine
from fair_dice.transcript.events import GameEvent
from fair_dice.transcript.recorder import InMemoryRecorder, record_engine_events
from fair_dice.transcript import serializer


DICE = [Die([2, 2, 4, 4, 9, 9]), Die([1, 1, 6, 6, 8, 8]), Die([3, 3, 5, 5, 7, 7])]


class TestTranscript(unittest.TestCase):
    """
    Tests for moving engine events into the in-memory recorder and serializing them.
    """

    def test_record_engine_events_drains_engine(self):
        engine = GameEngine(DICE)
        recorder = InMemoryRecorder()
        engine.start()
        first = record_engine_events(engine, recorder, "g1")
        self.assertEqual([e.event_type for e in first], ["CommitmentDisclosed"])
        self.assertEqual(engine.pop_events(), [])
        engine.submit(Help())
        engine.submit(ChooseNumber(0))
        record_engine_events(engine, recorder, "g1")
        types = [e.event_type for e in recorder.events()]
        self.assertEqual(types[:4], ["CommitmentDisclosed", "HelpRequested", "NumberRevealed", "FirstMoveDecided"])
        self.assertTrue(all(e.game_id == "g1" for e in recorder.events()))
        self.assertNotIn("type", recorder.events()[0].payload)

    def test_player_type_from_payload(self):
        engine = GameEngine(DICE)
        recorder = InMemoryRecorder()
        engine.start()
        engine.submit(ChooseNumber(1))
        engine.submit(ChooseNumber(0))
        record_engine_events(engine, recorder, "g2")
        selected = recorder.of_type("DieSelected")
        self.assertEqual(sorted(e.player_type for e in selected), ["computer", "user"])

    def test_flush(self):
        recorder = InMemoryRecorder()
        recorder.record(GameEvent("g", "GameCancelled", {"phase": "X"}))
        recorder.flush()
        self.assertEqual(recorder.events(), [])

    def test_events_is_a_copy_and_of_type_filters(self):
        recorder = InMemoryRecorder()
        recorder.record(GameEvent("g", "DieSelected", {"index": 0}, player_type="computer"))
        recorder.record(GameEvent("g", "GameCancelled", {"phase": "X"}))
        snapshot = recorder.events()
        snapshot.clear()
        self.assertEqual(len(recorder.events()), 2)
        self.assertEqual([e.player_type for e in recorder.of_type("DieSelected")], ["computer"])
        data = serializer.loads(serializer.dumps(recorder.events()))
        self.assertIsInstance(data[1], dict)
        self.assertEqual(data[1]["payload"], {"phase": "X"})
        self.assertIsNone(data[1]["player_type"])

    def test_serializer_handles_fractions_and_bytes(self):
        event = GameEvent("g", "HelpRequested", {"matrix": [[None, Fraction(5, 9)]], "key": b"\x0a\xff"})
        data = serializer.loads(serializer.dumps([event]))
        self.assertEqual(data[0]["event_type"], "HelpRequested")
        self.assertEqual(data[0]["payload"]["matrix"], [[None, "5/9"]])
        self.assertEqual(data[0]["payload"]["key"], "0AFF")


if __name__ == '__main__':
    unittest.main()
