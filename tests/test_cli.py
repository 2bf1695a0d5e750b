import unittest
from unittest import mock
from fractions import Fraction

from fair_dice.cli import (
    parse_dice, parse_choice, format_probability_table, play, main,
)
from fair_dice.core.actions import ChooseNumber, Cancel, Help
from fair_dice.core.commitment import FairRandomGenerator
from fair_dice.core.config import GameConfig, ConfigurationError
from fair_dice.core.die import Die
from fair_dice.core import state


class QueuedSecrets:
    def __init__(self, secrets):
        self.secrets = list(secrets)

    def random_bytes(self, n):
        if n == 32:
            return bytes(range(32))
        return self.secrets.pop(0).to_bytes(n, "big")


def scripted(lines):
    it = iter(lines)
    return lambda prompt: next(it)


class TestParsing(unittest.TestCase):
    def test_parse_dice(self):
        dice = parse_dice(["2,2,4,4,9,9", "6,8,1,1,8,6", "7,5,3,7,5,3"])
        self.assertEqual(dice[1], Die([6, 8, 1, 1, 8, 6]))
        self.assertEqual(len(dice), 3)

    def test_parse_dice_too_few(self):
        with self.assertRaises(ConfigurationError) as ctx:
            parse_dice(["1,2,3", "4,5,6"])
        self.assertIn("at least 3 dice", str(ctx.exception))

    def test_parse_dice_bad_format(self):
        with self.assertRaises(ConfigurationError) as ctx:
            parse_dice(["1,2,3", "4,x,6", "1"])
        self.assertIn("Bad die format: '4,x,6'", str(ctx.exception))
        with self.assertRaises(ConfigurationError):
            parse_dice(["1,2,3", "", "1"])

    def test_parse_choice(self):
        cfg = GameConfig()
        self.assertEqual(parse_choice("x", cfg), Cancel())
        self.assertEqual(parse_choice(" X ", cfg), Cancel())
        self.assertEqual(parse_choice("?", cfg), Help())
        self.assertEqual(parse_choice("3", cfg), ChooseNumber(3))
        self.assertIsNone(parse_choice("three", cfg))

    def test_parse_choice_lowercase_tokens(self):
        cfg = GameConfig(help_token="h", cancel_token="q")
        self.assertEqual(parse_choice("h", cfg), Help())
        self.assertEqual(parse_choice("H", cfg), Help())
        self.assertEqual(parse_choice("q", cfg), Cancel())
        self.assertIsNone(parse_choice("?", cfg))

    def test_probability_table(self):
        table = format_probability_table([[None, Fraction(5, 9)], [Fraction(4, 9), None]])
        self.assertIn("Win Chances", table)
        self.assertIn("55.56%", table)
        self.assertIn("44.44%", table)
        self.assertIn("Die 1", table)

    def test_probability_table_is_grid(self):
        lines = format_probability_table([[None, Fraction(5, 9)], [Fraction(4, 9), None]]).splitlines()
        self.assertEqual(lines[0], "Win Chances")
        self.assertTrue(lines[1].startswith("+--"))
        self.assertTrue(lines[-1].startswith("+--"))
        die0 = next(line for line in lines if line.startswith("| Die 0"))
        cells = [c.strip() for c in die0.strip("|").split("|")]
        self.assertEqual(cells, ["Die 0", "-", "55.56%"])


class TestPlay(unittest.TestCase):
    def test_full_game_output(self):
        dice = parse_dice(["2,2,4,4,9,9", "1,1,6,6,8,8", "3,3,5,5,7,7"])
        out = []
        # help, garbage, then: user first, takes die 0, counter agent answers with die 2
        engine = play(dice, GameConfig(agent="counter"), input_fn=scripted(["?", "abc", "1", "0", "4", "0"]),
                      output_fn=out.append, source=QueuedSecrets([0, 0, 0]))
        text = "\n".join(out)
        self.assertEqual(engine.session.phase, state.RESOLVED)
        self.assertIn("Let's decide who picks first.", text)
        self.assertIn("Win Chances", text)
        self.assertIn("Pick a number between 0 and 1", text)
        self.assertIn("You pick first!", text)
        self.assertIn("You picked: [2,2,4,4,9,9]", text)
        self.assertIn("I pick die: [3,3,5,5,7,7]", text)
        self.assertIn("Result: 0 + 4 = 4 (mod 6)", text)
        self.assertIn("I win! (7 > 2)", text)

    def test_out_of_range_reprompts(self):
        dice = parse_dice(["1,2", "3,4", "5,6"])
        out = []
        engine = play(dice, input_fn=scripted(["5", "X"]), output_fn=out.append, source=QueuedSecrets([0]))
        self.assertEqual(engine.session.phase, state.CANCELLED)
        self.assertIn("Pick a number between 0 and 1, X to exit, or ? for help.", out)
        self.assertEqual(out[-1], "Game cancelled.")

    def test_eof_cancels(self):
        def eof(prompt):
            raise EOFError
        out = []
        engine = play(parse_dice(["1", "2", "3"]), input_fn=eof, output_fn=out.append, source=QueuedSecrets([0]))
        self.assertEqual(engine.session.phase, state.CANCELLED)


class TestMain(unittest.TestCase):
    def test_main_reports_configuration_error(self):
        out = []
        code = main(["1,2,3", "4,5,6"], input_fn=scripted([]), output_fn=out.append)
        self.assertEqual(code, 1)
        self.assertTrue(out[0].startswith("Error: You need at least 3 dice"))

    def test_main_unknown_agent(self):
        out = []
        code = main(["--agent", "oracle", "1", "2", "3"], input_fn=scripted([]), output_fn=out.append)
        self.assertEqual(code, 1)
        self.assertIn("Unknown agent", out[0])

    def test_main_does_not_hide_unexpected_errors(self):
        with mock.patch("fair_dice.cli.play", side_effect=ValueError("boom")):
            with self.assertRaises(ValueError):
                main(["1", "2", "3"], input_fn=scripted([]), output_fn=lambda line: None)

    def test_main_cancel_is_clean_exit(self):
        out = []
        code = main(["1,2", "3,4", "5,6"], input_fn=scripted(["X"]), output_fn=out.append)
        self.assertEqual(code, 0)
        self.assertEqual(out[-1], "Game cancelled.")

    def test_main_transcript(self):
        out = []
        code = main(["--transcript", "1,2", "3,4", "5,6"], input_fn=scripted(["X"]), output_fn=out.append)
        self.assertEqual(code, 0)
        self.assertIn('"event_type": "GameCancelled"', out[-1])

    def test_verify_command(self):
        gen = FairRandomGenerator(5)
        commitment = gen.get_hmac()
        gen.compute_result(2)
        out = []
        args = ["verify", "--hmac", commitment, "--key", gen.get_key(), "--number", str(gen.get_computer_number())]
        self.assertEqual(main(args, output_fn=out.append), 0)
        self.assertEqual(out, ["Commitment verified."])
        wrong = (gen.get_computer_number() + 1) % 6
        args[-1] = str(wrong)
        self.assertEqual(main(args, output_fn=out.append), 1)
        self.assertEqual(out[-1], "Commitment does NOT match!")


if __name__ == '__main__':
    unittest.main()
