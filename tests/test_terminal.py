import os
import tempfile
import termios
import time
import unittest
from unittest.mock import patch

from gpu_temp_reader.monitor import GPUTemperatureMonitor
from gpu_temp_reader.terminal import RawTerminal, TerminalError, split_keys


class RawTerminalTest(unittest.TestCase):
    def setUp(self):
        self.master, self.slave = os.openpty()
        self.stream = os.fdopen(self.slave, "r")
        self.addCleanup(self.stream.close)
        self.addCleanup(os.close, self.master)

    def test_enable_and_restore_attributes(self):
        original = termios.tcgetattr(self.slave)
        terminal = RawTerminal(self.stream)

        with terminal:
            self.assertTrue(terminal.active)
            attrs = termios.tcgetattr(self.slave)
            self.assertFalse(attrs[3] & termios.ICANON)
            self.assertFalse(attrs[3] & termios.ECHO)
            self.assertFalse(attrs[3] & termios.ISIG)

        self.assertFalse(terminal.active)
        self.assertEqual(termios.tcgetattr(self.slave), original)

    def test_restores_on_exception(self):
        original = termios.tcgetattr(self.slave)
        with self.assertRaises(RuntimeError):
            with RawTerminal(self.stream):
                raise RuntimeError("boom")
        self.assertEqual(termios.tcgetattr(self.slave), original)

    def test_read_key_returns_pressed_key(self):
        with RawTerminal(self.stream) as terminal:
            os.write(self.master, b"q")
            self.assertEqual(terminal.read_key(1.0), "q")

    def test_read_key_times_out(self):
        with RawTerminal(self.stream) as terminal:
            self.assertIsNone(terminal.read_key(0.05))

    def test_escape_sequence_arrives_whole(self):
        with RawTerminal(self.stream) as terminal:
            os.write(self.master, b"\x1b[A")
            time.sleep(0.05)
            self.assertEqual(terminal.read_key(1.0), "\x1b[A")

    def test_read_key_requires_raw_mode(self):
        with self.assertRaises(TerminalError):
            RawTerminal(self.stream).read_key(0.0)

    def test_non_terminal_stream_is_rejected(self):
        with tempfile.TemporaryFile("w+") as handle:
            with self.assertRaises(TerminalError):
                RawTerminal(handle).enable()

    def test_enable_is_idempotent(self):
        terminal = RawTerminal(self.stream)
        terminal.enable()
        terminal.enable()
        terminal.disable()
        terminal.disable()
        self.assertFalse(terminal.active)

    def test_keys_read_together_are_returned_one_at_a_time(self):
        with RawTerminal(self.stream) as terminal:
            os.write(self.master, b"aq")
            time.sleep(0.05)
            self.assertEqual(terminal.read_key(1.0), "a")
            self.assertEqual(terminal.read_key(0.0), "q")
            self.assertIsNone(terminal.read_key(0.0))

    def test_queued_quit_key_stops_monitor(self):
        terminal = RawTerminal(self.stream)
        monitor = GPUTemperatureMonitor(terminal, interval=0.5, quit_key="q")
        with terminal:
            os.write(self.master, b"aq")
            time.sleep(0.05)
            self.assertFalse(monitor.await_input())
            self.assertTrue(monitor.await_input())

            os.write(self.master, b"qq")
            time.sleep(0.05)
            self.assertTrue(monitor.await_input())
            self.assertTrue(monitor.await_input())

    def test_closed_input_raises(self):
        with RawTerminal(self.stream) as terminal:
            os.write(self.master, b"x")
            time.sleep(0.05)
            with patch("gpu_temp_reader.terminal.os.read", return_value=b""):
                with self.assertRaises(TerminalError):
                    terminal.read_key(1.0)

    def test_pending_keys_dropped_on_disable(self):
        terminal = RawTerminal(self.stream)
        with terminal:
            os.write(self.master, b"ab")
            time.sleep(0.05)
            self.assertEqual(terminal.read_key(1.0), "a")
        with terminal:
            self.assertIsNone(terminal.read_key(0.05))


class SplitKeysTest(unittest.TestCase):
    def test_plain_characters(self):
        self.assertEqual(split_keys("qq"), ["q", "q"])
        self.assertEqual(split_keys("aq"), ["a", "q"])

    def test_escape_sequences_stay_whole(self):
        self.assertEqual(split_keys("a\x1b[Aq"), ["a", "\x1b[A", "q"])
        self.assertEqual(split_keys("\x1bOPq"), ["\x1bOP", "q"])
        self.assertEqual(split_keys("\x1b[15~"), ["\x1b[15~"])

    def test_alt_modified_key_is_not_the_quit_key(self):
        self.assertEqual(split_keys("\x1bq"), ["\x1bq"])

    def test_lone_escape(self):
        self.assertEqual(split_keys("\x1b"), ["\x1b"])


if __name__ == "__main__":
    unittest.main()
