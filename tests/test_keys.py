import unittest

from keys import read_key


def decode(raw: str):
    """
    Feeds {raw} through read_key as if it had
    arrived on the terminal all at once.
    """
    chars = list(raw)

    def read():
        return chars.pop(0) if chars else ""

    def ready(timeout):
        return bool(chars)

    return read_key(read, ready)


class TestReadKey(unittest.TestCase):

    def test_plain_and_control_characters(self):
        cases = {
            "a": "a",
            "Q": "Q",
            "é": "é",
            "\r": "enter",
            "\t": "tab",
            "\x7f": "backspace",
            "\x03": "ctrl+c",
            "\x13": "ctrl+s",
            "\x01": "ctrl+a",
        }
        for raw, key in cases.items():
            with self.subTest(raw=raw):
                self.assertEqual(decode(raw), key)

    def test_escape_sequences(self):
        cases = {
            "\x1b": "esc",
            "\x1b\x1b": "esc",
            "\x1b[A": "up",
            "\x1bOB": "down",
            "\x1b[1;5C": "right",
            "\x1b[Z": "shift+tab",
            "\x1b[3~": "delete",
            "\x1b[5~": "pageup",
            "\x1b[6~": "pagedown",
            "\x1bx": "alt+x",
            "\x1b[99~": "unknown",
        }
        for raw, key in cases.items():
            with self.subTest(raw=repr(raw)):
                self.assertEqual(decode(raw), key)

    def test_end_of_input(self):
        self.assertIsNone(decode(""))

    def test_sequence_consumes_only_one_key(self):
        chars = list("\x1b[Bj")

        def read():
            return chars.pop(0) if chars else ""

        def ready(timeout):
            return bool(chars)

        self.assertEqual(read_key(read, ready), "down")
        self.assertEqual(read_key(read, ready), "j")


if __name__ == '__main__':
    unittest.main()
