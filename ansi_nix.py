import os
import tty
import sys
import codecs
import select
import termios


_decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")


def initialize() -> list:
    """
    This setup function is relavent on unix-like
    systems to ensure the escape codes passed to
    the terminal operate as expected. It returns
    the original state of the terminal,
    applicable to the reset function.
    """
    # initialize {{{
    fileno = sys.stdin.fileno()
    state = termios.tcgetattr(fileno)
    tty.setraw(fileno)
    return state
    # }}}


def reset(original_state: list) -> None:
    """
    This is required because some terminals on unix-like systems
    will not return, by default, to their original state. This
    function is used to address this.
    """
    # reset {{{
    fileno = sys.stdin.fileno()
    termios.tcsetattr(fileno, termios.TCSADRAIN, original_state)
    # }}}


def read_char() -> str:
    """
    Reads a single character straight from the file
    descriptor. Going around the buffered stdin keeps
    key_ready honest about pending escape sequences.
    Returns an empty string once stdin is closed.
    """
    # read_char {{{
    fileno = sys.stdin.fileno()
    while True:
        byte = os.read(fileno, 1)
        if byte == b"":
            return ""
        char = _decoder.decode(byte)
        if char != "":
            return char
    # }}}


def key_ready(timeout: float) -> bool:
    # key_ready {{{
    readable, _, _ = select.select([sys.stdin.fileno()], [], [], timeout)
    return len(readable) > 0
    # }}}
