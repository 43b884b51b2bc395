from typing import Callable


ESC = "\x1b"
ESC_DELAY = 0.025       # Seconds to wait before a lone ESC counts as a key

CONTROL_KEYS = {
    "\x03": "ctrl+c",
    "\x13": "ctrl+s",
    "\t": "tab",
    "\r": "enter",
    "\n": "enter",
    "\x7f": "backspace",
    "\x08": "backspace",
}

# Final byte of a CSI sequence, modifiers are ignored
CSI_KEYS = {
    "A": "up",
    "B": "down",
    "C": "right",
    "D": "left",
    "H": "home",
    "F": "end",
    "Z": "shift+tab",
}

# Numeric parameter of "CSI n ~" sequences
TILDE_KEYS = {
    "1": "home",
    "2": "insert",
    "3": "delete",
    "4": "end",
    "5": "pageup",
    "6": "pagedown",
    "7": "home",
    "8": "end",
}


def read_key(read: Callable[[], str],
             ready: Callable[[float], bool]) -> str | None:
    """
    Reads one logical key from the terminal, returning
    its name ("enter", "ctrl+c", "up", "a", ...) or None
    once the input has closed. {read} returns a single
    character, {ready} tells whether another one is
    available within the given number of seconds.
    """
    # read_key {{{
    char = read()
    if char == "":
        return None

    if char == ESC:
        if not ready(ESC_DELAY):
            return "esc"
        return _read_escape(read, ready)

    if char in CONTROL_KEYS:
        return CONTROL_KEYS[char]

    if ord(char) < 0x20:
        return f"ctrl+{chr(ord(char) + 0x60)}"

    return char
    # }}}


def _read_escape(read: Callable[[], str],
                 ready: Callable[[float], bool]) -> str:
    """
    Decodes what follows an ESC, CSI (ESC [) and
    SS3 (ESC O) sequences, or alt+key otherwise.
    """
    # _read_escape {{{
    introducer = read()
    if introducer == ESC:
        return "esc"

    if introducer not in ("[", "O"):
        return f"alt+{introducer}"

    params = ""
    final = ""
    while ready(ESC_DELAY):
        char = read()
        if char == "":
            break
        # Final bytes are in the range @ to ~
        if "\x40" <= char <= "\x7e":
            final = char
            break
        params += char

    if final == "~":
        code = params.split(";")[0]
        return TILDE_KEYS.get(code, "unknown")

    return CSI_KEYS.get(final, "unknown")
    # }}}
