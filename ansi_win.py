from ctypes.wintypes import DWORD
import ctypes
import msvcrt
import time
import sys


# Input Constants
STD_INPUT_HANDLE = -10
ENABLE_VIRTUAL_TERMINAL_INPUT = 0x0200

# Output Constants
STD_OUTPUT_HANDLE = -11
ENABLE_PROCESSED_OUTPUT = 0x0001
ENABLE_WRAP_AT_EOL_OUTPUT = 0x0002
ENABLE_VIRTUAL_TERMINAL_PROCESSING = 0x0004

POLL_INTERVAL = 0.01


def initialize() -> tuple[ctypes.c_long, ctypes.c_long]:
    '''
    In certain environments, this function may not
    be needed, such as running PowerShell in Windows
    Terminal. In other situations, such as running
    Windows CMD 'straight', this allows the escape
    characters to function properly. Virtual terminal
    input also turns arrow keys into the same escape
    sequences unix terminals send.

    Returns (output, input)
    '''
    kernel = ctypes.windll.kernel32
    stdin = kernel.GetStdHandle(STD_INPUT_HANDLE)
    stdout = kernel.GetStdHandle(STD_OUTPUT_HANDLE)
    istate = DWORD()
    ostate = DWORD()
    kernel.GetConsoleMode(stdin, ctypes.byref(istate))
    kernel.GetConsoleMode(stdout, ctypes.byref(ostate))
    kernel.SetConsoleMode(
            stdin,
            ENABLE_VIRTUAL_TERMINAL_INPUT
    )
    kernel.SetConsoleMode(
            stdout,
            ENABLE_PROCESSED_OUTPUT |
            ENABLE_WRAP_AT_EOL_OUTPUT |
            ENABLE_VIRTUAL_TERMINAL_PROCESSING
    )
    return (ostate, istate)


def reset(ostate: ctypes.c_long, istate: ctypes.c_long) -> None:
    '''
    Though not strictly necessary, this function is used as a
    means to ensure the user's terminal is returned to the
    way it was before using this application.
    '''
    kernel = ctypes.windll.kernel32
    stdin = kernel.GetStdHandle(STD_INPUT_HANDLE)
    stdout = kernel.GetStdHandle(STD_OUTPUT_HANDLE)
    kernel.SetConsoleMode(stdin, istate)
    kernel.SetConsoleMode(stdout, ostate)


def read_char() -> str:
    return sys.stdin.read(1)


def key_ready(timeout: float) -> bool:
    '''
    msvcrt has no blocking wait with a timeout,
    so the console buffer is polled instead.
    '''
    deadline = time.monotonic() + timeout
    while True:
        if msvcrt.kbhit():
            return True
        if time.monotonic() >= deadline:
            return False
        time.sleep(POLL_INTERVAL)
