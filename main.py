import sys
import shutil
import signal
import logging
import threading
import traceback
from queue import Empty, Queue

from keys import read_key
from events import Command, EventHandler
from presets import PresetsStore
from state import AppState
from http_client import send_request
from config import Arguments, Theme, parse_args, parse_colors
from messages import KeyPressed, Message, Quit, RequestFailed, ResponseArrived
from render import (
    RenderContext, clear_screen, disable_buffer, enable_buffer, hide_cursor,
    populate_borders, render, set_cursor, show_cursor, update_layout,
    update_request_animation
)


LOGGER = logging.getLogger(__name__)

KEY_POLL = 0.1      # Seconds between checks that the update thread lives
ANIMATE = 0.2       # Seconds per frame of the loading animation


def main(argv: list[str] | None = None) -> None:
    """
    Main wraps the platform
    specific implementation
    """
    # main {{{
    args = parse_args(argv)
    configure_logging(args)
    theme = parse_colors(args)

    if sys.platform == "win32":
        _win_main(args, theme)
    else:
        _nix_main(args, theme)
    # }}}


def configure_logging(args: Arguments) -> None:
    """
    The terminal belongs to the interface, so
    records go to a file beside the presets.
    """
    # configure_logging {{{
    level = logging.DEBUG if args.debug else logging.WARNING
    try:
        args.log_file.parent.mkdir(parents=True, exist_ok=True)
        logging.basicConfig(
            filename=args.log_file, level=level,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    except OSError as error:
        print(f"Logging disabled: {error}", file=sys.stderr)
        logging.getLogger().addHandler(logging.NullHandler())
    # }}}


def _main_loop(driver: any, args: Arguments, theme: Theme) -> list:
    """
    Orchestrates all threads of the application.
    Keys are read here and put on the bus, the update
    thread is the only one touching the state.
    Returns the exceptions raised by the update thread.
    """
    # _main_loop {{{
    enable_buffer()
    hide_cursor()
    bus = Queue()
    failures = []

    store = PresetsStore(args.file)
    state = AppState()
    state.saved_list.set_items(store.load())

    ctx = RenderContext(
        borders=populate_borders(args.border_style),
        theme=theme, args=args, size=shutil.get_terminal_size()
    )

    update_thread = threading.Thread(
        target=update_loop,
        args=(bus, state, EventHandler(store), ctx, failures),
        daemon=True
    )
    update_thread.start()

    try:
        while update_thread.is_alive():
            if not driver.key_ready(KEY_POLL):
                continue

            key = read_key(driver.read_char, driver.key_ready)
            if key is None:
                bus.put(Quit())
                break
            bus.put(KeyPressed(key))

        update_thread.join(KEY_POLL)
    finally:
        show_cursor()
        disable_buffer()

    return failures
    # }}}


def _win_main(args: Arguments, theme: Theme) -> None:
    # _win_main {{{
    import ansi_win

    driver = ansi_win
    ostate, istate = driver.initialize()

    def signal_trap(sig, frame) -> None:
        """
        Ensures terminal state is restored
        """
        show_cursor()
        disable_buffer()
        driver.reset(ostate, istate)
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_trap)

    try:
        failures = _main_loop(driver, args, theme)
    finally:
        driver.reset(ostate, istate)

    _exit(failures)
    # }}}


def _nix_main(args: Arguments, theme: Theme) -> None:
    # _nix_main {{{
    import ansi_nix

    driver = ansi_nix
    orig_state = driver.initialize()

    def signal_trap(sig, frame) -> None:
        """
        Ensures terminal state is restored
        """
        show_cursor()
        disable_buffer()
        driver.reset(orig_state)
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_trap)

    try:
        failures = _main_loop(driver, args, theme)
    finally:
        driver.reset(orig_state)

    _exit(failures)
    # }}}


def _exit(failures: list) -> None:
    # _exit {{{
    if not failures:
        sys.exit(0)

    for exception in failures:
        print(exception)
        traceback.print_tb(exception.__traceback__)
    sys.exit(1)
    # }}}


def _update_loop(bus: Queue, state: AppState, handler: EventHandler,
                 ctx: RenderContext) -> None:
    """
    Processes messages produced by the other threads,
    updating state and triggering a rerender.
    """
    # _update_loop {{{
    update_layout(state, ctx.size)
    render(state, ctx, True)  # Ensure screen is initially cleared

    while True:
        resizeflag = False

        new_size = shutil.get_terminal_size()
        if new_size != ctx.size:
            # Resize is handled differently
            # with render to avoid flickering
            ctx.size = new_size
            update_layout(state, ctx.size)
            resizeflag = True

        try:
            message = bus.get(timeout=ANIMATE)
        except Empty:
            message = None

        if message is not None:
            if not handle_bus_event(message, state, handler, bus):
                return
        elif state.response.loading:
            ctx.animation = update_request_animation(ctx.animation)
        elif not resizeflag:
            continue

        render(state, ctx, resizeflag)
    # }}}


def handle_bus_event(message: Message, state: AppState,
                     handler: EventHandler, bus: Queue) -> bool:
    """
    Makes the necessary calls upon receiving a message
    from the bus. Returns False once the application
    should stop.
    """
    # handle_bus_event {{{
    match message:
        case KeyPressed(key=key):
            command = handler.dispatch_key(state, key)

            if command == Command.Quit:
                return False

            if command == Command.SendRequest:
                # Snapshot now, later edits must not leak in
                spec = state.request_spec()
                threading.Thread(
                    target=send_request, args=(spec, bus), daemon=True
                ).start()

        case ResponseArrived() | RequestFailed():
            handler.fold_message(state, message)

        case Quit():
            return False

    return True
    # }}}


def update_loop(bus: Queue, state: AppState, handler: EventHandler,
                ctx: RenderContext, failures: list) -> None:
    """
    Simple wrapper to ensure the exception is
    recorded, if needed, from the update thread.
    """
    # update_loop {{{
    try:
        _update_loop(bus, state, handler, ctx)
    except Exception as exception:
        LOGGER.exception("Update loop crashed")
        clear_screen()

        print(set_cursor(2, 2), end="")
        print("An unexpected exception occured", end="", flush=True)

        failures.append(exception)
    # }}}


if __name__ == "__main__":
    main()
