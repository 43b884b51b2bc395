import logging
from enum import Enum
from functools import partial
from typing import Callable

from focus import compute_focus, update_focus
from http_client import format_body
from presets import PresetsStore
from req_struct import ErrorData, SavedRequest
from state import AppState, Mode, Section, Tab
from messages import Message, RequestFailed, ResponseArrived


LOGGER = logging.getLogger(__name__)

DIGIT_SECTIONS = {str(section.value + 1): section for section in Section}


class Command(Enum):
    """
    Side effects the update loop has to carry
    out after a key has been handled.
    """
    # Command {{{
    Quit = 0
    SendRequest = 1
    # }}}


KeyResult = tuple[Command | None, bool]   # (command, consumed)

CONSUMED: KeyResult = (None, True)
NOT_CONSUMED: KeyResult = (None, False)


class EventHandler:
    """
    Modal key dispatch. Keys are routed by mode first,
    then by key through lookup tables, so every handler
    can be exercised without a terminal.
    """
    # EventHandler {{{
    def __init__(self, store: PresetsStore) -> None:
        self.store = store

        self._mode_handlers: dict[Mode, Callable] = {
            Mode.SaveNamePrompt: self._handle_save_prompt,
            Mode.DeleteConfirm: self._handle_delete_confirm,
            Mode.Navigation: self._handle_navigation,
            Mode.TextEdit: self._handle_text_edit,
        }

        self._navigation_keys: dict[str, Callable] = {
            "ctrl+c": self._quit,
            "q": self._quit,
            "i": self._start_text_edit,
            "a": self._start_text_edit,
            "ctrl+s": self._open_save_prompt,
            "left": partial(self._move_horizontal, -1),
            "h": partial(self._move_horizontal, -1),
            "right": partial(self._move_horizontal, 1),
            "l": partial(self._move_horizontal, 1),
            "up": partial(self._move_vertical, -1),
            "k": partial(self._move_vertical, -1),
            "down": partial(self._move_vertical, 1),
            "j": partial(self._move_vertical, 1),
            "tab": partial(self._cycle_section, 1),
            "shift+tab": partial(self._cycle_section, -1),
            "pageup": partial(self._page, -1),
            "pagedown": partial(self._page, 1),
            "d": self._open_delete_confirm,
            "enter": self._navigation_enter,
            "backspace": self._backspace_action,
        }
        for digit, section in DIGIT_SECTIONS.items():
            self._navigation_keys[digit] = partial(self._jump_section,
                                                   section)

        self._enter_actions: dict[Section, Callable] = {
            Section.Headers: self._add_header,
            Section.Params: self._add_param,
        }

    def handle_key(self, state: AppState, key: str) -> KeyResult:
        """
        Entry point of the state machine. Returns the
        command to run, if any, and whether the key was
        consumed. Overlay modes are checked first and
        swallow every key while open.
        """
        # handle_key {{{
        return self._mode_handlers[state.mode](state, key)
        # }}}

    def dispatch_key(self, state: AppState, key: str) -> Command | None:
        """
        Handles a key and forwards it to the focused
        widget when text entry did not consume it.
        """
        # dispatch_key {{{
        state.notice = ""
        mode = state.mode
        command, consumed = self.handle_key(state, key)

        if not consumed and mode == Mode.TextEdit:
            widget = compute_focus(state)
            if widget is not None:
                widget.handle_key(key)

        return command
        # }}}

    def fold_message(self, state: AppState, message: Message) -> None:
        """
        Applies the outcome of a request thread.
        """
        # fold_message {{{
        match message:
            case ResponseArrived(response=data):
                LOGGER.debug("Response %s in %s", data.status, data.elapsed)
                state.set_response(data, format_body(data.body))
                self._show_response(state)

            case RequestFailed(message=text):
                LOGGER.info("Request failed: %s", text)
                state.set_error(ErrorData(text))
                self._show_response(state)
        # }}}

    # Overlay handlers {{{
    def _handle_save_prompt(self, state: AppState, key: str) -> KeyResult:
        # _handle_save_prompt {{{
        name_input = state.save_name_input
        match key:
            case "enter":
                if name_input.value != "":
                    self._add_saved(state, state.snapshot(name_input.value))
                self._close_save_prompt(state)

            case "esc":
                self._close_save_prompt(state)

            case _:
                name_input.handle_key(key)

        return CONSUMED
        # }}}

    def _close_save_prompt(self, state: AppState) -> None:
        state.save_name_input.reset()
        state.save_name_input.blur()
        state.mode = Mode.Navigation

    def _handle_delete_confirm(self, state: AppState, key: str) -> KeyResult:
        # _handle_delete_confirm {{{
        match key.lower():
            case "y":
                self._delete_selected(state)
                state.mode = Mode.Navigation
            case "n" | "esc":
                state.mode = Mode.Navigation

        return CONSUMED
        # }}}
    # }}}

    # Navigation handlers {{{
    def _handle_navigation(self, state: AppState, key: str) -> KeyResult:
        handler = self._navigation_keys.get(key)
        if handler is None:
            return NOT_CONSUMED
        return handler(state)

    def _quit(self, state: AppState) -> KeyResult:
        return (Command.Quit, True)

    def _start_text_edit(self, state: AppState) -> KeyResult:
        # The fields only exist on the request tab
        if state.tab != Tab.Request:
            return NOT_CONSUMED
        state.mode = Mode.TextEdit
        update_focus(state)
        return CONSUMED

    def _open_save_prompt(self, state: AppState) -> KeyResult:
        # _open_save_prompt {{{
        if state.tab != Tab.Request:
            return NOT_CONSUMED

        state.mode = Mode.SaveNamePrompt
        update_focus(state)
        state.save_name_input.focus()
        return CONSUMED
        # }}}

    def _open_delete_confirm(self, state: AppState) -> KeyResult:
        # _open_delete_confirm {{{
        if state.tab != Tab.Saved:
            return NOT_CONSUMED

        if state.saved_list.selected_item() is not None:
            state.mode = Mode.DeleteConfirm
        return CONSUMED
        # }}}

    def _move_horizontal(self, step: int, state: AppState) -> KeyResult:
        """
        On the method row this picks the method,
        everywhere else it switches tabs.
        """
        # _move_horizontal {{{
        if state.tab == Tab.Request and state.section == Section.Method:
            state.method = state.method.cycle(step)
        else:
            state.tab = state.tab.cycle(step)
        return CONSUMED
        # }}}

    def _move_vertical(self, step: int, state: AppState) -> KeyResult:
        # _move_vertical {{{
        match state.tab:
            case Tab.Request:
                return self._cycle_section(step, state)

            case Tab.Response:
                if step < 0:
                    state.response_viewport.line_up()
                else:
                    state.response_viewport.line_down()

            case Tab.Saved:
                if step < 0:
                    state.saved_list.cursor_up()
                else:
                    state.saved_list.cursor_down()

        return CONSUMED
        # }}}

    def _page(self, step: int, state: AppState) -> KeyResult:
        # _page {{{
        match state.tab:
            case Tab.Response:
                scrollable = state.response_viewport
            case Tab.Saved:
                scrollable = state.saved_list
            case _:
                return NOT_CONSUMED

        if step < 0:
            scrollable.page_up()
        else:
            scrollable.page_down()
        return CONSUMED
        # }}}

    def _cycle_section(self, step: int, state: AppState) -> KeyResult:
        if state.tab != Tab.Request:
            return NOT_CONSUMED
        state.section = state.section.cycle(step)
        update_focus(state)
        return CONSUMED

    def _jump_section(self, section: Section, state: AppState) -> KeyResult:
        if state.tab != Tab.Request:
            return NOT_CONSUMED
        state.section = section
        update_focus(state)
        return CONSUMED

    def _navigation_enter(self, state: AppState) -> KeyResult:
        # _navigation_enter {{{
        match state.tab:
            case Tab.Saved:
                saved = state.saved_list.selected_item()
                if saved is not None:
                    state.load_saved(saved)
                    update_focus(state)
                return CONSUMED

            case Tab.Response:
                return self._send(state)

            case _:
                return self._enter_action(state)
        # }}}
    # }}}

    def _handle_text_edit(self, state: AppState, key: str) -> KeyResult:
        """
        Only a handful of keys are reserved while typing,
        the rest belong to the focused widget.
        """
        # _handle_text_edit {{{
        structured = state.section in self._enter_actions

        match key:
            case "esc":
                state.mode = Mode.Navigation
                update_focus(state)
                return CONSUMED

            case "ctrl+c" | "q":
                # Both have to be typeable in the body
                if state.section == Section.Body:
                    return NOT_CONSUMED
                return (Command.Quit, True)

            case "enter" if structured:
                return self._enter_action(state)

            case "backspace" if structured:
                return self._backspace_action(state)

        return NOT_CONSUMED
        # }}}

    # Shared actions {{{
    def _enter_action(self, state: AppState) -> KeyResult:
        action = self._enter_actions.get(state.section, self._send)
        return action(state)

    def _add_header(self, state: AppState) -> KeyResult:
        entry = split_entry(state.header_input.value)
        if entry is not None:
            state.add_header(*entry)
            state.header_input.reset()
        return CONSUMED

    def _add_param(self, state: AppState) -> KeyResult:
        entry = split_entry(state.param_input.value)
        if entry is not None:
            state.add_param(*entry)
            state.param_input.reset()
        return CONSUMED

    def _send(self, state: AppState) -> KeyResult:
        # _send {{{
        if state.url == "":
            return CONSUMED

        LOGGER.debug("Sending %s %s", state.method.value, state.url)
        state.response.loading = True
        return (Command.SendRequest, True)
        # }}}

    def _backspace_action(self, state: AppState) -> KeyResult:
        """
        Backspace over an empty entry field pops the
        last entry, otherwise it is ordinary deletion.
        """
        # _backspace_action {{{
        if state.tab != Tab.Request:
            return NOT_CONSUMED

        match state.section:
            case Section.Headers if state.header_input.value == "":
                state.remove_last_header()
            case Section.Params if state.param_input.value == "":
                state.remove_last_param()
            case _:
                return NOT_CONSUMED

        return CONSUMED
        # }}}

    def _show_response(self, state: AppState) -> None:
        # Never pull the view away from someone typing
        if state.mode == Mode.Navigation:
            state.tab = Tab.Response
    # }}}

    # Presets {{{
    def _add_saved(self, state: AppState, saved: SavedRequest) -> None:
        state.saved_list.set_items(state.saved_requests + [saved])
        self._persist(state)

    def _delete_selected(self, state: AppState) -> None:
        # _delete_selected {{{
        items = list(state.saved_requests)
        if not items:
            return

        del items[state.saved_list.index]
        state.saved_list.set_items(items)
        self._persist(state)
        # }}}

    def _persist(self, state: AppState) -> None:
        # _persist {{{
        try:
            self.store.save(state.saved_requests)
        except OSError as error:
            LOGGER.warning("Could not write presets to %s: %s",
                           self.store.path, error)
            state.notice = f"Could not save presets: {error}"
        # }}}
    # }}}
    # }}}


def split_entry(text: str) -> tuple[str, str] | None:
    """
    Splits "key=value" on the first equals sign. Text
    without one yields None and is left where it is.
    """
    # split_entry {{{
    if text == "" or "=" not in text:
        return None
    key, value = text.split("=", 1)
    return (key, value)
    # }}}
