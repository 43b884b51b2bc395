from state import AppState, Mode, Section, Tab
from widgets import TextInput


def compute_focus(state: AppState) -> TextInput | None:
    """
    Returns the widget that should receive raw keys,
    only ever one, and none outside of text entry
    on the request tab.
    """
    # compute_focus {{{
    if state.mode != Mode.TextEdit or state.tab != Tab.Request:
        return None

    match state.section:
        case Section.URL:
            return state.url_input
        case Section.Headers:
            return state.header_input
        case Section.Body:
            return state.body_input
        case Section.Params:
            return state.param_input
        case _:
            return None  # Method has nothing to type into
    # }}}


def update_focus(state: AppState) -> None:
    """
    Blurs everything first so that no two widgets
    are ever focused at the same time.
    """
    # update_focus {{{
    for widget in state.text_widgets():
        widget.blur()

    target = compute_focus(state)
    if target is not None:
        target.focus()
    # }}}
