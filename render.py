import os
import sys
from dataclasses import dataclass

from config import Arguments, BorderStyle, ColorMode, Theme
from state import AppState, Mode, Section, Tab
from widgets import TextArea, TextInput


TITLE = "POSTUI"        # For main application

ESC = "\x1b"            # Escape
CSI = f"{ESC}["         # Control Sequence Introducer

EN_ALT_BUF = "?1049h"   # Enable Alternate Buffer
DIS_ALT_BUF = "?1049l"  # Disable Alternate Buffer

LABEL_WIDTH = 14        # Column taken by the section labels
MIN_COLUMNS = 40
MIN_LINES = 14

# Rows of the request tab that are not the body:
# method, url, labels, entry inputs and separators
REQUEST_FIXED_ROWS = 12

# Header box (3), content borders (2), footer and help (2)
CHROME_ROWS = 7

TAB_TITLES = {
    Tab.Request: "Request",
    Tab.Response: "Response",
    Tab.Saved: "Saved",
}

SECTION_LABELS = {
    Section.Method: "[1] Method:",
    Section.URL: "[2] URL:",
    Section.Headers: "[3] Headers:",
    Section.Body: "[4] Body:",
    Section.Params: "[5] Params:",
}

HELP_NAVIGATION = "h/l: tabs | j/k: move | i: edit | enter: send/select" + \
                  " | ctrl+s: save | d: delete | q: quit"
HELP_TEXT_EDIT = "esc: stop editing | enter: add header/param"


@dataclass
class Border:
    # Border {{{
    h_single = "─"
    h_double = "═"
    v_single = "│"
    v_double = "║"
    ltc_single = "┌"
    ltc_double = "╔"
    ltc_rounded = "╭"
    lbc_single = "└"
    lbc_double = "╚"
    lbc_rounded = "╰"
    rtc_single = "┐"
    rtc_double = "╗"
    rtc_rounded = "╮"
    rbc_single = "┘"
    rbc_double = "╝"
    rbc_rounded = "╯"
    # }}}


@dataclass
class RenderContext:
    """
    Everything the renderer needs that is
    not part of the application state.
    """
    # RenderContext {{{
    borders: dict
    theme: Theme
    args: Arguments
    size: os.terminal_size
    animation: int = 0
    # }}}


@dataclass
class Span:
    # Span {{{
    text: str
    color: str = None
    reverse: bool = False
    # }}}


Row = list[Span]


def cap_line_width(max_w: int, line: str) -> str:
    """
    Cuts a line short, appending with ..
    to indicate this
    """
    # cap_line_width {{{
    if len(str(line)) > max_w:
        capped = str(line)[:max_w - 2]  # Length of ..
        capped = capped + ".."

        line = capped
    return line
    # }}}


def clear_screen() -> None:
    # clear_screen {{{
    print(f"{CSI}2J", end="")
    # }}}


def disable_buffer() -> None:
    """
    Reverts screen back to
    previous state before script
    """
    # disable_buffer {{{
    print(f"{CSI}{DIS_ALT_BUF}", end="", flush=True)
    # }}}


def enable_buffer() -> None:
    """
    Creates a new screen buffer
    """
    # enable_buffer {{{
    print(f"{CSI}{EN_ALT_BUF}", end="", flush=True)
    # }}}


def get_foreground(color: str, mode: ColorMode) -> str:
    # get_foreground {{{
    match mode:
        case ColorMode.Bit4:
            prefix = f"{CSI}"
            return f"{prefix}{color}m"
        case ColorMode.Bit8:
            prefix = f"{CSI}38;5;"
            return f"{prefix}{color}m"
        case ColorMode.Bit24:
            r, g, b = color.split(",")
            prefix = f"{CSI}38;2;"
            return f"{prefix}{r};{g};{b}m"
    # }}}


def hide_cursor() -> None:
    # hide_cursor {{{
    print(f"{CSI}?25l", end="", flush=True)
    # }}}


def show_cursor() -> None:
    # show_cursor {{{
    print(f"{CSI}?25h", end="", flush=True)
    # }}}


def reset_style() -> str:
    # reset_style {{{
    return f"{CSI}0m"
    # }}}


def set_cursor(x: int, y: int) -> str:
    """
    Escape sequence to move the
    cursor with the assumption that
    location (1,1) is at the top
    left of the screen.

    It also assumes that {x} and {y}
    are based on character size.
    """
    # set_cursor {{{
    return f'{CSI}{y};{x}H'
    # }}}


def populate_borders(style: BorderStyle) -> dict:
    # populate_borders {{{
    borders = {}
    if style == BorderStyle.Single:
        borders["h_border"] = Border.h_single
        borders["v_border"] = Border.v_single
        borders["lt_corner"] = Border.ltc_single
        borders["lb_corner"] = Border.lbc_single
        borders["rt_corner"] = Border.rtc_single
        borders["rb_corner"] = Border.rbc_single
    elif style == BorderStyle.Rounded:
        borders["h_border"] = Border.h_single
        borders["v_border"] = Border.v_single
        borders["lt_corner"] = Border.ltc_rounded
        borders["lb_corner"] = Border.lbc_rounded
        borders["rt_corner"] = Border.rtc_rounded
        borders["rb_corner"] = Border.rbc_rounded
    else:
        borders["h_border"] = Border.h_double
        borders["v_border"] = Border.v_double
        borders["lt_corner"] = Border.ltc_double
        borders["lb_corner"] = Border.lbc_double
        borders["rt_corner"] = Border.rtc_double
        borders["rb_corner"] = Border.rbc_double
    return borders
    # }}}


def content_size(size: os.terminal_size) -> tuple[int, int]:
    """
    Returns the width and height inside the
    content box, between header and footer.
    """
    # content_size {{{
    return (size.columns - 4, size.lines - CHROME_ROWS)
    # }}}


def update_layout(state: AppState, size: os.terminal_size) -> None:
    """
    Scrollable widgets need to know how many rows
    they get, recalculated on every resize.
    """
    # update_layout {{{
    _, height = content_size(size)
    state.response_viewport.set_height(height - 2)  # Status and separator
    state.saved_list.set_height(height // 2)        # Two rows per preset
    # }}}


def update_request_animation(animation: int) -> int:
    # update_request_animation {{{
    update = animation + 1
    if update >= 5:
        update = 0
    return update
    # }}}


def render(state: AppState, ctx: RenderContext, resize: bool) -> None:
    """
    Main render function, writes the whole
    frame in a single call to avoid flickering.
    """
    # render {{{
    if resize:
        clear_screen()

    frame = []
    for index, row in enumerate(compose(state, ctx)):
        frame.append(set_cursor(1, index + 1))
        frame.append(finish_row(row, ctx.size.columns, ctx))
    frame.append(reset_style())

    sys.stdout.write("".join(frame))
    sys.stdout.flush()
    # }}}


def compose(state: AppState, ctx: RenderContext) -> list[Row]:
    """
    Lays out every row of the screen. Rows are kept
    as spans so widths can be measured without the
    escape sequences getting in the way.
    """
    # compose {{{
    width = ctx.size.columns
    if width < MIN_COLUMNS or ctx.size.lines < MIN_LINES:
        text = ctx.theme.text_color
        return [[Span("Terminal too small", text)]]

    inner_w, inner_h = content_size(ctx.size)
    border = ctx.theme.border_color
    active = ctx.theme.active_color

    rows = []
    rows.append(box_top("", width, border, ctx))
    rows.append(box_row(compose_header(state, inner_w, ctx), width,
                        border, ctx))
    rows.append(box_bottom(width, border, ctx))

    match state.tab:
        case Tab.Request:
            content = compose_request(state, inner_w, inner_h, ctx)
        case Tab.Response:
            content = compose_response(state, inner_w, inner_h, ctx)
        case Tab.Saved:
            content = compose_saved(state, inner_w, inner_h, ctx)

    content = content[:inner_h]
    content += [[] for _ in range(inner_h - len(content))]

    rows.append(box_top(TAB_TITLES[state.tab], width, active, ctx))
    for row in content:
        rows.append(box_row(row, width, active, ctx))
    rows.append(box_bottom(width, active, ctx))

    rows.append([Span(" ")] + compose_footer(state, width - 2, ctx))
    rows.append([Span(" ")] + compose_help(state, ctx))
    return rows
    # }}}


def compose_header(state: AppState, width: int, ctx: RenderContext) -> Row:
    """
    Renders the top bar containing the tabs
    and the title.
    ╭───────────────────────────────────╮
    │ Request  Response  Saved   Title  │
    ╰───────────────────────────────────╯
    """
    # compose_header {{{
    row = []
    used = 0
    for tab, title in TAB_TITLES.items():
        if tab == state.tab:
            label = f"[{title}]"
            row.append(Span(label, ctx.theme.active_color))
        else:
            label = f" {title} "
            row.append(Span(label, ctx.theme.text_color))
        row.append(Span(" "))
        used += len(label) + 1

    gap = max(1, width - used - len(TITLE))
    row.append(Span(" " * gap))
    row.append(Span(TITLE, ctx.theme.title_color))
    return row
    # }}}


def compose_request(state: AppState, width: int, height: int,
                    ctx: RenderContext) -> list[Row]:
    """
    Renders the request editor, one block per section.
    ╭─ Request ───────────────────────────╮
    │ [1] Method:  [GET]  POST   PUT  ... │
    │ [2] URL:     https://example.com    │
    │ ...                                 │
    ╰─────────────────────────────────────╯
    """
    # compose_request {{{
    theme = ctx.theme
    field_w = max(1, width - LABEL_WIDTH)
    pad = Span(" " * LABEL_WIDTH)

    rows = []
    methods = []
    for method in type(state.method):
        if method == state.method:
            methods.append(Span(f"[{method.value}]", theme.selected_color))
        else:
            methods.append(Span(f" {method.value} ", theme.text_color))
        methods.append(Span(" "))
    rows.append(section_label(state, Section.Method, ctx) + methods)
    rows.append([])

    rows.append(section_label(state, Section.URL, ctx) +
                field_spans(state.url_input, field_w, ctx))
    rows.append([])

    rows.append(section_label(state, Section.Headers, ctx))
    for header in state.headers:
        rows.append([pad, Span(cap_line_width(field_w, str(header)),
                               theme.text_color)])
    rows.append([pad] + field_spans(state.header_input, field_w, ctx))
    rows.append([])

    body_h = height - REQUEST_FIXED_ROWS - len(state.headers) - \
        len(state.params)
    rows.append(section_label(state, Section.Body, ctx))
    for line in area_rows(state.body_input, field_w, max(3, body_h), ctx):
        rows.append([pad] + line)
    rows.append([])

    rows.append(section_label(state, Section.Params, ctx))
    for param in state.params:
        rows.append([pad, Span(cap_line_width(field_w, str(param)),
                               theme.text_color)])
    rows.append([pad] + field_spans(state.param_input, field_w, ctx))
    return rows
    # }}}


def compose_response(state: AppState, width: int, height: int,
                     ctx: RenderContext) -> list[Row]:
    """
    Renders the response viewport, or the loading
    animation while a request is in flight.
    ╭─ Response ─────────╮
    │ Status 200 OK      │
    │                    │
    │ {                  │
    ╰────────────────────╯
    """
    # compose_response {{{
    theme = ctx.theme
    response = state.response

    if response.loading:
        rows = [[] for _ in range(height // 2)]
        dots = Span(" " * max(0, width // 2 - 3))
        rows.append([dots] + await_spans(ctx))
        return rows

    if response.error_message != "":
        rows = [[Span("Error", theme.error_color)], []]
        color = theme.error_color
    elif response.status_line != "":
        status = f"Status {response.status_line}   Time {response.elapsed}"
        rows = [[Span(cap_line_width(width, status), theme.success_color)],
                []]
        color = theme.text_color
    else:
        hint = "No response yet, press enter on the request tab to send"
        return [[Span(cap_line_width(width, hint), theme.border_color)]]

    for line in state.response_viewport.visible():
        rows.append([Span(cap_line_width(width, line), color)])
    return rows
    # }}}


def compose_saved(state: AppState, width: int, height: int,
                  ctx: RenderContext) -> list[Row]:
    """
    Renders the saved requests, name over description.
    ╭─ Saved ──────────────────────╮
    │ > Users                      │
    │     [GET] https://api/users  │
    ╰──────────────────────────────╯
    """
    # compose_saved {{{
    theme = ctx.theme
    saved_list = state.saved_list
    if not saved_list.items:
        hint = "No saved requests, press ctrl+s on the request tab to save"
        return [[Span(cap_line_width(width, hint), theme.border_color)]]

    rows = []
    for offset, saved in enumerate(saved_list.visible()):
        selected = saved_list.offset + offset == saved_list.index
        marker = "> " if selected else "  "
        color = theme.selected_color if selected else theme.text_color
        rows.append([Span(cap_line_width(width, marker + saved.name), color)])
        rows.append([Span(cap_line_width(width, "    " + saved.description),
                          theme.border_color)])
    return rows
    # }}}


def compose_footer(state: AppState, width: int, ctx: RenderContext) -> Row:
    """
    One line of status, overlays take priority
    over request progress and results.
    """
    # compose_footer {{{
    theme = ctx.theme
    response = state.response

    match state.mode:
        case Mode.SaveNamePrompt:
            prompt = "Save as: "
            return [Span(prompt, theme.title_color)] + field_spans(
                state.save_name_input, max(1, width - len(prompt)), ctx)

        case Mode.DeleteConfirm:
            saved = state.saved_list.selected_item()
            name = saved.name if saved is not None else ""
            return [Span(cap_line_width(width, f"Delete '{name}'? (y/n)"),
                         theme.error_color)]

    if state.notice != "":
        return [Span(cap_line_width(width, state.notice), theme.error_color)]

    if response.loading:
        return [Span("Sending request ", theme.text_color)] + \
            await_spans(ctx)

    if response.error_message != "":
        message = response.error_message.replace("\n", " ")
        return [Span(cap_line_width(width, f"Error: {message}"),
                     theme.error_color)]

    if response.status_line != "":
        return [Span("✓ Done", theme.success_color),
                Span(f"  Status: {response.status_line}" +
                     f"  Time: {response.elapsed}", theme.text_color)]

    return []
    # }}}


def compose_help(state: AppState, ctx: RenderContext) -> Row:
    # compose_help {{{
    if state.mode == Mode.TextEdit:
        help_text = HELP_TEXT_EDIT
    else:
        help_text = HELP_NAVIGATION

    if ctx.args.debug:
        help_text = f"mode {state.mode.name} | tab {state.tab.name} | " + \
            f"sec {state.section.name} | " + \
            f"presets {len(state.saved_requests)}"

    return [Span(help_text, ctx.theme.border_color)]
    # }}}


def section_label(state: AppState, section: Section,
                  ctx: RenderContext) -> Row:
    # section_label {{{
    label = SECTION_LABELS[section].ljust(LABEL_WIDTH)
    if state.section == section:
        return [Span(label, ctx.theme.active_color)]
    return [Span(label, ctx.theme.text_color)]
    # }}}


def field_spans(widget: TextInput, width: int, ctx: RenderContext) -> Row:
    """
    A single line input, the cursor drawn in reverse
    video and the text scrolled to keep it in view.
    """
    # field_spans {{{
    if widget.value == "" and not widget.focused:
        return [Span(cap_line_width(width, widget.placeholder),
                     ctx.theme.border_color)]

    if not widget.focused:
        return [Span(cap_line_width(width, widget.value),
                     ctx.theme.text_color)]

    return cursor_spans(widget.value, widget.cursor, width, ctx)
    # }}}


def area_rows(widget: TextArea, width: int, height: int,
              ctx: RenderContext) -> list[Row]:
    """
    Visible rows of the body editor, scrolled so
    the cursor row is always on screen.
    """
    # area_rows {{{
    if widget.value == "" and not widget.focused:
        rows = [[Span(cap_line_width(width, widget.placeholder),
                      ctx.theme.border_color)]]
        return rows + [[] for _ in range(height - 1)]

    lines = widget.lines()
    cursor_row, cursor_col = widget.cursor_position()
    top = max(0, cursor_row - height + 1)

    rows = []
    for index in range(top, top + height):
        if index >= len(lines):
            rows.append([])
        elif widget.focused and index == cursor_row:
            rows.append(cursor_spans(lines[index], cursor_col, width, ctx))
        else:
            rows.append([Span(cap_line_width(width, lines[index]),
                              ctx.theme.text_color)])
    return rows
    # }}}


def cursor_spans(text: str, cursor: int, width: int,
                 ctx: RenderContext) -> Row:
    # cursor_spans {{{
    start = max(0, cursor - width + 1)
    visible = text[start:start + width]
    column = cursor - start

    color = ctx.theme.text_color
    under = visible[column:column + 1] or " "
    return [
        Span(visible[:column], color),
        Span(under, color, reverse=True),
        Span(visible[column + 1:], color)
    ]
    # }}}


def await_spans(ctx: RenderContext) -> Row:
    """
    The loading animation, a dot travelling
    along a short line, ··•··
    """
    # await_spans {{{
    small = "·"
    large = "•"

    spans = []
    for i in range(5):
        if i == ctx.animation:
            spans.append(Span(large, ctx.theme.selected_color))
        else:
            spans.append(Span(small, ctx.theme.text_color))
    return spans
    # }}}


def box_top(title: str, width: int, color: str, ctx: RenderContext) -> Row:
    # box_top {{{
    borders = ctx.borders
    h_border = borders["h_border"]
    if title == "":
        return [Span(borders["lt_corner"] + h_border * (width - 2) +
                     borders["rt_corner"], color)]

    # Magic 2 represents offset for section title
    label = f" {title} "
    rest = max(0, width - 4 - len(label))
    return [
        Span(borders["lt_corner"] + h_border * 2, color),
        Span(label, ctx.theme.text_color),
        Span(h_border * rest + borders["rt_corner"], color)
    ]
    # }}}


def box_row(row: Row, width: int, color: str, ctx: RenderContext) -> Row:
    # box_row {{{
    inner = width - 4
    used = sum(len(span.text) for span in row)
    v_border = ctx.borders["v_border"]
    return [Span(v_border + " ", color)] + clip(row, inner) + \
        [Span(" " * max(0, inner - used)), Span(" " + v_border, color)]
    # }}}


def box_bottom(width: int, color: str, ctx: RenderContext) -> Row:
    # box_bottom {{{
    borders = ctx.borders
    return [Span(borders["lb_corner"] + borders["h_border"] * (width - 2) +
                 borders["rb_corner"], color)]
    # }}}


def clip(row: Row, width: int) -> Row:
    """
    Cuts spans so the row is at most {width} wide
    """
    # clip {{{
    result = []
    remaining = width
    for span in row:
        if remaining <= 0:
            break
        text = span.text[:remaining]
        result.append(Span(text, span.color, span.reverse))
        remaining -= len(text)
    return result
    # }}}


def finish_row(row: Row, width: int, ctx: RenderContext) -> str:
    """
    Turns spans into printable text, padded to the
    full terminal width so stale characters are wiped.
    """
    # finish_row {{{
    clipped = clip(row, width)
    used = sum(len(span.text) for span in clipped)

    line = ""
    for span in clipped:
        if span.color is not None:
            line += get_foreground(span.color, ctx.args.color_mode)
        if span.reverse:
            line += f"{CSI}7m{span.text}{CSI}27m"
        else:
            line += span.text
        line += reset_style()
    return line + " " * max(0, width - used)
    # }}}
