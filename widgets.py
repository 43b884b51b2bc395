from dataclasses import dataclass, field


def is_printable(key: str) -> bool:
    """
    Logical key names are multi-character ("enter",
    "ctrl+c"), a typed character is always a single one.
    """
    # is_printable {{{
    return len(key) == 1 and key.isprintable()
    # }}}


@dataclass
class TextInput:
    """
    Single line text field. Keys are only
    applied while the field is focused.
    """
    # TextInput {{{
    placeholder: str = ""
    char_limit: int = 0     # 0 means unlimited
    value: str = ""
    cursor: int = 0
    focused: bool = False

    def focus(self) -> None:
        self.focused = True

    def blur(self) -> None:
        self.focused = False

    def set_value(self, value: str) -> None:
        if self.char_limit > 0:
            value = value[:self.char_limit]
        self.value = value
        self.cursor = len(value)

    def reset(self) -> None:
        self.set_value("")

    def handle_key(self, key: str) -> bool:
        """
        Applies an editing key, returning whether
        the key meant anything to the field.
        """
        # handle_key {{{
        if not self.focused:
            return False

        match key:
            case "backspace":
                if self.cursor > 0:
                    self.value = self.value[:self.cursor - 1] + \
                        self.value[self.cursor:]
                    self.cursor -= 1
            case "delete":
                self.value = self.value[:self.cursor] + \
                    self.value[self.cursor + 1:]
            case "left":
                self.cursor = max(0, self.cursor - 1)
            case "right":
                self.cursor = min(len(self.value), self.cursor + 1)
            case "home":
                self.cursor = 0
            case "end":
                self.cursor = len(self.value)
            case _:
                if not is_printable(key):
                    return False
                self._insert(key)
        return True
        # }}}

    def _insert(self, text: str) -> None:
        if self.char_limit > 0 and len(self.value) >= self.char_limit:
            return
        self.value = self.value[:self.cursor] + text + \
            self.value[self.cursor:]
        self.cursor += len(text)
    # }}}


@dataclass
class TextArea(TextInput):
    """
    Multi line variant used for the request body,
    enter inserts a newline and up/down move
    between lines keeping the column.
    """
    # TextArea {{{
    def lines(self) -> list[str]:
        return self.value.split("\n")

    def cursor_position(self) -> tuple[int, int]:
        """
        Returns (row, column) of the cursor
        """
        before = self.value[:self.cursor].split("\n")
        return (len(before) - 1, len(before[-1]))

    def handle_key(self, key: str) -> bool:
        # handle_key {{{
        if not self.focused:
            return False

        match key:
            case "enter":
                self._insert("\n")
            case "up":
                self._move_line(-1)
            case "down":
                self._move_line(1)
            case "home":
                _, column = self.cursor_position()
                self.cursor -= column
            case "end":
                row, column = self.cursor_position()
                self.cursor += len(self.lines()[row]) - column
            case _:
                return super().handle_key(key)
        return True
        # }}}

    def _move_line(self, step: int) -> None:
        lines = self.lines()
        row, column = self.cursor_position()
        target = row + step
        if target < 0 or target >= len(lines):
            return
        column = min(column, len(lines[target]))
        # Each preceding line accounts for its newline
        self.cursor = sum(len(line) + 1 for line in lines[:target]) + column
    # }}}


@dataclass
class Viewport:
    # Viewport {{{
    height: int = 10
    offset: int = 0
    content: list[str] = field(default_factory=list)

    def set_content(self, text: str) -> None:
        self.content = text.splitlines() if text else []
        self.offset = 0

    def max_offset(self) -> int:
        return max(0, len(self.content) - self.height)

    def line_up(self, count: int = 1) -> None:
        self.offset = max(0, self.offset - count)

    def line_down(self, count: int = 1) -> None:
        self.offset = min(self.max_offset(), self.offset + count)

    def page_up(self) -> None:
        self.line_up(self.height)

    def page_down(self) -> None:
        self.line_down(self.height)

    def set_height(self, height: int) -> None:
        self.height = max(1, height)
        self.offset = min(self.offset, self.max_offset())

    def visible(self) -> list[str]:
        return self.content[self.offset:self.offset + self.height]
    # }}}


@dataclass
class ItemList:
    """
    Selectable list of items, scrolled so
    the selected item is always visible.
    """
    # ItemList {{{
    height: int = 10
    index: int = 0
    offset: int = 0
    items: list = field(default_factory=list)

    def set_items(self, items: list) -> None:
        self.items = items
        self.clamp()

    def selected_item(self):
        if not self.items:
            return None
        return self.items[self.index]

    def cursor_up(self, count: int = 1) -> None:
        self.index = max(0, self.index - count)
        self._follow()

    def cursor_down(self, count: int = 1) -> None:
        if not self.items:
            return
        self.index = min(len(self.items) - 1, self.index + count)
        self._follow()

    def page_up(self) -> None:
        self.cursor_up(self.height)

    def page_down(self) -> None:
        self.cursor_down(self.height)

    def set_height(self, height: int) -> None:
        self.height = max(1, height)
        self._follow()

    def clamp(self) -> None:
        """
        Keeps the selection valid after the
        underlying items shrink.
        """
        self.index = max(0, min(self.index, len(self.items) - 1))
        self._follow()

    def visible(self) -> list:
        return self.items[self.offset:self.offset + self.height]

    def _follow(self) -> None:
        if self.index < self.offset:
            self.offset = self.index
        elif self.index >= self.offset + self.height:
            self.offset = self.index - self.height + 1
        self.offset = max(0, min(self.offset,
                                 max(0, len(self.items) - self.height)))
    # }}}
