import unittest

from widgets import ItemList, TextArea, TextInput, Viewport, is_printable


class TestTextInput(unittest.TestCase):

    def setUp(self):
        self.widget = TextInput()
        self.widget.focus()

    def type(self, text):
        for char in text:
            self.widget.handle_key(char)

    def test_ignores_keys_while_blurred(self):
        self.widget.blur()
        self.assertFalse(self.widget.handle_key("a"))
        self.assertEqual(self.widget.value, "")

    def test_editing(self):
        self.type("helo")
        self.widget.handle_key("left")
        self.type("l")
        self.assertEqual(self.widget.value, "hello")

        self.widget.handle_key("home")
        self.widget.handle_key("delete")
        self.widget.handle_key("end")
        self.widget.handle_key("backspace")
        self.assertEqual(self.widget.value, "ell")
        self.assertEqual(self.widget.cursor, 3)

    def test_backspace_at_start(self):
        self.widget.handle_key("backspace")
        self.assertEqual((self.widget.value, self.widget.cursor), ("", 0))

    def test_char_limit(self):
        widget = TextInput(char_limit=3)
        widget.focus()
        for char in "abcd":
            widget.handle_key(char)
        self.assertEqual(widget.value, "abc")

        widget.set_value("wxyz")
        self.assertEqual(widget.value, "wxy")

    def test_named_keys_are_not_text(self):
        self.assertFalse(self.widget.handle_key("ctrl+s"))
        self.assertFalse(self.widget.handle_key("enter"))
        self.assertEqual(self.widget.value, "")
        self.assertTrue(is_printable("q"))
        self.assertFalse(is_printable("\t"))


class TestTextArea(unittest.TestCase):

    def setUp(self):
        self.area = TextArea()
        self.area.focus()

    def test_enter_inserts_newline(self):
        for key in ("a", "enter", "b"):
            self.area.handle_key(key)
        self.assertEqual(self.area.value, "a\nb")
        self.assertEqual(self.area.cursor_position(), (1, 1))

    def test_up_down_keep_column(self):
        self.area.set_value("abcd\nxy\nlonger")
        self.area.handle_key("up")
        self.assertEqual(self.area.cursor_position(), (1, 2))
        self.area.handle_key("up")
        self.assertEqual(self.area.cursor_position(), (0, 2))
        self.area.handle_key("up")
        self.assertEqual(self.area.cursor_position(), (0, 2))
        self.area.handle_key("down")
        self.area.handle_key("end")
        self.assertEqual(self.area.cursor_position(), (1, 2))
        self.area.handle_key("home")
        self.assertEqual(self.area.cursor, 5)


class TestViewport(unittest.TestCase):

    def test_scroll_is_clamped(self):
        viewport = Viewport(height=2)
        viewport.set_content("1\n2\n3")
        viewport.line_up()
        self.assertEqual(viewport.offset, 0)
        viewport.page_down()
        viewport.page_down()
        self.assertEqual(viewport.offset, 1)
        self.assertEqual(viewport.visible(), ["2", "3"])

    def test_new_content_resets_offset(self):
        viewport = Viewport(height=1)
        viewport.set_content("1\n2")
        viewport.line_down()
        viewport.set_content("")
        self.assertEqual((viewport.offset, viewport.content), (0, []))


class TestItemList(unittest.TestCase):

    def test_selection_follows_cursor(self):
        items = ItemList(height=2)
        items.set_items(["a", "b", "c", "d"])
        items.page_down()
        items.cursor_down()
        self.assertEqual(items.selected_item(), "d")
        self.assertEqual(items.visible(), ["c", "d"])

    def test_clamp_after_shrinking(self):
        items = ItemList()
        items.set_items(["a", "b"])
        items.cursor_down()
        items.set_items(["a"])
        self.assertEqual(items.selected_item(), "a")
        items.set_items([])
        self.assertIsNone(items.selected_item())
        items.cursor_down()
        self.assertEqual(items.index, 0)


if __name__ == '__main__':
    unittest.main()
