import os
import unittest

from config import Arguments, BorderStyle, ColorMode, Theme
from render import (
    CSI, RenderContext, Span, compose, finish_row, populate_borders,
    update_layout
)
from req_struct import ErrorData, ResponseData, SavedRequest
from state import AppState, Mode, Tab


def make_ctx(columns=80, lines=30, debug=False) -> RenderContext:
    theme = Theme("252", "63", "240", "205", "81", "196", "82")
    return RenderContext(
        borders=populate_borders(BorderStyle.Rounded),
        theme=theme,
        args=Arguments(debug=debug, color_mode=ColorMode.Bit8),
        size=os.terminal_size((columns, lines))
    )


def text_of(rows) -> list[str]:
    return ["".join(span.text for span in row) for row in rows]


class TestCompose(unittest.TestCase):

    def setUp(self):
        self.state = AppState()
        self.ctx = make_ctx()
        update_layout(self.state, self.ctx.size)

    def screen(self) -> list[str]:
        return text_of(compose(self.state, self.ctx))

    def test_fills_terminal(self):
        for tab in Tab:
            with self.subTest(tab=tab):
                self.state.tab = tab
                lines = self.screen()
                self.assertEqual(len(lines), 30)
                for line in lines[:-2]:
                    self.assertEqual(len(line), 80)

    def test_request_tab(self):
        lines = self.screen()
        self.assertIn("[Request]", lines[1])
        self.assertIn("POSTUI", lines[1])
        joined = "\n".join(lines)
        self.assertIn("[GET]", joined)
        self.assertIn("[2] URL:", joined)
        self.assertIn("https://api.example.com/endpoint", joined)
        self.assertIn("Content-Type: application/json", joined)

    def test_save_prompt_footer(self):
        self.state.mode = Mode.SaveNamePrompt
        self.state.save_name_input.focus()
        self.state.save_name_input.set_value("Demo")
        self.assertTrue(self.screen()[-2].startswith(" Save as: Demo"))

    def test_saved_tab_with_delete_confirm(self):
        self.state.saved_list.set_items([
            SavedRequest(name="Demo", url="http://x")
        ])
        self.state.tab = Tab.Saved
        self.state.mode = Mode.DeleteConfirm

        lines = self.screen()
        joined = "\n".join(lines)
        self.assertIn("> Demo", joined)
        self.assertIn("[GET] http://x", joined)
        self.assertIn("Delete 'Demo'? (y/n)", lines[-2])

    def test_response_tab(self):
        data = ResponseData('{"a":1}', "200 OK", 200, "12ms")
        self.state.set_response(data, '{\n  "a": 1\n}')
        self.state.tab = Tab.Response

        lines = self.screen()
        joined = "\n".join(lines)
        self.assertIn("Status 200 OK (200)   Time 12ms", joined)
        self.assertIn('"a": 1', joined)
        self.assertIn("✓ Done  Status: 200 OK (200)  Time: 12ms", lines[-2])

    def test_error_and_notice_footer(self):
        self.state.set_error(ErrorData("Request failed: boom"))
        self.assertIn("Error: Request failed: boom", self.screen()[-2])

        self.state.notice = "Could not save presets"
        self.assertIn("Could not save presets", self.screen()[-2])

    def test_loading_footer(self):
        self.state.response.loading = True
        self.assertTrue(self.screen()[-2].startswith(" Sending request "))

    def test_debug_help_line(self):
        self.ctx = make_ctx(debug=True)
        self.assertIn("mode Navigation", self.screen()[-1])

    def test_small_terminal(self):
        self.ctx = make_ctx(columns=30, lines=10)
        self.assertEqual(self.screen(), ["Terminal too small"])


class TestFinishRow(unittest.TestCase):

    def test_colors_and_padding(self):
        ctx = make_ctx()
        line = finish_row([Span("ab", "252")], 5, ctx)
        self.assertEqual(line, f"{CSI}38;5;252mab{CSI}0m   ")

    def test_clips_to_width(self):
        ctx = make_ctx()
        line = finish_row([Span("abc"), Span("def")], 4, ctx)
        self.assertEqual(line, f"abc{CSI}0md{CSI}0m")


if __name__ == '__main__':
    unittest.main()
