import unittest
from queue import Queue
from unittest.mock import MagicMock, patch

import requests

from http_client import (
    TIMEOUT, build_headers, build_url, format_body, format_elapsed, send,
    send_request
)
from messages import RequestFailed, ResponseArrived
from req_struct import HttpMethod, KeyValue, RequestSpec


def fake_response(status_code=200, reason="OK", text=""):
    response = MagicMock()
    response.status_code = status_code
    response.reason = reason
    response.text = text
    return response


class TestFormatBody(unittest.TestCase):

    def test_reindents_json(self):
        self.assertEqual(format_body('{"a":1}'), '{\n  "a": 1\n}')
        self.assertEqual(format_body("[1,2]"), "[\n  1,\n  2\n]")

    def test_idempotent(self):
        once = format_body('{"b": [true, null], "a": {"c": "ü"}}')
        self.assertEqual(format_body(once), once)

    def test_keeps_key_order(self):
        self.assertEqual(format_body('{"b":1,"a":2}'),
                         '{\n  "b": 1,\n  "a": 2\n}')

    def test_non_json_returned_verbatim(self):
        for text in ("", "plain text", "<html></html>", "{broken",
                     "NaN", '{"a": Infinity}'):
            with self.subTest(text=text):
                self.assertEqual(format_body(text), text)

    def test_blank_body_is_empty(self):
        self.assertEqual(format_body(" \n"), "")

    def test_duplicate_keys_kept(self):
        self.assertEqual(format_body('{"a":1,"a":2}'),
                         '{\n  "a": 1,\n  "a": 2\n}')

    def test_number_literals_kept(self):
        self.assertEqual(format_body('{"p": 1.50, "n": 1e400}'),
                         '{\n  "p": 1.50,\n  "n": 1e400\n}')

    def test_string_escapes_kept(self):
        self.assertEqual(format_body('{"e":"\\u00e9","q":"a\\"b, c: [d]"}'),
                         '{\n  "e": "\\u00e9",\n  "q": "a\\"b, c: [d]"\n}')

    def test_nested_and_empty_containers(self):
        self.assertEqual(format_body('{"a":{},"b":[ ],"c":[{"d":null}]}'),
                         '{\n  "a": {},\n  "b": [],\n  "c": [\n    {\n'
                         '      "d": null\n    }\n  ]\n}')


class TestBuildRequest(unittest.TestCase):

    def test_params_appended_to_query(self):
        params = (KeyValue("q", "1"),)
        self.assertEqual(build_url("http://x/y", params), "http://x/y?q=1")

    def test_existing_query_merged_and_sorted(self):
        params = (KeyValue("a", "3"), KeyValue("c", "x y"))
        self.assertEqual(build_url("http://x/y?b=2&a=1", params),
                         "http://x/y?a=1&a=3&b=2&c=x+y")

    def test_no_params_leaves_url(self):
        self.assertEqual(build_url("http://x/y", ()), "http://x/y")

    def test_repeated_headers_folded(self):
        headers = (KeyValue("Accept", "text/html"), KeyValue("X", "1"),
                   KeyValue("Accept", "application/json"))
        self.assertEqual(build_headers(headers), {
            "Accept": "text/html, application/json",
            "X": "1",
        })

    def test_format_elapsed(self):
        self.assertEqual(format_elapsed(0.0123), "12ms")
        self.assertEqual(format_elapsed(1.5), "1.5s")
        self.assertEqual(format_elapsed(2.0), "2s")
        self.assertEqual(format_elapsed(123.25), "2m3.25s")


class TestSend(unittest.TestCase):

    def setUp(self):
        self.spec = RequestSpec(
            method=HttpMethod.POST,
            url="http://x/y",
            headers=(KeyValue("Content-Type", "application/json"),),
            params=(KeyValue("q", "1"),),
            body=b'{"a":1}'
        )

    @patch("http_client.requests.request")
    def test_send_passes_snapshot(self, mock_request):
        mock_request.return_value = fake_response(404, "Not Found", "nope")

        data = send(self.spec)

        mock_request.assert_called_once_with(
            "POST", "http://x/y?q=1",
            headers={"Content-Type": "application/json"},
            data=b'{"a":1}', timeout=TIMEOUT)
        self.assertEqual(data.status, "404 Not Found")
        self.assertEqual(data.status_code, 404)
        self.assertEqual(data.body, "nope")

    @patch("http_client.requests.request")
    def test_response_put_on_bus(self, mock_request):
        mock_request.return_value = fake_response(text='{"a":1}')
        bus = Queue()

        send_request(self.spec, bus)

        message = bus.get_nowait()
        self.assertIsInstance(message, ResponseArrived)
        self.assertEqual(message.response.body, '{"a":1}')
        self.assertTrue(bus.empty())

    @patch("http_client.requests.request")
    def test_failure_put_on_bus(self, mock_request):
        mock_request.side_effect = requests.ConnectionError("refused")
        bus = Queue()

        send_request(self.spec, bus)

        message = bus.get_nowait()
        self.assertIsInstance(message, RequestFailed)
        self.assertIn("refused", message.message)
        self.assertTrue(bus.empty())

    @patch("http_client.requests.request")
    def test_invalid_url_is_a_failure(self, mock_request):
        mock_request.side_effect = requests.exceptions.MissingSchema("no")
        bus = Queue()
        send_request(RequestSpec(HttpMethod.GET, "not a url"), bus)
        self.assertIsInstance(bus.get_nowait(), RequestFailed)


if __name__ == '__main__':
    unittest.main()
