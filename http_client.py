import json
import time
import logging
import requests
from queue import Queue
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from req_struct import KeyValue, RequestSpec, ResponseData
from messages import RequestFailed, ResponseArrived


LOGGER = logging.getLogger(__name__)

TIMEOUT = 30  # Seconds, for both connect and read

INDENT = "  "
JSON_WHITESPACE = " \t\r\n"


def build_url(url: str, params: tuple[KeyValue, ...]) -> str:
    """
    Merges the params into whatever query string the
    url already carries. Nothing is deduplicated, the
    combined query is encoded ordered by key.
    """
    # build_url {{{
    parts = urlsplit(url)
    query = parse_qsl(parts.query, keep_blank_values=True)
    query += [(param.key, param.value) for param in params]

    # Sort is stable, repeated keys keep their relative order
    query.sort(key=lambda pair: pair[0])
    return urlunsplit(parts._replace(query=urlencode(query)))
    # }}}


def build_headers(headers: tuple[KeyValue, ...]) -> dict:
    """
    Repeated header names are folded into a
    single comma separated value.
    """
    # build_headers {{{
    result = {}
    for header in headers:
        if header.key in result:
            result[header.key] = f"{result[header.key]}, {header.value}"
        else:
            result[header.key] = header.value
    return result
    # }}}


def format_body(text: str) -> str:
    """
    Re-indents JSON with two spaces. Only whitespace
    changes, keys, numbers and escapes are kept as sent.
    Anything that does not parse comes back exactly
    as it was given.
    """
    # format_body {{{
    if text.strip() == "":
        return ""

    try:
        # Parsed only to validate, the text itself is re-emitted
        json.loads(text, object_pairs_hook=list,
                   parse_constant=_reject_constant)
    except ValueError:
        return text

    return indent_json(text)
    # }}}


def indent_json(text: str, indent: str = INDENT) -> str:
    """
    Rewrites the whitespace between the tokens of
    valid JSON, strings are copied untouched. Empty
    objects and arrays stay on one line, {} and [].
    """
    # indent_json {{{
    out = []
    depth = 0
    in_string = False
    escaped = False
    opened = False      # Last token opened an object or array

    for char in text:
        if in_string:
            out.append(char)
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char in JSON_WHITESPACE:
            continue

        if opened and char not in "}]":
            out.append("\n" + indent * depth)

        match char:
            case "{" | "[":
                depth += 1
                out.append(char)
                opened = True
                continue
            case "}" | "]":
                depth -= 1
                if not opened:
                    out.append("\n" + indent * depth)
                out.append(char)
            case ",":
                out.append(",\n" + indent * depth)
            case ":":
                out.append(": ")
            case '"':
                in_string = True
                out.append(char)
            case _:
                out.append(char)
        opened = False

    return "".join(out)
    # }}}


def format_elapsed(seconds: float) -> str:
    """
    Rounds to the millisecond, "12ms", "1.5s", "2m3.25s"
    """
    # format_elapsed {{{
    millis = round(seconds * 1000)
    if millis < 1000:
        return f"{millis}ms"

    minutes, millis = divmod(millis, 60_000)
    secs = f"{millis / 1000:.3f}".rstrip("0").rstrip(".")
    if minutes > 0:
        return f"{minutes}m{secs}s"
    return f"{secs}s"
    # }}}


def send(spec: RequestSpec) -> ResponseData:
    """
    Performs the request described by the snapshot.
    Raises requests.RequestException on transport
    failures, any status code is a valid response.
    """
    # send {{{
    start = time.monotonic()

    response = requests.request(
        spec.method.value, build_url(spec.url, spec.params),
        headers=build_headers(spec.headers), data=spec.body,
        timeout=TIMEOUT)

    elapsed = format_elapsed(time.monotonic() - start)
    return ResponseData(
        body=response.text,
        status=f"{response.status_code} {response.reason}",
        status_code=response.status_code,
        elapsed=elapsed
    )
    # }}}


def send_request(spec: RequestSpec, bus: Queue) -> None:
    """
    Primary function that comprises the request thread.
    Exactly one message is put on the bus, whatever happens.
    """
    # send_request {{{
    try:
        response = send(spec)
    except Exception as exception:
        LOGGER.debug("Request to %s raised", spec.url, exc_info=True)
        bus.put(RequestFailed(f"Request failed: {exception}"))
    else:
        bus.put(ResponseArrived(response))
    # }}}


def _reject_constant(name: str) -> None:
    raise ValueError(f"{name} is not valid JSON")
