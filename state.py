from enum import Enum
from dataclasses import dataclass, field

from widgets import ItemList, TextArea, TextInput, Viewport
from req_struct import (
    ErrorData, HttpMethod, KeyValue, RequestSpec, ResponseData, SavedRequest
)


class Tab(Enum):
    # Tab {{{
    Request = 0
    Response = 1
    Saved = 2

    def cycle(self, step: int) -> "Tab":
        return (Tab)((self.value + step) % len(Tab))
    # }}}


class Section(Enum):
    # Section {{{
    Method = 0
    URL = 1
    Headers = 2
    Body = 3
    Params = 4

    def cycle(self, step: int) -> "Section":
        return (Section)((self.value + step) % len(Section))
    # }}}


class Mode(Enum):
    """
    Interpretation regime for key events. Being a
    single value, two modes can never be active at once.
    """
    # Mode {{{
    Navigation = 0
    TextEdit = 1
    SaveNamePrompt = 2
    DeleteConfirm = 3
    # }}}


def default_headers() -> list[KeyValue]:
    # default_headers {{{
    return [KeyValue("Content-Type", "application/json")]
    # }}}


@dataclass
class ResponseView:
    # ResponseView {{{
    body_formatted: str = ""
    status_line: str = ""
    status_code: int = 0
    elapsed: str = ""
    error_message: str = ""
    loading: bool = False
    # }}}


@dataclass
class AppState:
    """
    Single owner of everything the interface shows.
    Only the update thread touches it.
    """
    # AppState {{{
    method: HttpMethod = HttpMethod.GET
    headers: list[KeyValue] = field(default_factory=default_headers)
    params: list[KeyValue] = field(default_factory=list)

    url_input: TextInput = field(default_factory=lambda: TextInput(
        placeholder="https://api.example.com/endpoint", char_limit=500))
    header_input: TextInput = field(default_factory=lambda: TextInput(
        placeholder="Content-Type=application/json", char_limit=100))
    param_input: TextInput = field(default_factory=lambda: TextInput(
        placeholder="key=value", char_limit=100))
    body_input: TextArea = field(default_factory=lambda: TextArea(
        placeholder='{"key": "value"}'))
    save_name_input: TextInput = field(default_factory=lambda: TextInput(
        placeholder="My Awesome Request", char_limit=100))

    response_viewport: Viewport = field(default_factory=Viewport)
    saved_list: ItemList = field(default_factory=ItemList)
    response: ResponseView = field(default_factory=ResponseView)

    tab: Tab = Tab.Request
    section: Section = Section.Method
    mode: Mode = Mode.Navigation

    # Transient footer message, cleared on the next key
    notice: str = ""

    @property
    def url(self) -> str:
        return self.url_input.value

    @property
    def body(self) -> str:
        return self.body_input.value

    @property
    def saved_requests(self) -> list[SavedRequest]:
        return self.saved_list.items

    def text_widgets(self) -> list[TextInput]:
        return [
            self.url_input, self.header_input, self.body_input,
            self.param_input, self.save_name_input
        ]

    def add_header(self, key: str, value: str) -> None:
        self.headers.append(KeyValue(key, value))

    def remove_last_header(self) -> None:
        if self.headers:
            self.headers.pop()

    def add_param(self, key: str, value: str) -> None:
        self.params.append(KeyValue(key, value))

    def remove_last_param(self) -> None:
        if self.params:
            self.params.pop()

    def request_spec(self) -> RequestSpec:
        """
        Snapshot of the current draft. Later edits
        to the draft never reach the returned object.
        """
        # request_spec {{{
        body = self.body.encode("utf-8") if self.body != "" else None
        return RequestSpec(
            method=self.method,
            url=self.url,
            headers=tuple(self.headers),
            params=tuple(self.params),
            body=body
        )
        # }}}

    def snapshot(self, name: str) -> SavedRequest:
        # snapshot {{{
        return SavedRequest(
            name=name,
            method=self.method,
            url=self.url,
            body=self.body,
            headers=list(self.headers),
            params=list(self.params)
        )
        # }}}

    def load_saved(self, saved: SavedRequest) -> None:
        """
        Replaces the draft wholesale with a copy of
        the preset and brings the request tab forward.
        """
        # load_saved {{{
        self.method = saved.method
        self.url_input.set_value(saved.url)
        self.body_input.set_value(saved.body)
        self.headers = list(saved.headers)
        self.params = list(saved.params)
        self.tab = Tab.Request
        # }}}

    def set_response(self, data: ResponseData, formatted: str) -> None:
        # set_response {{{
        self.response.loading = False
        self.response.body_formatted = formatted
        self.response.status_line = f"{data.status} ({data.status_code})"
        self.response.status_code = data.status_code
        self.response.elapsed = data.elapsed
        self.response.error_message = ""
        self.response_viewport.set_content(formatted)
        # }}}

    def set_error(self, error: ErrorData) -> None:
        # set_error {{{
        self.response.loading = False
        self.response.body_formatted = ""
        self.response.status_line = "Error"
        self.response.status_code = 0
        self.response.elapsed = ""
        self.response.error_message = error.message
        self.response_viewport.set_content(error.message)
        # }}}
    # }}}
