from enum import Enum
from dataclasses import dataclass, field


class HttpMethod(Enum):
    """
    Order matters, the index of each member
    is what gets persisted in the presets file
    """
    # HttpMethod {{{
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"

    @classmethod
    def from_index(cls, index: int) -> "HttpMethod":
        methods = list(cls)
        if not 0 <= index < len(methods):
            raise ValueError(f"No method with index {index}")
        return methods[index]

    @property
    def index(self) -> int:
        return list(HttpMethod).index(self)

    def cycle(self, step: int) -> "HttpMethod":
        methods = list(HttpMethod)
        return methods[(self.index + step) % len(methods)]
    # }}}


@dataclass(frozen=True)
class KeyValue():
    # KeyValue {{{
    key: str
    value: str

    def __str__(self) -> str:
        return f"{self.key}: {self.value}"
    # }}}


@dataclass(frozen=True)
class RequestSpec():
    """
    Immutable snapshot of a draft, taken the moment
    a send is triggered. The request thread only
    ever sees this object.
    """
    # RequestSpec {{{
    method: HttpMethod
    url: str
    headers: tuple[KeyValue, ...] = ()
    params: tuple[KeyValue, ...] = ()
    body: bytes = None
    # }}}


@dataclass
class SavedRequest():
    # SavedRequest {{{
    name: str
    method: HttpMethod = HttpMethod.GET
    url: str = ""
    body: str = ""
    headers: list[KeyValue] = field(default_factory=list)
    params: list[KeyValue] = field(default_factory=list)

    @property
    def description(self) -> str:
        return f"[{self.method.value}] {self.url}"

    def __str__(self) -> str:
        return self.name
    # }}}


@dataclass(frozen=True)
class ResponseData():
    # ResponseData {{{
    body: str
    status: str         # e.g. "200 OK"
    status_code: int
    elapsed: str        # e.g. "12ms"
    # }}}


@dataclass(frozen=True)
class ErrorData():
    # ErrorData {{{
    message: str
    # }}}
