from dataclasses import dataclass

from req_struct import ResponseData


# Everything that travels over the bus between the key reader,
# the request threads and the update thread.

@dataclass(frozen=True)
class KeyPressed:
    # KeyPressed {{{
    key: str
    # }}}


@dataclass(frozen=True)
class ResponseArrived:
    # ResponseArrived {{{
    response: ResponseData
    # }}}


@dataclass(frozen=True)
class RequestFailed:
    # RequestFailed {{{
    message: str
    # }}}


@dataclass(frozen=True)
class Quit:
    """
    Sent by the key reader when the input stream closes
    """
    # Quit {{{
    pass
    # }}}


Message = KeyPressed | ResponseArrived | RequestFailed | Quit
