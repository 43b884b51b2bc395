import os
import sys
import json
import logging
from pathlib import Path

from req_struct import HttpMethod, KeyValue, SavedRequest


LOGGER = logging.getLogger(__name__)

APP_DIR = "postui"
PRESETS_FILE = "requests.json"


def get_config_dir() -> Path:
    """
    Per user configuration directory, following
    the convention of the running platform.
    """
    # get_config_dir {{{
    if sys.platform == "win32":
        base = os.environ.get("APPDATA")
        if base:
            return Path(base, APP_DIR)
    elif sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_DIR

    base = os.environ.get("XDG_CONFIG_HOME")
    if base:
        return Path(base, APP_DIR)
    return Path.home() / ".config" / APP_DIR
    # }}}


def request_from_dict(data: dict) -> SavedRequest:
    # request_from_dict {{{
    return SavedRequest(
        name=data.get("name") or "",
        method=HttpMethod.from_index(int(data.get("method") or 0)),
        url=data.get("url") or "",
        body=data.get("body") or "",
        headers=_pairs_from_list(data.get("headers")),
        params=_pairs_from_list(data.get("params"))
    )
    # }}}


def request_to_dict(request: SavedRequest) -> dict:
    # request_to_dict {{{
    return {
        "name": request.name,
        "method": request.method.index,
        "url": request.url,
        "body": request.body,
        "headers": [{"key": h.key, "value": h.value}
                    for h in request.headers],
        "params": [{"key": p.key, "value": p.value}
                   for p in request.params],
    }
    # }}}


class PresetsStore:
    """
    Reads and writes the whole list of saved
    requests, there are no partial updates.
    """
    # PresetsStore {{{
    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def load(self) -> list[SavedRequest]:
        """
        A missing file is simply an empty list. A file
        that cannot be read is logged and treated the same,
        a single malformed record is logged and skipped.
        """
        # load {{{
        if not self.path.exists():
            return []

        try:
            with self.path.open(encoding="utf-8") as o_file:
                data = json.load(o_file)
        except (OSError, ValueError) as error:
            LOGGER.warning("Ignoring unreadable presets file %s: %s",
                           self.path, error)
            return []

        if data is None:
            return []
        if not isinstance(data, list):
            LOGGER.warning("Ignoring presets file %s, expected a list",
                           self.path)
            return []

        requests = []
        for position, item in enumerate(data):
            try:
                requests.append(request_from_dict(item))
            except (ValueError, TypeError, AttributeError) as error:
                LOGGER.warning("Skipping preset %d in %s: %s",
                               position, self.path, error)
        return requests
        # }}}

    def save(self, requests: list[SavedRequest]) -> None:
        """
        Overwrites the file with the full list.
        Raises OSError when the file cannot be written.
        """
        # save {{{
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = [request_to_dict(request) for request in requests]
        with self.path.open("w", encoding="utf-8") as o_file:
            json.dump(data, o_file, indent=2, ensure_ascii=False)
        LOGGER.debug("Wrote %d presets to %s", len(data), self.path)
        # }}}
    # }}}


def _pairs_from_list(items: list | None) -> list[KeyValue]:
    # Older files store null for empty lists
    if not items:
        return []
    return [KeyValue(item.get("key", ""), item.get("value", ""))
            for item in items]
