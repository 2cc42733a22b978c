"""
JSON key-value persistence for the current game and the solve history.

Saved data is never trusted: anything missing, unreadable or malformed is
logged and treated as absent so the game can start fresh.
"""
import json
import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)

CURRENT_KEY = "currentPlanarityGame"
HISTORY_KEY = "planarityHistory"


class MemoryStore:
    """In-process store; values go through JSON so they behave like saved ones."""

    def __init__(self):
        self._data = {}

    def get(self, key):
        raw = self._data.get(key)
        return None if raw is None else json.loads(raw)

    def set(self, key, value):
        self._data[key] = json.dumps(value)

    def delete(self, key):
        self._data.pop(key, None)


class JsonStore:
    """One `<key>.json` file per key under `directory`."""

    def __init__(self, directory):
        self.directory = Path(directory).expanduser()

    def _path(self, key):
        return self.directory / f"{key}.json"

    def get(self, key):
        path = self._path(key)
        if not path.exists():
            return None
        try:
            with path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("ignoring unreadable %s: %s", path, e)
            return None

    def set(self, key, value):
        self.directory.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
        try:
            with open(fd, "w", encoding="utf-8") as f:
                json.dump(value, f)
            os.replace(tmp, self._path(key))
        except BaseException:
            os.unlink(tmp)
            raise

    def delete(self, key):
        try:
            self._path(key).unlink()
        except FileNotFoundError:
            pass


def save_current(store, snapshot):
    store.set(CURRENT_KEY, snapshot)


def load_current(store):
    """The saved snapshot dict, or None when there is no usable one."""
    data = store.get(CURRENT_KEY)
    if data is None:
        return None
    if not isinstance(data, dict) or not isinstance(data.get('nodes'), list):
        logger.warning("saved game has unexpected shape, ignoring it")
        return None
    return data


def load_history(store):
    history = store.get(HISTORY_KEY)
    if not isinstance(history, list):
        if history is not None:
            logger.warning("history has unexpected shape, starting a new one")
        return []
    return history


def append_history(store, record):
    history = load_history(store)
    history.append(record)
    store.set(HISTORY_KEY, history)
    return len(history)
