"""Process-wide graph used by the HTTP layer.

The API serves one GraphStore. It is loaded lazily from the snapshot named by
CASTGRAPH_SNAPSHOT_PATH and every request touches it under ``graph_lock``,
so mutations are serialized and readers never see a half-applied write.
"""
import logging
import os
import threading
from typing import Optional

from castgraph.services.graph import GraphStore, load_snapshot, save_snapshot

logger = logging.getLogger(__name__)

DEFAULT_SNAPSHOT_PATH = os.path.join("data", "graph.json")

graph_lock = threading.RLock()
_store: Optional[GraphStore] = None


def _load_env_from_file():
    """Load environment variables from a .env file at the project root if present.

    Only sets variables that aren't already present in the process environment.
    """
    root_dir = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
    env_path = os.path.join(root_dir, ".env")
    if not os.path.isfile(env_path):
        return
    with open(env_path, "r", encoding="utf-8") as f:
        for line in f:
            s = line.strip()
            if not s or s.startswith("#"):
                continue
            if "=" not in s:
                continue
            key, val = s.split("=", 1)
            key = key.strip()
            val = val.strip().strip('"').strip("'")
            # Allow space around '=' like KEY = value
            if key and (key not in os.environ or not os.environ[key]):
                os.environ[key] = val


def get_snapshot_path() -> str:
    _load_env_from_file()
    return os.getenv("CASTGRAPH_SNAPSHOT_PATH") or DEFAULT_SNAPSHOT_PATH


def autosave_enabled() -> bool:
    _load_env_from_file()
    return os.getenv("CASTGRAPH_AUTOSAVE") == "1"


def get_store() -> GraphStore:
    """Return the shared store, loading the snapshot on first use.

    A missing snapshot gives an empty graph; a malformed one raises
    ValidationFailure.
    """
    global _store
    with graph_lock:
        if _store is None:
            path = get_snapshot_path()
            try:
                _store = load_snapshot(path)
            except FileNotFoundError:
                logger.warning("No graph snapshot at %s; starting with an empty graph", path)
                _store = GraphStore()
        return _store


def set_store(store: Optional[GraphStore]) -> None:
    """Replace the shared store (None forces a reload on next use)."""
    global _store
    with graph_lock:
        _store = store


def save_store(path: Optional[str] = None) -> str:
    with graph_lock:
        return save_snapshot(get_store(), path or get_snapshot_path())


def close_store():
    """Drop the shared store, saving it first when autosave is on."""
    global _store
    with graph_lock:
        if _store is not None and autosave_enabled():
            save_snapshot(_store, get_snapshot_path())
        _store = None
