"""
Key-path addressed entity store with push notifications
"""
import copy
import threading
import time
import uuid
from typing import Any, Callable, Dict, List, Optional, Tuple

from utils.logger import get_logger

logger = get_logger(__name__)

Listener = Callable[[Any], None]


def split_path(path: str) -> List[str]:
    """Split 'rooms/VTRY/game' into its segments"""
    return [part for part in path.strip('/').split('/') if part]


def _is_related(a: List[str], b: List[str]) -> bool:
    """True when one path is an ancestor of (or equal to) the other"""
    size = min(len(a), len(b))
    return a[:size] == b[:size]


def _prune(value: Any) -> Any:
    """
    Drop None values and empty containers, the way the realtime store does.
    Returns None when nothing is left.
    """
    if isinstance(value, dict):
        pruned = {}
        for key, item in value.items():
            item = _prune(item)
            if item is not None:
                pruned[str(key)] = item
        return pruned or None
    if isinstance(value, (list, tuple)):
        items = [_prune(item) for item in value]
        items = [item for item in items if item is not None]
        return items or None
    return value


class EntityStore:
    """
    In-memory store holding every room under 'rooms/{code}/...'.

    Single-path writes are atomic; transaction() gives an atomic
    read-modify-write on one path. Listeners receive the full value at
    the path they subscribed to after every write touching it.
    """

    def __init__(self):
        self._data: Dict[str, Any] = {}
        self._lock = threading.RLock()
        self._listeners: Dict[int, Tuple[List[str], Listener]] = {}
        self._listener_counter = 0

    # Reads

    def get(self, path: str) -> Any:
        """Get a deep copy of the value stored at path (None if absent)"""
        with self._lock:
            node: Any = self._data
            for part in split_path(path):
                if not isinstance(node, dict) or part not in node:
                    return None
                node = node[part]
            return copy.deepcopy(node)

    def keys(self, path: str) -> List[str]:
        """Child keys of the value at path"""
        value = self.get(path)
        if isinstance(value, dict):
            return list(value.keys())
        return []

    # Writes

    def set(self, path: str, value: Any) -> None:
        """Replace the value at path; None (or an empty container) removes it"""
        with self._lock:
            self._write(split_path(path), _prune(copy.deepcopy(value)))
        self._notify([split_path(path)])

    def update(self, path: str, fields: Dict[str, Any]) -> None:
        """
        Write several children of path in one atomic step.
        Keys may be nested paths ('timer/endsAt'); None deletes the child.
        """
        base = split_path(path)
        touched = []
        with self._lock:
            for key, value in fields.items():
                target = base + split_path(key)
                self._write(target, _prune(copy.deepcopy(value)))
                touched.append(target)
        self._notify(touched)

    def remove(self, path: str) -> None:
        """Delete the value at path"""
        self.set(path, None)

    def transaction(self, path: str, fn: Callable[[Any], Any]) -> Any:
        """
        Atomically apply fn to the current value at path and store the result.

        Args:
            path: Value path
            fn: Receives the current value (None if absent), returns the new one

        Returns:
            The stored value
        """
        parts = split_path(path)
        with self._lock:
            current = self.get(path)
            new_value = _prune(copy.deepcopy(fn(current)))
            self._write(parts, new_value)
        self._notify([parts])
        return copy.deepcopy(new_value)

    def push_id(self) -> str:
        """Generate a new, roughly chronologically ordered record id"""
        return f"{int(time.time() * 1000):x}{uuid.uuid4().hex[:8]}"

    def clear(self) -> None:
        """Drop everything (tests and full resets)"""
        with self._lock:
            self._data.clear()
        self._notify([[]])

    # Subscriptions

    def listen(self, path: str, callback: Listener) -> Callable[[], None]:
        """
        Subscribe to the value at path. The callback fires immediately with
        the current value, then after every write that touches the path.

        Returns:
            Function that removes the subscription
        """
        with self._lock:
            self._listener_counter += 1
            listener_id = self._listener_counter
            self._listeners[listener_id] = (split_path(path), callback)
        callback(self.get(path))

        def unsubscribe() -> None:
            with self._lock:
                self._listeners.pop(listener_id, None)

        return unsubscribe

    # Internals

    def _write(self, parts: List[str], value: Any) -> None:
        if not parts:
            self._data = value if isinstance(value, dict) else {}
            return

        if value is None:
            self._delete(parts)
            return

        node = self._data
        for part in parts[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        node[parts[-1]] = value

    def _delete(self, parts: List[str]) -> None:
        trail = []
        node: Any = self._data
        for part in parts[:-1]:
            if not isinstance(node, dict) or part not in node:
                return
            trail.append((node, part))
            node = node[part]
        if isinstance(node, dict):
            node.pop(parts[-1], None)
        # Remove parents left empty by the delete
        for parent, key in reversed(trail):
            if parent[key]:
                break
            del parent[key]

    def _notify(self, touched: List[List[str]]) -> None:
        with self._lock:
            targets = [
                (parts, callback)
                for parts, callback in self._listeners.values()
                if any(_is_related(parts, written) for written in touched)
            ]
        for parts, callback in targets:
            try:
                callback(self.get('/'.join(parts)))
            except Exception:
                logger.exception("Store listener for %s failed", '/'.join(parts))


# Global store
entity_store = EntityStore()
