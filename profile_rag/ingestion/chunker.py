import hashlib
import itertools
import math
from collections.abc import Mapping
from typing import Callable, List, Tuple

from profile_rag.models import Chunk, JsonValue

ROOT_PATH = "root"
JOINER = " | "

# (path, text, ordinal within one flatten call) -> chunk id
IdFactory = Callable[[str, str, int], str]


def content_hash_ids(path: str, text: str, ordinal: int) -> str:
    """
    Stable id: same content at the same position always hashes the same,
    so re-ingesting an unchanged profile overwrites instead of duplicating.
    """
    digest = hashlib.sha1(f"{ordinal}\x00{path}\x00{text}".encode("utf-8")).hexdigest()
    return f"{path}-{digest[:16]}"


class SequentialIds:
    """Monotonic counter ids ("chunk-0", "chunk-1", ...). Handy in tests."""

    def __init__(self, prefix: str = "chunk"):
        self.prefix = prefix
        self._counter = itertools.count()

    def __call__(self, path: str, text: str, ordinal: int) -> str:
        return f"{self.prefix}-{next(self._counter)}"


def _is_branch(value) -> bool:
    return isinstance(value, (Mapping, list, tuple))


def _to_text(value) -> str:
    # JSON spelling for booleans; 3.0 -> "3"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return str(int(value))
    return str(value)


def flatten(
    value: JsonValue,
    base_path: str = "",
    id_factory: IdFactory | None = None,
) -> List[Chunk]:
    """
    Flatten an arbitrary JSON value into addressable text chunks.

    - null -> nothing
    - scalar -> one chunk at base_path (or "root")
    - list -> one chunk joining its scalar items with " | ", then every nested
      object/list under "<path>[<original index>]"
    - mapping -> every key under "<path>.<key>", in key order

    Walks an explicit stack instead of recursing, so nesting depth is unbounded.
    The input is never mutated.
    """
    make_id = id_factory or content_hash_ids
    chunks: List[Chunk] = []

    def emit(path: str, text: str):
        chunks.append(Chunk(path=path, text=text, id=make_id(path, text, len(chunks))))

    # LIFO, so children are pushed in reverse to come out in document order
    stack: List[Tuple[JsonValue, str]] = [(value, base_path)]
    while stack:
        node, path = stack.pop()

        if node is None:
            continue

        if isinstance(node, Mapping):
            children = [
                (child, f"{path}.{key}" if path else str(key))
                for key, child in node.items()
            ]
            stack.extend(reversed(children))
            continue

        if isinstance(node, (list, tuple)):
            here = path or ROOT_PATH
            scalars = [_to_text(item) for item in node if item is not None and not _is_branch(item)]
            if scalars:
                emit(here, JOINER.join(scalars))

            nested = [(item, f"{here}[{idx}]") for idx, item in enumerate(node) if _is_branch(item)]
            stack.extend(reversed(nested))
            continue

        emit(path or ROOT_PATH, _to_text(node))

    return chunks
