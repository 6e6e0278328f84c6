"""
Dotted path addressing over untyped item trees.

A form item is a plain JSON-like tree (dicts, lists, scalars, None). Fields
address locations inside it with dot-separated paths such as "user.tags.0".
This module parses those strings once into an immutable Path and provides
total reads and container-creating writes over the tree.

Read semantics:
- Missing keys, out-of-range indices and scalars in the middle of the path
  all resolve to the caller's default (None unless given)

Write semantics:
- Intermediate containers are created on demand: list when the next
  segment is an integer index, dict otherwise
- Writing past the end of a list pads it with None, up to MAX_LIST_PADDING
- A scalar (or a container of the wrong kind) sitting where an intermediate
  container is needed is overwritten with a fresh container
- The terminal value is replaced, never merged
- Sibling keys are never touched
"""
import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Tuple, Union

logger = logging.getLogger(__name__)

Segment = Union[str, int]

PATH_SEPARATOR = '.'

# Canonical list indices only; "007" or "01" stay mapping keys
_INDEX_PATTERN = re.compile(r'0|[1-9][0-9]*')

# Largest gap a write may pad with None when indexing past the end of a list
MAX_LIST_PADDING = 10000


class PathError(ValueError):
    """Raised for malformed paths and writes into a non-container root."""


@dataclass(frozen=True)
class Path:
    """Immutable, validated sequence of path segments.

    String segments address mapping keys, integer segments address list
    indices. Canonical ASCII integers in a dotted string ("0", "12", not
    "007") become integers.
    """
    segments: Tuple[Segment, ...]

    def __post_init__(self):
        if not self.segments:
            raise PathError("Path must have at least one segment")
        for segment in self.segments:
            if isinstance(segment, bool) or not isinstance(segment, (str, int)):
                raise PathError(f"Invalid path segment {segment!r} in {self.segments!r}")
            if isinstance(segment, int) and segment < 0:
                raise PathError(f"Negative index {segment} in {self.segments!r}")
            if segment == '':
                raise PathError(f"Empty path segment in {self.segments!r}")

    @classmethod
    def parse(cls, text: str) -> 'Path':
        """Parse a dot-separated path string.

        Args:
            text: Path such as "user.name" or "user.tags.0"

        Returns:
            Parsed Path

        Raises:
            PathError: If the string is empty or has empty segments
        """
        if not isinstance(text, str) or not text:
            raise PathError(f"Path must be a non-empty string, got {text!r}")
        segments = []
        for part in text.split(PATH_SEPARATOR):
            if not part:
                raise PathError(f"Empty segment in path {text!r}")
            segments.append(int(part) if _INDEX_PATTERN.fullmatch(part) else part)
        return cls(tuple(segments))

    @classmethod
    def coerce(cls, path: Union['Path', str]) -> 'Path':
        """Accept either a Path or a dotted string."""
        if isinstance(path, Path):
            return path
        return cls.parse(path)

    @property
    def parent(self) -> 'Path':
        """Path without the terminal segment (invalid for single-segment paths)."""
        return Path(self.segments[:-1])

    @property
    def leaf(self) -> Segment:
        return self.segments[-1]

    def is_prefix_of(self, other: 'Path') -> bool:
        """True if other lies at or below this path."""
        return other.segments[:len(self.segments)] == self.segments

    def __str__(self) -> str:
        return PATH_SEPARATOR.join(str(s) for s in self.segments)

    def __len__(self) -> int:
        return len(self.segments)


def _lookup(container: Any, segment: Segment) -> Tuple[bool, Any]:
    """Look up one segment. Returns (found, value)."""
    if isinstance(container, dict):
        key = str(segment)
        if key in container:
            return True, container[key]
        # Python callers may key dicts by int directly
        if isinstance(segment, int) and segment in container:
            return True, container[segment]
        return False, None
    if isinstance(container, (list, tuple)):
        if isinstance(segment, int) and segment < len(container):
            return True, container[segment]
        return False, None
    return False, None


def get_path(root: Any, path: Union[Path, str], default: Any = None) -> Any:
    """Read the value stored at path.

    Never raises for a missing location; malformed path strings also resolve
    to the default since reads are total.

    Args:
        root: Item tree to read from
        path: Path or dotted string
        default: Returned when nothing (or None) is stored at path

    Returns:
        Stored value, or default
    """
    try:
        path = Path.coerce(path)
    except PathError:
        return default

    current = root
    for segment in path.segments:
        found, current = _lookup(current, segment)
        if not found:
            return default
    return default if current is None else current


def _new_container(next_segment: Segment) -> Any:
    return [] if isinstance(next_segment, int) else {}


def _fits(container: Any, next_segment: Segment) -> bool:
    """True if container can be addressed by next_segment without replacement."""
    if isinstance(container, dict):
        return True
    if isinstance(container, list):
        return isinstance(next_segment, int)
    return False


def _assign(container: Any, segment: Segment, value: Any) -> None:
    if isinstance(container, dict):
        # Keep an existing int key rather than shadowing it with its str form
        if isinstance(segment, int) and segment in container:
            container[segment] = value
        else:
            container[str(segment)] = value
        return
    # list, guaranteed by _fits / root check
    if segment >= len(container):
        if segment - len(container) > MAX_LIST_PADDING:
            raise PathError(
                f"Index {segment} is more than {MAX_LIST_PADDING} past the end of a list of {len(container)}"
            )
        container.extend([None] * (segment + 1 - len(container)))
    container[segment] = value


def set_path(root: Any, path: Union[Path, str], value: Any) -> None:
    """Write value at path, mutating root in place.

    Args:
        root: Item tree (dict or list) to write into
        path: Path or dotted string
        value: Value stored at the terminal segment (replaces, never merges)

    Raises:
        PathError: Malformed path, a root that cannot hold the first segment,
                   or an index more than MAX_LIST_PADDING past the end of a list
    """
    path = Path.coerce(path)
    segments = path.segments

    if not _fits(root, segments[0]):
        raise PathError(
            f"Cannot write {str(path)!r} into root of type {type(root).__name__}"
        )

    current = root
    for index, segment in enumerate(segments[:-1]):
        next_segment = segments[index + 1]
        found, child = _lookup(current, segment)
        if not found or not _fits(child, next_segment):
            if found and child is not None:
                logger.debug(
                    f"Overwriting {type(child).__name__} at {segment!r} "
                    f"while writing {str(path)!r}"
                )
            child = _new_container(next_segment)
            _assign(current, segment, child)
        current = child

    _assign(current, segments[-1], value)


def is_empty(value: Any) -> bool:
    """Emptiness rule shared by required checks and the has-value aggregate.

    None, False, "", numeric zero, NaN and zero-length lists/tuples are
    empty. Mappings are never empty (JSON object semantics).
    """
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return value == ''
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    if isinstance(value, (int, float)):
        return value == 0 or (isinstance(value, float) and math.isnan(value))
    return False
