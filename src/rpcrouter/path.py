"""RPC route paths.

An ``RpcPath`` addresses a group of RPC methods, the way a URL path
addresses a resource::

    RpcPath.parse("/Base/Test").segments  -> ("Base", "Test")
    RpcPath.parse("/").segments           -> ()   (root)
    RpcPath.parse("/Base").add(RpcPath.parse("Test")) == RpcPath.parse("/base/test")

Segments keep the casing they were parsed with, but compare
case-insensitively.
"""

from collections.abc import Callable, Iterator
from dataclasses import dataclass

from rpcrouter.errors import InvalidPathError

SEPARATOR = "/"
RESERVED_CHARACTERS = frozenset("?#\\{}")

SegmentComparer = Callable[[str, str], bool]


def case_insensitive(left: str, right: str) -> bool:
    return left.casefold() == right.casefold()


def _check_segment(path: str, segment: str) -> None:
    if not segment:
        raise InvalidPathError(path, "empty path segment")
    for char in segment:
        if char == SEPARATOR or char in RESERVED_CHARACTERS or char.isspace() or not char.isprintable():
            raise InvalidPathError(path, f"reserved character {char!r} in segment {segment!r}")


@dataclass(frozen=True, slots=True, eq=False)
class RpcPath:
    """An immutable, order-sensitive sequence of path segments."""

    segments: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        for segment in self.segments:
            _check_segment(SEPARATOR.join(self.segments), segment)

    @classmethod
    def root(cls) -> "RpcPath":
        return cls(())

    @classmethod
    def parse(cls, text: str | None) -> "RpcPath":
        """Parse a ``/``-separated path string.

        ``None``, ``""`` and ``"/"`` all give the root path. A single
        leading separator and a single trailing separator are ignored;
        any other empty segment raises ``InvalidPathError``.
        """
        if not text:
            return cls.root()
        body = text[1:] if text.startswith(SEPARATOR) else text
        parts = body.split(SEPARATOR)
        if parts and parts[-1] == "":
            parts.pop()
        for part in parts:
            _check_segment(text, part)
        return cls(tuple(parts))

    @property
    def is_root(self) -> bool:
        return not self.segments

    def add(self, other: "RpcPath") -> "RpcPath":
        """Return a new path with ``other``'s segments appended to this one's."""
        return RpcPath(self.segments + other.segments)

    def matches(self, other: "RpcPath", comparer: SegmentComparer = case_insensitive) -> bool:
        if len(self.segments) != len(other.segments):
            return False
        return all(comparer(a, b) for a, b in zip(self.segments, other.segments))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RpcPath):
            return NotImplemented
        return self.matches(other)

    def __hash__(self) -> int:
        return hash(tuple(segment.casefold() for segment in self.segments))

    def __len__(self) -> int:
        return len(self.segments)

    def __iter__(self) -> Iterator[str]:
        return iter(self.segments)

    def __str__(self) -> str:
        return SEPARATOR + SEPARATOR.join(self.segments)

    def __repr__(self) -> str:
        return f"RpcPath({str(self)!r})"
