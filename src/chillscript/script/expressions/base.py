"""
Expression base class for the chill-script AST.

Every node owns its children (registered through ``add_child``, which also
sets the parent link) and records the tokens that start and end it. The
parent links and spans back the tooling queries: ancestry, node-at-offset
lookups and slicing the source a node covers.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar

if TYPE_CHECKING:
    from chillscript.script.runtime import ChillScriptRuntime
    from chillscript.script.tokenizer import Token

E = TypeVar("E", bound="Expression")


@dataclass(frozen=True)
class SourceSpan:
    """Half-open offset range ``[start, end)`` plus the start's line/column."""

    start: int
    end: int
    line: int
    column: int

    def contains(self, offset: int) -> bool:
        return self.start <= offset < self.end

    def encloses(self, other: SourceSpan) -> bool:
        return self.start <= other.start and other.end <= self.end


class Expression(ABC):
    """Abstract AST node."""

    def __init__(self) -> None:
        self._children: list[Expression] = []
        self.parent: Expression | None = None
        self.start: Token | None = None
        self.end: Token | None = None
        # Nodes on the longest path down to a leaf, this one included
        self.height = 1

    # -- Tree construction --

    def add_child(self, child: E) -> E:
        """Take ownership of ``child`` and return it."""
        if child.parent is not None and child.parent is not self:
            raise ValueError(f"{child.debug_label} already belongs to {child.parent.debug_label}")
        child.parent = self
        self._children.append(child)
        self.height = max(self.height, child.height + 1)
        return child

    def set_start(self, token: Token | None) -> None:
        if token is not None:
            self.start = token

    def set_end(self, token: Token | None) -> None:
        if token is not None:
            self.end = token

    @property
    def children(self) -> tuple[Expression, ...]:
        return tuple(self._children)

    # -- Spans and queries --

    @property
    def span(self) -> SourceSpan | None:
        if self.start is None or self.end is None:
            return None
        return SourceSpan(
            start=self.start.offset,
            end=self.end.end_offset,
            line=self.start.line,
            column=self.start.column,
        )

    def ancestors(self) -> Iterator[Expression]:
        """Yield the parent, grandparent, ... up to the root."""
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    @property
    def root(self) -> Expression:
        node = self
        while node.parent is not None:
            node = node.parent
        return node

    def walk(self) -> Iterator[Expression]:
        """Yield this node and all descendants in pre-order."""
        yield self
        for child in self._children:
            yield from child.walk()

    def node_at(self, offset: int) -> Expression | None:
        """Deepest node in this subtree whose span contains ``offset``."""
        span = self.span
        if span is None or not span.contains(offset):
            return None
        for child in self._children:
            found = child.node_at(offset)
            if found is not None:
                return found
        return self

    def source_text(self, source: str) -> str:
        """The slice of ``source`` this node was parsed from."""
        span = self.span
        if span is None:
            return ""
        return source[span.start : span.end]

    # -- Evaluation and display --

    @abstractmethod
    def evaluate(self, runtime: ChillScriptRuntime) -> Any:
        """Evaluate children first, then apply this node's operation."""

    def detail(self) -> str | None:
        """Operator or literal shown in the debug label, if any."""
        return None

    @property
    def debug_label(self) -> str:
        detail = self.detail()
        name = type(self).__name__
        return f"{name}[{detail}]" if detail is not None else name

    def _payload(self) -> tuple[Any, ...]:
        detail = self.detail()
        return (detail,) if detail is not None else ()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Expression) or type(other) is not type(self):
            return NotImplemented
        return self._payload() == other._payload() and self._children == other._children

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        span = self.span
        where = f" @{span.start}:{span.end}" if span else ""
        return f"<{self.debug_label}{where}>"
