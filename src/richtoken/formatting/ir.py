"""Intermediate Representation for editable documents.

This module defines the document representation handed to and read back
from a rich-text editing surface. A document is an ordered sequence of
operations: text runs, which contribute one offset per character, and
embeds, which contribute exactly one offset regardless of their content.
"""

from dataclasses import dataclass, field
from typing import Any, Iterator, Optional, Union

from pydantic import BaseModel


@dataclass
class TextRun:
    """A contiguous run of text with consistent attributes.

    Attributes:
        text: The text content
        attributes: Inline formatting (attribute name -> value)
    """

    text: str
    attributes: dict[str, Any] = field(default_factory=dict)

    @property
    def length(self) -> int:
        return len(self.text)

    def copy(self) -> "TextRun":
        return TextRun(text=self.text, attributes=dict(self.attributes))

    def __str__(self) -> str:
        return self.text


@dataclass
class Embed:
    """An opaque embedded object occupying a single document offset.

    Attributes:
        kind: Registered embed type name (e.g. "placeholder")
        value: Tagged payload describing the embed
        attributes: Inline formatting applied around the embed
    """

    kind: str
    value: BaseModel
    attributes: dict[str, Any] = field(default_factory=dict)

    @property
    def length(self) -> int:
        return 1

    def copy(self) -> "Embed":
        return Embed(kind=self.kind, value=self.value, attributes=dict(self.attributes))


Op = Union[TextRun, Embed]


@dataclass(frozen=True)
class LocatedRange:
    """A (start, length) pair in document-offset space."""

    start: int
    length: int

    def __post_init__(self) -> None:
        if self.start < 0:
            raise ValueError(f"Range start must be >= 0, got {self.start}")
        if self.length <= 0:
            raise ValueError(f"Range length must be > 0, got {self.length}")

    @property
    def end(self) -> int:
        """Exclusive end offset."""
        return self.start + self.length


@dataclass
class Document:
    """Complete document representation.

    Attributes:
        ops: Text runs and embeds in document order
    """

    ops: list[Op] = field(default_factory=list)

    @property
    def length(self) -> int:
        """Total number of offsets in the document."""
        return sum(op.length for op in self.ops)

    @property
    def plain_text(self) -> str:
        """Concatenated run text; embeds contribute nothing."""
        return "".join(op.text for op in self.ops if isinstance(op, TextRun))

    @property
    def embeds(self) -> list[Embed]:
        return [op for op in self.ops if isinstance(op, Embed)]

    def iter_offsets(self) -> Iterator[tuple[int, Op]]:
        """Yield (start offset, op) for every op in order."""
        offset = 0
        for op in self.ops:
            yield offset, op
            offset += op.length

    def append(self, op: Op) -> None:
        """Append an op, merging text into the previous run when possible."""
        if isinstance(op, TextRun):
            self.append_text(op.text, op.attributes)
            return
        self.ops.append(op)

    def append_text(self, text: str, attributes: Optional[dict[str, Any]] = None) -> None:
        """Append text, extending the last run when its attributes match."""
        if not text:
            return
        attrs = dict(attributes or {})
        if self.ops:
            last = self.ops[-1]
            if isinstance(last, TextRun) and last.attributes == attrs:
                last.text += text
                return
        self.ops.append(TextRun(text=text, attributes=attrs))

    def concat(self, other: "Document") -> "Document":
        """Return a new document with ``other`` appended to this one."""
        result = self.copy()
        for op in other.ops:
            result.append(op.copy())
        return result

    def compact(self) -> "Document":
        """Merge adjacent runs with equal attributes and drop empty runs."""
        compacted = Document()
        for op in self.ops:
            compacted.append(op.copy())
        self.ops = compacted.ops
        return self

    def copy(self) -> "Document":
        return Document(ops=[op.copy() for op in self.ops])

    def ends_with_newline(self) -> bool:
        if not self.ops:
            return False
        last = self.ops[-1]
        return isinstance(last, TextRun) and last.text.endswith("\n")

    def __str__(self) -> str:
        return self.plain_text
