"""Abstract contract of the host editing surface.

The core never owns an editor. It drives any surface that implements
``EditingSurface`` and lets the surface know about its embed types and
inline attributes through ``EmbedFormat`` and ``InlineFormat`` hooks.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from pydantic import BaseModel

from richtoken.formatting.ir import Document


class SurfaceError(Exception):
    """Invalid use of an editing surface (e.g. offset out of bounds)."""

    pass


class EmbedFormat(ABC):
    """Registration hooks for an embed type."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Embed type name used in the document representation."""
        ...

    @abstractmethod
    def matches(self, tag: str, attrs: dict[str, str]) -> bool:
        """Whether an element in markup is this embed."""
        ...

    @abstractmethod
    def value_from(self, tag: str, attrs: dict[str, str], text: str) -> BaseModel:
        """Build the embed payload from a matched element."""
        ...

    @abstractmethod
    def render(self, value: BaseModel) -> str:
        """Render the embed payload as canonical markup."""
        ...


class InlineFormat(ABC):
    """Registration hooks for an inline attribute.

    ``update`` and ``detach`` are the constructor/destructor hooks the
    surface calls when an existing attribute value is reformatted or
    removed.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Attribute name used in op attribute maps."""
        ...

    @abstractmethod
    def matches(self, tag: str, attrs: dict[str, str]) -> bool:
        ...

    @abstractmethod
    def value_from(self, tag: str, attrs: dict[str, str]) -> Any:
        ...

    @abstractmethod
    def render_open(self, value: Any) -> str:
        ...

    def render_close(self, value: Any) -> str:
        return "</span>"

    def update(self, old: Any, new: Any) -> Any:
        """Merge a new value onto an existing one. Default: replace."""
        return new

    def detach(self, old: Any) -> None:
        """Called after the attribute is removed from a span of text."""
        return None


class EditingSurface(ABC):
    """The capabilities the facade requires from a host editing surface."""

    @abstractmethod
    def markup_to_document(self, markup: str) -> Document:
        ...

    @abstractmethod
    def document_to_markup(self, document: Document) -> str:
        ...

    @abstractmethod
    def get_document(self) -> Document:
        ...

    @abstractmethod
    def set_document(self, document: Document) -> None:
        ...

    @abstractmethod
    def insert_embed(self, offset: int, kind: str, value: BaseModel) -> None:
        ...

    @abstractmethod
    def format_range(self, offset: int, length: int, attribute: str, value: Any) -> None:
        """Set, update or (for a falsy value) remove an inline attribute."""
        ...

    @abstractmethod
    def get_selection_offset(self) -> Optional[int]:
        ...

    @abstractmethod
    def set_selection_offset(self, offset: int) -> None:
        ...

    @abstractmethod
    def get_document_length(self) -> int:
        ...

    @abstractmethod
    def register_embed(self, fmt: EmbedFormat) -> None:
        ...

    @abstractmethod
    def register_inline(self, fmt: InlineFormat) -> None:
        ...
