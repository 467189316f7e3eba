"""Abstract base class for token codecs."""

from abc import ABC, abstractmethod
from typing import Optional

from richtoken.formatting.payloads import HighlightRequest


class TokenCodec(ABC):
    """Abstract base class for token codecs.

    Each codec converts its own storage token form into the canonical
    editor markup the host understands, and converts that markup back into
    the storage form. Neither direction raises on malformed input; anything
    the codec does not recognise passes through unchanged.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Registered name of the embed or attribute this codec handles."""
        ...

    @abstractmethod
    def to_editor_markup(
        self,
        markup: str,
        requests: Optional[list[HighlightRequest]] = None,
    ) -> str:
        """Convert storage markup into editor markup.

        Args:
            markup: Storage text
            requests: Optional highlight requests (ignored by codecs that
                do not use them)

        Returns:
            Markup with this codec's tokens in canonical form
        """
        ...

    @abstractmethod
    def to_storage(self, markup: str) -> str:
        """Convert editor markup back into storage markup.

        Args:
            markup: Markup extracted from the editing surface

        Returns:
            Markup with this codec's canonical fragments in token form
        """
        ...
