"""Token codecs for richtoken."""

from richtoken.codecs.base import TokenCodec
from richtoken.codecs.placeholder import PlaceholderCodec
from richtoken.codecs.highlight import HighlightCodec

__all__ = [
    "TokenCodec",
    "PlaceholderCodec",
    "HighlightCodec",
    "CODEC_MAP",
    "SUPPORTED_CODECS",
    "UnknownCodecError",
    "get_codec",
]


class UnknownCodecError(ValueError):
    """No codec is registered under the requested name."""

    pass


# Map registered names to codecs
CODEC_MAP: dict[str, type[TokenCodec]] = {
    "placeholder": PlaceholderCodec,
    "highlight": HighlightCodec,
}

SUPPORTED_CODECS = tuple(CODEC_MAP.keys())


def get_codec(name: str) -> type[TokenCodec]:
    """Get the codec class registered under a name."""
    key = name.lower()
    if key not in CODEC_MAP:
        raise UnknownCodecError(
            f"Unknown codec: {name}. "
            f"Supported codecs: {', '.join(SUPPORTED_CODECS)}"
        )
    return CODEC_MAP[key]
