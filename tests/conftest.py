"""Pytest fixtures for richtoken tests."""

import os

import pytest
from pathlib import Path

from richtoken.config import reset_settings
from richtoken.core.facade import DocumentFacade
from richtoken.core.tooltip import MemoryOverlayLayer, TooltipEngine, Viewport
from richtoken.formatting.ir import Document, Embed, TextRun
from richtoken.formatting.payloads import PlaceholderPayload
from richtoken.host.memory import MemorySurface


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Give every test default settings, unaffected by the environment."""
    for name in list(os.environ):
        if name.startswith("RICHTOKEN_"):
            monkeypatch.delenv(name, raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def surface() -> MemorySurface:
    """Empty in-memory editing surface."""
    return MemorySurface()


@pytest.fixture
def overlay_layer() -> MemoryOverlayLayer:
    return MemoryOverlayLayer()


@pytest.fixture
def tooltips(overlay_layer: MemoryOverlayLayer) -> TooltipEngine:
    """Tooltip engine over an 800x600 viewport."""
    return TooltipEngine(overlay_layer, Viewport(800, 600))


@pytest.fixture
def facade(surface: MemorySurface) -> DocumentFacade:
    """Facade with both codecs enabled and no tooltip engine."""
    return DocumentFacade(surface)


@pytest.fixture
def sample_storage() -> str:
    """Storage text with a placeholder and a plain phrase."""
    return "<p>Hello {{name}}, welcome back</p>"


@pytest.fixture
def embed_document() -> Document:
    """Document [run "ab", embed, run "cd"] (a=0, b=1, embed=2, c=3, d=4)."""
    return Document(
        [
            TextRun("ab"),
            Embed(kind="placeholder", value=PlaceholderPayload(key="X")),
            TextRun("cd"),
        ]
    )


@pytest.fixture
def tmp_storage_file(tmp_path: Path, sample_storage: str) -> Path:
    """Create a temporary storage file for CLI tests."""
    file_path = tmp_path / "letter.html"
    file_path.write_text(sample_storage, encoding="utf-8")
    return file_path
