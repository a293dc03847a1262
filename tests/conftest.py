# ABOUTME: Shared pytest fixtures for Tabby tests.
# ABOUTME: Provides sample image files and a fake HTTP client.

from pathlib import Path

import pytest

from tests.fixtures.fake_http import FakeHttpClient


@pytest.fixture
def fixtures_dir() -> Path:
    """Path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def cover_image(tmp_path: Path) -> Path:
    """A small fake JPEG standing in for a photo of a book cover."""
    filepath = tmp_path / "cover.jpg"
    filepath.write_bytes(b"\xff\xd8\xff\xe0fake-cover-jpeg\xff\xd9")
    return filepath


@pytest.fixture
def shelf_image(tmp_path: Path) -> Path:
    """A small fake JPEG standing in for a photo of a bookshelf."""
    filepath = tmp_path / "shelf.jpg"
    filepath.write_bytes(b"\xff\xd8\xff\xe0fake-shelf-jpeg\xff\xd9")
    return filepath


@pytest.fixture
def empty_image(tmp_path: Path) -> Path:
    filepath = tmp_path / "empty.jpg"
    filepath.write_bytes(b"")
    return filepath


@pytest.fixture
def fake_http() -> FakeHttpClient:
    return FakeHttpClient()
