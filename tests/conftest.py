"""Shared pytest fixtures for tilewave tests."""

import pytest
from PIL import Image

from tilewave.model.sample_model import SampleModel
from tilewave.model.string_map import StringMap
from tilewave.model.wfc import WFC


# =============================================================================
# Sample Grids
# =============================================================================

ISLAND_SAMPLE_TEXT = (
    "W;W;W;W;W;W\n"
    "W;W;S;S;W;W\n"
    "W;S;G;G;S;W\n"
    "W;S;G;G;S;W\n"
    "W;W;S;S;W;W\n"
    "W;W;W;W;W;W\n"
)


@pytest.fixture
def small_sample() -> StringMap:
    """The 2x2 sample A;A / A;B."""
    return StringMap.from_text("A;A\nA;B")


@pytest.fixture
def island_sample() -> StringMap:
    """A 6x6 sample of a sand-rimmed grass island in water."""
    return StringMap.from_text(ISLAND_SAMPLE_TEXT)


@pytest.fixture
def small_model(small_sample: StringMap) -> SampleModel:
    return SampleModel(small_sample)


@pytest.fixture
def island_model(island_sample: StringMap) -> SampleModel:
    return SampleModel(island_sample)


@pytest.fixture
def small_wfc(small_model: SampleModel) -> WFC:
    return WFC(small_model)


@pytest.fixture
def island_wfc(island_model: SampleModel) -> WFC:
    return WFC(island_model)


# =============================================================================
# Files
# =============================================================================

@pytest.fixture
def island_sample_file(tmp_path):
    """The island sample written to a text file."""
    path = tmp_path / "island.txt"
    path.write_text(ISLAND_SAMPLE_TEXT, encoding="utf-8")
    return path


TILESET_COLORS = [(255, 0, 0), (0, 0, 255), (0, 255, 0)]


@pytest.fixture
def tileset_file(tmp_path):
    """A 12x4 tileset image holding three 4x4 tiles: red, blue, green."""
    img = Image.new("RGB", (12, 4))
    for i, color in enumerate(TILESET_COLORS):
        img.paste(Image.new("RGB", (4, 4), color), (i * 4, 0, (i + 1) * 4, 4))
    path = tmp_path / "tileset.png"
    img.save(path)
    return path
