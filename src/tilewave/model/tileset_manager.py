"""Manages the visual representation of generated tile maps."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Mapping

from PIL import Image

from tilewave.logging_config import get_logger

if TYPE_CHECKING:
    from tilewave.model.string_map import StringMap


logger = get_logger(__name__)


class TilesetManager:
    """Renders grids of tile type labels with the tiles of a tileset image.

    The tileset image is split into tiles of equal size, indexed row by row. A mapping from tile type labels to tile
    indices decides which tile is drawn for which label; labels without a tile are drawn as black tiles.
    """

    # The dimensions (width, height) of a single tile in pixels.
    _tile_size: tuple[int, int]
    # A completely black tile image used for labels without a mapped tile.
    _unmapped_tile: Image.Image
    # A dictionary mapping tile indices to their corresponding PIL Image objects.
    _tiles: dict[int, Image.Image]
    # Maps tile type labels to tile indices.
    _tile_indices: dict[str, int]
    # The source image containing all individual tiles arranged in a grid.
    _tileset_img: Image.Image

    def __init__(
        self, tileset_img_path: Path | str, tile_size: tuple[int, int], tile_indices: Mapping[str, int]
    ) -> None:
        """Loads the tileset image and extracts the individual tile images.

        Args:
            tileset_img_path: The file path to the source tileset image.
            tile_size: The dimensions (width, height) of a single tile in pixels.
            tile_indices: Maps tile type labels to the index of the tile they are drawn with.

        Raises:
            ValueError: If a label is mapped to a tile index the tileset does not contain.
        """
        self._tile_size = tile_size
        self._unmapped_tile = Image.new("RGB", self._tile_size)
        self._tiles = {}

        with Image.open(tileset_img_path) as img:
            self._tileset_img = img.convert("RGB")

        rows = self._tileset_img.size[1] // self._tile_size[1]
        cols = self._tileset_img.size[0] // self._tile_size[0]
        for row in range(rows):
            for col in range(cols):
                box = (
                    col * self._tile_size[0],
                    row * self._tile_size[1],
                    (col + 1) * self._tile_size[0],
                    (row + 1) * self._tile_size[1],
                )
                self._tiles[row * cols + col] = self._tileset_img.crop(box)

        invalid_labels = [label for label, tile_index in tile_indices.items() if tile_index not in self._tiles]
        if invalid_labels:
            raise ValueError(
                f"Tileset {tileset_img_path} has {len(self._tiles)} tiles, no tile for labels: "
                f"{', '.join(invalid_labels)}"
            )
        self._tile_indices = dict(tile_indices)
        logger.debug(f"Loaded {len(self._tiles)} tiles of size {tile_size} from {tileset_img_path}")

    @property
    def tile_count(self) -> int:
        return len(self._tiles)

    def get_tile_img(self, label: str) -> Image.Image:
        """Returns the tile image a label is drawn with (the black tile for unmapped labels)."""
        tile_index = self._tile_indices.get(label)
        if tile_index is None:
            return self._unmapped_tile
        return self._tiles[tile_index]

    def get_tilemap_img(self, string_map: StringMap) -> Image.Image:
        """Renders a grid of labels into a complete PIL Image object.

        Args:
            string_map: The grid to render.

        Returns:
            A PIL Image of (width * tile width, height * tile height) pixels.
        """
        img_size = (string_map.width * self._tile_size[0], string_map.height * self._tile_size[1])
        tilemap_img = Image.new("RGB", img_size)
        unmapped_labels = set()
        for index, label in enumerate(string_map):
            row, col = divmod(index, string_map.width)
            box = (
                col * self._tile_size[0],
                row * self._tile_size[1],
                (col + 1) * self._tile_size[0],
                (row + 1) * self._tile_size[1],
            )
            if label not in self._tile_indices:
                unmapped_labels.add(label)
            tilemap_img.paste(self.get_tile_img(label), box)

        if unmapped_labels:
            logger.warning(f"No tile mapped for labels {sorted(unmapped_labels)}, drawn as black tiles")
        return tilemap_img

    def save_tilemap_img(self, tilemap_img: Image.Image, file_path: Path | str) -> None:
        """Saves a rendered tilemap image to the specified file path.

        Args:
            tilemap_img: The PIL Image object to be saved.
            file_path: The destination path (including filename and extension).
        """
        logger.info(f"Writing tilemap image to {file_path}")
        tilemap_img.save(file_path)
