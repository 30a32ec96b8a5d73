"""Contains the grid of tile type labels that is read from and written to text files."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Iterator

import numpy as np

from tilewave import constants
from tilewave.exceptions import MapFormatError
from tilewave.logging_config import get_logger

if TYPE_CHECKING:
    from numpy.typing import NDArray


logger = get_logger(__name__)


class StringMap:
    """A rectangular grid of tile type labels, stored row by row.

    The text format used for import and export has one grid row per line and separates the labels of a row with ';',
    e.g. "W;W;G\\nW;G;G" for a 3x2 grid. Grids with rows of differing lengths or with empty labels are rejected on
    import: the import logs the problem and yields an empty (0x0) grid instead of raising.

    Attributes:
        width: The number of columns of the grid.
        height: The number of rows of the grid.
    """

    width: int
    height: int

    # The row-major list of tile type labels.
    _data: list[str]

    def __init__(self, width: int = 0, height: int = 0, data: Iterable[str] | None = None) -> None:
        """Initializes a grid with the given dimensions.

        Args:
            width: The number of columns of the grid.
            height: The number of rows of the grid.
            data: Optional row-major labels. May be left out and appended later with 'push_back()'/'extend()'.
        """
        self.width = width
        self.height = height
        self._data = list(data) if data is not None else []

    @classmethod
    def empty(cls) -> StringMap:
        """Returns a new 0x0 grid."""
        return cls(0, 0)

    @classmethod
    def from_text(cls, text: str) -> StringMap:
        """Creates a grid from text in the ';'/newline format.

        Args:
            text: The grid text, e.g. "F;F;G\\nF;G;G".

        Returns:
            The parsed grid, or an empty grid if the rows of the text have differing field counts or a field is empty.
        """
        try:
            return cls._parse(text)
        except MapFormatError as e:
            logger.warning(f"Importing StringMap failed: {e}. Emptying StringMap...")
            return cls.empty()

    @classmethod
    def from_file(cls, file_path: Path | str) -> StringMap:
        """Reads a grid from a text file (see 'from_text()' for the format and error behavior)."""
        logger.debug(f"Importing StringMap from {file_path}")
        return cls.from_text(Path(file_path).read_text(encoding="utf-8"))

    @classmethod
    def _parse(cls, text: str) -> StringMap:
        """Parses grid text, raising MapFormatError on inconsistent row lengths or empty fields."""
        string_map = cls.empty()
        lines = text.split(constants.GRID_ROW_DELIMITER)
        # A trailing newline does not start another row.
        if lines and lines[-1] == "":
            lines.pop()
        for row, line in enumerate(lines):
            fields = line.rstrip("\r").split(constants.GRID_FIELD_DELIMITER)
            if row == 0:
                string_map.width = len(fields)
            elif len(fields) != string_map.width:
                raise MapFormatError(
                    f"row {row} has {len(fields)} fields, expected {string_map.width} like the first row"
                )
            if "" in fields:
                raise MapFormatError(f"row {row} has an empty field at column {fields.index('')}")
            string_map.extend(fields)
            string_map.height += 1
        return string_map

    def push_back(self, label: str) -> None:
        """Appends a single label to the end of the data."""
        self._data.append(label)

    def extend(self, labels: Iterable[str]) -> None:
        """Appends several labels to the end of the data."""
        self._data.extend(labels)

    def erase_data(self) -> None:
        """Erases all labels and resets the dimensions to 0x0."""
        self._data.clear()
        self.width = 0
        self.height = 0

    def is_empty(self) -> bool:
        """Returns True if the grid has no cells."""
        return self.width * self.height == 0

    def get_types(self) -> list[str]:
        """Returns all distinct labels in the order of their first occurrence."""
        return list(dict.fromkeys(self._data))

    def to_array(self) -> NDArray[np.object_]:
        """Returns the labels as a (height, width) array."""
        array = np.empty(len(self._data), dtype=object)
        array[:] = self._data
        return array.reshape((self.height, self.width))

    def to_text(self) -> str:
        """Returns the grid in the ';'/newline text format (with a trailing newline)."""
        return "".join(line + constants.GRID_ROW_DELIMITER for line in self._rows(constants.GRID_FIELD_DELIMITER))

    def write_to_file(self, file_path: Path | str) -> None:
        """Writes the grid to a text file in the ';'/newline format."""
        logger.info(f"Writing generated map to {file_path}")
        Path(file_path).write_text(self.to_text(), encoding="utf-8")

    def _rows(self, delimiter: str) -> Iterator[str]:
        """Yields each grid row joined with the given delimiter."""
        for row in range(self.height):
            yield delimiter.join(self._data[row * self.width : (row + 1) * self.width])

    def __getitem__(self, index: int) -> str:
        return self._data[index]

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StringMap):
            return NotImplemented
        return self.width == other.width and self.height == other.height and self._data == other._data

    def __repr__(self) -> str:
        return f"StringMap(width={self.width}, height={self.height})"

    def __str__(self) -> str:
        if self.is_empty():
            return "StringMap of size 0x0 (Empty)"
        rows = "\n".join(self._rows(constants.GRID_PRINT_DELIMITER))
        return f"Map of size {self.width}x{self.height}\n{rows}"
