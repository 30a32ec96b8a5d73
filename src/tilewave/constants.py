"""Contains global constants and default values used throughout the project."""

import math

# === MODEL CONSTANTS ===

# Number of output cells per randomly pre-collapsed seed cell (floor(width * height / divisor) cells get seeded).
SEEDING_CELL_RATIO_DIVISOR: int = 90

# Queue key of a cell that has not received any propagation update yet. Sorts after every real entropy value.
UNINITIALIZED_ENTROPY: float = math.inf

RANDOM_SEED_MAX: int = 999999999

# === GRID TEXT FORMAT ===

GRID_FIELD_DELIMITER: str = ";"
GRID_ROW_DELIMITER: str = "\n"
# Separator used between fields when pretty-printing a grid.
GRID_PRINT_DELIMITER: str = "-"

# === RENDERING CONSTANTS ===

TILE_SIZE_DEFAULT: int = 16
TILE_SIZE_MAX_LIMIT: int = 256

# === LOGGING CONSTANTS ===

LOGGER_ROOT_NAME: str = "tilewave"
LOG_FILE_MAX_SIZE: int = 10 * 1024 * 1024
LOG_FILE_BACKUP_COUNT: int = 5
