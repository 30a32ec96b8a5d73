"""Sample-driven tile map generation with the Wave Function Collapse algorithm."""

__version__ = "0.1.0"
