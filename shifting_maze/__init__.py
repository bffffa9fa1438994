"""Shifting Maze: a grid maze that re-carves itself while you play."""

__version__ = "1.0.0"
