"""Grid Pathfinding Visualizer - weighted A* search you can watch step by step.

This package implements an incremental A* search over a 4-connected grid of
weighted cells, a Qt controller that paces the search for animation, and a
store for named grid layouts.
"""

__version__ = "1.0.0"
