"""
Spatial data structures for gravity calculations.

Provides the quadtree used for Barnes-Hut O(n log n) force approximation.
"""

from .quadtree import QuadTree, QuadTreeNode

__all__ = ["QuadTree", "QuadTreeNode"]
