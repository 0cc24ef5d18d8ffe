"""
Block discovery

- StreetGraph: noded street network
- BlockFinder: finds blocks and runs the shrink / divide passes
"""

from .graph import StreetGraph, Node
from .finder import BlockFinder

__all__ = [
    "StreetGraph",
    "Node",
    "BlockFinder",
]
