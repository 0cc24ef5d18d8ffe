from .carver import LotCarver

__all__ = ["LotCarver"]
