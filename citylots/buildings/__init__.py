from .projector import BuildingProjector

__all__ = ["BuildingProjector"]
