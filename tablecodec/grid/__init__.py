from .accessor import GridAccessor
from .oriented import OrientedGrid, transpose

__all__ = ["GridAccessor", "OrientedGrid", "transpose"]
