from .engine import evaluate
from .types import PlacementRequest, PlacementResult

__all__ = ["evaluate", "PlacementRequest", "PlacementResult"]
