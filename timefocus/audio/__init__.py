"""Audio package."""

from .bell import BellPlayer, generate_bell

__all__ = ["BellPlayer", "generate_bell"]
