from .repository import RunRepository

__all__ = ["RunRepository"]
