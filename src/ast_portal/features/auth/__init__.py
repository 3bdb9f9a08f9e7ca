from .service import SessionGate

__all__ = ["SessionGate"]
