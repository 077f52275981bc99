from .datetime import utcnow, isoformat

__all__ = ["utcnow", "isoformat"]
