from . import delivery

__all__ = ["delivery"]
