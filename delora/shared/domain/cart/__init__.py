from .service import CartLine, CartStore

__all__ = ["CartLine", "CartStore"]
