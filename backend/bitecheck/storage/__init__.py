from .product_store import ProductStore

__all__ = ["ProductStore"]
