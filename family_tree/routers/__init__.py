from family_tree.routers import family, health

__all__ = [
    "health",
    "family",
]
