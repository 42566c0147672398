from .places import PlacesRepository
from .users import UsersRepository
from .wishlist import WishlistRepository
from . import models

__all__ = ["PlacesRepository", "UsersRepository", "WishlistRepository", "models"]
