from .app import Server
from .lifespan import Lifespan

__all__ = ["Server", "Lifespan"]
