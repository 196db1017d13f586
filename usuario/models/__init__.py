from .usuario_models import User

__all__ = [
    "User",
]
