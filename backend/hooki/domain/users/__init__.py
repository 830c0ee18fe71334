from .service import UserService

__all__ = ["UserService"]
