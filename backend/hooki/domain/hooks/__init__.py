from .service import HookService

__all__ = ["HookService"]
