"""Runtime state owned by the caller (profile cache)."""

from .profile_cache import ProfileCache

__all__ = ["ProfileCache"]
