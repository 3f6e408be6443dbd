from .resolver import AuthResolver, Resolution, ResolutionStatus, StaleSessionError

__all__ = [
    "AuthResolver",
    "Resolution",
    "ResolutionStatus",
    "StaleSessionError",
]
