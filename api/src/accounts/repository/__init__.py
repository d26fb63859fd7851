from .user_repository import UserRepository, user_repository

__all__ = ["UserRepository", "user_repository"]
