"""
Services package
"""
from .user_service import UserService
from .case_service import CaseService
from .review_repository import ReviewRepository
from .review_service import ReviewService
from .progress_service import ProgressService

__all__ = [
    "UserService",
    "CaseService",
    "ReviewRepository",
    "ReviewService",
    "ProgressService",
]
