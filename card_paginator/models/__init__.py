"""
Models package for the card paginator.

This package contains the Pydantic DTOs for posts, comments and pages.
"""

from .dtos import (
    Comment,
    CommentsPage,
    MainPage,
    Page,
    PageType,
    Post,
)

__all__ = [
    "Comment",
    "CommentsPage",
    "MainPage",
    "Page",
    "PageType",
    "Post",
]
