"""
Pydantic Data Transfer Objects (DTOs) for the card paginator.

Posts and comments arrive as caller-supplied records (typically scraped Reddit data
with machine-translated ``*_zh`` fields). Pages are the paginator's output and are
frozen once built.
"""

from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, Field, field_validator


class PageType(str, Enum):
    MAIN = "main"
    MAIN_CONTINUED = "main_continued"
    COMMENTS = "comments"


class Comment(BaseModel):
    """
    A single comment, or one continuation chunk of a comment.

    ``body`` is the default-script track and ``body_zh`` the translated track. The
    two are independent strings. ``is_continuation`` is only ever set by the comment
    splitter, on every chunk after the first.
    """
    author: str
    body: str = ""
    body_zh: str = ""
    ups: int
    parent_id: Optional[str] = None
    icon_img: Optional[str] = None  # avatar reference
    is_continuation: bool = Field(False, alias="isContinuation")

    model_config = {"frozen": True, "populate_by_name": True}

    @field_validator("author", mode="before")
    @classmethod
    def strip_author(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("body", "body_zh", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @property
    def has_body(self) -> bool:
        return bool(self.body.strip())


class Post(BaseModel):
    """
    A post with a bilingual title/body and its comments.

    ``selftext`` and ``selftext_zh`` are not guaranteed to have the same number of
    paragraphs; pagination pairs them positionally anyway.
    """
    id: str
    title: str
    title_zh: Optional[str] = None
    title_polish_zh: Optional[str] = None
    selftext: str = ""
    selftext_zh: str = ""
    subreddit: str
    ups: int
    created: Optional[float] = None  # Unix timestamp
    name: Optional[str] = None
    summary_zh: Optional[str] = None
    comment_list: List[Comment] = Field(default_factory=list, alias="commentList")

    model_config = {"frozen": True, "populate_by_name": True}

    @field_validator("selftext", "selftext_zh", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("comment_list", mode="before")
    @classmethod
    def none_to_list(cls, v: Any) -> Any:
        return [] if v is None else v

    @property
    def display_title_zh(self) -> Optional[str]:
        """Translated title for main pages, falling back to the polished title."""
        return self.title_zh or self.title_polish_zh or None

    @property
    def comments_page_title(self) -> str:
        return self.title_zh or self.title


class MainPage(BaseModel):
    """A main or continued-main page. ``content``/``content_zh`` are None on the default page."""
    type: Literal["main", "main_continued"] = "main"
    title: str
    title_zh: Optional[str] = None
    ups: int
    subreddit: str
    content: Optional[str] = None
    content_zh: Optional[str] = None

    model_config = {"frozen": True}

    @property
    def has_content(self) -> bool:
        return self.content is not None or self.content_zh is not None

    def to_template_data(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=False)


class CommentsPage(BaseModel):
    type: Literal["comments"] = "comments"
    title: str
    comments: Tuple[Comment, ...] = ()

    model_config = {"frozen": True}

    def to_template_data(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=False)


Page = Annotated[Union[MainPage, CommentsPage], Field(discriminator="type")]
