"""
Pagination orchestrator for the card paginator.

Turns a post into an ordered list of pages: main content first, then packed
comments, or a single default page when there is nothing to show.
"""
import asyncio
import logging
import time
from collections import Counter
from typing import Dict, List, Optional, Tuple, Union

from card_paginator.config.settings import Settings, settings as default_settings
from card_paginator.core.comment_splitter import PARAGRAPH_SEPARATOR, CommentSplitter
from card_paginator.core.fitter import AlignedQueue, iter_chunks
from card_paginator.core.page_packer import CommentPagePacker
from card_paginator.core.segmenter import paragraphize
from card_paginator.models.dtos import Comment, CommentsPage, MainPage, PageType, Post
from card_paginator.rendering.oracle import MeasurementOracle
from card_paginator.utils.events import LoggingEventSink, PaginationEventSink

logger = logging.getLogger(__name__)

AnyPage = Union[MainPage, CommentsPage]


class Paginator:
    """
    Orchestrates main-content and comment pagination for one post at a time.

    The paginator keeps no per-post state, so one instance may serve several
    concurrent ``paginate`` calls as long as the oracle tolerates that.
    """
    def __init__(
        self,
        oracle: MeasurementOracle,
        settings: Settings = default_settings,
        events: Optional[PaginationEventSink] = None,
    ):
        self.oracle = oracle
        self.settings = settings
        self.events = events or LoggingEventSink()
        self.splitter = CommentSplitter(oracle, settings=settings, events=self.events)
        self.packer = CommentPagePacker(oracle, settings=settings, events=self.events)

    def _paragraphs(self, text: str) -> List[str]:
        return paragraphize(
            text,
            long_text_threshold=self.settings.LONG_TEXT_THRESHOLD,
            long_paragraph_threshold=self.settings.LONG_PARAGRAPH_THRESHOLD,
            sentence_pack_limit=self.settings.SENTENCE_PACK_LIMIT,
        )

    def _main_page(self, post: Post, page_type: PageType, content: Optional[str] = None,
                   content_zh: Optional[str] = None) -> MainPage:
        return MainPage(
            type=page_type.value,
            title=post.title,
            title_zh=post.display_title_zh,
            ups=post.ups,
            subreddit=post.subreddit,
            content=content,
            content_zh=content_zh,
        )

    async def paginate_main_content(self, post: Post) -> List[MainPage]:
        """
        Split the post body into main pages.

        Returns an empty list when both body tracks are empty.
        """
        queue = AlignedQueue.of(self._paragraphs(post.selftext), self._paragraphs(post.selftext_zh))
        if queue.is_empty:
            return []

        async def render_chunk(chunk_en: Tuple[str, ...], chunk_zh: Tuple[str, ...]) -> float:
            page = self._main_page(post, PageType.MAIN, PARAGRAPH_SEPARATOR.join(chunk_en),
                                   PARAGRAPH_SEPARATOR.join(chunk_zh))
            return await self.oracle.measure(
                self.settings.MAIN_TEMPLATE_NAME,
                page.to_template_data(),
                self.settings.MAIN_CONTENT_SELECTOR,
            )

        pages: List[MainPage] = []
        async for chunk_en, chunk_zh, fits in iter_chunks(
            queue, self.settings.MAX_MAIN_CONTENT_HEIGHT, render_chunk, self.events
        ):
            page_type = PageType.MAIN if not pages else PageType.MAIN_CONTINUED
            page = self._main_page(post, page_type, PARAGRAPH_SEPARATOR.join(chunk_en),
                                   PARAGRAPH_SEPARATOR.join(chunk_zh))
            if not fits:
                self.events.emit("page_overflow", kind="main", post_id=post.id, page_index=len(pages),
                                 limit=self.settings.MAX_MAIN_CONTENT_HEIGHT)
            pages.append(page)
            self.events.emit("main_page_emitted", post_id=post.id, page_type=page_type.value,
                             paragraphs=max(len(chunk_en), len(chunk_zh)))
        return pages

    def select_comments(self, post: Post) -> List[Comment]:
        """Non-blank comments, highest score first, capped at MAX_COMMENTS_CONSIDERED."""
        with_body = [comment for comment in post.comment_list if comment.has_body]
        ranked = sorted(with_body, key=lambda comment: comment.ups, reverse=True)
        return ranked[: self.settings.MAX_COMMENTS_CONSIDERED]

    async def build_comment_queue(self, post: Post, comments: List[Comment]) -> List[Comment]:
        """
        Replace every comment taller than MAX_SINGLE_COMMENT_HEIGHT by its chunks.

        A comment whose measurement or split fails is kept whole.
        """
        queue: List[Comment] = []
        for index, comment in enumerate(comments):
            try:
                height = await self.splitter.measure(comment)
                if height > self.settings.MAX_SINGLE_COMMENT_HEIGHT:
                    logger.debug("Comment %d of post %s is %.1fpx tall, splitting", index, post.id, height)
                    queue.extend(await self.splitter.split(comment))
                else:
                    queue.append(comment)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.warning(f"Post {post.id}: processing comment {index} by {comment.author!r} failed ({e}). Keeping it unsplit.")
                self.events.emit("comment_fallback", post_id=post.id, comment_index=index, error=str(e))
                queue.append(comment)
        return queue

    async def paginate_comments(self, post: Post) -> List[CommentsPage]:
        comments = self.select_comments(post)
        if not comments:
            return []
        queue = await self.build_comment_queue(post, comments)
        return await self.packer.pack(queue, title=post.comments_page_title)

    async def paginate(self, post: Post) -> List[AnyPage]:
        """
        Paginate one post.

        Args:
            post: The post to paginate.

        Returns:
            Pages in reading order: main, main_continued..., comments...; or a single
            content-less main page when the post has neither body nor comments.
        """
        started = time.perf_counter()
        logger.info(f"Paginating post {post.id} ({len(post.comment_list)} comments)")

        pages: List[AnyPage] = []
        pages.extend(await self.paginate_main_content(post))
        pages.extend(await self.paginate_comments(post))

        if not pages:
            pages.append(self._main_page(post, PageType.MAIN))
            self.events.emit("default_page_emitted", post_id=post.id)

        duration_ms = (time.perf_counter() - started) * 1000
        self.events.emit("pagination_completed", post_id=post.id, pages=len(pages), duration_ms=round(duration_ms, 1))
        logger.info(f"Post {post.id}: {len(pages)} pages in {duration_ms:.0f}ms")
        return pages


def template_for(page: AnyPage, settings: Settings = default_settings) -> str:
    """Template used to render ``page``."""
    if page.type == PageType.COMMENTS:
        return settings.COMMENT_TEMPLATE_NAME
    return settings.MAIN_TEMPLATE_NAME


def pagination_stats(pages: List[AnyPage]) -> Dict[str, object]:
    """Page count and per-type distribution of a pagination result."""
    distribution = Counter(page.type for page in pages)
    return {
        "total_pages": len(pages),
        "page_types": {page_type.value: distribution.get(page_type.value, 0) for page_type in PageType},
        "comments_shown": sum(len(page.comments) for page in pages if isinstance(page, CommentsPage)),
    }
