"""
Greedy packer for comments pages.
"""
import asyncio
import logging
from typing import List, Optional, Sequence

from card_paginator.config.settings import Settings, settings as default_settings
from card_paginator.models.dtos import Comment, CommentsPage
from card_paginator.rendering.oracle import MeasurementOracle
from card_paginator.utils.events import LoggingEventSink, PaginationEventSink

logger = logging.getLogger(__name__)


class CommentPagePacker:
    """
    Packs an ordered comment queue into pages.

    Each page grows one comment at a time, re-measuring the whole tentative page,
    until the next comment would break MAX_COMMENTS_PAGE_HEIGHT or the page already
    holds MAX_COMMENTS_PER_PAGE comments. No backtracking: an earlier page is never
    shrunk to improve a later one. A comment that does not fit even on an empty page
    gets a page to itself.
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

    async def measure_page(self, comments: Sequence[Comment], title: str) -> float:
        page = CommentsPage(title=title, comments=tuple(comments))
        try:
            return await self.oracle.measure(
                self.settings.COMMENT_TEMPLATE_NAME,
                page.to_template_data(),
                self.settings.COMMENTS_SECTION_SELECTOR,
            )
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning("Measuring a %d-comment page failed: %s", len(comments), e)
            self.events.emit("measurement_failed", kind="comments_page", comments=len(comments), error=str(e))
            return 0

    async def pack(self, queue: Sequence[Comment], title: str) -> List[CommentsPage]:
        pages: List[CommentsPage] = []
        position = 0
        cap = self.settings.MAX_COMMENTS_PER_PAGE
        limit = self.settings.MAX_COMMENTS_PAGE_HEIGHT

        while position < len(queue):
            committed: List[Comment] = []
            while position + len(committed) < len(queue) and len(committed) < cap:
                tentative = committed + [queue[position + len(committed)]]
                height = await self.measure_page(tentative, title)
                if 0 < height <= limit:
                    committed = tentative
                else:
                    break

            if not committed:
                # Forced progress: the head comment alone overflows the page budget
                committed = [queue[position]]
                self.events.emit("page_overflow", kind="comments_page", page_index=len(pages), limit=limit)

            position += len(committed)
            page = CommentsPage(title=title, comments=tuple(committed))
            pages.append(page)
            self.events.emit("comments_page_emitted", page_index=len(pages) - 1, comments=len(committed))

        return pages
