"""
Splits a comment too tall for one page into continuation chunks.
"""
import logging
from typing import List, Optional, Tuple

from card_paginator.config.settings import Settings, settings as default_settings
from card_paginator.core.fitter import AlignedQueue, iter_chunks
from card_paginator.core.segmenter import paragraphize
from card_paginator.models.dtos import Comment
from card_paginator.rendering.oracle import MeasurementOracle
from card_paginator.utils.events import LoggingEventSink, PaginationEventSink

logger = logging.getLogger(__name__)

PARAGRAPH_SEPARATOR = "\n"


class CommentSplitter:
    """
    Carves one comment into chunks that each fit MAX_SINGLE_COMMENT_HEIGHT.

    Both body tracks are paragraphized independently and cut at the same paragraph
    count. The first chunk is the comment itself, the rest are continuations. A
    single paragraph taller than the budget still becomes its own (oversized) chunk.
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

    def _paragraphs(self, text: str) -> List[str]:
        return paragraphize(
            text,
            long_text_threshold=self.settings.LONG_TEXT_THRESHOLD,
            long_paragraph_threshold=self.settings.LONG_PARAGRAPH_THRESHOLD,
            sentence_pack_limit=self.settings.SENTENCE_PACK_LIMIT,
        )

    async def measure(self, comment: Comment) -> float:
        """Height of ``comment`` rendered alone on a comments page."""
        return await self.oracle.measure(
            self.settings.COMMENT_TEMPLATE_NAME,
            {"comments": [comment.model_dump()]},
            self.settings.COMMENTS_SECTION_SELECTOR,
        )

    async def split(self, comment: Comment) -> List[Comment]:
        queue = AlignedQueue.of(self._paragraphs(comment.body), self._paragraphs(comment.body_zh))

        async def render_chunk(chunk_en: Tuple[str, ...], chunk_zh: Tuple[str, ...]) -> float:
            return await self.measure(self._chunk(comment, chunk_en, chunk_zh, is_continuation=False))

        chunks: List[Comment] = []
        async for chunk_en, chunk_zh, fits in iter_chunks(
            queue, self.settings.MAX_SINGLE_COMMENT_HEIGHT, render_chunk, self.events
        ):
            chunk = self._chunk(comment, chunk_en, chunk_zh, is_continuation=bool(chunks))
            if not fits:
                self.events.emit(
                    "page_overflow",
                    kind="comment_chunk",
                    author=comment.author,
                    chunk_index=len(chunks),
                    limit=self.settings.MAX_SINGLE_COMMENT_HEIGHT,
                )
            chunks.append(chunk)

        self.events.emit("comment_split", author=comment.author, chunks=len(chunks))
        return chunks

    @staticmethod
    def _chunk(comment: Comment, chunk_en: Tuple[str, ...], chunk_zh: Tuple[str, ...], is_continuation: bool) -> Comment:
        return comment.model_copy(
            update={
                "body": PARAGRAPH_SEPARATOR.join(chunk_en),
                "body_zh": PARAGRAPH_SEPARATOR.join(chunk_zh),
                "is_continuation": is_continuation,
            }
        )
