"""
Core components for the card paginator.
"""

from .text_classifier import CharClass, classify
from .segmenter import Segment, paragraphize, segment_paragraphs, tokenize
from .fitter import AlignedQueue, fit, iter_chunks
from .comment_splitter import CommentSplitter
from .page_packer import CommentPagePacker
from .paginator import Paginator, pagination_stats, template_for

__all__ = [
    "CharClass",
    "classify",
    "Segment",
    "paragraphize",
    "segment_paragraphs",
    "tokenize",
    "AlignedQueue",
    "fit",
    "iter_chunks",
    "CommentSplitter",
    "CommentPagePacker",
    "Paginator",
    "pagination_stats",
    "template_for",
]
