"""
Segmenter for bilingual (CJK / Latin) text.

Two granularities are produced here:

* segments: atomic layout units for line wrapping. Latin words are kept whole,
  every CJK ideograph is its own unit.
* paragraphs: page-level units for the height fitter. Long texts with very few
  paragraphs are re-chunked on sentence boundaries so the fitter has enough units to
  split on.
"""
import logging
import re
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

from card_paginator.config.settings import settings
from card_paginator.core.text_classifier import CharClass, classify

logger = logging.getLogger(__name__)

SENTENCE_TERMINALS = ".!?。！？"
# Split after a run of terminals, never inside one ("Really?!" stays together)
_SENTENCE_BOUNDARY = re.compile(rf"(?<=[{re.escape(SENTENCE_TERMINALS)}])(?![{re.escape(SENTENCE_TERMINALS)}])")

ELLIPSIS = "..."


@dataclass(frozen=True)
class Segment:
    """An indivisible unit of text for line layout."""
    text: str
    script: CharClass
    paragraph_index: int = 0


def _script_of(run: str) -> CharClass:
    classes = [classify(ch) for ch in run]
    for candidate in (CharClass.WIDE, CharClass.NARROW):
        if candidate in classes:
            return candidate
    for cls in classes:
        if cls is not CharClass.SPACE:
            return cls
    return CharClass.SPACE


def tokenize(text: str, paragraph_index: int = 0) -> List[Segment]:
    """
    Split text into layout segments.

    A Latin run absorbs following spaces and further Latin letters, so "hello world"
    is one segment. Entering or leaving CJK closes the current run, and each CJK
    ideograph is a segment of its own. Punctuation and other characters attach to
    the open run. Whitespace-only segments are dropped.

    Args:
        text (str): The text to split.
        paragraph_index (int): Index stored on every produced segment.

    Returns:
        List[Segment]: Segments in reading order.
    """
    runs: List[str] = []
    current = ""
    last: Optional[CharClass] = None

    def flush() -> None:
        if current.strip():
            runs.append(current)

    for char in text or "":
        cls = classify(char)
        if last is not None and last is not cls:
            if (last is CharClass.NARROW and cls is CharClass.SPACE) or (
                last is CharClass.SPACE and cls is CharClass.NARROW
            ):
                current += char
            elif cls is CharClass.WIDE or last is CharClass.WIDE:
                flush()
                current = char
            else:
                current += char
        else:
            current += char
        last = cls

        # Two adjacent ideographs never share a segment
        if cls is CharClass.WIDE and len(current) > 1:
            current = current[:-1]
            flush()
            current = char

    flush()
    return [Segment(text=run, script=_script_of(run), paragraph_index=paragraph_index) for run in runs]


def segment_paragraphs(paragraphs: Iterable[str]) -> List[Segment]:
    """Tokenize each paragraph, tagging segments with the paragraph they came from."""
    segments: List[Segment] = []
    for index, paragraph in enumerate(paragraphs):
        segments.extend(tokenize(paragraph, paragraph_index=index))
    return segments


def split_sentences(paragraph: str) -> List[str]:
    """Split after sentence-terminal punctuation. ``"".join()`` of the result is the input."""
    return [piece for piece in _SENTENCE_BOUNDARY.split(paragraph) if piece]


def repack_sentences(sentences: Iterable[str], max_chars: int) -> List[str]:
    """
    Greedily pack sentences into chunks of at most ``max_chars`` characters.

    A single sentence longer than ``max_chars`` becomes a chunk of its own.
    Whitespace-only pieces always join the current chunk.
    """
    chunks: List[str] = []
    buffer = ""
    for sentence in sentences:
        if buffer and sentence.strip() and len(buffer) + len(sentence) > max_chars:
            chunks.append(buffer)
            buffer = sentence
        else:
            buffer += sentence
    if buffer:
        chunks.append(buffer)
    return chunks


def paragraphize(
    text: str,
    *,
    long_text_threshold: Optional[int] = None,
    long_paragraph_threshold: Optional[int] = None,
    sentence_pack_limit: Optional[int] = None,
) -> List[str]:
    """
    Split text into non-blank paragraphs.

    When the text is long (over ``long_text_threshold`` characters) but has at most
    two paragraphs, every paragraph over ``long_paragraph_threshold`` characters is
    re-chunked on sentence boundaries into pieces of about ``sentence_pack_limit``
    characters. Re-chunking never adds or drops characters.

    Thresholds default to the configured settings.
    """
    if long_text_threshold is None:
        long_text_threshold = settings.LONG_TEXT_THRESHOLD
    if long_paragraph_threshold is None:
        long_paragraph_threshold = settings.LONG_PARAGRAPH_THRESHOLD
    if sentence_pack_limit is None:
        sentence_pack_limit = settings.SENTENCE_PACK_LIMIT

    text = text or ""
    paragraphs = [p for p in text.split("\n") if p.strip()]

    if len(paragraphs) > 2 or len(text) <= long_text_threshold:
        return paragraphs

    rechunked: List[str] = []
    for paragraph in paragraphs:
        if len(paragraph) > long_paragraph_threshold:
            rechunked.extend(repack_sentences(split_sentences(paragraph), sentence_pack_limit))
        else:
            rechunked.append(paragraph)

    if len(rechunked) != len(paragraphs):
        logger.debug("Re-chunked %d long paragraph(s) into %d pieces", len(paragraphs), len(rechunked))
    return rechunked


def clean_text(text: Optional[str]) -> str:
    """Normalise line endings, merge blank lines, collapse spaces and tabs, strip."""
    if not text:
        return ""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = re.sub(r"\n+", "\n", text)
    text = re.sub(r"[ \t]+", " ", text)
    return text.strip()


def truncate_text(text: Optional[str], max_length: int) -> Optional[str]:
    if not text or len(text) <= max_length:
        return text
    return text[: max(max_length - len(ELLIPSIS), 0)] + ELLIPSIS


def wrap_text(
    text: str,
    max_width: float,
    measure_width: Callable[[str], float],
    max_lines: Optional[int] = None,
) -> List[str]:
    """
    Wrap text into lines no wider than ``max_width``, breaking only between segments.

    Args:
        text (str): Text to wrap.
        max_width (float): Maximum line width in the unit ``measure_width`` returns.
        measure_width (Callable[[str], float]): Width of a string once drawn, e.g. a
            font's ``getlength``.
        max_lines (Optional[int]): If given, stop after this many lines and end the
            last one with an ellipsis that still fits.

    Returns:
        List[str]: Stripped lines. A segment wider than ``max_width`` gets a line of
        its own rather than being broken.
    """
    if not text or not text.strip():
        return []

    lines: List[str] = []
    current = ""
    truncated = False
    for segment in tokenize(text):
        candidate = current + segment.text
        if measure_width(candidate) > max_width and current:
            lines.append(current.strip())
            if max_lines is not None and len(lines) >= max_lines:
                truncated = True
                break
            current = segment.text
        else:
            current = candidate

    if truncated:
        last = lines[-1]
        while last and measure_width(last + ELLIPSIS) > max_width:
            last = last[:-1]
        lines[-1] = last + ELLIPSIS
    elif current.strip():
        lines.append(current.strip())

    return lines
