"""
Character classification for mixed-script text.

Segmentation treats CJK ideographs and Latin letters differently: ideographs can
break anywhere, Latin words must stay whole. Everything the segmenter decides is
driven by the class returned here.
"""
from enum import Enum


class CharClass(str, Enum):
    WIDE = "wide"
    NARROW = "narrow"
    SPACE = "space"
    PUNCTUATION = "punctuation"
    OTHER = "other"


# CJK Unified Ideographs
WIDE_RANGE = ("\u4e00", "\u9fff")

PUNCTUATION_CHARS = frozenset(",.!?;:，。！？；：、")


def is_wide(char: str) -> bool:
    return WIDE_RANGE[0] <= char <= WIDE_RANGE[1]


def is_narrow(char: str) -> bool:
    # ASCII letters only; str.isalpha() would also accept ideographs and accented letters
    return ("a" <= char <= "z") or ("A" <= char <= "Z")


def is_punctuation(char: str) -> bool:
    return char in PUNCTUATION_CHARS


def classify(char: str) -> CharClass:
    """
    Classify a single character.

    Args:
        char (str): Exactly one character.

    Returns:
        CharClass: The class of the character. Total over all single characters.

    Raises:
        ValueError: If ``char`` is not exactly one character long.
    """
    if len(char) != 1:
        raise ValueError(f"classify() expects a single character, got {char!r}")
    if is_wide(char):
        return CharClass.WIDE
    if is_narrow(char):
        return CharClass.NARROW
    if char == " ":
        return CharClass.SPACE
    if is_punctuation(char):
        return CharClass.PUNCTUATION
    return CharClass.OTHER
