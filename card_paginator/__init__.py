"""
Measurement-driven pagination of bilingual Reddit posts into fixed-size cards.
"""

__version__ = "0.1.0"
