import json
import math
import os
import sys
from typing import Any, Callable, Dict, List, Tuple

import pytest

# Add project root to path so the card_paginator package resolves without installation
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from dotenv import load_dotenv

# Load test environment variables from .env.test in the project root
dotenv_path = os.path.join(project_root, '.env.test')
if os.path.exists(dotenv_path):
    load_dotenv(dotenv_path=dotenv_path)

from card_paginator.config.settings import Settings
from card_paginator.rendering.oracle import MeasurementOracle
from card_paginator.utils.events import RecordingEventSink

# height_fn(template_name, data, selector) -> height
HeightFn = Callable[[str, Dict[str, Any], str], float]

CHARS_PER_LINE = 30
LINE_HEIGHT = 30
PAGE_HEADER_HEIGHT = 120
COMMENT_HEADER_HEIGHT = 60


class JsonMarkupRenderer:
    """Deterministic stand-in for a template renderer: the markup is the JSON record."""

    def __init__(self) -> None:
        self.calls: List[Tuple[str, Dict[str, Any]]] = []

    async def render_markup(self, template_name: str, data: Dict[str, Any]) -> str:
        self.calls.append((template_name, data))
        return json.dumps({"template": template_name, "data": data}, sort_keys=True, ensure_ascii=False, default=str)


class FunctionHeightMeasurer:
    """Measures by decoding the JSON markup and applying a height function."""

    def __init__(self, height_fn: HeightFn) -> None:
        self.height_fn = height_fn
        self.calls: List[Dict[str, Any]] = []

    async def measure_height(self, markup: str, selector: str) -> float:
        decoded = json.loads(markup)
        self.calls.append(decoded["data"])
        return self.height_fn(decoded["template"], decoded["data"], selector)


def text_height(text: str) -> float:
    """Line-based height: every paragraph takes whole lines of CHARS_PER_LINE characters."""
    if not text:
        return 0
    return sum(math.ceil(len(p) / CHARS_PER_LINE) * LINE_HEIGHT for p in text.split("\n") if p)


def layout_height(template_name: str, data: Dict[str, Any], selector: str) -> float:
    """A monotone layout model for both card templates."""
    if "comments" in data:
        return sum(
            COMMENT_HEADER_HEIGHT + text_height(c.get("body", "")) + text_height(c.get("body_zh", ""))
            for c in data["comments"]
        )
    return PAGE_HEADER_HEIGHT + text_height(data.get("content") or "") + text_height(data.get("content_zh") or "")


@pytest.fixture
def test_settings():
    """Settings with the documented defaults, independent of any local .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def events():
    return RecordingEventSink()


@pytest.fixture
def make_oracle():
    """Factory returning (oracle, renderer, measurer) for a given height function."""
    def _make(height_fn: HeightFn = layout_height):
        renderer = JsonMarkupRenderer()
        measurer = FunctionHeightMeasurer(height_fn)
        return MeasurementOracle(renderer, measurer), renderer, measurer
    return _make
