import sys
from pathlib import Path
from typing import List

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from backend.parsers.models import Fragment  # noqa: E402


def frag(text: str, x: float, y: float, page: int = 1) -> Fragment:
    return Fragment(text=text, x=x, y=y, page=page)


@pytest.fixture
def tracker_fragments() -> List[Fragment]:
    """Two-page tracker report; the last column overflows onto page 2."""

    return [
        frag("OIS Employee Tracker", 40, 800),
        frag("Applied filters: Store is 1234", 40, 780),
        frag("Multi Channel - Last Week 202547", 40, 760),
        frag("Staff Member", 40, 700),
        frag("Captured", 200, 700),
        frag("Total", 300, 700),
        frag("Pct O", 400, 700),
        frag("Jane", 40, 680),
        frag("Smith", 80, 680),
        frag("12", 200, 680),
        frag("£1,234", 300, 680),
        frag("86%", 400, 680),
        frag("Bob", 40, 660),
        frag("Jones", 80, 660),
        frag("7", 200, 660),
        frag("£950", 300, 660),
        frag("14%", 400, 660),
        frag("Total:", 40, 640),
        frag("19", 200, 640),
        frag("£2,184", 300, 640),
        frag("Pct Of Total", 60, 690, page=2),
        frag("86%", 60, 680, page=2),
        frag("14%", 60, 660, page=2),
        frag("100%", 60, 640, page=2),
        frag("Staff Member - YTD 202547", 40, 500, page=2),
        frag("Jane Smith", 40, 480, page=2),
    ]
