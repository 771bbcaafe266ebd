"""
Pytest configuration and shared fixtures for PolyCurveStudio tests.
"""

import shutil
import sys
import tempfile
from pathlib import Path
from typing import Generator

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from pcs.core.document import Document
from pcs.core.models import AnimationSettings, Layer
from pcs.core.playback import PlaybackClock
from pcs.core.settings import EditorSettings
from pcs.geom.keyframes import Easing, Keyframe
from pcs.geom.primitives import Point
from pcs.geom.symmetry import SymmetrySettings
from pcs.geom.transform import Transform


# ============== Temporary Directory Fixtures ==============

@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    tmp = tempfile.mkdtemp(prefix="pcs_test_")
    yield Path(tmp)
    shutil.rmtree(tmp, ignore_errors=True)


# ============== Geometry Fixtures ==============

@pytest.fixture
def square_points() -> list:
    """Axis-aligned 100x100 square starting at (100, 100)."""
    return [Point(100, 100), Point(200, 100), Point(200, 200), Point(100, 200)]


@pytest.fixture
def zigzag_points() -> list:
    """Open polyline with clear corners."""
    return [Point(0, 0), Point(50, 40), Point(100, 0), Point(150, 40), Point(200, 0)]


# ============== Model Fixtures ==============

@pytest.fixture
def simple_layer(square_points) -> Layer:
    """Closed square layer with a static transform."""
    return Layer(
        id="sq",
        points=list(square_points),
        color="#ff0000",
        fill="#00ff00",
        width=3.0,
        tension=0.8,
        closed=True,
        transform=Transform(x=10, y=5, rotation=30, scale=1.5),
        animation=AnimationSettings(types=["spin"], duration=3.0),
    )


@pytest.fixture
def line_layer() -> Layer:
    """Open two-point layer with a keyframe track."""
    return Layer(
        id="ln",
        points=[Point(400, 100), Point(500, 150)],
        color="#0000ff",
        width=1.5,
        keyframes=[
            Keyframe(time=0, value=Transform(), ease=Easing.LINEAR, id="kf_a"),
            Keyframe(time=1000, value=Transform(x=100), ease=Easing.EASE_IN, id="kf_b"),
        ],
    )


@pytest.fixture
def compound_layer() -> Layer:
    """Compound layer with two segments and per-segment styles."""
    segs = [
        [Point(0, 0), Point(10, 0), Point(10, 10)],
        [Point(50, 50), Point(60, 50)],
    ]
    layer = Layer(
        id="cmp",
        segments=segs,
        segment_colors=["#111111", "#222222"],
        segment_fills=["none", "#333333"],
        segment_widths=[1.0, 2.0],
        segment_transforms=[None, Transform(rotation=90)],
        segment_keyframes=[[], []],
        segment_closed=[True, False],
        segment_tensions=[0.5, 1.0],
        segment_animations=[None, None],
        symmetry=SymmetrySettings(horizontal=True),
    )
    layer.sync_points()
    return layer


# ============== Document Fixtures ==============

class FakeTime:
    """Manually advanced monotonic clock (seconds)."""

    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def fake_time() -> FakeTime:
    return FakeTime()


@pytest.fixture
def clock(fake_time) -> PlaybackClock:
    return PlaybackClock(1000.0, now=fake_time)


@pytest.fixture
def document(clock) -> Document:
    """Empty document with a deterministic clock and small history."""
    return Document(settings=EditorSettings(history_limit=10), clock=clock)
