import logging
from dataclasses import dataclass
from typing import List, Optional

from .constants import (
    MAX_USER_MARKERS, MARKER_DEFAULT_X_NORM, MARKER_GRAB_BAND_HEIGHT, MARKER_GRAB_TOLERANCE_X
)

logger = logging.getLogger(__name__)


@dataclass
class UserMarker:
    x_norm: float = MARKER_DEFAULT_X_NORM


@dataclass
class PointerResult:
    """Outcome of a pointer event: whether to repaint, and whether to suppress scrolling."""
    dirty: bool = False
    prevent_default: bool = False


class MarkerInteractionModel:
    """
    Learner-placed acceleration guesses and their drag gesture.

    Pointer coordinates are in on-screen units relative to the chart's top
    left corner. Marker positions are stored as fractions of chart width so
    they survive surface resizes.

    States: Idle (dragging_index is None) and Dragging(index).
    """

    def __init__(self):
        self.markers: List[UserMarker] = []
        self.dragging_index: Optional[int] = None

    @property
    def is_dragging(self) -> bool:
        return self.dragging_index is not None

    def clear(self) -> None:
        self.dragging_index = None
        self.markers = []

    def add_marker(self) -> bool:
        """Add a marker at mid-strip. Returns True if the chart needs a repaint."""
        if len(self.markers) >= MAX_USER_MARKERS:
            return False
        self.markers.append(UserMarker())
        return True

    def hit_test(self, x: float, y: float, width: float, height: float) -> Optional[int]:
        """Index of the first marker whose bottom tag is under the pointer."""
        if y <= height - MARKER_GRAB_BAND_HEIGHT:
            return None
        for i, marker in enumerate(self.markers):
            if abs(x - marker.x_norm * width) < MARKER_GRAB_TOLERANCE_X:
                return i
        return None

    def pointer_down(self, x: float, y: float, width: float, height: float, is_touch: bool = False) -> PointerResult:
        index = self.hit_test(x, y, width, height)
        if index is not None:
            self.dragging_index = index
            logger.debug("Started dragging marker %d", index)
        # Touch must not scroll the page while a drag may be starting
        return PointerResult(dirty=False, prevent_default=is_touch)

    def pointer_move(self, x: float, width: float, is_touch: bool = False) -> PointerResult:
        if self.dragging_index is None or self.dragging_index >= len(self.markers) or width <= 0:
            return PointerResult(dirty=False, prevent_default=is_touch)
        x_norm = max(0.0, min(1.0, x / width))
        self.markers[self.dragging_index].x_norm = x_norm
        return PointerResult(dirty=True, prevent_default=is_touch)

    def pointer_up(self) -> PointerResult:
        """Pointer up, leave or touch cancel: always back to Idle."""
        if self.dragging_index is not None:
            logger.debug("Stopped dragging marker %d", self.dragging_index)
        self.dragging_index = None
        return PointerResult(dirty=False, prevent_default=False)
