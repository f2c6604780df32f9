"""View mode state machine - Pure functions.

Two display surfaces, map and list, exactly one visible at a time.
Switching surfaces never touches the data.
"""

from dataclasses import dataclass
from enum import Enum


class ViewMode(str, Enum):
    """Which display surface is visible."""
    MAP = "map"
    LIST = "list"


INITIAL_MODE = ViewMode.MAP


@dataclass(frozen=True)
class ModeTransition:
    """Outcome of a view mode change.

    Attributes:
        mode: Mode after the transition
        changed: Whether the mode differs from before
        needs_layout_refresh: Whether the map must recompute its size
    """
    mode: ViewMode
    changed: bool
    needs_layout_refresh: bool


def parse_view_mode(value: str | ViewMode) -> ViewMode:
    """Parse a view mode name.

    Raises:
        ValueError: If the name is not a known mode
    """
    if isinstance(value, ViewMode):
        return value
    try:
        return ViewMode(value.strip().lower())
    except ValueError:
        raise ValueError(f"Unknown view mode '{value}'. Choose from: map, list") from None


def transition(current: ViewMode, target: ViewMode) -> ModeTransition:
    """Compute a view mode transition.

    Pure function. Showing the map always asks for a layout refresh, since
    the map may have been sized while hidden.

    Args:
        current: Current mode
        target: Requested mode

    Returns:
        ModeTransition describing the change
    """
    return ModeTransition(
        mode=target,
        changed=current != target,
        needs_layout_refresh=target == ViewMode.MAP,
    )
