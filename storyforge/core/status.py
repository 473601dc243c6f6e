"""
Story status state machine.

Status is only ever changed through `next_status`, which rejects any
transition not listed in TRANSITIONS. The repository applies the result with
a conditional update so two pipeline runs cannot both leave the same state.
"""

from enum import Enum

from .errors import InvalidTransitionError


class StoryStatus(str, Enum):
    """Lifecycle status of a story."""

    DRAFT = "draft"
    PROCESSING_CONTENT = "processing_content"
    PROCESSING_ASSETS = "processing_assets"
    GENERATED_CONTENT = "generated_content"
    GENERATED = "generated"
    ERROR = "error"


class StoryEvent(str, Enum):
    """Pipeline events that move a story between statuses."""

    START_CONTENT = "start_content"
    CONTENT_READY = "content_ready"
    START_ASSETS = "start_assets"
    ASSETS_READY = "assets_ready"
    FAIL = "fail"


PROCESSING_STATUSES = frozenset({StoryStatus.PROCESSING_CONTENT, StoryStatus.PROCESSING_ASSETS})

TRANSITIONS: dict[tuple[StoryStatus, StoryEvent], StoryStatus] = {
    (StoryStatus.DRAFT, StoryEvent.START_CONTENT): StoryStatus.PROCESSING_CONTENT,
    (StoryStatus.ERROR, StoryEvent.START_CONTENT): StoryStatus.PROCESSING_CONTENT,
    (StoryStatus.PROCESSING_CONTENT, StoryEvent.CONTENT_READY): StoryStatus.GENERATED_CONTENT,
    (StoryStatus.PROCESSING_CONTENT, StoryEvent.FAIL): StoryStatus.ERROR,
    (StoryStatus.GENERATED_CONTENT, StoryEvent.START_ASSETS): StoryStatus.PROCESSING_ASSETS,
    (StoryStatus.GENERATED, StoryEvent.START_ASSETS): StoryStatus.PROCESSING_ASSETS,
    (StoryStatus.ERROR, StoryEvent.START_ASSETS): StoryStatus.PROCESSING_ASSETS,
    (StoryStatus.PROCESSING_ASSETS, StoryEvent.ASSETS_READY): StoryStatus.GENERATED,
    (StoryStatus.PROCESSING_ASSETS, StoryEvent.FAIL): StoryStatus.ERROR,
}


def next_status(current: str, event: StoryEvent) -> StoryStatus:
    """Return the status reached by applying `event` to `current`.

    Raises:
        InvalidTransitionError: If the state machine has no such edge
    """
    try:
        status = StoryStatus(current)
    except ValueError:
        raise InvalidTransitionError(str(current), event.value)

    target = TRANSITIONS.get((status, event))
    if target is None:
        raise InvalidTransitionError(status.value, event.value)
    return target


def can_apply(current: str, event: StoryEvent) -> bool:
    """True if `event` is a legal move from `current`."""
    try:
        next_status(current, event)
    except InvalidTransitionError:
        return False
    return True
