"""
execution/progress/module_progress.py

Session-local module progress and its merge with host-supplied progress.

The progress map ("1".."8" -> percentage) is owned by the session. These
helpers never mutate the map they are given; entry events return a new map.
"""

from __future__ import annotations

import logging
from datetime import datetime

from execution.course.course_payload import CoursePayload
from execution.course.module_registry import (
    MODULE_INDICES,
    PROGRESS_KEYS,
    PROGRESS_MAX,
    PROGRESS_MIN,
    PROGRESS_STEP,
    require_module_index,
)
from execution.policy.unlock_policy import is_module_unlocked

logger = logging.getLogger(__name__)


def initial_progress() -> dict[str, int]:
    """Return a progress map with every module at 0."""
    return {key: PROGRESS_MIN for key in PROGRESS_KEYS}


def seed_progress(payload: CoursePayload) -> dict[str, int]:
    """Return a fresh progress map hydrated from host-supplied progress.

    Modules without a host value stay at 0. Earlier local progress is not
    carried over.
    """
    progress = initial_progress()
    for index in MODULE_INDICES:
        module = payload.module(index)
        if module is not None and module.progress is not None:
            progress[str(index)] = module.progress
    return progress


def host_progress(module_index: int, payload: CoursePayload | None) -> int | None:
    """Return the host-supplied progress for a module, or None."""
    module = payload.module(module_index) if payload is not None else None
    return module.progress if module is not None else None


def displayed_progress(
    module_index: int,
    payload: CoursePayload | None,
    progress: dict[str, int],
) -> int:
    """Return the progress shown for a module: host value, else local value."""
    from_host = host_progress(module_index, payload)
    if from_host is not None:
        return from_host
    return progress.get(str(require_module_index(module_index)), PROGRESS_MIN)


def enter_module(
    module_index: int,
    payload: CoursePayload | None,
    progress: dict[str, int],
    now: datetime | int | float,
) -> dict[str, int]:
    """Apply one module-entry event and return the resulting progress map.

    A locked module ignores the event. A module whose progress came from
    the host ignores it too: host progress always wins. Otherwise local
    progress advances by PROGRESS_STEP, capped at PROGRESS_MAX.

    Args:
        module_index: Slot 1..8 that the learner entered.
        payload:      Current canonical payload.
        progress:     Current session progress map (left untouched).
        now:          Current time, used for the unlock check.

    Returns:
        A new progress map. Equal to progress when nothing changed.

    Raises:
        ValueError: If module_index is not 1..8.
    """
    require_module_index(module_index)
    updated = dict(progress)

    if not is_module_unlocked(module_index, payload, now):
        return updated  # locked, nothing happens
    if host_progress(module_index, payload) is not None:
        return updated

    key = str(module_index)
    current = updated.get(key, PROGRESS_MIN)
    if current < PROGRESS_MAX:
        updated[key] = min(current + PROGRESS_STEP, PROGRESS_MAX)
        logger.info("Module %s progress: %s -> %s", key, current, updated[key])
    return updated


def all_modules_completed(
    payload: CoursePayload | None,
    progress: dict[str, int],
) -> bool:
    """Return True when every one of the 8 modules shows 100% progress."""
    return all(
        displayed_progress(index, payload, progress) == PROGRESS_MAX
        for index in MODULE_INDICES
    )
