"""
execution/session/learning_session.py

Owner of the mutable state of one learning-path page session: the user,
the current canonical payload and the progress map.

Two events change it:
  - apply_boundary(): a new boundary read replaces payload and progress
    wholesale;
  - enter_module(): a module-entry interaction updates the progress map.
Everything else reads snapshots and hands them to the pure policy helpers.
"""

from __future__ import annotations

import time
from collections.abc import Mapping
from datetime import datetime

from execution.course.course_payload import CoursePayload, User
from execution.course.module_registry import (
    DEFAULT_PLAYBACK_PREFERENCES,
    require_module_index,
)
from execution.payload.decode_boundary import decode_boundary, decode_user
from execution.progress.module_progress import (
    all_modules_completed,
    enter_module,
    initial_progress,
)
from execution.views.build_learning_path import build_learning_path


class LearningSession:
    """Session-scoped state container for the learning path."""

    def __init__(self, playback: dict[str, bool] | None = None) -> None:
        self.user: User = User()
        self.payload: CoursePayload | None = None
        self.progress: dict[str, int] = initial_progress()
        self.decode_source: str | None = None
        self.playback: dict[str, bool] = dict(
            playback if playback is not None else DEFAULT_PLAYBACK_PREFERENCES
        )

    def apply_boundary(self, inputs: Mapping[str, str]) -> None:
        """Decode a new boundary read and replace payload and progress."""
        self.user = decode_user(inputs, self.user)
        outcome = decode_boundary(inputs)
        self.payload = outcome.payload
        self.progress = outcome.progress
        self.decode_source = outcome.source

    def enter_module(
        self,
        module_index: int,
        now: datetime | int | float | None = None,
    ) -> bool:
        """Record that the learner entered a module.

        Returns:
            True if the progress map changed; False when the event was
            ignored (no payload yet, module locked, host-owned progress or
            already at 100%).

        Raises:
            ValueError: If module_index is not 1..8.
        """
        require_module_index(module_index)
        if self.payload is None:
            return False
        if now is None:
            now = time.time()

        updated = enter_module(module_index, self.payload, self.progress, now)
        changed = updated != self.progress
        self.progress = updated
        return changed

    def all_modules_completed(self) -> bool:
        return all_modules_completed(self.payload, self.progress)

    def build_view(self, now: datetime | int | float | None = None) -> dict:
        """Return the outbound learning-path view for the current state."""
        if now is None:
            now = time.time()
        return build_learning_path(
            self.user, self.payload, self.progress, now, self.playback
        )
