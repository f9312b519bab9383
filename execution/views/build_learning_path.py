"""
execution/views/build_learning_path.py

Assembles the read-only view of the learning path handed to the
presentation layer: one entry per fixed module slot, the course header and
the bonus sections. No state is changed here.
"""

from __future__ import annotations

from datetime import datetime

from execution.course.course_payload import CoursePayload, User
from execution.course.module_registry import (
    BONUS_SECTIONS,
    DEFAULT_PLAYBACK_PREFERENCES,
    MODULE_DURATION,
    MODULE_INDICES,
    PROGRESS_MAX,
    SURVEY_SECTION,
    module_subtitle,
)
from execution.policy.unlock_policy import explain_module_access, resolve_display_title
from execution.progress.module_progress import all_modules_completed, displayed_progress


def build_module_view(
    module_index: int,
    payload: CoursePayload | None,
    progress: dict[str, int],
    now: datetime | int | float,
    playback: dict[str, bool] | None = None,
) -> dict:
    """Return the presentation fields for one module slot.

    Returns:
        dict with keys:
            index         (int)       Slot 1..8.
            unlocked      (bool)      Result of the unlock policy.
            access_reason (str)       Reason code of the deciding rule.
            title         (str)       Host name or local fallback title.
            subtitle      (str)       Fixed local subtitle.
            duration      (str)       Fixed local duration label.
            progress      (int)       Host progress, else local progress.
            completed     (bool)      progress == 100.
            url           (str|None)  Host entry URL.
            linked        (bool)      unlocked and a URL is present.
            playback      (dict)      Pass-through player preference flags.
    """
    access = explain_module_access(module_index, payload, now)
    module = payload.module(module_index) if payload is not None else None
    url = module.url if module is not None else None
    shown = displayed_progress(module_index, payload, progress)

    return {
        "index": module_index,
        "unlocked": access["unlocked"],
        "access_reason": access["reason"],
        "title": resolve_display_title(module_index, payload),
        "subtitle": module_subtitle(module_index),
        "duration": MODULE_DURATION,
        "progress": shown,
        "completed": shown == PROGRESS_MAX,
        "url": url,
        "linked": access["unlocked"] and url is not None,
        "playback": dict(playback if playback is not None else DEFAULT_PLAYBACK_PREFERENCES),
    }


def build_bonus_sections(
    payload: CoursePayload | None,
    progress: dict[str, int],
) -> list[dict]:
    """Return the bonus sections; only the survey can be locked."""
    completed = all_modules_completed(payload, progress)
    return [
        {"name": name, "locked": name == SURVEY_SECTION and not completed}
        for name in BONUS_SECTIONS
    ]


def build_learning_path(
    user: User,
    payload: CoursePayload | None,
    progress: dict[str, int],
    now: datetime | int | float,
    playback: dict[str, bool] | None = None,
) -> dict:
    """Return the full learning-path view for one render pass.

    Returns:
        dict with keys:
            greeting_name    (str)        User name, or the anonymous default
                                          when the user is not logged in.
            course_name      (str|None)   Course name when the host sent one.
            course_shortname (str|None)   Shortname alongside course_name.
            first_open       (int|None)   Host "first open module" hint.
            modules          (list)       build_module_view() for slots 1..8.
            all_completed    (bool)       Every module at 100%.
            bonus_sections   (list)       build_bonus_sections().
    """
    has_course = payload is not None and bool(payload.name)
    return {
        "greeting_name": user.name if user.is_logged_in else User().name,
        "course_name": payload.name if has_course else None,
        "course_shortname": payload.shortname if has_course else None,
        "first_open": payload.first_open if payload is not None else None,
        "modules": [
            build_module_view(index, payload, progress, now, playback)
            for index in MODULE_INDICES
        ],
        "all_completed": all_modules_completed(payload, progress),
        "bonus_sections": build_bonus_sections(payload, progress),
    }
