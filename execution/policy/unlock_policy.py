"""
execution/policy/unlock_policy.py

Module-unlock policy: decides whether a learner may enter a module right now.

Pure functions over a CoursePayload snapshot and an injected clock value.
Nothing here reads the wall clock, mutates state or performs I/O.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from execution.course.course_payload import CoursePayload
from execution.course.module_registry import fallback_title, require_module_index

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Reason codes (one per decisive rule, in evaluation order)
# ---------------------------------------------------------------------------
MODULE_ABSENT = "MODULE_ABSENT"
WINDOW_NOT_STARTED = "WINDOW_NOT_STARTED"
WINDOW_ENDED = "WINDOW_ENDED"
OPEN_FLAG = "OPEN_FLAG"
CLOSED_WITH_TIME_RULE = "CLOSED_WITH_TIME_RULE"
CLOSED_WITH_REASON = "CLOSED_WITH_REASON"
CLOSED_FLAG_UNCORROBORATED = "CLOSED_FLAG_UNCORROBORATED"
NO_EXPLICIT_SIGNAL = "NO_EXPLICIT_SIGNAL"


def to_epoch_seconds(now: datetime | int | float) -> int | float:
    """Return now as POSIX seconds.

    Numbers pass through. A naive datetime is assumed to be UTC and a
    warning is emitted; an aware datetime is converted.
    """
    if isinstance(now, datetime):
        if now.tzinfo is None:
            logger.warning("unlock_policy: now has no tzinfo; assuming UTC.")
            now = now.replace(tzinfo=timezone.utc)
        return now.timestamp()
    return now


def explain_module_access(
    module_index: int,
    payload: CoursePayload | None,
    now: datetime | int | float,
) -> dict:
    """Evaluate the unlock rules for one module and say which rule decided.

    Rules are evaluated in order; the first decisive rule wins:

        1. Slot absent or exists=False              -> locked   (MODULE_ABSENT)
        2. now < tstart                             -> locked   (WINDOW_NOT_STARTED)
           now >= tend                              -> locked   (WINDOW_ENDED)
           A violated window beats open=True.
        3. open=True                                -> unlocked (OPEN_FLAG)
        4. open=False and a window is declared      -> locked   (CLOSED_WITH_TIME_RULE)
           open=False and available=False or a
           non-blank available_info                 -> locked   (CLOSED_WITH_REASON)
           open=False with neither                  -> unlocked (CLOSED_FLAG_UNCORROBORATED)
        5. open unset                               -> unlocked (NO_EXPLICIT_SIGNAL)

    Rule 4 deliberately refuses to lock on a bare open=False: the host must
    back a closed flag with a window or a reason. This is a product call
    that is open for review, not an oversight.

    Args:
        module_index: Slot 1..8.
        payload:      Current canonical payload, or None before any decode.
        now:          Current time as epoch seconds or a datetime. This
                      function never reads the clock itself.

    Returns:
        dict with keys:
            unlocked (bool) – True when the learner may enter the module.
            reason   (str)  – Reason code of the rule that decided.

    Raises:
        ValueError: If module_index is not 1..8.
    """
    require_module_index(module_index)
    module = payload.module(module_index) if payload is not None else None

    # Rule 1: presence
    if module is None:
        return {"unlocked": False, "reason": MODULE_ABSENT}

    # Rule 2: time window [tstart, tend)
    now_s = to_epoch_seconds(now)
    if module.tstart is not None and now_s < module.tstart:
        return {"unlocked": False, "reason": WINDOW_NOT_STARTED}
    if module.tend is not None and now_s >= module.tend:
        return {"unlocked": False, "reason": WINDOW_ENDED}

    # Rule 3: explicit open
    if module.open is True:
        return {"unlocked": True, "reason": OPEN_FLAG}

    # Rule 4: explicit closed, honoured only when corroborated
    if module.open is False:
        if module.has_time_rule:
            return {"unlocked": False, "reason": CLOSED_WITH_TIME_RULE}
        if module.has_unavailable_reason:
            return {"unlocked": False, "reason": CLOSED_WITH_REASON}
        return {"unlocked": True, "reason": CLOSED_FLAG_UNCORROBORATED}

    # Rule 5: no explicit signal
    return {"unlocked": True, "reason": NO_EXPLICIT_SIGNAL}


def is_module_unlocked(
    module_index: int,
    payload: CoursePayload | None,
    now: datetime | int | float,
) -> bool:
    """Return True if the module is open for entry at time now."""
    return explain_module_access(module_index, payload, now)["unlocked"]


def resolve_display_title(module_index: int, payload: CoursePayload | None) -> str:
    """Return the host-supplied module name, or the local fallback title.

    A name that is empty after trimming counts as absent. The title never
    affects unlock state.
    """
    module = payload.module(module_index) if payload is not None else None
    if module is not None and module.name and module.name.strip():
        return module.name
    return fallback_title(module_index)
