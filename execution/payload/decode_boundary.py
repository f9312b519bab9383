"""
execution/payload/decode_boundary.py

Decodes the key/value data handed over by the LMS host (the page query
string) into a canonical CoursePayload plus a freshly seeded progress map.

Two encodings compete:
  - a whole serialized payload under the "course" key (JSON, possibly
    percent-encoded a second time by legacy sources);
  - flat per-field keys: cid, cn, csn, fo and m{i}e, m{i}o, m{i}n, m{i}s,
    m{i}i, m{i}u, m{i}ts, m{i}te, m{i}p for each module slot i in 1..8.

Strategies are tried in DECODER_STRATEGIES order and the first success wins.
Nothing is merged across strategies. Flat decoding always succeeds, so a
decode never fails the page. No I/O; the only side effect is logging.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from urllib.parse import unquote

from execution.course.course_payload import CoursePayload, ModuleInfo, User
from execution.course.module_registry import MODULE_INDICES, is_valid_module_index
from execution.payload.coerce_fields import (
    clean_text,
    parse_flag,
    parse_int,
    parse_number,
    parse_progress,
)
from execution.progress.module_progress import seed_progress

logger = logging.getLogger(__name__)

COURSE_KEY = "course"
USER_ID_KEY = "userid"
USER_NAME_KEY = "uname"

# Module slots inside the whole-payload JSON are keyed "modulo1".."modulo8".
JSON_MODULE_PREFIX = "modulo"

# Strategy names, reported back as DecodeOutcome.source.
WHOLE_PAYLOAD = "whole_payload"
PERCENT_DECODED_PAYLOAD = "percent_decoded_payload"
FLAT_FIELDS = "flat_fields"


@dataclass(frozen=True)
class DecodeResult:
    """Tagged result of one decoding strategy."""

    ok: bool
    source: str
    payload: CoursePayload | None = None
    reason: str | None = None


@dataclass(frozen=True)
class DecodeOutcome:
    """What one boundary read produces: the payload and its seeded progress."""

    payload: CoursePayload
    progress: dict[str, int]
    source: str


# ---------------------------------------------------------------------------
# Whole-payload (JSON) canonicalisation
# ---------------------------------------------------------------------------

def _int_or_zero(raw: object) -> int:
    value = parse_int(raw)
    return 0 if value is None else value


def _text_or_empty(raw: object) -> str:
    return raw if isinstance(raw, str) else ""


def _first_open_index(raw: object) -> int | None:
    """Return a 1..8 module index from "moduloN", N or "N"; else None."""
    if isinstance(raw, str) and raw.startswith(JSON_MODULE_PREFIX):
        raw = raw[len(JSON_MODULE_PREFIX):]
    index = parse_int(raw)
    return index if index is not None and is_valid_module_index(index) else None


def _module_from_json(raw: object) -> ModuleInfo | None:
    if not isinstance(raw, dict):
        return None
    if parse_flag(raw.get("exists")) is not True:
        return None

    # The legacy shape omits url/window/availability keys; .get() -> None.
    return ModuleInfo(
        exists=True,
        section_number=parse_int(raw.get("sectionnum")),
        section_id=parse_int(raw.get("sectionid")),
        name=clean_text(raw.get("name")),
        open=parse_flag(raw.get("open")),
        available=parse_flag(raw.get("available")),
        available_info=clean_text(raw.get("availableinfo")),
        url=clean_text(raw.get("url")),
        tstart=parse_number(raw.get("tstart")),
        tend=parse_number(raw.get("tend")),
        progress=parse_progress(raw.get("progress")),
    )


def payload_from_json(raw: dict) -> CoursePayload:
    """Canonicalise an already-parsed whole-payload JSON object.

    Applies the same lenient coercions as flat decoding: unusable fields
    become absent, progress is clamped, non-existent modules become None.
    """
    modules_raw = raw.get("modules")
    if not isinstance(modules_raw, dict):
        modules_raw = {}

    slots = []
    for index in MODULE_INDICES:
        slot_raw = modules_raw.get(f"{JSON_MODULE_PREFIX}{index}")
        if slot_raw is None:
            slot_raw = modules_raw.get(str(index))
        slots.append(_module_from_json(slot_raw))

    return CoursePayload(
        id=_int_or_zero(raw.get("id")),
        name=_text_or_empty(raw.get("name")),
        shortname=_text_or_empty(raw.get("shortname")),
        modules=tuple(slots),
        first_open=_first_open_index(raw.get("firstopen")),
    )


def _parse_json_payload(text: str, source: str) -> DecodeResult:
    try:
        raw = json.loads(text)
    except (ValueError, RecursionError) as exc:
        return DecodeResult(ok=False, source=source, reason=f"invalid JSON ({exc})")

    if not isinstance(raw, dict):
        return DecodeResult(
            ok=False,
            source=source,
            reason=f"expected a JSON object, got {type(raw).__name__}",
        )

    return DecodeResult(ok=True, source=source, payload=payload_from_json(raw))


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

def _decode_whole_payload(inputs: Mapping[str, str]) -> DecodeResult:
    raw = inputs.get(COURSE_KEY)
    if not raw:
        return DecodeResult(ok=False, source=WHOLE_PAYLOAD, reason="no course parameter")
    return _parse_json_payload(raw, WHOLE_PAYLOAD)


def _decode_percent_decoded_payload(inputs: Mapping[str, str]) -> DecodeResult:
    raw = inputs.get(COURSE_KEY)
    if not raw:
        return DecodeResult(
            ok=False, source=PERCENT_DECODED_PAYLOAD, reason="no course parameter"
        )
    return _parse_json_payload(unquote(raw), PERCENT_DECODED_PAYLOAD)


def _module_from_flat(inputs: Mapping[str, str], index: int) -> ModuleInfo | None:
    prefix = f"m{index}"
    if inputs.get(prefix + "e") != "1":
        return None  # remaining keys for this slot are not read

    open_raw = inputs.get(prefix + "o")
    return ModuleInfo(
        exists=True,
        section_number=parse_int(inputs.get(prefix + "s")),
        section_id=parse_int(inputs.get(prefix + "i")),
        name=clean_text(inputs.get(prefix + "n")),
        open=None if open_raw is None else open_raw == "1",
        url=clean_text(inputs.get(prefix + "u")),
        tstart=parse_number(inputs.get(prefix + "ts")),
        tend=parse_number(inputs.get(prefix + "te")),
        progress=parse_progress(inputs.get(prefix + "p")),
    )


def _decode_flat_fields(inputs: Mapping[str, str]) -> DecodeResult:
    payload = CoursePayload(
        id=_int_or_zero(inputs.get("cid")),
        name=inputs.get("cn") or "",
        shortname=inputs.get("csn") or "",
        modules=tuple(_module_from_flat(inputs, i) for i in MODULE_INDICES),
        first_open=_first_open_index(inputs.get("fo")),
    )
    return DecodeResult(ok=True, source=FLAT_FIELDS, payload=payload)


DECODER_STRATEGIES: tuple[Callable[[Mapping[str, str]], DecodeResult], ...] = (
    _decode_whole_payload,
    _decode_percent_decoded_payload,
    _decode_flat_fields,
)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def decode_boundary(inputs: Mapping[str, str]) -> DecodeOutcome:
    """Decode one boundary read into a payload and its seeded progress map.

    The progress map starts at 0 for every module and is overwritten with
    each host-supplied progress value; it does not merge with any earlier
    local progress.

    Args:
        inputs: Read-only key/value boundary data (e.g. st.query_params).

    Returns:
        DecodeOutcome with the canonical payload, the seeded progress map
        and the name of the strategy that produced the payload.
    """
    failures: list[DecodeResult] = []
    for strategy in DECODER_STRATEGIES:
        result = strategy(inputs)
        if result.ok:
            break
        failures.append(result)
    # The last strategy (flat fields) always succeeds, so result.ok holds here.

    if inputs.get(COURSE_KEY) and result.source == FLAT_FIELDS:
        logger.warning(
            "decode_boundary: could not decode %r as JSON (%s); using flat parameters.",
            COURSE_KEY,
            "; ".join(f"{f.source}: {f.reason}" for f in failures),
        )

    return DecodeOutcome(
        payload=result.payload,
        progress=seed_progress(result.payload),
        source=result.source,
    )


def decode_user(inputs: Mapping[str, str], current: User | None = None) -> User:
    """Hydrate the session user from the userid / uname identity hints.

    When either hint is present the user is marked logged in and each
    present hint replaces the corresponding field of current. With no
    hints, current (or the anonymous default) is returned unchanged.
    """
    current = current or User()
    user_id = inputs.get(USER_ID_KEY) or None
    user_name = inputs.get(USER_NAME_KEY) or None
    if user_id is None and user_name is None:
        return current

    return User(
        name=user_name if user_name is not None else current.name,
        is_logged_in=True,
        id=user_id if user_id is not None else current.id,
    )
