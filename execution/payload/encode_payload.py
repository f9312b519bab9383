"""
execution/payload/encode_payload.py

Encodes a CoursePayload back into either boundary form accepted by
execution/payload/decode_boundary.py.

Used to build preview links for a course (see ui/learning_path_app.py) and
to check that both encodings decode to the same canonical payload.

The round trip is exact only for canonical payloads, i.e. decoder output:
a ModuleInfo with exists=False encodes as null and decodes as None, and
blank names or URLs come back as None.
"""

from __future__ import annotations

import json
from urllib.parse import quote

from execution.course.course_payload import CoursePayload, ModuleInfo
from execution.course.module_registry import MODULE_INDICES
from execution.payload.decode_boundary import COURSE_KEY, JSON_MODULE_PREFIX


def _module_to_json(module: ModuleInfo | None) -> dict | None:
    if module is None or not module.exists:
        return None
    return {
        "exists": True,
        "sectionnum": module.section_number,
        "sectionid": module.section_id,
        "name": module.name,
        "open": module.open,
        "available": module.available,
        "availableinfo": module.available_info,
        "url": module.url,
        "tstart": module.tstart,
        "tend": module.tend,
        "progress": module.progress,
    }


def payload_to_json(payload: CoursePayload) -> dict:
    """Return payload as the whole-payload JSON object (not yet serialized)."""
    return {
        "id": payload.id,
        "name": payload.name,
        "shortname": payload.shortname,
        "modules": {
            f"{JSON_MODULE_PREFIX}{index}": _module_to_json(payload.modules[index - 1])
            for index in MODULE_INDICES
        },
        "firstopen": (
            f"{JSON_MODULE_PREFIX}{payload.first_open}"
            if payload.first_open is not None
            else None
        ),
    }


def encode_whole_payload(payload: CoursePayload, percent_encode: bool = False) -> dict[str, str]:
    """Return the boundary key/values carrying payload as a single JSON value.

    Args:
        payload:        Payload to encode.
        percent_encode: Percent-encode the JSON once more, as legacy hosts do.

    Returns:
        dict with the single key "course".
    """
    text = json.dumps(payload_to_json(payload), ensure_ascii=False, separators=(",", ":"))
    if percent_encode:
        text = quote(text, safe="")
    return {COURSE_KEY: text}


def encode_flat_params(payload: CoursePayload) -> dict[str, str]:
    """Return payload as flat boundary key/values (cid, cn, csn, fo, m{i}*).

    The flat form has no availability channel, so available and
    available_info are not encoded. Absent optional fields emit no key.
    """
    params: dict[str, str] = {
        "cid": str(payload.id),
        "cn": payload.name,
        "csn": payload.shortname,
    }
    if payload.first_open is not None:
        params["fo"] = str(payload.first_open)

    for index in MODULE_INDICES:
        module = payload.module(index)
        prefix = f"m{index}"
        if module is None:
            continue
        params[prefix + "e"] = "1"
        if module.open is not None:
            params[prefix + "o"] = "1" if module.open else "0"
        if module.name is not None:
            params[prefix + "n"] = module.name
        if module.section_number is not None:
            params[prefix + "s"] = str(module.section_number)
        if module.section_id is not None:
            params[prefix + "i"] = str(module.section_id)
        if module.url is not None:
            params[prefix + "u"] = module.url
        if module.tstart is not None:
            params[prefix + "ts"] = str(module.tstart)
        if module.tend is not None:
            params[prefix + "te"] = str(module.tend)
        if module.progress is not None:
            params[prefix + "p"] = str(module.progress)

    return params
