"""
execution/course/course_payload.py

Canonical in-memory records for one learning-path page session:
User, ModuleInfo and CoursePayload.

Records are frozen. A new boundary read builds a new CoursePayload rather
than patching the current one. No I/O, no parsing (see execution/payload/).
"""

from __future__ import annotations

from dataclasses import dataclass, field

from execution.course.module_registry import MODULE_COUNT, require_module_index

DEFAULT_USER_NAME = "Nome do Usuário"


@dataclass(frozen=True)
class User:
    """Identity hint supplied by the host."""

    name: str = DEFAULT_USER_NAME
    is_logged_in: bool = False
    id: str | None = None


@dataclass(frozen=True)
class ModuleInfo:
    """State of one module slot as reported by the host.

    section_number / section_id are opaque host identifiers; nothing in the
    policy reads them. tstart / tend are epoch seconds bounding the half-open
    access window [tstart, tend). progress is already clamped to 0..100.
    """

    exists: bool = True
    section_number: int | None = None
    section_id: int | None = None
    name: str | None = None
    open: bool | None = None
    available: bool | None = None
    available_info: str | None = None
    url: str | None = None
    tstart: int | float | None = None
    tend: int | float | None = None
    progress: int | None = None

    @property
    def has_time_rule(self) -> bool:
        return self.tstart is not None or self.tend is not None

    @property
    def has_unavailable_reason(self) -> bool:
        """True when the host explains why the module is inaccessible."""
        if self.available is False:
            return True
        return bool(self.available_info and self.available_info.strip())


def _empty_slots() -> tuple[ModuleInfo | None, ...]:
    return (None,) * MODULE_COUNT


@dataclass(frozen=True)
class CoursePayload:
    """Decoded course plus its 8 module slots (slot 1 at position 0)."""

    id: int = 0
    name: str = ""
    shortname: str = ""
    modules: tuple[ModuleInfo | None, ...] = field(default_factory=_empty_slots)
    first_open: int | None = None

    def __post_init__(self) -> None:
        if len(self.modules) != MODULE_COUNT:
            raise ValueError(
                f"CoursePayload requires exactly {MODULE_COUNT} module slots, "
                f"got {len(self.modules)}"
            )

    def module(self, module_index: int) -> ModuleInfo | None:
        """Return the slot for module_index, or None when absent.

        A slot whose exists flag is False is reported as None too.

        Raises:
            ValueError: If module_index is not 1..8.
        """
        info = self.modules[require_module_index(module_index) - 1]
        if info is None or not info.exists:
            return None
        return info
