"""
execution/course/module_registry.py

Canonical learning-path definition for the FIEC +IA culture programme.

Eight fixed module slots, their local fallback titles, the bonus sections
shown below the path, and the default playback preferences handed to the
presentation layer. No I/O. Pure constants and helpers only.
"""

MODULE_COUNT: int = 8

# Slot indices 1..8. Progress maps key these as strings ("1".."8").
MODULE_INDICES: tuple[int, ...] = tuple(range(1, MODULE_COUNT + 1))
PROGRESS_KEYS: tuple[str, ...] = tuple(str(i) for i in MODULE_INDICES)

# Local entry event advances progress by this many percentage points.
PROGRESS_STEP: int = 25
PROGRESS_MIN: int = 0
PROGRESS_MAX: int = 100

MODULE_DURATION: str = "16h"

# (fallback title, subtitle) per slot, index 1 first.
MODULES: tuple[tuple[str, str], ...] = (
    ("Módulo 1", "Fundamentos de IA generativa"),
    ("Módulo 2", "Governança e risco"),
    ("Módulo 3", "Possibilidades tecnológicas"),
    ("Módulo 4", "Engenharia de prompts e padrões de saída"),
    ("Módulo 5", "Agentes e automação de workflow"),
    ("Módulo 6", "IA no ecossistema corporativo"),
    ("Módulo 7", "Confiabilidade, vieses e segurança"),
    ("Módulo 8", "Produtividade e colaboração com IA"),
)

SURVEY_SECTION: str = "Pesquisa Institucional"

# Always visible. Only the survey is gated (on every module reaching 100%).
BONUS_SECTIONS: tuple[str, ...] = (
    "Calendário",
    "Exercícios Extras",
    "Tire Suas Dúvidas Aqui",
    SURVEY_SECTION,
)

# Passed through to the player untouched; the core never reads these.
DEFAULT_PLAYBACK_PREFERENCES: dict[str, bool] = {
    "autoplay": True,
    "muted": False,
    "save_progress": True,
    "hide_controls": False,
    "restart_after_end": True,
    "show_captions": True,
    "allow_skip": False,
    "track_time": True,
}


def is_valid_module_index(module_index: int) -> bool:
    """Return True if module_index names one of the fixed slots (1..8)."""
    return (
        isinstance(module_index, int)
        and not isinstance(module_index, bool)
        and 1 <= module_index <= MODULE_COUNT
    )


def require_module_index(module_index: int) -> int:
    """Return module_index unchanged, or raise ValueError if it is not 1..8."""
    if not is_valid_module_index(module_index):
        raise ValueError(f"Invalid module index: {module_index!r}")
    return module_index


def fallback_title(module_index: int) -> str:
    """Return the local title shown when the host supplies no module name."""
    return MODULES[require_module_index(module_index) - 1][0]


def module_subtitle(module_index: int) -> str:
    return MODULES[require_module_index(module_index) - 1][1]
