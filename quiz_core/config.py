from __future__ import annotations
import os, json, pathlib


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


# percentage ladder used when no range criterion matches
LADDER: tuple[tuple[int, str], ...] = (
    (90, "EXCELLENT"),
    (70, "GOOD"),
    (50, "FAIR"),
)
LADDER_FLOOR: str = "NEEDS_IMPROVEMENT"

LADDER_FEEDBACK: dict[str, str] = {
    "EXCELLENT": "Excellent! You demonstrate mastery in this area.",
    "GOOD": "Good! You have a solid foundation with room for improvement.",
    "FAIR": "Fair. You have potential but need to develop better practices.",
    "NEEDS_IMPROVEMENT": "You have significant room for improvement in this area.",
}

UNKNOWN_CLASSIFICATION: str = "Unknown"
UNKNOWN_FEEDBACK: str = (
    "We could not match your answers to a profile. Try retaking the quiz and "
    "answering every question."
)
UNKNOWN_RECOMMENDATIONS: tuple[str, ...] = (
    "Answer every question, even when no option fits perfectly",
    "Retake the quiz when you have a few quiet minutes",
)
PARTIAL_RECOMMENDATIONS: tuple[str, ...] = (
    "Review the description of each dimension in your profile",
    "Retake the quiz to confirm your closest type",
)

# dimension short names whose (low, high) letters are known without labels
LETTER_SCHEMES: dict[str, tuple[str, str]] = {
    "E/I": ("I", "E"),
    "S/N": ("N", "S"),
    "T/F": ("F", "T"),
    "J/P": ("P", "J"),
}

INLINE_REPAIR_ENABLED: bool = True

TIME_FAST_MAX: float = 5.0
TIME_SLOW_MIN: float = 15.0

# (question number, dropoff rate %) estimates until per-question telemetry exists
DROPOFF_PLACEHOLDER: tuple[tuple[int, float], ...] = ((1, 2.0), (5, 1.0), (8, 1.5))

MAX_QUESTIONS: int = 50
MIN_OPTIONS: int = 2
MAX_OPTIONS: int = 6
MAX_OPTION_VALUE: int = 10
MAX_DIMENSIONS: int = 10
MAX_RANGE_CRITERIA: int = 10
MAX_RULE_CRITERIA: int = 20

MAX_TIME_SPENT: float = 1440.0

INLINE_REPAIR_ENABLED = _env_bool("INLINE_REPAIR_ENABLED", INLINE_REPAIR_ENABLED)
TIME_FAST_MAX = _env_float("TIME_FAST_MAX", TIME_FAST_MAX)
TIME_SLOW_MIN = _env_float("TIME_SLOW_MIN", TIME_SLOW_MIN)
MAX_QUESTIONS = _env_int("MAX_QUESTIONS", MAX_QUESTIONS)
MAX_OPTIONS = _env_int("MAX_OPTIONS", MAX_OPTIONS)
MAX_OPTION_VALUE = _env_int("MAX_OPTION_VALUE", MAX_OPTION_VALUE)
MAX_DIMENSIONS = _env_int("MAX_DIMENSIONS", MAX_DIMENSIONS)
MAX_RANGE_CRITERIA = _env_int("MAX_RANGE_CRITERIA", MAX_RANGE_CRITERIA)
MAX_RULE_CRITERIA = _env_int("MAX_RULE_CRITERIA", MAX_RULE_CRITERIA)


def load_config(path: str = "config.json") -> dict:
    cfg: dict = {}
    p = pathlib.Path(path)
    if p.exists():
        try:
            cfg = json.loads(p.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            cfg = {}
    e = os.environ
    if e.get("DATA_DIR"): cfg["DATA_DIR"] = e.get("DATA_DIR")
    if e.get("INLINE_REPAIR_ENABLED"): cfg["INLINE_REPAIR_ENABLED"] = _env_bool("INLINE_REPAIR_ENABLED", True)
    if e.get("CORS_ORIGINS"):
        cfg["CORS_ORIGINS"] = [o.strip() for o in e["CORS_ORIGINS"].split(",") if o.strip()]
    return cfg
