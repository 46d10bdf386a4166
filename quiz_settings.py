# quiz_settings.py
import logging
import os
import pathlib
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


def _env_int(name: str, default: int, minimum: int = 1) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer, using %s", name, raw, default)
        return default
    if value < minimum:
        logger.warning("Ignoring %s=%r: must be at least %s, using %s", name, raw, minimum, default)
        return default
    return value


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not a number, using %s", name, raw, default)
        return default
    if value < 0:
        logger.warning("Ignoring %s=%r: must not be negative, using %s", name, raw, default)
        return default
    return value


# ---------- Config ----------
BASE_DIR = pathlib.Path(__file__).resolve().parent

COUNTRIES_API_URL = os.environ.get("FLAG_QUIZ_API_URL", "https://restcountries.com/v3.1/all")
COUNTRIES_API_FIELDS = "flags,name,translations,cca3,independent,unMember"
USER_AGENT = "flag-quiz/1.0"
REQUEST_TIMEOUT_SECONDS = _env_float("FLAG_QUIZ_TIMEOUT", 20.0)

# Key under "translations" in the API payload, e.g. "jpn" or "fra".
# Unset means common (English) names are shown.
TRANSLATION_LANGUAGE: Optional[str] = (os.environ.get("FLAG_QUIZ_LANGUAGE") or "").strip() or None

DEFAULT_QUESTION_COUNT = _env_int("FLAG_QUIZ_QUESTIONS", 10)
DEFAULT_DIFFICULTY = "normal"
DEFAULT_MODE = "nameFromFlag"
WRONG_OPTION_COUNT = 3
ANSWER_DELAY_SECONDS = _env_float("FLAG_QUIZ_ANSWER_DELAY", 1.5)

CORRECT_SOUND_PATH = pathlib.Path(
    os.environ.get("FLAG_QUIZ_CORRECT_SOUND", str(BASE_DIR / "sounds" / "correct.mp3"))
)
WRONG_SOUND_PATH = pathlib.Path(
    os.environ.get("FLAG_QUIZ_WRONG_SOUND", str(BASE_DIR / "sounds" / "wrong.mp3"))
)

LOG_LEVEL = os.environ.get("FLAG_QUIZ_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass(frozen=True)
class QuizSettings:
    """Game-facing settings bundled for QuizGame."""
    question_count: int = DEFAULT_QUESTION_COUNT
    difficulty: str = DEFAULT_DIFFICULTY
    mode: str = DEFAULT_MODE
    wrong_option_count: int = WRONG_OPTION_COUNT
    answer_delay_seconds: float = ANSWER_DELAY_SECONDS


def load_settings() -> QuizSettings:
    return QuizSettings(
        question_count=DEFAULT_QUESTION_COUNT,
        difficulty=DEFAULT_DIFFICULTY,
        mode=DEFAULT_MODE,
        wrong_option_count=WRONG_OPTION_COUNT,
        answer_delay_seconds=ANSWER_DELAY_SECONDS,
    )


def setup_logging(level: str = LOG_LEVEL) -> None:
    """Configure root logging once for the app process."""
    log_level = getattr(logging, str(level).upper(), logging.INFO)
    logging.basicConfig(level=log_level, format=LOG_FORMAT)
