# quiz_core.py
"""Quiz rules: difficulty pools, question selection, answer options, the
per-game session state machine and result tiers.

Nothing here touches the network or the UI. Every function that needs
randomness takes an optional ``rng`` (a ``random.Random``); without one the
module-level ``random`` functions are used.
"""
import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from country_source import Country, DataFetchError, QuizError

logger = logging.getLogger(__name__)

__all__ = [
    "AnswerOutcome",
    "Country",
    "DataFetchError",
    "Difficulty",
    "EASY_COUNTRY_CODES",
    "InsufficientPoolError",
    "InvalidStateError",
    "QuizError",
    "QuizMode",
    "QuizResult",
    "QuizSession",
    "ResultTier",
    "SessionState",
    "build_pool",
    "classify_result",
    "generate_options",
    "select_questions",
    "shuffle",
]


# ---------- Errors ----------
class InsufficientPoolError(QuizError):
    """Not enough distinct countries to build the requested options."""


class InvalidStateError(QuizError):
    """A session operation was called in a state that does not allow it."""


# ---------- Enumerations ----------
class _ParsableEnum(str, Enum):
    @classmethod
    def parse(cls, value):
        if isinstance(value, cls):
            return value
        text = str(value or "").strip()
        for member in cls:
            if text.lower() in (member.value.lower(), member.name.lower()):
                return member
        allowed = ", ".join(m.value for m in cls)
        raise ValueError(f"Unknown {cls.__name__} {value!r}; expected one of: {allowed}")


class Difficulty(_ParsableEnum):
    EASY = "easy"
    NORMAL = "normal"
    HARD = "hard"
    ALL = "all"


class QuizMode(_ParsableEnum):
    NAME_FROM_FLAG = "nameFromFlag"
    FLAG_FROM_NAME = "flagFromName"


class SessionState(Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"


class ResultTier(str, Enum):
    PERFECT = "perfect"
    GREAT = "great"
    GOOD = "good"
    KEEP_TRYING = "keep_trying"


# Well-known nations for beginners. "SUI" is not an ISO code and never
# matches; it is kept because the list is product data, not derived.
EASY_COUNTRY_CODES = frozenset({
    "JPN", "USA", "GBR", "FRA", "DEU", "ITA", "CAN", "CHN", "KOR", "RUS",
    "AUS", "BRA", "IND", "ESP", "MEX", "EGY", "GRC", "TUR", "ARG", "CHE",
    "SWE", "NLD", "BEL", "SGP", "THA", "VNM", "IDN", "PHL", "MYS", "SAU",
    "ARE", "SUI", "NZL", "DNK", "FIN", "NOR", "PRT", "AUT",
})

# Distractor sampling gives up after this many draws per country in the list.
MAX_SAMPLING_ATTEMPTS_FACTOR = 50
MIN_SAMPLING_ATTEMPTS = 1000


# ---------- Pool building & sampling ----------
def build_pool(all_countries: Iterable[Country], difficulty: Union[Difficulty, str]) -> List[Country]:
    """Return the countries eligible for ``difficulty``, in input order."""
    difficulty = Difficulty.parse(difficulty)
    countries = list(all_countries)
    if difficulty is Difficulty.EASY:
        return [c for c in countries if c.code in EASY_COUNTRY_CODES]
    if difficulty is Difficulty.NORMAL:
        return [c for c in countries if c.is_un_member]
    if difficulty is Difficulty.HARD:
        return [c for c in countries if not c.is_un_member]
    return countries


def shuffle(items: Iterable, rng: Optional[random.Random] = None) -> list:
    """Fisher-Yates shuffle of a copy of ``items``."""
    rnd = rng or random
    result = list(items)
    for i in range(len(result) - 1, 0, -1):
        j = rnd.randint(0, i)
        result[i], result[j] = result[j], result[i]
    return result


def select_questions(
    pool: Sequence[Country],
    desired_count: int,
    rng: Optional[random.Random] = None,
) -> List[Country]:
    if desired_count < 1:
        raise ValueError(f"Question count must be a positive integer, got {desired_count}")
    shuffled = shuffle(pool, rng=rng)
    return shuffled[:min(desired_count, len(shuffled))]


def generate_options(
    correct: Country,
    all_countries: Sequence[Country],
    wrong_count: int = 3,
    rng: Optional[random.Random] = None,
) -> List[Country]:
    """Return ``correct`` plus ``wrong_count`` distinct distractors, shuffled.

    Distractors are drawn uniformly from ``all_countries`` and keyed on
    ``code`` only. Raises InsufficientPoolError instead of looping forever
    when the list cannot supply enough distinct codes.
    """
    if wrong_count < 0:
        raise ValueError(f"wrong_count must not be negative, got {wrong_count}")
    candidates = list(all_countries)
    available = {c.code for c in candidates} - {correct.code}
    if len(available) < wrong_count:
        raise InsufficientPoolError(
            f"Need {wrong_count} distractors for {correct.code}, "
            f"only {len(available)} other countries available"
        )

    rnd = rng or random
    wrong: List[Country] = []
    used_codes = {correct.code}
    max_attempts = max(MIN_SAMPLING_ATTEMPTS, MAX_SAMPLING_ATTEMPTS_FACTOR * len(candidates))
    attempts = 0
    while len(wrong) < wrong_count:
        if attempts >= max_attempts:
            raise InsufficientPoolError(
                f"Gave up picking distractors for {correct.code} after {attempts} draws"
            )
        attempts += 1
        pick = candidates[rnd.randrange(len(candidates))]
        if pick.code in used_codes:
            continue
        used_codes.add(pick.code)
        wrong.append(pick)

    return shuffle([correct] + wrong, rng=rng)


# ---------- Results ----------
def classify_result(score: int, total_questions: int) -> ResultTier:
    if total_questions <= 0:
        return ResultTier.KEEP_TRYING
    ratio = score / total_questions
    if ratio == 1:
        return ResultTier.PERFECT
    if ratio >= 0.8:
        return ResultTier.GREAT
    if ratio >= 0.5:
        return ResultTier.GOOD
    return ResultTier.KEEP_TRYING


@dataclass(frozen=True)
class AnswerOutcome:
    question: Country
    selected: Country
    is_correct: bool

    @property
    def correct_answer(self) -> Country:
        return self.question


@dataclass(frozen=True)
class QuizResult:
    score: int
    total_questions: int

    @property
    def ratio(self) -> float:
        return self.score / self.total_questions if self.total_questions else 0.0

    @property
    def tier(self) -> ResultTier:
        return classify_result(self.score, self.total_questions)


# ---------- Session ----------
class QuizSession:
    """One game: the fixed question queue, progress, score and answer lock.

    States run NOT_STARTED -> IN_PROGRESS -> FINISHED. While IN_PROGRESS each
    question is either awaiting an answer or locked (``answering_locked``)
    until ``advance`` presents the next one.
    """

    def __init__(self):
        self.question_queue: Tuple[Country, ...] = ()
        self.current_index = 0
        self.score = 0
        self.answering_locked = False
        self.mode: Optional[QuizMode] = None
        self.difficulty: Optional[Difficulty] = None
        self.state = SessionState.NOT_STARTED
        self.answers: List[AnswerOutcome] = []

    def start(
        self,
        pool: Optional[Sequence[Country]],
        difficulty: Union[Difficulty, str],
        mode: Union[QuizMode, str],
        question_count: int = 10,
        rng: Optional[random.Random] = None,
    ) -> None:
        if pool is None:
            raise DataFetchError("No country data has been loaded")
        difficulty = Difficulty.parse(difficulty)
        mode = QuizMode.parse(mode)
        queue = select_questions(pool, question_count, rng=rng)

        self.difficulty = difficulty
        self.mode = mode
        self.question_queue = tuple(queue)
        self.current_index = 0
        self.score = 0
        self.answers = []
        self.answering_locked = False
        self.state = SessionState.FINISHED if not queue else SessionState.IN_PROGRESS
        logger.info(
            "Session started: difficulty=%s mode=%s questions=%d (pool of %d)",
            difficulty.value, mode.value, len(queue), len(pool),
        )

    @property
    def total_questions(self) -> int:
        return len(self.question_queue)

    @property
    def question_number(self) -> int:
        """1-based number of the question on screen."""
        return min(self.current_index + 1, self.total_questions)

    def is_finished(self) -> bool:
        return self.state is SessionState.FINISHED

    def _require_in_progress(self, operation: str) -> None:
        if self.state is not SessionState.IN_PROGRESS:
            raise InvalidStateError(f"Cannot {operation} while session is {self.state.value}")

    def current_question(self) -> Country:
        self._require_in_progress("read the current question")
        return self.question_queue[self.current_index]

    def submit_answer(self, selected: Country) -> Optional[AnswerOutcome]:
        """Score ``selected`` against the current question.

        Returns None, changing nothing, if this question was already answered.
        """
        self._require_in_progress("submit an answer")
        if self.answering_locked:
            logger.debug("Ignoring repeated answer %s for question %d", selected.code, self.question_number)
            return None
        self.answering_locked = True

        question = self.question_queue[self.current_index]
        is_correct = selected.code == question.code
        if is_correct:
            self.score += 1
        outcome = AnswerOutcome(question=question, selected=selected, is_correct=is_correct)
        self.answers.append(outcome)
        logger.debug(
            "Question %d/%d: picked %s, answer %s, %s",
            self.question_number, self.total_questions, selected.code, question.code,
            "correct" if is_correct else "incorrect",
        )
        return outcome

    def advance(self) -> None:
        self._require_in_progress("advance")
        if not self.answering_locked:
            raise InvalidStateError("Cannot advance before the current question is answered")
        self.current_index += 1
        if self.current_index >= len(self.question_queue):
            self.state = SessionState.FINISHED
            logger.info("Session finished: %d/%d", self.score, self.total_questions)
        else:
            self.answering_locked = False

    def result(self) -> QuizResult:
        if self.state is not SessionState.FINISHED:
            raise InvalidStateError(f"No result while session is {self.state.value}")
        return QuizResult(score=self.score, total_questions=self.total_questions)
