# quiz_game.py
"""Game flow between a country source, a QuizSession and the screen.

The presenter and notifier are ports: any object with the listed methods
works, so the Streamlit app and the tests plug in their own.
"""
import logging
import random
from typing import List, Optional, Protocol, Sequence, Tuple, Union

from country_source import Country
from quiz_core import (
    AnswerOutcome,
    DataFetchError,
    Difficulty,
    InsufficientPoolError,
    InvalidStateError,
    QuizMode,
    QuizResult,
    QuizSession,
    build_pool,
    generate_options,
)
from quiz_settings import QuizSettings, load_settings

logger = logging.getLogger(__name__)


class CountrySource(Protocol):
    def fetch_all(self) -> List[Country]: ...


class Presenter(Protocol):
    def render_question(self, question: Country, mode: QuizMode, number: int, total: int) -> None: ...

    def render_options(self, options: Sequence[Country], mode: QuizMode) -> None: ...

    def mark_option_result(self, outcome: AnswerOutcome) -> None: ...

    def show_final_result(self, result: QuizResult) -> None: ...

    def show_error(self, message: str) -> None: ...


class Notifier(Protocol):
    def notify_correct(self) -> None: ...

    def notify_incorrect(self) -> None: ...


class NullNotifier:
    def notify_correct(self) -> None:
        pass

    def notify_incorrect(self) -> None:
        pass


class QuizGame:
    """Drive one player's games: load data, start, answer, advance, finish."""

    def __init__(
        self,
        source: CountrySource,
        presenter: Presenter,
        notifier: Optional[Notifier] = None,
        rng: Optional[random.Random] = None,
        settings: Optional[QuizSettings] = None,
    ):
        self.source = source
        self.presenter = presenter
        self.notifier = notifier or NullNotifier()
        self.rng = rng
        self.settings = settings or load_settings()

        self.countries: List[Country] = []
        self.session: Optional[QuizSession] = None
        self.mode = QuizMode.parse(self.settings.mode)
        self.difficulty = Difficulty.parse(self.settings.difficulty)
        self.question_count = self.settings.question_count
        self.options: Tuple[Country, ...] = ()
        self.last_outcome: Optional[AnswerOutcome] = None

    @property
    def answer_delay_seconds(self) -> float:
        return self.settings.answer_delay_seconds

    def load_countries(self) -> List[Country]:
        """Fetch the country list unless it is already loaded.

        DataFetchError from the source propagates unchanged.
        """
        if not self.countries:
            self.countries = list(self.source.fetch_all())
        return self.countries

    def set_mode(self, mode: Union[QuizMode, str]) -> None:
        """Choose the mode for the next game; a running game keeps its own."""
        self.mode = QuizMode.parse(mode)

    def start(
        self,
        difficulty: Union[Difficulty, str, None] = None,
        mode: Union[QuizMode, str, None] = None,
        question_count: Optional[int] = None,
    ) -> QuizSession:
        if difficulty is not None:
            self.difficulty = Difficulty.parse(difficulty)
        if mode is not None:
            self.set_mode(mode)
        if question_count is not None:
            self.question_count = question_count

        previous_session, previous_options = self.session, self.options
        try:
            countries = self.load_countries()
            pool = build_pool(countries, self.difficulty)
            session = QuizSession()
            session.start(pool, self.difficulty, self.mode, self.question_count, rng=self.rng)
            self.session = session
            self.present_current()
        except (DataFetchError, InsufficientPoolError) as e:
            # a failed start leaves the previous game, if any, untouched
            self.session, self.options = previous_session, previous_options
            logger.error("Could not start a %s game: %s", self.difficulty.value, e)
            self.presenter.show_error(str(e))
            raise
        return session

    def restart(self) -> QuizSession:
        return self.start(self.difficulty)

    def abandon(self) -> None:
        """Drop the current game, e.g. when the player returns to the title."""
        if self.session is not None and not self.session.is_finished():
            logger.info("Game abandoned at question %d/%d", self.session.question_number, self.session.total_questions)
        self.session = None
        self.options = ()
        self.last_outcome = None

    def _require_session(self) -> QuizSession:
        if self.session is None:
            raise InvalidStateError("No game has been started")
        return self.session

    def present_current(self) -> None:
        """Show the current question with fresh options, or the final result."""
        session = self._require_session()
        self.last_outcome = None
        if session.is_finished():
            self.options = ()
            self.presenter.show_final_result(session.result())
            return

        question = session.current_question()
        self.options = tuple(generate_options(
            question,
            self.countries,
            wrong_count=self.settings.wrong_option_count,
            rng=self.rng,
        ))
        self.presenter.render_question(question, session.mode, session.question_number, session.total_questions)
        self.presenter.render_options(self.options, session.mode)

    def answer(self, selected: Country) -> Optional[AnswerOutcome]:
        """Submit ``selected``; returns None if the question was already answered."""
        session = self._require_session()
        outcome = session.submit_answer(selected)
        if outcome is None:
            return None
        self.last_outcome = outcome
        self.presenter.mark_option_result(outcome)
        self._notify(outcome.is_correct)
        return outcome

    def answer_by_code(self, code: str) -> Optional[AnswerOutcome]:
        for option in self.options:
            if option.code == code:
                return self.answer(option)
        raise ValueError(f"{code!r} is not one of the current options")

    def next_question(self) -> None:
        session = self._require_session()
        session.advance()
        try:
            self.present_current()
        except InsufficientPoolError as e:
            logger.error("Could not present question %d: %s", session.question_number, e)
            self.presenter.show_error(str(e))
            raise

    def _notify(self, is_correct: bool) -> None:
        try:
            if is_correct:
                self.notifier.notify_correct()
            else:
                self.notifier.notify_incorrect()
        except Exception as e:
            logger.warning("Answer notification failed: %s", e)
