# flag_quiz_app.py
import logging
import pathlib
import time
from typing import Dict, List, Optional, Sequence

import streamlit as st

from country_source import Country, RestCountriesSource
from quiz_core import (
    AnswerOutcome,
    DataFetchError,
    Difficulty,
    InsufficientPoolError,
    QuizMode,
    QuizResult,
    ResultTier,
)
from quiz_game import QuizGame
from result_map import build_result_map
from quiz_settings import (
    COUNTRIES_API_URL,
    CORRECT_SOUND_PATH,
    REQUEST_TIMEOUT_SECONDS,
    TRANSLATION_LANGUAGE,
    WRONG_SOUND_PATH,
    setup_logging,
)

setup_logging()
logger = logging.getLogger(__name__)

# ---------- Text ----------
FETCH_ERROR_MESSAGE = (
    "Could not load country data. Check your internet connection and reload the page."
)

RESULT_MESSAGES: Dict[ResultTier, str] = {
    ResultTier.PERFECT: "Perfect!! Every single flag right! 🏆",
    ResultTier.GREAT: "Great job! So close to perfect! ✨",
    ResultTier.GOOD: "Good! Keep it up! 👍",
    ResultTier.KEEP_TRYING: "Don't give up! You'll get more next time! 💪",
}

DIFFICULTY_LABELS = {
    Difficulty.EASY: ("Easy", "Well-known countries"),
    Difficulty.NORMAL: ("Normal", "UN member states"),
    Difficulty.HARD: ("Hard", "Territories and non-members"),
    Difficulty.ALL: ("All", "Every flag there is"),
}

MODE_LABELS = {
    QuizMode.NAME_FROM_FLAG: "🏳️ Flag → country name",
    QuizMode.FLAG_FROM_NAME: "🔤 Country name → flag",
}


# ---------- Data ----------
@st.cache_data(ttl=60 * 60 * 24, show_spinner="Loading countries...")
def load_countries(url: str, timeout: float, language: Optional[str]) -> List[Country]:
    return RestCountriesSource(url=url, timeout=timeout, language=language).fetch_all()


class CachedCountrySource:
    def fetch_all(self) -> List[Country]:
        return load_countries(COUNTRIES_API_URL, REQUEST_TIMEOUT_SECONDS, TRANSLATION_LANGUAGE)


# ---------- Presentation ----------
class StreamlitPresenter:
    """Keep what the game asked to show; the render_* functions draw it on every rerun."""

    def __init__(self):
        self.reset()

    def reset(self) -> None:
        self.screen = "start"
        self.question: Optional[Country] = None
        self.mode: Optional[QuizMode] = None
        self.number = 0
        self.total = 0
        self.options: Sequence[Country] = ()
        self.outcome: Optional[AnswerOutcome] = None
        self.result: Optional[QuizResult] = None
        self.error: Optional[str] = None

    def render_question(self, question: Country, mode: QuizMode, number: int, total: int) -> None:
        self.screen = "quiz"
        self.question = question
        self.mode = mode
        self.number = number
        self.total = total
        self.outcome = None
        self.error = None

    def render_options(self, options: Sequence[Country], mode: QuizMode) -> None:
        self.options = tuple(options)

    def mark_option_result(self, outcome: AnswerOutcome) -> None:
        self.outcome = outcome

    def show_final_result(self, result: QuizResult) -> None:
        self.screen = "result"
        self.result = result
        self.outcome = None

    def show_error(self, message: str) -> None:
        self.error = message


class StreamlitSoundNotifier:
    """Queue a sound on answer; play_pending() emits it during the next render."""

    def __init__(self, correct_path: pathlib.Path, wrong_path: pathlib.Path):
        self.correct_path = correct_path
        self.wrong_path = wrong_path
        self.pending: Optional[pathlib.Path] = None
        self._missing = set()

    def notify_correct(self) -> None:
        self.pending = self.correct_path

    def notify_incorrect(self) -> None:
        self.pending = self.wrong_path

    def play_pending(self) -> None:
        path, self.pending = self.pending, None
        if path is None:
            return
        if not path.exists():
            if path not in self._missing:
                logger.warning("Sound file not found, skipping: %s", path)
                self._missing.add(path)
            return
        st.audio(path.read_bytes(), format="audio/mp3", autoplay=True)


def option_label(index: int, option: Country, mode: QuizMode, outcome: Optional[AnswerOutcome]) -> str:
    mark = ""
    if outcome is not None:
        if option.code == outcome.question.code:
            mark = "✅ "
        elif option.code == outcome.selected.code:
            mark = "❌ "
    if mode is QuizMode.FLAG_FROM_NAME:
        return f"{mark}{index + 1}"
    return f"{mark}{index + 1}. {option.display_name}"


def start_game(game: QuizGame, difficulty: Difficulty, mode: Optional[QuizMode] = None) -> None:
    st.session_state["confirm_title"] = False
    try:
        game.start(difficulty, mode=mode)
    except DataFetchError:
        game.presenter.show_error(FETCH_ERROR_MESSAGE)
    except InsufficientPoolError:
        # presenter already holds the message
        pass


def back_to_title(game: QuizGame) -> None:
    game.abandon()
    game.presenter.reset()
    st.session_state["confirm_title"] = False


def render_title_confirmation(game: QuizGame) -> None:
    if not st.session_state.get("confirm_title", False):
        if st.button("Back to title"):
            st.session_state["confirm_title"] = True
            st.rerun()
        return
    st.warning("Return to the title screen? Your current game will be lost.")
    yes_col, no_col = st.columns(2)
    with yes_col:
        if st.button("Yes, go back", type="primary"):
            back_to_title(game)
            st.rerun()
    with no_col:
        if st.button("Keep playing"):
            st.session_state["confirm_title"] = False
            st.rerun()


def render_start(game: QuizGame) -> None:
    st.markdown("Guess the country from its flag, or pick the right flag for a country.")
    modes = list(QuizMode)
    chosen_mode = st.radio(
        "Mode",
        options=modes,
        index=modes.index(game.mode),
        format_func=lambda m: MODE_LABELS[m],
        key="mode_choice",
    )
    if chosen_mode != game.mode:
        game.set_mode(chosen_mode)

    st.subheader("Choose a difficulty to start")
    cols = st.columns(len(DIFFICULTY_LABELS))
    for col, (difficulty, (label, caption)) in zip(cols, DIFFICULTY_LABELS.items()):
        with col:
            if st.button(label, key=f"difficulty_{difficulty.value}", type="primary", use_container_width=True):
                start_game(game, difficulty, mode=chosen_mode)
                st.rerun()
            st.caption(caption)


def render_quiz(game: QuizGame, presenter: StreamlitPresenter, notifier: StreamlitSoundNotifier) -> None:
    session = game.session
    score_col, progress_col = st.columns(2)
    with score_col:
        st.metric("Score", session.score if session else 0)
    with progress_col:
        st.metric("Question", f"{presenter.number} / {presenter.total}")

    q = presenter.question
    if presenter.mode is QuizMode.NAME_FROM_FLAG:
        st.subheader("Which country does this flag belong to?")
        st.image(q.flag_image_url, width=320)
    else:
        st.subheader(f"Which flag belongs to **{q.display_name}**?")

    outcome = presenter.outcome
    cols = st.columns(2)
    for idx, option in enumerate(presenter.options):
        with cols[idx % 2]:
            if presenter.mode is QuizMode.FLAG_FROM_NAME:
                st.image(option.flag_image_url, use_container_width=True)
            clicked = st.button(
                option_label(idx, option, presenter.mode, outcome),
                key=f"option_{presenter.number}_{option.code}",
                disabled=outcome is not None,
                use_container_width=True,
            )
            if clicked:
                game.answer_by_code(option.code)
                st.rerun()

    if outcome is not None:
        if outcome.is_correct:
            st.success(f"Correct! That's {outcome.question.display_name}.")
        else:
            st.error(f"Not quite. The answer was {outcome.question.display_name}.")
        notifier.play_pending()
        time.sleep(game.answer_delay_seconds)
        try:
            game.next_question()
        except InsufficientPoolError as e:
            back_to_title(game)
            presenter.show_error(str(e))
        st.rerun()

    st.write("---")
    render_title_confirmation(game)


def render_result(game: QuizGame, presenter: StreamlitPresenter) -> None:
    result = presenter.result
    st.subheader("Results")
    st.metric("Final score", f"{result.score} / {result.total_questions}")
    if result.total_questions == 0:
        st.info("No countries match this difficulty, so there were no questions.")
    else:
        st.success(RESULT_MESSAGES[result.tier])

    if game.session and game.session.answers:
        st.plotly_chart(build_result_map(game.session.answers), use_container_width=True)
        with st.expander("Your answers"):
            for i, outcome in enumerate(game.session.answers, start=1):
                verdict = "✅" if outcome.is_correct else f"❌ (you picked {outcome.selected.display_name})"
                st.write(f"{i}. {outcome.question.display_name} {verdict}")

    again_col, title_col = st.columns(2)
    with again_col:
        if st.button("Play again", type="primary"):
            start_game(game, game.difficulty)
            st.rerun()
    with title_col:
        if st.button("Back to title"):
            back_to_title(game)
            st.rerun()


# ---------- App UI ----------
st.set_page_config(page_title="World Flag Quiz", layout="centered")

if "game" not in st.session_state:
    st.session_state["game"] = QuizGame(
        CachedCountrySource(),
        StreamlitPresenter(),
        StreamlitSoundNotifier(CORRECT_SOUND_PATH, WRONG_SOUND_PATH),
    )
if "confirm_title" not in st.session_state:
    st.session_state["confirm_title"] = False

game: QuizGame = st.session_state["game"]
presenter: StreamlitPresenter = game.presenter
notifier: StreamlitSoundNotifier = game.notifier

st.title("🌍 World Flag Quiz")

if presenter.error:
    st.error(presenter.error)

if presenter.screen == "quiz" and presenter.question is not None:
    render_quiz(game, presenter, notifier)
elif presenter.screen == "result" and presenter.result is not None:
    render_result(game, presenter)
else:
    render_start(game)
