"""Per-type play engines.

Every engine implements the same contract over an explicit state object:
``new_state`` builds the transient state, ``render`` draws the current
screen, ``evaluate`` applies one player action and reports whether the game
is over, ``score`` grades the state and ``public_view`` strips the answers
from a definition before it is shown to a player.
"""
from dataclasses import dataclass, field
from difflib import SequenceMatcher
from typing import Dict, List, Optional, Tuple
import math
import random
import re

from mindwave.engine.models import (
    POINTS_PER_ITEM,
    AddBlockAction,
    AnswerAction,
    ClearBlankAction,
    DebugGame,
    EditCodeAction,
    FillInGame,
    QuizGame,
    RemoveBlockAction,
    Screen,
    SelectLineAction,
    SortAction,
    SorterGame,
    SorterItem,
    SqlBuilderGame,
    SubmitAction,
    UnjumbleGame,
    UseWordAction,
)
from mindwave.utils.errors import GameError

BLANK_MARKER = re.compile(r"(\[.*?\])")


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def proportional_score(correct: int, total: int, total_points: int) -> int:
    if total <= 0:
        return 0
    return round_half_up(correct / total * total_points)


def code_similarity(submitted: str, reference: str) -> int:
    """Similarity of two code strings as an integer percentage."""
    return round_half_up(SequenceMatcher(None, submitted, reference).ratio() * 100)


def _shuffled(values, rng: random.Random) -> list:
    values = list(values)
    rng.shuffle(values)
    return values


def _check_index(index: int, size: int, what: str) -> None:
    if not 0 <= index < size:
        raise GameError(f"No {what} at position {index}")


class GameEngine:
    """Base contract; subclasses handle one game variant."""

    def new_state(self, game, rng: random.Random):
        raise NotImplementedError

    def render(self, game, state) -> Screen:
        raise NotImplementedError

    def evaluate(self, game, state, action) -> bool:
        raise NotImplementedError

    def score(self, game, state) -> int:
        raise NotImplementedError

    def public_view(self, game, rng: Optional[random.Random] = None) -> dict:
        return game.model_dump(by_alias=True)

    def is_complete(self, game, state) -> bool:
        return False

    def details(self, game, state) -> dict:
        """Extra feedback shown on the result screen."""
        return {}

    def _unsupported(self, action):
        raise GameError(f"Action '{action.kind}' is not valid for this game")


# Quiz
@dataclass
class QuizState:
    index: int = 0
    score: int = 0


class QuizEngine(GameEngine):

    def new_state(self, game: QuizGame, rng):
        return QuizState()

    def is_complete(self, game, state):
        return state.index >= len(game.questions)

    def render(self, game: QuizGame, state: QuizState) -> Screen:
        total = len(game.questions)
        question = game.questions[state.index]
        return Screen(
            kind="question",
            heading=f"Question {state.index + 1} of {total}",
            prompt=question.text,
            choices=question.options,
            progress=state.index / total * 100,
        )

    def evaluate(self, game: QuizGame, state: QuizState, action) -> bool:
        if not isinstance(action, AnswerAction):
            self._unsupported(action)
        if self.is_complete(game, state):
            raise GameError("All questions have been answered")
        question = game.questions[state.index]
        _check_index(action.option, len(question.options), "option")
        if action.option == question.correct:
            state.score += POINTS_PER_ITEM
        state.index += 1
        return self.is_complete(game, state)

    def score(self, game, state):
        return state.score

    def public_view(self, game: QuizGame, rng=None):
        return game.model_dump(by_alias=True, exclude={"questions": {"__all__": {"correct"}}})


# Code unjumble
@dataclass
class UnjumbleState:
    lines: List[Tuple[str, int]]  # (text, original position)
    selected: Optional[int] = None


class UnjumbleEngine(GameEngine):

    def new_state(self, game: UnjumbleGame, rng):
        return UnjumbleState(lines=_shuffled(((text, i) for i, text in enumerate(game.lines)), rng))

    def render(self, game, state: UnjumbleState) -> Screen:
        return Screen(
            kind="unjumble",
            heading="Reorder the Code",
            prompt="Click two lines to swap them. Arrange in correct order.",
            choices=[text for text, _ in state.lines],
            selected=state.selected,
        )

    def evaluate(self, game, state: UnjumbleState, action) -> bool:
        if isinstance(action, SubmitAction):
            return True
        if not isinstance(action, SelectLineAction):
            self._unsupported(action)
        _check_index(action.index, len(state.lines), "line")
        if state.selected is None:
            state.selected = action.index
        else:
            first, second = state.selected, action.index
            state.lines[first], state.lines[second] = state.lines[second], state.lines[first]
            state.selected = None
        return False

    def score(self, game: UnjumbleGame, state: UnjumbleState):
        in_place = sum(1 for position, (_, original) in enumerate(state.lines) if original == position)
        return proportional_score(in_place, len(game.lines), game.total_points)

    def public_view(self, game: UnjumbleGame, rng=None):
        view = game.model_dump(by_alias=True)
        view["lines"] = _shuffled(game.lines, rng or random.Random())
        return view


# Tech sorter
@dataclass
class SorterState:
    remaining: List[SorterItem]
    current: Optional[SorterItem] = None
    score: int = 0


class SorterEngine(GameEngine):

    def new_state(self, game: SorterGame, rng):
        remaining = list(game.items)
        current = remaining.pop() if remaining else None
        return SorterState(remaining=remaining, current=current)

    def is_complete(self, game, state):
        return state.current is None

    def render(self, game: SorterGame, state: SorterState) -> Screen:
        return Screen(
            kind="sorter",
            heading="Sort the Item",
            prompt=state.current.name,
            choices=game.categories,
            remaining=len(state.remaining),
        )

    def evaluate(self, game: SorterGame, state: SorterState, action) -> bool:
        if not isinstance(action, SortAction):
            self._unsupported(action)
        if state.current is None:
            raise GameError("All items have been sorted")
        if action.category not in game.categories:
            raise GameError(f"Unknown category '{action.category}'")
        if action.category == state.current.category:
            state.score += POINTS_PER_ITEM
        state.current = state.remaining.pop() if state.remaining else None
        return self.is_complete(game, state)

    def score(self, game, state):
        return state.score

    def public_view(self, game: SorterGame, rng=None):
        return game.model_dump(by_alias=True, exclude={"items": {"__all__": {"category"}}})


# Syntax fill-in
@dataclass
class FillInState:
    bank: List[str]
    filled: Dict[int, int] = field(default_factory=dict)  # blank -> bank position


class FillInEngine(GameEngine):

    def new_state(self, game: FillInGame, rng):
        return FillInState(bank=_shuffled(game.blanks, rng))

    def _placed(self, game: FillInGame, state: FillInState) -> List[Optional[str]]:
        return [
            state.bank[state.filled[i]] if i in state.filled else None
            for i in range(len(game.blanks))
        ]

    def render(self, game: FillInGame, state: FillInState) -> Screen:
        placed = self._placed(game, state)
        counter = iter(range(len(BLANK_MARKER.findall(game.content))))

        def fill(_match):
            index = next(counter)
            word = placed[index] if index < len(placed) else None
            return f"[{word or '___'}]"

        return Screen(
            kind="fill-in",
            heading="Fill in the blanks",
            prompt=BLANK_MARKER.sub(fill, game.content),
            choices=state.bank,
            disabled=sorted(state.filled.values()),
            slots=placed,
        )

    def evaluate(self, game: FillInGame, state: FillInState, action) -> bool:
        if isinstance(action, SubmitAction):
            return True
        if isinstance(action, UseWordAction):
            _check_index(action.index, len(state.bank), "word")
            if action.index in state.filled.values():
                raise GameError("That word is already placed")
            for blank in range(len(game.blanks)):
                if blank not in state.filled:
                    state.filled[blank] = action.index
                    break
            return False
        if isinstance(action, ClearBlankAction):
            _check_index(action.index, len(game.blanks), "blank")
            state.filled.pop(action.index, None)
            return False
        self._unsupported(action)

    def score(self, game: FillInGame, state: FillInState):
        placed = self._placed(game, state)
        correct = sum(1 for word, answer in zip(placed, game.blanks) if word == answer)
        return proportional_score(correct, len(game.blanks), game.total_points)

    def public_view(self, game: FillInGame, rng=None):
        view = game.model_dump(by_alias=True, exclude={"blanks"})
        view["content"] = BLANK_MARKER.sub("[___]", game.content)
        view["wordBank"] = _shuffled(game.blanks, rng or random.Random())
        return view


# SQL builder
@dataclass
class SqlBuilderState:
    pool: List[str]
    built: List[str] = field(default_factory=list)


class SqlBuilderEngine(GameEngine):

    def new_state(self, game: SqlBuilderGame, rng):
        return SqlBuilderState(pool=_shuffled(game.blocks + game.distractors, rng))

    def render(self, game: SqlBuilderGame, state: SqlBuilderState) -> Screen:
        return Screen(
            kind="sql-builder",
            heading="Build the Query",
            prompt=game.description or "",
            choices=state.pool,
            slots=state.built,
        )

    def evaluate(self, game, state: SqlBuilderState, action) -> bool:
        if isinstance(action, SubmitAction):
            return True
        if isinstance(action, AddBlockAction):
            _check_index(action.index, len(state.pool), "block")
            state.built.append(state.pool.pop(action.index))
            return False
        if isinstance(action, RemoveBlockAction):
            _check_index(action.index, len(state.built), "query block")
            state.pool.append(state.built.pop(action.index))
            return False
        self._unsupported(action)

    def score(self, game: SqlBuilderGame, state: SqlBuilderState):
        if state.built == game.blocks:
            return game.total_points
        in_place = sum(
            1 for position, block in enumerate(state.built)
            if position < len(game.blocks) and block == game.blocks[position]
        )
        return proportional_score(in_place, len(game.blocks), game.total_points)

    def public_view(self, game: SqlBuilderGame, rng=None):
        view = game.model_dump(by_alias=True, exclude={"blocks", "distractors"})
        view["pool"] = _shuffled(game.blocks + game.distractors, rng or random.Random())
        return view


# Debug the monolith
@dataclass
class DebugState:
    code: str


class DebugEngine(GameEngine):

    def new_state(self, game: DebugGame, rng):
        # the editor starts out holding the buggy code
        return DebugState(code=game.buggy_code)

    def render(self, game: DebugGame, state: DebugState) -> Screen:
        return Screen(
            kind="debug",
            heading="Debug the Code",
            prompt=game.description or "Fix the bugs in the code below",
            code=state.code,
        )

    def evaluate(self, game, state: DebugState, action) -> bool:
        if isinstance(action, SubmitAction):
            return True
        if isinstance(action, EditCodeAction):
            state.code = action.code
            return False
        self._unsupported(action)

    def score(self, game: DebugGame, state: DebugState):
        similarity = code_similarity(state.code, game.perfect_code)
        return round_half_up(similarity / 100 * game.total_points)

    def details(self, game: DebugGame, state: DebugState):
        similarity = code_similarity(state.code, game.perfect_code)
        details = {
            "similarity": similarity,
            "explanation": game.explanation or "No explanation provided.",
        }
        if similarity < 100:
            details["perfectCode"] = game.perfect_code
        return details

    def public_view(self, game: DebugGame, rng=None):
        return game.model_dump(by_alias=True, exclude={"perfect_code", "explanation"})


ENGINES: Dict[type, GameEngine] = {
    QuizGame: QuizEngine(),
    UnjumbleGame: UnjumbleEngine(),
    SorterGame: SorterEngine(),
    FillInGame: FillInEngine(),
    SqlBuilderGame: SqlBuilderEngine(),
    DebugGame: DebugEngine(),
}


def engine_for(game) -> GameEngine:
    try:
        return ENGINES[type(game)]
    except KeyError:
        raise GameError(f"No engine for game type '{getattr(game, 'type', None)}'")
