"""Game definitions, player actions and view models for the play engine.

Game definitions form a tagged union discriminated on ``type``; several
legacy tag spellings are accepted for the same variant. Wire keys are
camelCase (``totalPoints``, ``buggyCode``) while attributes stay snake_case.
"""
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from mindwave.utils.errors import GameError

POINTS_PER_ITEM = 10


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GameBase(WireModel):
    id: Optional[str] = None
    title: str = "Untitled"
    description: Optional[str] = None
    duration: int = 10  # minutes
    total_points: int = 100


# Quiz
class QuizQuestion(WireModel):
    text: str
    options: List[str] = Field(min_length=2)
    correct: int

    @model_validator(mode="after")
    def check_correct_index(self):
        if not 0 <= self.correct < len(self.options):
            raise ValueError("correct must index one of the options")
        return self


class QuizGame(GameBase):
    type: Literal["quiz", "trivia-challenge"] = "quiz"
    questions: List[QuizQuestion] = []

    @model_validator(mode="after")
    def derive_total(self):
        self.total_points = POINTS_PER_ITEM * len(self.questions)
        return self


# Code unjumble
class UnjumbleGame(GameBase):
    type: Literal["unjumble", "code-unjumble"] = "unjumble"
    lines: List[str] = Field(min_length=1)


# Tech sorter
class SorterItem(WireModel):
    name: str
    category: str


class SorterGame(GameBase):
    type: Literal["sorter", "tech-sorter"] = "sorter"
    categories: List[str] = Field(min_length=1)
    items: List[SorterItem] = []
    total_points: Optional[int] = None

    @model_validator(mode="after")
    def default_total(self):
        if self.total_points is None:
            self.total_points = POINTS_PER_ITEM * len(self.items)
        return self


# Syntax fill-in
class FillInGame(GameBase):
    type: Literal["fillin", "syntax-fill"] = "fillin"
    content: str
    blanks: List[str] = Field(min_length=1)


# SQL builder
class SqlBuilderGame(GameBase):
    type: Literal["sql", "sql-builder"] = "sql"
    blocks: List[str] = Field(min_length=1)
    distractors: List[str] = []


# Debug the monolith
class DebugGame(GameBase):
    type: Literal["bug-hunt"] = "bug-hunt"
    duration: int = 15
    language: str = "javascript"
    buggy_code: str = ""
    perfect_code: str = ""
    explanation: Optional[str] = None
    bug_count: int = 0


GameDefinition = Annotated[
    Union[QuizGame, UnjumbleGame, SorterGame, FillInGame, SqlBuilderGame, DebugGame],
    Field(discriminator="type"),
]

_game_adapter = TypeAdapter(GameDefinition)


def parse_game(data: Dict[str, Any]) -> GameDefinition:
    """Validate a raw game document into its tagged variant."""
    try:
        return _game_adapter.validate_python(data)
    except PydanticValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ()))
        raise GameError(f"Invalid game definition ({location}): {first.get('msg')}")


# Player actions
class AnswerAction(WireModel):
    kind: Literal["answer"] = "answer"
    option: int


class SelectLineAction(WireModel):
    kind: Literal["select-line"] = "select-line"
    index: int


class SortAction(WireModel):
    kind: Literal["sort"] = "sort"
    category: str


class UseWordAction(WireModel):
    kind: Literal["use-word"] = "use-word"
    index: int  # position in the word bank


class ClearBlankAction(WireModel):
    kind: Literal["clear-blank"] = "clear-blank"
    index: int


class AddBlockAction(WireModel):
    kind: Literal["add-block"] = "add-block"
    index: int  # position in the available pool


class RemoveBlockAction(WireModel):
    kind: Literal["remove-block"] = "remove-block"
    index: int  # position in the built query


class EditCodeAction(WireModel):
    kind: Literal["edit-code"] = "edit-code"
    code: str


class SubmitAction(WireModel):
    kind: Literal["submit"] = "submit"


PlayerAction = Annotated[
    Union[
        AnswerAction,
        SelectLineAction,
        SortAction,
        UseWordAction,
        ClearBlankAction,
        AddBlockAction,
        RemoveBlockAction,
        EditCodeAction,
        SubmitAction,
    ],
    Field(discriminator="kind"),
]

_action_adapter = TypeAdapter(PlayerAction)


def parse_action(data: Union[Dict[str, Any], BaseModel]) -> PlayerAction:
    if isinstance(data, BaseModel):
        return data
    try:
        return _action_adapter.validate_python(data)
    except PydanticValidationError as e:
        raise GameError(f"Invalid action: {e.errors()[0].get('msg')}")


class Screen(WireModel):
    """One interactive screen, as the client should draw it."""
    kind: Literal["question", "unjumble", "sorter", "fill-in", "sql-builder", "debug", "result", "error"]
    heading: str
    prompt: Optional[str] = None
    choices: List[str] = []
    disabled: List[int] = []
    selected: Optional[int] = None
    slots: List[Optional[str]] = []
    code: Optional[str] = None
    progress: float = 0.0
    remaining: Optional[int] = None
    time_left: Optional[int] = None
    message: Optional[str] = None
