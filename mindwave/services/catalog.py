"""Turning stored game rows into playable definitions and student-safe views."""
import logging
import random
from typing import Optional

from mindwave.engine import engine_for, parse_game
from mindwave.models.game import PRIVATE_GAME_FIELDS
from mindwave.utils.errors import GameError

logger = logging.getLogger(__name__)


def load_definition(game_row: dict):
    """Build the engine definition for a stored game, or None if it has none.

    The row's own id, title and type win over anything stored inside the
    definition payload.
    """
    definition = game_row.get("definition")
    if not definition:
        return None
    data = {**definition, "id": game_row["id"], "title": game_row["title"], "type": game_row["type"]}
    if game_row.get("brief") and not data.get("description"):
        data["description"] = game_row["brief"]
    if game_row.get("duration"):
        data["duration"] = game_row["duration"]
    if game_row.get("total_points"):
        data["totalPoints"] = game_row["total_points"]
    return parse_game(data)


def public_game(game_row: dict, rng: Optional[random.Random] = None) -> dict:
    """Strip ownership columns and answer-bearing definition fields."""
    view = {k: v for k, v in game_row.items() if k not in PRIVATE_GAME_FIELDS}
    try:
        game = load_definition(game_row)
    except GameError as e:
        logger.warning(f"Dropping unreadable definition of game {game_row.get('id')}: {e}")
        view["definition"] = None
        return view
    if game is not None:
        view["definition"] = engine_for(game).public_view(game, rng)
    return view
