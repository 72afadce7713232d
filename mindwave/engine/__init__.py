from .models import GameDefinition, PlayerAction, Screen, parse_action, parse_game
from .engines import ENGINES, GameEngine, code_similarity, engine_for
from .results import GameResult, LocalResultStore, Player, build_result
from .session import PlaySession
from .timer import Countdown

__all__ = [
    "GameDefinition", "PlayerAction", "Screen", "parse_action", "parse_game",
    "ENGINES", "GameEngine", "code_similarity", "engine_for",
    "GameResult", "LocalResultStore", "Player", "build_result",
    "PlaySession", "Countdown",
]
