"""Lobby helpers: player level/rank stats and game listing filters."""
import math
from typing import Iterable, List, Optional

RANKS = ["Novice", "Apprentice", "Scholar", "Expert", "Master", "Grandmaster"]

TYPE_LABELS = {
    "quiz": "Quiz",
    "unjumble": "Logic Unjumble",
    "code-unjumble": "Logic Unjumble",
    "sorter": "Tech Sorter",
    "tech-sorter": "Tech Sorter",
    "fillin": "Syntax Fill-in",
    "syntax-fill": "Syntax Fill-in",
    "sql": "SQL Builder",
    "sql-builder": "SQL Builder",
    "bug-hunt": "Debug the Monolith",
}

# (collection key, unit) per type tag
META_COUNTS = {
    "quiz": ("questions", "Questions"),
    "unjumble": ("lines", "Lines"),
    "code-unjumble": ("lines", "Lines"),
    "sorter": ("items", "Items"),
    "tech-sorter": ("items", "Items"),
    "fillin": ("blanks", "Blanks"),
    "syntax-fill": ("blanks", "Blanks"),
    "sql": ("blocks", "Blocks"),
    "sql-builder": ("blocks", "Blocks"),
}

CATEGORY_FILTERS = {
    "quiz": lambda t: t in ("quiz", "trivia-challenge"),
    "logic": lambda t: "unjumble" in t or "sorter" in t or "logic" in t or t == "bug-hunt",
    "builder": lambda t: "sql" in t or "fill" in t,
}


def player_stats(results: Iterable[dict]) -> dict:
    """Level, XP and rank computed from a player's result history."""
    results = list(results)
    total_score = sum(r.get("raw_score") or r.get("rawScore") or 0 for r in results)
    level = math.floor(math.sqrt(total_score / 100)) + 1
    next_level_xp = level ** 2 * 100
    current_level_base = (level - 1) ** 2 * 100
    progress = (total_score - current_level_base) / (next_level_xp - current_level_base) * 100
    return {
        "level": level,
        "current_xp": total_score,
        "next_level_xp": next_level_xp,
        "progress": max(0.0, min(100.0, progress)),
        "total_wins": len(results),
        "rank": RANKS[min(level - 1, len(RANKS) - 1)],
    }


def format_game_type(game_type: Optional[str]) -> str:
    return TYPE_LABELS.get(game_type, "Challenge")


def game_meta(game: dict) -> str:
    """Short size label for a game card, e.g. '5 Questions'."""
    game_type = game.get("type")
    definition = game.get("definition") or game
    if game_type == "bug-hunt":
        return f"{definition.get('bugCount') or definition.get('bug_count') or 0} Bugs"
    if game_type not in META_COUNTS:
        return "Game"
    key, unit = META_COUNTS[game_type]
    return f"{len(definition.get(key) or [])} {unit}"


def filter_games(games: List[dict], category: str = "all") -> List[dict]:
    if category in (None, "", "all"):
        return list(games)
    matches = CATEGORY_FILTERS.get(category)
    if matches is None:
        return []
    return [g for g in games if matches(g.get("type") or "")]
