from fastapi import APIRouter, Depends, Query, status
from mindwave.database import Database, get_db
from mindwave.engine import PlaySession, Player
from mindwave.engine.lobby import filter_games, format_game_type, game_meta
from mindwave.models.base import CamelModel, camelize
from mindwave.models.game import GAME_RESULTS_TABLE, GAMES_TABLE, Game
from mindwave.models.user import USERS_TABLE
from mindwave.services.catalog import load_definition, public_game
from mindwave.utils.auth_utils import get_current_user, require_admin
from mindwave.utils.errors import ForbiddenError, MindwaveError, NotFound, ServerError, ValidationError
from mindwave.utils.time_utils import get_ist_time
from typing import Any, Dict, List, Optional
from uuid import uuid4
import logging

logger = logging.getLogger(__name__)

router = APIRouter()

class GameCreate(CamelModel):
    title: Optional[str] = None
    type: Optional[str] = None
    difficulty: Optional[str] = None
    brief: Optional[str] = None
    definition: Optional[Dict[str, Any]] = None
    duration: Optional[int] = None
    total_points: Optional[int] = None

class PlayRequest(CamelModel):
    actions: List[Dict[str, Any]] = []
    elapsed_seconds: Optional[float] = None
    double_xp: bool = False

def _get_game(db: Database, game_id: str) -> dict:
    games = db.select(GAMES_TABLE, "*", {"id": game_id})
    if not games:
        raise NotFound("Game not found")
    return games[0]

@router.post("", status_code=status.HTTP_201_CREATED)
async def create_game(game_data: GameCreate, admin_user: dict = Depends(require_admin), db: Database = Depends(get_db)):
    """Create a draft game (admins only)"""
    if not game_data.title or not game_data.type or not game_data.difficulty or not game_data.brief:
        raise ValidationError("All game fields are required")

    try:
        game = Game(
            id=uuid4().hex,
            title=game_data.title,
            type=game_data.type,
            difficulty=game_data.difficulty,
            brief=game_data.brief,
            created_by=admin_user["id"],
            definition=game_data.definition,
            duration=game_data.duration,
            total_points=game_data.total_points,
            created_at=get_ist_time().isoformat(),
        )
        # raises GameError (400) when the payload does not fit the game type
        load_definition(game.model_dump())

        created = db.insert(GAMES_TABLE, game.model_dump())
        return {"ok": True, "game": camelize(created or game.model_dump())}
    except MindwaveError:
        raise
    except Exception as e:
        logger.error(f"Game creation error: {e}")
        raise ServerError()

@router.put("/{game_id}/publish")
async def publish_game(game_id: str, admin_user: dict = Depends(require_admin), db: Database = Depends(get_db)):
    """Make one of your own games visible to students"""
    try:
        game = _get_game(db, game_id)
        if game["created_by"] != admin_user["id"]:
            raise ForbiddenError("You can only publish your own games")

        updated = db.update(GAMES_TABLE, {"published": True}, {"id": game_id})
        return {"ok": True, "game": camelize(updated or {**game, "published": True})}
    except MindwaveError:
        raise
    except Exception as e:
        logger.error(f"Game publish error: {e}")
        raise ServerError()

@router.get("/published")
async def get_published_games(category: str = Query("all"), db: Database = Depends(get_db)):
    """List published games for the student lobby, newest first"""
    try:
        games = db.select(GAMES_TABLE, "*", {"published": True}, order_by=[("created_at", True)])
        games = filter_games(games, category)

        creator_ids = {game["created_by"] for game in games}
        creators = {}
        if creator_ids:
            users = db.select(USERS_TABLE, "id,name", in_filters={"id": creator_ids})
            creators = {user["id"]: user["name"] for user in users}

        listing = []
        for game in games:
            view = camelize(public_game(game))
            view["createdByName"] = creators.get(game["created_by"])
            view["meta"] = game_meta(game)
            view["typeLabel"] = format_game_type(game["type"])
            listing.append(view)
        return {"ok": True, "games": listing}
    except MindwaveError:
        raise
    except Exception as e:
        logger.error(f"Get published games error: {e}")
        raise ServerError()

@router.get("/my")
async def get_my_games(admin_user: dict = Depends(require_admin), db: Database = Depends(get_db)):
    """List the games the signed-in admin created"""
    try:
        games = db.select(GAMES_TABLE, "*", {"created_by": admin_user["id"]}, order_by=[("created_at", True)])
        return {"ok": True, "games": [camelize(game) for game in games]}
    except MindwaveError:
        raise
    except Exception as e:
        logger.error(f"Get my games error: {e}")
        raise ServerError()

@router.post("/{game_id}/play")
async def play_game(game_id: str, request: PlayRequest,
                    current_user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    """Replay a student's actions through the play engine and store the result"""
    try:
        game_row = _get_game(db, game_id)
        if not game_row.get("published") and game_row["created_by"] != current_user["id"]:
            raise NotFound("Game not found")

        game = load_definition(game_row)
        if game is None:
            raise ValidationError("This game has no playable definition")

        player = Player(id=current_user["id"], email=current_user.get("email"), name=current_user.get("name") or "Student")
        session = PlaySession(game, player=player, double_xp=request.double_xp)
        for action in request.actions:
            if session.finished or session.error:
                break
            session.act(action)

        # actions that never reach the end count as a timed-out attempt
        result = None if session.error else session.finalize(forced=not session.finished)
        if result is None:
            raise ServerError("Game engine failed; reload and try again")
        if request.elapsed_seconds is not None:
            result = result.model_copy(update={"time_taken": int(max(0, request.elapsed_seconds))})
        db.insert(GAME_RESULTS_TABLE, result.model_dump())
        return {"ok": True, "result": result.model_dump(by_alias=True), "screen": session.screen().model_dump(by_alias=True)}
    except MindwaveError:
        raise
    except Exception as e:
        logger.error(f"Play game error: {e}")
        raise ServerError()
