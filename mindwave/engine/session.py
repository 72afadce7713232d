"""Drives one play-through of a game from first screen to result record."""
from typing import Any, Callable, Optional
import logging
import random
import time

from mindwave.engine.engines import engine_for
from mindwave.engine.models import Screen, parse_action
from mindwave.engine.results import GameResult, Player, build_result
from mindwave.engine.timer import Countdown
from mindwave.utils.errors import GameError

logger = logging.getLogger(__name__)

ResultSink = Callable[[GameResult], Any]


class PlaySession:
    """Explicit state for a single player working through a single game.

    Invalid actions raise ``GameError``; anything else going wrong inside an
    engine is caught here and turned into an error screen asking the player
    to reload.
    """

    def __init__(
        self,
        game,
        player: Optional[Player] = None,
        result_sink: Optional[ResultSink] = None,
        rng: Optional[random.Random] = None,
        double_xp: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.game = game
        self.player = player or Player()
        self.engine = engine_for(game)
        self.state = self.engine.new_state(game, rng or random.Random())
        self.double_xp = double_xp
        self.result: Optional[GameResult] = None
        self.points = 0
        self.error: Optional[str] = None
        self.countdown: Optional[Countdown] = None
        self._result_sink = result_sink
        self._clock = clock
        self._started_at = clock()

    @property
    def finished(self) -> bool:
        return self.result is not None

    def elapsed(self) -> float:
        return self._clock() - self._started_at

    def start(self, tick_interval: float = 1.0) -> Screen:
        """Arm the countdown (needs a running event loop) and draw the first screen."""
        if self.engine.is_complete(self.game, self.state):
            self.finalize()
            return self.screen()
        self.countdown = Countdown(self.game.duration * 60, self.expire, interval=tick_interval)
        self.countdown.start()
        return self.screen()

    def screen(self) -> Screen:
        if self.error:
            return Screen(
                kind="error",
                heading="Something went wrong",
                message=f"We couldn't load this game. Error: {self.error}. Reload the page to try again.",
            )
        if self.result:
            return self._result_screen()
        try:
            screen = self.engine.render(self.game, self.state)
        except Exception as e:
            return self._fail(e)
        if self.countdown is not None:
            screen.time_left = int(self.countdown.remaining)
        return screen

    def act(self, action) -> Screen:
        if self.finished:
            raise GameError("This game is already finished")
        if self.error:
            raise GameError("This game needs to be reloaded")
        action = parse_action(action)
        try:
            done = self.engine.evaluate(self.game, self.state, action)
        except GameError:
            raise
        except Exception as e:
            return self._fail(e)
        if done:
            self.finalize()
        return self.screen()

    def expire(self) -> None:
        """Countdown callback: grade whatever the player has so far."""
        if not self.finished:
            logger.info(f"Time up for game {self.game.id}")
            self.finalize(forced=True)

    def finalize(self, forced: bool = False, time_taken: Optional[float] = None) -> Optional[GameResult]:
        """Grade the play-through once; returns None if grading failed."""
        if self.result is not None:
            return self.result
        if self.error:
            return None
        if self.countdown is not None:
            self.countdown.cancel()

        try:
            score = self.engine.score(self.game, self.state)
            details = self.engine.details(self.game, self.state)
        except Exception as e:
            self._fail(e)
            return None
        self.points = score
        self.result = build_result(
            self.game,
            score,
            self.game.total_points,
            self.elapsed() if time_taken is None else time_taken,
            player=self.player,
            double_xp=self.double_xp,
            forced=forced,
            details=details,
        )
        if self._result_sink is not None:
            self._result_sink(self.result)
        return self.result

    def _result_screen(self) -> Screen:
        result = self.result
        minutes, seconds = divmod(result.time_taken, 60)
        heading = "Great Job!" if result.score >= 70 else "Keep Practicing"
        similarity = result.details.get("similarity")
        if similarity is not None:
            heading = "Excellent!" if similarity >= 90 else "Good Job!" if similarity >= 70 else "Keep Learning"
        return Screen(
            kind="result",
            heading=heading,
            prompt=f"{self.points}/{result.total_points}",
            progress=100.0,
            message=f"Completed in {minutes}m {seconds}s",
        )

    def _fail(self, error: Exception) -> Screen:
        logger.error(f"Game error in {self.game.id}: {error}", exc_info=True)
        self.error = str(error)
        if self.countdown is not None:
            self.countdown.cancel()
        return self.screen()
