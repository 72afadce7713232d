import asyncio
import pytest
from mindwave.engine import Countdown, LocalResultStore, PlaySession, Player, parse_game
from mindwave.engine.results import build_result, percentage
from mindwave.utils.errors import GameError


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


@pytest.fixture
def quiz(quiz_definition):
    return parse_game({"id": "g1", "title": "SQL Basics", "type": "quiz", **quiz_definition})


class TestPlaySession:
    """One play-through from first screen to result"""

    def test_completing_the_game_finalizes_once(self, quiz):
        results = []
        clock = FakeClock()
        session = PlaySession(quiz, player=Player(id="s1", name="Asha"), result_sink=results.append, clock=clock)

        session.act({"kind": "answer", "option": 0})
        clock.now += 75
        screen = session.act({"kind": "answer", "option": 1})

        assert session.finished
        assert screen.kind == "result"
        assert screen.heading == "Great Job!"
        assert screen.prompt == "20/20"
        assert screen.message == "Completed in 1m 15s"
        assert len(results) == 1

        result = results[0]
        assert result.score == 100
        assert result.raw_score == 20
        assert result.time_taken == 75
        assert result.student_name == "Asha"
        assert result.forced is False

        assert session.finalize() is result
        assert len(results) == 1

    def test_low_score_heading(self, quiz):
        session = PlaySession(quiz)
        session.act({"kind": "answer", "option": 1})
        screen = session.act({"kind": "answer", "option": 0})
        assert screen.heading == "Keep Practicing"
        assert screen.prompt == "0/20"

    def test_double_xp_doubles_raw_score_only(self, quiz):
        session = PlaySession(quiz, double_xp=True)
        session.act({"kind": "answer", "option": 0})
        session.act({"kind": "answer", "option": 0})
        assert session.result.raw_score == 20
        assert session.result.score == 50

    def test_actions_after_finish_are_rejected(self, quiz):
        session = PlaySession(quiz)
        session.finalize()
        with pytest.raises(GameError):
            session.act({"kind": "answer", "option": 0})

    def test_invalid_action_raises(self, quiz):
        session = PlaySession(quiz)
        with pytest.raises(GameError):
            session.act({"kind": "answer", "option": 9})
        assert session.error is None

    def test_engine_failure_shows_error_screen(self, quiz, monkeypatch):
        session = PlaySession(quiz)

        def broken(game, state, action):
            raise RuntimeError("boom")

        monkeypatch.setattr(session.engine, "evaluate", broken)
        screen = session.act({"kind": "answer", "option": 0})
        assert screen.kind == "error"
        assert "boom" in screen.message
        assert session.screen().kind == "error"
        with pytest.raises(GameError):
            session.act({"kind": "answer", "option": 0})

    def test_scoring_failure_shows_error_screen(self, quiz, monkeypatch):
        results = []
        session = PlaySession(quiz, result_sink=results.append)

        def broken(game, state):
            raise KeyError("points")

        monkeypatch.setattr(session.engine, "score", broken)
        session.act({"kind": "answer", "option": 0})
        screen = session.act({"kind": "answer", "option": 1})

        assert screen.kind == "error"
        assert "points" in screen.message
        assert session.result is None
        assert session.finalize() is None
        assert results == []

    @pytest.mark.asyncio
    async def test_scoring_failure_at_expiry(self, quiz, monkeypatch):
        results = []
        session = PlaySession(quiz, result_sink=results.append)

        def broken(game, state):
            raise ValueError("bad details")

        monkeypatch.setattr(session.engine, "details", broken)
        session.start(tick_interval=0.01)
        session.countdown.remaining = 0.02
        await asyncio.sleep(0.2)

        assert session.countdown.expired
        assert session.error == "bad details"
        assert session.result is None
        assert session.screen().kind == "error"
        assert results == []

    def test_debug_result_heading_uses_similarity(self):
        game = parse_game({"type": "bug-hunt", "buggyCode": "a = 1", "perfectCode": "a = 2"})
        session = PlaySession(game)
        session.act({"kind": "edit-code", "code": "a = 2"})
        screen = session.act({"kind": "submit"})
        assert screen.heading == "Excellent!"
        assert session.result.details["similarity"] == 100

    @pytest.mark.asyncio
    async def test_countdown_expiry_forces_finalize(self, quiz):
        results = []
        session = PlaySession(quiz, result_sink=results.append)
        screen = session.start(tick_interval=0.01)
        assert screen.time_left == quiz.duration * 60
        session.countdown.remaining = 0.03

        session.act({"kind": "answer", "option": 0})
        await asyncio.sleep(0.2)

        assert session.finished
        assert session.result.forced is True
        assert session.result.raw_score == 10
        assert len(results) == 1
        assert session.countdown.expired

    @pytest.mark.asyncio
    async def test_finishing_cancels_countdown(self, quiz):
        session = PlaySession(quiz)
        session.start()
        session.act({"kind": "answer", "option": 0})
        session.act({"kind": "answer", "option": 1})
        await asyncio.sleep(0)

        assert session.countdown.cancelled
        assert session.countdown.cancel() is False

    def test_empty_game_finishes_immediately(self):
        game = parse_game({"type": "quiz", "questions": []})
        session = PlaySession(game)
        screen = session.start()
        assert session.finished
        assert screen.kind == "result"
        assert session.countdown is None


class TestCountdown:
    """Game timer"""

    @pytest.mark.asyncio
    async def test_expires_once(self):
        expired, ticks = [], []
        countdown = Countdown(0.05, lambda: expired.append(True), on_tick=ticks.append, interval=0.01)
        countdown.start()
        await asyncio.sleep(0.2)

        assert expired == [True]
        assert countdown.expired
        assert ticks[0] == 0.05
        assert not countdown.active
        assert countdown.cancel() is False

    @pytest.mark.asyncio
    async def test_double_cancel_is_a_no_op(self):
        expired = []
        countdown = Countdown(5, lambda: expired.append(True))
        countdown.start()
        assert countdown.active

        assert countdown.cancel() is True
        assert countdown.cancel() is False
        await asyncio.sleep(0)
        assert expired == []

    def test_cancel_before_start(self):
        assert Countdown(5, lambda: None).cancel() is False


class TestResults:
    """Result records and the local result file"""

    def test_percentage(self):
        assert percentage(7, 20) == 35
        assert percentage(5, 0) == 0

    def test_local_store_appends(self, quiz, tmp_path):
        store = LocalResultStore(tmp_path / "results.json")
        assert store.load() == []

        store(build_result(quiz, 10, 20, 30.7))
        store(build_result(quiz, 20, 20, 12))

        loaded = store.load()
        assert [r.score for r in loaded] == [50, 100]
        assert loaded[0].time_taken == 30
        assert loaded[0].game_title == "SQL Basics"

    def test_corrupt_store_reads_as_empty(self, tmp_path):
        path = tmp_path / "results.json"
        path.write_text("{not json", encoding="utf-8")
        assert LocalResultStore(path).load() == []
