from jigsaw_madness.completion import CompletionDetector, CompletionEvent
from jigsaw_madness.session import Stopwatch


def test_stopwatch(clock):
    watch = Stopwatch(clock)
    assert watch.elapsed == 0
    watch.start()
    clock.advance(61.7)
    assert watch.formatted() == "01:01"
    watch.stop()
    clock.advance(100)
    assert int(watch.elapsed) == 61
    watch.resume()
    clock.advance(4)
    assert int(watch.elapsed) == 65


def test_stopwatch_restore_stays_stopped(clock):
    watch = Stopwatch(clock)
    watch.restore(125)
    clock.advance(10)
    assert not watch.running
    assert watch.elapsed == 125
    assert watch.formatted() == "02:05"
    watch.resume()
    clock.advance(5)
    assert watch.elapsed == 130


def test_not_complete_until_everything_is_locked(square_session):
    detector = CompletionDetector(square_session)
    square_session.lock([0, 1, 2])
    assert detector.check() is None
    assert not square_session.complete


def test_fires_exactly_once(square_session, clock):
    session = square_session
    session.timer.start()
    clock.advance(42)
    detector = CompletionDetector(session)
    seen = []
    detector.subscribe(seen.append)
    session.lock(session.piece_ids)

    event = detector.check()
    assert event == CompletionEvent(elapsed_seconds=42, difficulty=4)
    assert seen == [event]
    assert session.complete
    assert not session.timer.running

    clock.advance(30)
    assert detector.check() is None
    assert seen == [event]
    assert int(session.timer.elapsed) == 42


def test_unsubscribe(square_session):
    detector = CompletionDetector(square_session)
    seen = []
    detector.subscribe(seen.append)
    detector.unsubscribe(seen.append)
    square_session.lock(square_session.piece_ids)
    assert detector.check() is not None
    assert seen == []


def test_difficulty_is_the_requested_count(make_session):
    session = make_session(count=5, width=500, height=400)
    session.lock(session.piece_ids)
    event = CompletionDetector(session).check()
    assert len(session.pieces) == 6
    assert event.difficulty == 5
