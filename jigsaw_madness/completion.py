# completion.py - one-shot "puzzle solved" detection
import logging
from dataclasses import dataclass

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompletionEvent:
    elapsed_seconds: int
    difficulty: int


class CompletionDetector:
    """
    Watches a session's lock flags. The first time every piece is locked the
    stopwatch stops, the session is marked complete and listeners get a
    CompletionEvent; later checks on a finished session do nothing.
    """

    def __init__(self, session):
        self.session = session
        self._listeners = []

    def subscribe(self, callback):
        self._listeners.append(callback)
        return callback

    def unsubscribe(self, callback):
        if callback in self._listeners:
            self._listeners.remove(callback)

    def check(self):
        session = self.session
        if session.complete or not session.all_locked():
            return None
        session.timer.stop()
        session.complete = True
        event = CompletionEvent(int(session.timer.elapsed), session.target_piece_count)
        log.info("puzzle complete: %d pieces in %ds", len(session.pieces), event.elapsed_seconds)
        for callback in list(self._listeners):
            callback(event)
        return event
