# Overview: Per-application change feed so UI layers can re-render on every mutation.

from __future__ import annotations

from typing import Callable

from blinker import Signal
from flask import current_app


FEED_EXTENSION_KEY = "shiftbook.change_feed"

Listener = Callable[..., None]


class ChangeFeed:
    """
    Publish/subscribe hub for state changes.

    Listeners are called as ``listener(event, **payload)``, once per
    mutation. A listener that raises is logged and skipped; the others
    still run. Subscriptions hold strong references; call the returned
    handle to unsubscribe.
    """

    def __init__(self) -> None:
        self._signal = Signal("shiftbook.changed")

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._signal.connect(listener, weak=False)

        def unsubscribe() -> None:
            self._signal.disconnect(listener)

        return unsubscribe

    def publish(self, event: str, **payload) -> None:
        """
        Notify every listener. Runs after the mutation has committed, so a
        failing listener is logged and never reaches the command's caller.
        """
        for receiver in self._signal.receivers_for(event):
            try:
                receiver(event, **payload)
            except Exception:
                current_app.logger.exception("Change listener failed for event %s", event)

    @property
    def listener_count(self) -> int:
        return len(self._signal.receivers)


def get_change_feed() -> ChangeFeed:
    """Change feed owned by the current application."""
    return current_app.extensions[FEED_EXTENSION_KEY]


def publish_change(event: str, **payload) -> None:
    get_change_feed().publish(event, **payload)
