from typing import Callable, List
import inspect
import logging

logger = logging.getLogger(__name__)

class GameEvents:
    """Round / match notifications. Listeners may be plain functions or coroutines."""

    def __init__(self):
        self._on_round_over_listeners: List[Callable] = []
        self._on_match_over_listeners: List[Callable] = []

    def subscribe_round_over(self, callback: Callable):
        """callback(winner, winner_score); winner is None for a drawn round."""
        self._on_round_over_listeners.append(callback)

    def subscribe_match_over(self, callback: Callable):
        """callback(winner, scores)"""
        self._on_match_over_listeners.append(callback)

    async def _notify(self, listeners: List[Callable], *args):
        for listener in listeners:
            try:
                result = listener(*args)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error("Event listener error: %s", e)

    async def notify_round_over(self, winner, winner_score):
        await self._notify(self._on_round_over_listeners, winner, winner_score)

    async def notify_match_over(self, winner, scores):
        await self._notify(self._on_match_over_listeners, winner, scores)
