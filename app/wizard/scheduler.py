"""
Tâches différées annulables (debounce) sur la boucle asyncio.
"""
from typing import Any, Awaitable, Callable, Optional, Set, Union
import asyncio
import inspect
import logging

logger = logging.getLogger(__name__)

Callback = Callable[[], Union[None, Awaitable[Any]]]


class DebouncedTask:
    """
    Exécute un callback après une période d'inactivité.

    Chaque schedule() annule le timer en attente et le relance: au plus un
    timer en attente par tâche. Un callback coroutine est lancé comme tâche
    asyncio, suivie pour pouvoir être annulée par close().
    """

    def __init__(self, name: str, delay: float, callback: Callback):
        self.name = name
        self.delay = delay
        self.callback = callback
        self._handle: Optional[asyncio.TimerHandle] = None
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        """Un timer est-il en attente ?"""
        return self._handle is not None

    def schedule(self) -> None:
        """
        (Re)programme le callback.

        Raises:
            RuntimeError: Hors d'une boucle asyncio en cours d'exécution
        """
        loop = asyncio.get_running_loop()
        self.cancel()
        self._handle = loop.call_later(self.delay, self._fire)
        logger.debug(f"⏳ {self.name} programmé dans {self.delay}s")

    def cancel(self) -> None:
        """Annule le timer en attente (le callback en cours n'est pas touché)."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def flush(self) -> None:
        """Exécute immédiatement le callback s'il est en attente."""
        if self._handle is not None:
            self.cancel()
            self._fire()

    def close(self) -> None:
        """Annule le timer et les callbacks asynchrones en cours."""
        self.cancel()
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()

    def _fire(self) -> None:
        self._handle = None
        try:
            result = self.callback()
        except Exception as e:
            logger.error(f"✗ Erreur dans la tâche {self.name}: {e}")
            return

        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._tasks.add(task)
            task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"✗ Erreur dans la tâche {self.name}: {exc}")


class GenerationCounter:
    """Compteur strictement croissant pour écarter les réponses périmées."""

    def __init__(self):
        self._value = 0

    @property
    def latest(self) -> int:
        return self._value

    def next(self) -> int:
        self._value += 1
        return self._value

    def is_latest(self, generation: int) -> bool:
        return generation == self._value
