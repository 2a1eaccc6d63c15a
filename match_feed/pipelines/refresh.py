"""
Politique 'dernier fetch gagnant' pour les rafraichissements concurrents
"""
import itertools
import threading
from typing import Callable


class RefreshTracker:
    """
    Delivre un ticket par fetch; seul le ticket le plus recent peut publier

    Un fetch lent termine apres un fetch plus recent est ignore.
    """

    def __init__(self):
        self._counter = itertools.count(1)
        self._lock = threading.Lock()
        self._latest = 0

    def begin(self) -> int:
        with self._lock:
            self._latest = next(self._counter)
            return self._latest

    def is_current(self, ticket: int) -> bool:
        with self._lock:
            return ticket == self._latest

    def publish(self, ticket: int, store: Callable[[], None]) -> bool:
        """
        Verifie le ticket et publie sous le meme verrou

        Aucun begin() ne peut s'intercaler entre la verification et store().

        Returns:
            True si store() a ete appele, False si le ticket est supplante
        """
        with self._lock:
            if ticket != self._latest:
                return False
            store()
            return True

    @property
    def latest(self) -> int:
        return self._latest
