"""
Interfaces des collaborateurs externes du flux

Source de matchs, geolocalisation, identite et horloge sont fournies par
l'application hote; le moteur ne fait jamais d'I/O lui-meme.
"""
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Protocol, runtime_checkable

from .input_models import Coordinates

Clock = Callable[[], datetime]


@runtime_checkable
class MatchSource(Protocol):
    """Renvoie un instantane complet des matchs (pas de pagination)"""

    def fetch_matches(self) -> List[Dict[str, Any]]:
        ...


@runtime_checkable
class LocationProvider(Protocol):
    """Position du viewer, None si permission refusee ou indisponible"""

    def current_location(self) -> Optional[Coordinates]:
        ...


@runtime_checkable
class IdentityProvider(Protocol):
    """Email du viewer connecte, None si non authentifie"""

    def current_email(self) -> Optional[str]:
        ...


class StaticLocation:
    """Position fixe, utile quand l'hote a deja resolu la geolocalisation"""

    def __init__(self, coordinates: Optional[Coordinates] = None):
        self.coordinates = coordinates

    def current_location(self) -> Optional[Coordinates]:
        return self.coordinates


class StaticIdentity:
    """Identite fixe transmise par l'hote"""

    def __init__(self, email: Optional[str] = None):
        self.email = email

    def current_email(self) -> Optional[str]:
        return self.email
