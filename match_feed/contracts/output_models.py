"""
Modeles de sortie du flux de matchs
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .input_models import MatchInput


class FeedStatus(str, Enum):
    """Statuts possibles d'une generation de flux"""
    PENDING = "pending"
    FETCHING = "fetching"
    PARSING = "parsing"
    RANKING = "ranking"
    SUCCESS = "success"
    SOURCE_ERROR = "source_error"


class EnrichedMatch(BaseModel):
    """
    Match enrichi pour l'affichage

    Le match source est embarque tel quel, jamais modifie.
    """
    model_config = ConfigDict(frozen=True)

    match: MatchInput
    distance_km: float = Field(..., ge=0)
    is_full: bool
    remaining_places: Optional[int] = None
    minutes_until_start: Optional[float] = None  # None si l'heure de debut manque

    # Libelles d'affichage, calcules par le moteur
    format_label: str = ""
    time_range_label: str = ""
    places_label: str = ""
    price_label: str = ""
    short_location: str = ""
    fill_percent: float = Field(default=0.0, ge=0)
    is_creator: bool = False

    @property
    def id(self) -> Optional[str]:
        return self.match.id


class FeedResult(BaseModel):
    """Resultat d'une generation de flux"""
    status: str = Field(..., pattern=r'^(success|error)$')
    trace_id: str = Field(..., description="ID de tracabilite")
    total_received: int = Field(default=0, ge=0)
    excluded: int = Field(default=0, ge=0, description="Enregistrements mal formes ecartes")
    matches_count: int = Field(default=0, ge=0)
    matches: List[EnrichedMatch] = Field(default_factory=list)
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    error_cause: Optional[str] = Field(default=None, description="Cause explicite en cas d'erreur")
    error_details: Optional[str] = Field(default=None, description="Details techniques de l'erreur")

    def model_dump_json_safe(self) -> Dict[str, Any]:
        """Convertit en dict JSON-serializable"""
        return self.model_dump(mode="json")


class ActionResult(BaseModel):
    """Resultat d'une action sur un match (rejoindre, quitter, creer, supprimer)"""
    success: bool
    error: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict)
