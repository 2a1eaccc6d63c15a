"""
Modeles de validation des donnees entrantes
Schema explicite des matchs renvoyes par l'API distante et du contexte viewer
"""
import re
from datetime import date, datetime, time
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from match_feed.config.feed_settings import FEED_SETTINGS

_TIME_PATTERN = re.compile(r'^(\d{1,2}):(\d{2})(?::(\d{2}))?$')
_FR_DATE_PATTERN = re.compile(r'^(\d{2})/(\d{2})/(\d{4})$')


def parse_time_of_day(value: Any) -> Optional[time]:
    """
    Convertit 'HH:MM' ou 'HH:MM:SS' en time

    Raises:
        ValueError: Si le format ou les bornes sont invalides
    """
    if value is None or isinstance(value, time):
        return value
    text = str(value).strip()
    if not text:
        return None
    found = _TIME_PATTERN.match(text)
    if not found:
        raise ValueError(f"Invalid time format: {value}. Expected HH:MM.")
    hours, minutes, seconds = found.groups()
    return time(int(hours), int(minutes), int(seconds or 0))


def parse_match_date(value: Any) -> Optional[date]:
    """
    Convertit une date de match (YYYY-MM-DD, ISO datetime ou DD/MM/YYYY)

    Raises:
        ValueError: Si aucun format ne correspond
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    found = _FR_DATE_PATTERN.match(text)
    if found:
        day, month, year = found.groups()
        return date(int(year), int(month), int(day))
    try:
        # La partie heure d'un datetime ISO est ignoree
        return date.fromisoformat(text[:10])
    except ValueError:
        raise ValueError(f"Invalid date format: {value}. Expected YYYY-MM-DD.")


class FeedScope(str, Enum):
    """Portee du flux: tous les matchs ouverts ou ceux crees par le viewer"""
    ALL = "open"
    MINE = "my"


class Coordinates(BaseModel):
    """Position geographique"""
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class PlayerRef(BaseModel):
    """Reference vers un joueur inscrit a un match"""
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    id: Optional[str] = None
    email: Optional[str] = None
    name: Optional[str] = Field(default=None, alias="nom")

    @model_validator(mode="before")
    @classmethod
    def accept_bare_identifier(cls, data: Any) -> Any:
        if isinstance(data, (str, int)):
            return {"id": str(data)}
        return data

    @field_validator('id', mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Optional[str]:
        return None if v is None else str(v)


class MatchInput(BaseModel):
    """
    Match tel que renvoye par l'API distante

    Tous les champs sont optionnels a ce stade: l'etape de parsing
    (feed.exclusions) decide si l'enregistrement est exploitable.
    """
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    id: Optional[str] = None
    name: str = Field(default="", alias="nom")
    description: str = ""
    location: str = Field(default="", alias="localisation")
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    capacity: Optional[int] = Field(default=None, alias="places")
    joined_players: Tuple[PlayerRef, ...] = Field(default=(), alias="joueur_de_match")
    date_match: Optional[date] = None
    start_time: Optional[time] = Field(default=None, alias="heure_debut")
    end_time: Optional[time] = Field(default=None, alias="heure_fin")
    price: Optional[float] = Field(default=None, alias="prix")
    creator_email: Optional[str] = None
    creator_picture: Optional[str] = None
    communication_link: Optional[str] = Field(default=None, alias="communicationLink")

    @model_validator(mode="before")
    @classmethod
    def lift_creator_profile(cls, data: Any) -> Any:
        """L'email du createur arrive imbrique dans 'profiles'"""
        if isinstance(data, dict) and isinstance(data.get("profiles"), dict):
            if data.get("creator_email") is None:
                data = {**data, "creator_email": data["profiles"].get("email")}
        return data

    @field_validator('id', mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Optional[str]:
        return None if v is None else str(v)

    @field_validator('name', 'description', 'location', mode="before")
    @classmethod
    def none_as_empty(cls, v: Any) -> str:
        return "" if v is None else v

    @field_validator('latitude', 'longitude', 'price', 'capacity', mode="before")
    @classmethod
    def blank_as_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator('joined_players', mode="before")
    @classmethod
    def none_as_no_players(cls, v: Any) -> Any:
        return () if v is None else v

    @field_validator('date_match', mode="before")
    @classmethod
    def validate_date_match(cls, v: Any) -> Optional[date]:
        return parse_match_date(v)

    @field_validator('start_time', 'end_time', mode="before")
    @classmethod
    def validate_time_of_day(cls, v: Any) -> Optional[time]:
        return parse_time_of_day(v)

    @property
    def coordinates(self) -> Optional[Coordinates]:
        """Coordonnees du match, None si le createur n'a pas place de marqueur"""
        if self.latitude is None or self.longitude is None:
            return None
        # Un marqueur hors bornes equivaut a une position inconnue
        if not (-90 <= self.latitude <= 90 and -180 <= self.longitude <= 180):
            return None
        return Coordinates(latitude=self.latitude, longitude=self.longitude)

    @property
    def joined_count(self) -> int:
        return len(self.joined_players)


class ViewerContext(BaseModel):
    """
    Contexte du viewer construit a chaque rendu du flux

    'now' est toujours injecte: aucune lecture d'horloge implicite.
    """
    model_config = ConfigDict(frozen=True)

    now: datetime
    selected_date: date
    selected_scope: FeedScope = FeedScope.ALL
    search_text: str = ""
    current_user_email: Optional[str] = None
    current_location: Optional[Coordinates] = None

    @model_validator(mode="before")
    @classmethod
    def default_selected_date(cls, data: Any) -> Any:
        """Le jour selectionne par defaut est celui de 'now'"""
        if isinstance(data, dict) and data.get("selected_date") is None and data.get("now") is not None:
            now = data["now"]
            if isinstance(now, str):
                now = datetime.fromisoformat(now.replace('Z', '+00:00'))
            data = {**data, "selected_date": now.date()}
        return data

    @field_validator('search_text', mode="before")
    @classmethod
    def none_as_empty_search(cls, v: Any) -> str:
        return "" if v is None else v


class MatchCreateRequest(BaseModel):
    """
    Formulaire de creation de match

    Les messages d'erreur sont ceux affiches a l'utilisateur.
    """
    model_config = ConfigDict(populate_by_name=True)

    creator_email: Optional[str] = Field(default=None, alias="email")
    name: Optional[str] = Field(default=None, alias="nom")
    description: Optional[str] = None
    communication_link: Optional[str] = Field(default=None, alias="communicationLink")
    location: Optional[str] = Field(default=None, alias="localisation")
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    capacity: Optional[int] = Field(default=None, alias="places")
    price: Optional[float] = Field(default=None, alias="prix")
    date_match: Optional[str] = Field(default=None, alias="dateMatch")
    start_time: Optional[str] = Field(default=None, alias="heureDebut")
    end_time: Optional[str] = Field(default=None, alias="heureFin")

    @model_validator(mode="after")
    def validate_form(self) -> 'MatchCreateRequest':
        if not self.creator_email:
            raise ValueError("Vous devez être connecté pour créer un match.")

        required = [
            self.name, self.description, self.communication_link, self.location,
            self.capacity, self.price, self.date_match, self.start_time, self.end_time
        ]
        if any(value is None or value == "" for value in required):
            raise ValueError("Veuillez remplir tous les champs.")

        if not _FR_DATE_PATTERN.match(self.date_match):
            raise ValueError("Date invalide.")
        try:
            datetime.strptime(self.date_match, "%d/%m/%Y")
        except ValueError:
            raise ValueError("Date invalide.")

        try:
            start = parse_time_of_day(self.start_time)
            end = parse_time_of_day(self.end_time)
        except ValueError:
            raise ValueError("L'heure doit être valide (HH: 0-23, MM: 0-59).")

        if self.capacity not in FEED_SETTINGS.matches.capacities:
            raise ValueError("Format de match invalide.")

        if end <= start:
            raise ValueError("L'heure de fin doit être après l'heure de début.")
        return self

    @property
    def start_datetime(self) -> datetime:
        return datetime.combine(
            datetime.strptime(self.date_match, "%d/%m/%Y").date(),
            parse_time_of_day(self.start_time)
        )

    def check_schedule(self, now: datetime) -> None:
        """
        Refuse un match dont le debut est deja passe

        Raises:
            ValueError: Si le debut est anterieur a 'now'
        """
        start = self.start_datetime
        if now.tzinfo is not None:
            start = start.replace(tzinfo=now.tzinfo)
        if start < now:
            raise ValueError("Vous ne pouvez pas créer un match dans le passé.")

    def to_payload(self) -> Dict[str, Any]:
        """Corps JSON attendu par l'endpoint de sauvegarde"""
        return self.model_dump(by_alias=True, exclude_none=True)


def first_error_message(exc: ValidationError) -> str:
    """Message lisible de la premiere erreur d'une ValidationError"""
    errors = exc.errors()
    if not errors:
        return str(exc)
    error = errors[0]
    cause = error.get("ctx", {}).get("error")
    if cause is not None:
        return str(cause)
    return error.get("msg", str(exc))


class FeedRequest(BaseModel):
    """Requete de calcul de flux sur un instantane fourni par l'appelant"""
    matches: List[Dict[str, Any]] = Field(default_factory=list)
    now: Optional[datetime] = None
    selected_date: Optional[date] = None
    selected_scope: FeedScope = FeedScope.ALL
    search_text: str = ""
    current_user_email: Optional[str] = None
    current_location: Optional[Coordinates] = None


class PlayerActionRequest(BaseModel):
    """Corps des actions joueur (rejoindre, quitter, supprimer)"""
    email: str = Field(..., min_length=1)
