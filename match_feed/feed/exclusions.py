"""
Parsing des matchs bruts et gestion des exclusions
Un enregistrement mal forme est ecarte du flux, jamais remonte en erreur
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError

from match_feed.contracts.input_models import MatchInput

logger = logging.getLogger(__name__)


class ExclusionReason(str, Enum):
    """Raisons d'exclusion d'un enregistrement"""
    MISSING_DATA = "missing_data"
    INVALID_FORMAT = "invalid_format"


@dataclass(frozen=True)
class MatchExclusion:
    """Exclusion d'un enregistrement avec raison"""
    match_id: str
    reason: ExclusionReason
    details: Dict[str, Any]


@dataclass(frozen=True)
class ParseResult:
    """Soit un match valide, soit une exclusion"""
    match: Optional[MatchInput] = None
    exclusion: Optional[MatchExclusion] = None

    @property
    def ok(self) -> bool:
        return self.match is not None


class MatchParser:
    """
    Validateur des enregistrements de l'API
    Determine si un match peut entrer dans le flux
    """

    # Sans date ni heure de fin, l'expiration ne peut pas etre calculee
    REQUIRED_TEMPORAL_FIELDS = ("date_match", "end_time")

    def __init__(self, trace_id: Optional[str] = None):
        self.trace_id = trace_id or "match-parser"

    def parse(self, raw: Any) -> ParseResult:
        """
        Valide un enregistrement brut

        Args:
            raw: Dict renvoye par l'API (ou MatchInput deja construit)

        Returns:
            ParseResult avec match ou exclusion
        """
        if isinstance(raw, MatchInput):
            match = raw
        else:
            match_id = str(raw.get("id", "unknown")) if isinstance(raw, dict) else "unknown"
            try:
                match = MatchInput.model_validate(raw)
            except ValidationError as e:
                fields = [".".join(str(part) for part in err["loc"]) for err in e.errors()]
                logger.warning(f"[{self.trace_id}] Match {match_id} ignore: format invalide ({fields})")
                return ParseResult(exclusion=MatchExclusion(
                    match_id=match_id,
                    reason=ExclusionReason.INVALID_FORMAT,
                    details={"invalid_fields": fields}
                ))

        missing = [name for name in self.REQUIRED_TEMPORAL_FIELDS if getattr(match, name) is None]
        if missing:
            logger.warning(f"[{self.trace_id}] Match {match.id} ignore: champs manquants {missing}")
            return ParseResult(exclusion=MatchExclusion(
                match_id=match.id or "unknown",
                reason=ExclusionReason.MISSING_DATA,
                details={"missing_fields": missing}
            ))

        return ParseResult(match=match)

    def parse_batch(self, records: List[Any]) -> Tuple[List[MatchInput], List[MatchExclusion]]:
        """
        Valide un lot d'enregistrements

        Returns:
            Tuple (matchs_valides, exclusions), ordre d'origine conserve
        """
        valid: List[MatchInput] = []
        exclusions: List[MatchExclusion] = []

        for record in records:
            result = self.parse(record)
            if result.ok:
                valid.append(result.match)
            else:
                exclusions.append(result.exclusion)

        logger.info(f"[{self.trace_id}] Parsing: {len(valid)}/{len(records)} matchs exploitables")
        return valid, exclusions
