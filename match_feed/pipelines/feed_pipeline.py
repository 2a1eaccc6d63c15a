"""
Pipeline du flux de matchs
Collecte l'instantane, valide les enregistrements et calcule le flux du viewer
"""
import logging
import uuid
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

from requests.exceptions import HTTPError, JSONDecodeError, RequestException, Timeout

from match_feed.clients.match_api import MatchApiClient
from match_feed.contracts.input_models import Coordinates, FeedScope, ViewerContext
from match_feed.contracts.output_models import FeedResult, FeedStatus
from match_feed.contracts.providers import Clock, IdentityProvider, LocationProvider, MatchSource
from match_feed.feed.engine import FeedEngine
from match_feed.feed.exclusions import MatchParser
from match_feed.pipelines.refresh import RefreshTracker

logger = logging.getLogger(__name__)


class FeedPipeline:
    """
    Pipeline du flux de matchs
    Responsabilites:
    - Collecte depuis la source (echec -> liste vide + cause explicite)
    - Validation des enregistrements (mal formes ecartes)
    - Resolution position / identite (echec -> absence)
    - Calcul du flux ordonne
    """

    def __init__(
        self,
        source: Optional[MatchSource] = None,
        location_provider: Optional[LocationProvider] = None,
        identity_provider: Optional[IdentityProvider] = None,
        clock: Optional[Clock] = None,
        engine: Optional[FeedEngine] = None,
        trace_id: Optional[str] = None
    ):
        self.trace_id = trace_id or str(uuid.uuid4())
        self.source = source or MatchApiClient(trace_id=self.trace_id)
        self.location_provider = location_provider
        self.identity_provider = identity_provider
        self.clock = clock or datetime.now
        self.engine = engine or FeedEngine()
        self.parser = MatchParser(trace_id=self.trace_id)
        self.refresh_tracker = RefreshTracker()
        self.status = FeedStatus.PENDING
        self.error_cause: Optional[str] = None
        self.error_details: Optional[str] = None
        self.latest_result: Optional[FeedResult] = None

        logger.info(f"[{self.trace_id}] FeedPipeline initialise")

    def fetch_matches(self) -> Tuple[Optional[List[Dict[str, Any]]], Optional[str], Optional[str]]:
        """
        Recupere l'instantane des matchs

        Returns:
            (enregistrements bruts, cause, details); enregistrements None si echec
        """
        self.status = FeedStatus.FETCHING

        try:
            return self.source.fetch_matches(), None, None

        except Timeout as e:
            cause, details = "SOURCE_TIMEOUT", f"API timeout: {e}"

        except HTTPError as e:
            status_code = e.response.status_code if e.response is not None else 'unknown'
            cause, details = "SOURCE_HTTP_ERROR", f"HTTP {status_code}"

        except JSONDecodeError as e:
            cause, details = "SOURCE_INVALID_PAYLOAD", f"Invalid JSON: {e}"

        except RequestException as e:
            cause, details = "SOURCE_UNAVAILABLE", f"Request failed: {e}"

        except ValueError as e:
            cause, details = "SOURCE_INVALID_PAYLOAD", str(e)

        self._fail(cause, details)
        return None, cause, details

    def _fail(self, cause: str, details: str) -> None:
        # Etat informatif, run() s'appuie sur les valeurs retournees par fetch_matches
        self.status = FeedStatus.SOURCE_ERROR
        self.error_cause = cause
        self.error_details = details
        logger.error(f"[{self.trace_id}] Source indisponible ({cause}): {details}")

    def resolve_location(self) -> Optional[Coordinates]:
        """Position du viewer, None si refusee ou indisponible"""
        if self.location_provider is None:
            return None
        try:
            return self.location_provider.current_location()
        except Exception as e:
            logger.warning(f"[{self.trace_id}] Localisation indisponible: {e}")
            return None

    def resolve_identity(self) -> Optional[str]:
        """Email du viewer, None si non connecte"""
        if self.identity_provider is None:
            return None
        try:
            return self.identity_provider.current_email()
        except Exception as e:
            logger.warning(f"[{self.trace_id}] Identite indisponible: {e}")
            return None

    def build_context(
        self,
        selected_date: Optional[date] = None,
        scope: FeedScope = FeedScope.ALL,
        search_text: str = ""
    ) -> ViewerContext:
        """Contexte du viewer a l'instant fourni par l'horloge"""
        return ViewerContext(
            now=self.clock(),
            selected_date=selected_date,
            selected_scope=scope,
            search_text=search_text,
            current_user_email=self.resolve_identity(),
            current_location=self.resolve_location()
        )

    def compute(self, records: List[Any], ctx: ViewerContext) -> FeedResult:
        """
        Valide puis classe un lot d'enregistrements deja recuperes

        Args:
            records: Enregistrements bruts
            ctx: Contexte du viewer

        Returns:
            FeedResult succes
        """
        self.status = FeedStatus.PARSING
        valid_matches, exclusions = self.parser.parse_batch(records)

        self.status = FeedStatus.RANKING
        feed = self.engine.compute(valid_matches, ctx)

        self.status = FeedStatus.SUCCESS
        logger.info(
            f"[{self.trace_id}] Flux pret: {len(feed)} matchs affiches "
            f"({len(exclusions)} ecartes, {len(records)} recus)"
        )
        return FeedResult(
            status="success",
            trace_id=self.trace_id,
            total_received=len(records),
            excluded=len(exclusions),
            matches_count=len(feed),
            matches=list(feed)
        )

    def run(
        self,
        selected_date: Optional[date] = None,
        scope: FeedScope = FeedScope.ALL,
        search_text: str = ""
    ) -> FeedResult:
        """
        Execute le pipeline complet

        Returns:
            FeedResult; en cas d'echec source, statut error et aucun match
        """
        logger.info(f"[{self.trace_id}] === Generation du flux ===")

        raw_matches, error_cause, error_details = self.fetch_matches()
        if raw_matches is None:
            # Ne jamais publier un flux vide comme un succes
            return FeedResult(
                status="error",
                trace_id=self.trace_id,
                error_cause=error_cause,
                error_details=error_details
            )

        ctx = self.build_context(selected_date, scope, search_text)
        return self.compute(raw_matches, ctx)

    def refresh(
        self,
        selected_date: Optional[date] = None,
        scope: FeedScope = FeedScope.ALL,
        search_text: str = ""
    ) -> Optional[FeedResult]:
        """
        Rafraichissement (pull-to-refresh)

        Returns:
            Le resultat publie, ou None s'il a ete supplante par un fetch plus recent
        """
        ticket = self.refresh_tracker.begin()
        result = self.run(selected_date, scope, search_text)

        published = self.refresh_tracker.publish(ticket, lambda: setattr(self, "latest_result", result))
        if not published:
            logger.info(f"[{self.trace_id}] Resultat du fetch {ticket} ignore (supplante)")
            return None

        return result
