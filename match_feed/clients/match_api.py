"""
Client HTTP de l'API distante des matchs
Lecture du flux et actions joueur (rejoindre, quitter, creer, supprimer)
"""
import logging
import uuid
from typing import Any, Dict, List, Optional

import requests
from requests.exceptions import RequestException

from match_feed.config.feed_settings import FEED_SETTINGS, ApiConfig
from match_feed.contracts.output_models import ActionResult
from match_feed.contracts.input_models import MatchCreateRequest

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Une erreur est survenue, veuillez réessayer."


class MatchApiClient:
    """
    Source de matchs adossee a l'API distante

    Implemente le protocole MatchSource: fetch_matches() renvoie un
    instantane complet et laisse remonter les exceptions requests.
    """

    def __init__(self, api: Optional[ApiConfig] = None, trace_id: Optional[str] = None):
        self.api = api or FEED_SETTINGS.api
        self.trace_id = trace_id or str(uuid.uuid4())

    def _headers(self) -> Dict[str, str]:
        return {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "X-Trace-Id": self.trace_id
        }

    def fetch_matches(self) -> List[Dict[str, Any]]:
        """
        Recupere tous les matchs

        Returns:
            Liste des enregistrements bruts (vide si la cle 'matches' manque)

        Raises:
            requests.exceptions.RequestException: Echec reseau ou HTTP
            ValueError: Corps de reponse non JSON ou mal structure
        """
        url = self.api.url("matches")
        logger.info(f"[{self.trace_id}] Collecte des matchs depuis {url}")

        response = requests.get(url, timeout=self.api.timeout_seconds, headers=self._headers())
        response.raise_for_status()

        data = response.json()
        if not isinstance(data, dict):
            raise ValueError(f"Unexpected payload type: {type(data).__name__}")

        matches = data.get("matches") or []
        if not isinstance(matches, list):
            raise ValueError("'matches' must be a list")

        logger.info(f"[{self.trace_id}] Collecte reussie: {len(matches)} matchs")
        return matches

    def _post(self, endpoint: str, payload: Dict[str, Any], failure_message: str,
              connection_message: str = GENERIC_ERROR) -> ActionResult:
        """
        POST JSON et interpretation du champ 'success' de la reponse

        Le message d'erreur du serveur est prefere au message par defaut.
        """
        url = self.api.url(endpoint)
        try:
            response = requests.post(
                url,
                json=payload,
                timeout=self.api.timeout_seconds,
                headers=self._headers()
            )
            data = response.json()
        except RequestException as e:
            logger.error(f"[{self.trace_id}] Appel {endpoint} echoue: {e}")
            return ActionResult(success=False, error=connection_message)
        except ValueError as e:
            logger.error(f"[{self.trace_id}] Reponse {endpoint} illisible: {e}")
            return ActionResult(success=False, error=connection_message)

        if not isinstance(data, dict):
            return ActionResult(success=False, error=failure_message)

        if data.get("success"):
            logger.info(f"[{self.trace_id}] Action {endpoint} reussie")
            return ActionResult(success=True, data=data)

        logger.warning(f"[{self.trace_id}] Action {endpoint} refusee: {data.get('error')}")
        return ActionResult(success=False, error=data.get("error") or failure_message, data=data)

    def join_match(self, email: str, match_id: str) -> ActionResult:
        return self._post(
            "join",
            {"email": email, "matchId": match_id},
            "Impossible de rejoindre le match."
        )

    def leave_match(self, email: str, match_id: str) -> ActionResult:
        return self._post(
            "leave",
            {"email": email, "matchId": match_id},
            "Impossible de quitter le match."
        )

    def delete_match(self, email: str, match_id: str) -> ActionResult:
        return self._post(
            "delete",
            {"userEmail": email, "matchId": match_id},
            "Impossible de supprimer le match."
        )

    def list_match_players(self, email: str, match_id: str) -> ActionResult:
        """
        Joueurs inscrits et statut d'inscription du viewer

        Returns:
            ActionResult dont data contient 'joined' et 'players'
        """
        result = self._post(
            "players",
            {"email": email, "matchId": match_id},
            "Impossible de charger les joueurs."
        )
        if result.success:
            result.data.setdefault("players", [])
            result.data["joined"] = bool(result.data.get("joined"))
        return result

    def create_match(self, request: MatchCreateRequest) -> ActionResult:
        """Enregistre un match deja valide (voir MatchCreateRequest)"""
        return self._post(
            "create",
            request.to_payload(),
            "Échec de l'enregistrement",
            connection_message="Problème de connexion au serveur"
        )
