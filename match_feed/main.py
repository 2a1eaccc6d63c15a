"""
FastAPI entrypoint pour le service match-feed
Expose le flux de matchs et les actions joueur
"""
import logging
import uuid
from contextlib import asynccontextmanager
from datetime import date, datetime
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from match_feed.clients.match_api import MatchApiClient
from match_feed.config.feed_settings import FEED_SETTINGS
from match_feed.contracts.input_models import (
    Coordinates,
    FeedRequest,
    FeedScope,
    MatchCreateRequest,
    PlayerActionRequest,
    ViewerContext,
    first_error_message,
)
from match_feed.contracts.output_models import ActionResult, FeedResult
from match_feed.contracts.providers import StaticIdentity, StaticLocation
from match_feed.feed.formatting import upcoming_days
from match_feed.pipelines.feed_pipeline import FeedPipeline

# Configuration logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Gestion du cycle de vie de l'application"""
    logger.info(f"match-feed demarrage (API: {FEED_SETTINGS.api.base_url})")
    yield
    logger.info("match-feed arret...")


app = FastAPI(
    title="Match Feed",
    description="Flux de matchs de foot a proximite",
    version=FEED_SETTINGS.version,
    lifespan=lifespan
)


def get_api_client() -> MatchApiClient:
    return MatchApiClient()


def get_clock():
    return datetime.now


def _action_response(result: ActionResult) -> Any:
    if not result.success:
        return JSONResponse(status_code=502, content=result.model_dump())
    return result


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "match-feed",
        "version": FEED_SETTINGS.version
    }


@app.post("/feed", response_model=FeedResult)
async def compute_feed_endpoint(request: FeedRequest, clock=Depends(get_clock)):
    """
    Calcule le flux sur des matchs fournis par l'appelant (aucun fetch)

    Args:
        request: matchs bruts + contexte viewer ('now' par defaut: horloge serveur)

    Returns:
        FeedResult avec les matchs tries
    """
    trace_id = str(uuid.uuid4())
    ctx = ViewerContext(
        now=request.now or clock(),
        selected_date=request.selected_date,
        selected_scope=request.selected_scope,
        search_text=request.search_text,
        current_user_email=request.current_user_email,
        current_location=request.current_location
    )

    pipeline = FeedPipeline(source=None, clock=clock, trace_id=trace_id)
    return pipeline.compute(request.matches, ctx)


@app.get("/feed", response_model=FeedResult)
async def fetch_feed_endpoint(
    selected_date: Optional[date] = Query(default=None, alias="date"),
    scope: FeedScope = FeedScope.ALL,
    search: str = "",
    email: Optional[str] = None,
    lat: Optional[float] = Query(default=None, ge=-90, le=90),
    lon: Optional[float] = Query(default=None, ge=-180, le=180),
    client: MatchApiClient = Depends(get_api_client),
    clock=Depends(get_clock)
):
    """
    Recupere les matchs depuis l'API distante puis calcule le flux

    Returns:
        FeedResult; 502 si la source est indisponible
    """
    location = Coordinates(latitude=lat, longitude=lon) if lat is not None and lon is not None else None

    try:
        pipeline = FeedPipeline(
            source=client,
            location_provider=StaticLocation(location),
            identity_provider=StaticIdentity(email),
            clock=clock,
            trace_id=client.trace_id
        )
        result = pipeline.run(selected_date=selected_date, scope=scope, search_text=search)
    except Exception as e:
        logger.error(f"Exception generation flux: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    if result.status == "error":
        logger.error(f"[{result.trace_id}] Flux indisponible: {result.error_cause}")
        return JSONResponse(status_code=502, content=result.model_dump_json_safe())

    return result


@app.get("/calendar")
async def calendar_endpoint(clock=Depends(get_clock)):
    """Jours proposes dans le selecteur de date, a partir d'aujourd'hui"""
    today = clock().date()
    return {"days": [day.isoformat() for day in upcoming_days(today)]}


@app.post("/matches", response_model=ActionResult)
async def create_match_endpoint(
    form: Dict[str, Any],
    client: MatchApiClient = Depends(get_api_client),
    clock=Depends(get_clock)
):
    """
    Valide puis enregistre un nouveau match

    Returns:
        ActionResult; 422 si le formulaire est invalide
    """
    try:
        request = MatchCreateRequest.model_validate(form)
    except ValidationError as e:
        return JSONResponse(
            status_code=422,
            content=ActionResult(success=False, error=first_error_message(e)).model_dump()
        )

    try:
        request.check_schedule(clock())
    except ValueError as e:
        return JSONResponse(
            status_code=422,
            content=ActionResult(success=False, error=str(e)).model_dump()
        )

    return _action_response(client.create_match(request))


@app.post("/matches/{match_id}/join", response_model=ActionResult)
async def join_match_endpoint(
    match_id: str,
    body: PlayerActionRequest,
    client: MatchApiClient = Depends(get_api_client)
):
    return _action_response(client.join_match(body.email, match_id))


@app.post("/matches/{match_id}/leave", response_model=ActionResult)
async def leave_match_endpoint(
    match_id: str,
    body: PlayerActionRequest,
    client: MatchApiClient = Depends(get_api_client)
):
    return _action_response(client.leave_match(body.email, match_id))


@app.delete("/matches/{match_id}", response_model=ActionResult)
async def delete_match_endpoint(
    match_id: str,
    email: str = Query(..., min_length=1),
    client: MatchApiClient = Depends(get_api_client)
):
    return _action_response(client.delete_match(email, match_id))


@app.get("/matches/{match_id}/players", response_model=ActionResult)
async def match_players_endpoint(
    match_id: str,
    email: str = Query(..., min_length=1),
    client: MatchApiClient = Depends(get_api_client)
):
    """Joueurs inscrits et statut d'inscription du viewer"""
    return _action_response(client.list_match_players(email, match_id))


def run() -> None:
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8001)


if __name__ == "__main__":
    run()
