# Contracts module
from .input_models import (
    Coordinates,
    FeedScope,
    MatchCreateRequest,
    MatchInput,
    PlayerRef,
    ViewerContext,
)
from .output_models import ActionResult, EnrichedMatch, FeedResult, FeedStatus

__all__ = [
    'Coordinates',
    'FeedScope',
    'MatchCreateRequest',
    'MatchInput',
    'PlayerRef',
    'ViewerContext',
    'ActionResult',
    'EnrichedMatch',
    'FeedResult',
    'FeedStatus'
]
