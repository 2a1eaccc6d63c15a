# Clients module
from .match_api import MatchApiClient

__all__ = ['MatchApiClient']
