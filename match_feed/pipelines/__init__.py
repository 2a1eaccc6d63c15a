"""
Pipelines du flux de matchs
"""
from .feed_pipeline import FeedPipeline
from .refresh import RefreshTracker

__all__ = ['FeedPipeline', 'RefreshTracker']
