from .hfm import MarketNewsExtractor
from .browser import BrowserOptions, BrowserSession, acquire_session

# Base para extratores de outras fontes
from .base import BaseExtractor, RawCandidate

__all__ = [
    "MarketNewsExtractor",
    "BrowserOptions",
    "BrowserSession",
    "acquire_session",
    "BaseExtractor",
    "RawCandidate",
]
