"""Client side of Wealth Tracker: API client, view state and portfolio summary."""

from .api import ApiError, WealthClient
from .state import PortfolioView
from .summary import Summary, calculate_summary, display_summary

__all__ = [
    "ApiError",
    "WealthClient",
    "PortfolioView",
    "Summary",
    "calculate_summary",
    "display_summary",
]
