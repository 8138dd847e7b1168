"""
League Module - Black Box Interface

Purpose: Relay league data requests to the upstream fantasy API
Interface: bootstrap_dynamic(), league_details(), league_element_status(),
    analyze_players()
Hidden: Token normalization, upstream URLs, error mapping, ownership join
"""

from .analysis import analyze_players
from .league import LeagueClient, UpstreamError, normalize_bearer

__all__ = ["LeagueClient", "UpstreamError", "analyze_players", "normalize_bearer"]
