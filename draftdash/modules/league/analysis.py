"""
Player ownership analysis over live league data.

Joins the static bootstrap (players, positions, clubs), the league's
element-status (who owns whom) and the league details (entry names) into a
points ranking of every player and a per-team summary.
"""

import math
from typing import Any, Dict, List, Mapping, Optional

# GKP, DEF, MID, FWD; anything else sorts last.
POSITION_ORDER = {1: 1, 2: 2, 3: 3, 4: 4}
UNKNOWN_POSITION_ORDER = 99


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def ownership_map(element_status: Mapping[str, Any]) -> Dict[int, Optional[int]]:
    """Player id -> owning league entry id (None when unowned)."""
    return {
        status["element"]: status.get("owner")
        for status in element_status.get("element_status") or []
    }


def entry_map(details: Mapping[str, Any]) -> Dict[int, Mapping[str, Any]]:
    """League entry id -> league entry."""
    return {entry["entry_id"]: entry for entry in details.get("league_entries") or []}


def _team_summary(
    entry_id: int,
    players: List[Mapping[str, Any]],
    entry: Optional[Mapping[str, Any]],
    positions: Mapping[int, str],
) -> Dict[str, Any]:
    total = sum(p.get("total_points", 0) for p in players)
    squad = [
        {
            "name": p.get("web_name"),
            "position": positions.get(p.get("element_type"), "Unknown"),
            "points": p.get("total_points", 0),
            "positionOrder": POSITION_ORDER.get(p.get("element_type"), UNKNOWN_POSITION_ORDER),
        }
        for p in players
    ]
    squad.sort(key=lambda p: (p["positionOrder"], -p["points"]))

    if entry:
        manager = f"{entry.get('player_first_name', '')} {entry.get('player_last_name', '')}"
    else:
        manager = "Unknown"
    return {
        "entryId": entry_id,
        "teamName": (entry or {}).get("entry_name") or f"Team {entry_id}",
        "managerName": manager,
        "shortName": (entry or {}).get("short_name") or "??",
        "totalPoints": total,
        "playerCount": len(players),
        "players": squad,
        "averagePoints": _round_half_up(total / len(players)),
    }


def analyze_players(
    bootstrap: Mapping[str, Any],
    element_status: Mapping[str, Any],
    details: Mapping[str, Any],
) -> Dict[str, Any]:
    """
    Rank all players by total points and summarise each league team.

    Args:
        bootstrap: bootstrap-static payload (elements, element_types, teams)
        element_status: league element-status payload
        details: league details payload

    Returns:
        Dict with totalPlayers, ownedPlayers, availablePlayers, players
        (points descending), teamSummaries (team points descending) and
        positionTypes
    """
    players = bootstrap.get("elements") or []
    element_types = bootstrap.get("element_types") or []
    positions = {et["id"]: et.get("singular_name") for et in element_types}
    clubs = {team["id"]: team.get("short_name") for team in bootstrap.get("teams") or []}
    owners = ownership_map(element_status)
    entries = entry_map(details)

    squads: Dict[int, List[Mapping[str, Any]]] = {}
    ranked = []
    for player in players:
        owner_id = owners.get(player["id"])
        if owner_id:
            squads.setdefault(owner_id, []).append(player)
        owner = entries.get(owner_id) if owner_id else None
        ranked.append(
            {
                "id": player["id"],
                "name": player.get("web_name"),
                "fullName": f"{player.get('first_name', '')} {player.get('second_name', '')}",
                "totalPoints": player.get("total_points", 0),
                "position": positions.get(player.get("element_type"), "Unknown"),
                "team": clubs.get(player.get("team"), "Unknown"),
                "form": player.get("form"),
                "pointsPerGame": player.get("points_per_game"),
                "status": player.get("status"),
                "owned": owner_id is not None,
                "owner": owner.get("entry_name") if owner else None,
                "ownerId": owner_id or None,
                "ownerShortName": owner.get("short_name") if owner else None,
            }
        )
    ranked.sort(key=lambda p: p["totalPoints"], reverse=True)

    summaries = [
        _team_summary(entry_id, squad, entries.get(entry_id), positions)
        for entry_id, squad in squads.items()
    ]
    summaries.sort(key=lambda s: s["totalPoints"], reverse=True)

    owned = sum(1 for p in ranked if p["owned"])
    return {
        "totalPlayers": len(ranked),
        "ownedPlayers": owned,
        "availablePlayers": len(ranked) - owned,
        "players": ranked,
        "teamSummaries": summaries,
        "positionTypes": [
            {"id": et["id"], "name": et.get("singular_name"), "plural": et.get("plural_name")}
            for et in element_types
        ],
    }
