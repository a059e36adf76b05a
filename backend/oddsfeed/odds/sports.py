"""Fixed table of supported sports and their upstream type codes."""

from __future__ import annotations

from .models import Sport

CRICKET = Sport(id="cricket", name="Cricket", type_id="4")
FOOTBALL = Sport(id="football", name="Football", type_id="1")
TENNIS = Sport(id="tennis", name="Tennis", type_id="2")

SPORTS: tuple[Sport, ...] = (CRICKET, FOOTBALL, TENNIS)

SPORTS_BY_ID: dict[str, Sport] = {sport.id: sport for sport in SPORTS}

# Upstream eventTypeId -> sport tag used on transformed markets
SPORT_TAGS_BY_TYPE_ID: dict[str, str] = {sport.type_id: sport.id for sport in SPORTS}

# Unknown sport names fall back to cricket, the upstream's default market
DEFAULT_SPORT = CRICKET


def resolve_sport(sport_name: str) -> Sport:
    """Look up a sport by name, case-insensitively. Unknown names map to cricket."""
    return SPORTS_BY_ID.get(sport_name.strip().lower(), DEFAULT_SPORT)


def sport_tag(type_id: object) -> str:
    """Human sport tag for an upstream type code ('1' -> 'football'), else 'unknown'."""
    if type_id is None:
        return "unknown"
    return SPORT_TAGS_BY_TYPE_ID.get(str(type_id), "unknown")
