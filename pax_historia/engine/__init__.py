"""Game engine: turn advancement, calendar and player-driven save mutations."""

from .dates import TIME_JUMPS, add_months, advance_date, parse_game_date  # noqa: F401
from .game import (  # noqa: F401
    create_unit,
    current_turn_actions,
    delete_action,
    filter_units,
    move_unit,
    nation_with_state,
    new_game,
    occupations,
    rename,
    submit_action,
)
from .turn import TurnEngine, apply_state_changes, clamp, merge_regions  # noqa: F401
