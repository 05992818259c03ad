"""
Outcome rules for Last Man Standing picks

This module maps a fixture result and a picked team to a pick outcome.
For applying outcomes to stored picks and lives, see
lastman/services/settlement_service.py
"""

WIN = "WIN"
LOSE = "LOSE"
NO_PICK = "NO_PICK"

# Stored in Fixture.result when neither side won
DRAW = "DRAW"

PICK_OUTCOMES = (WIN, LOSE, NO_PICK)


def is_draw(result):
    """Check whether a fixture result is the draw sentinel"""
    return result == DRAW


def calculate_outcome(result, team):
    """
    Calculate the outcome for a single pick.

    Returns:
        LOSE for every pick on a drawn fixture
        WIN when the picked team is the recorded winner
        LOSE otherwise

    Args:
        result: Fixture.result (winning team short code or DRAW)
        team: Pick.team (short code of the picked team)
    """
    # Draws never reward a pick
    if is_draw(result):
        return LOSE

    if team == result:
        return WIN

    return LOSE
