"""Win rate confidence scoring."""

import math

# z for ~99.999% one-sided confidence
Z_SCORE = 4.265


def score(wins: float, played: float) -> float:
    """
    Lower bound of the Wilson score interval for a win rate.

    Penalizes small samples: 3 wins out of 3 games scores far below
    600 wins out of 1000. See
    https://www.evanmiller.org/how-not-to-sort-by-average-rating.html

    Args:
        wins: Games won
        played: Games played

    Returns:
        Adjusted win rate in [0, 1] (0 when nothing was played).
        Inconsistent counts are clamped rather than rejected.
    """
    if played <= 0:
        return 0.0

    z2 = Z_SCORE * Z_SCORE
    phat = min(1.0, max(0.0, wins / played))
    lower = (
        phat
        + z2 / (2 * played)
        - Z_SCORE * math.sqrt((phat * (1 - phat) + z2 / (4 * played)) / played)
    ) / (1 + z2 / played)

    return min(1.0, max(0.0, lower))


def item_set_win_rate(won: float, played: float) -> float:
    """
    Percentage shown in item set labels.

    The vendor convention divides games played by games won. It is kept
    as-is so exported item sets stay identical to ones already on disk.
    """
    if won == 0:
        return math.inf
    return played / won * 100
