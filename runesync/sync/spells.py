"""Summoner spell reconciliation."""

from typing import FrozenSet, Optional, Tuple

from runesync.clients.base import SelectionProvider
from runesync.data.models import FLASH_SPELL_ID, SummonerSpells
from runesync.utils.logger import get_logger


SpellPair = Tuple[int, int]


def order_flash(pair: SpellPair, flash_slot: str = "first") -> SpellPair:
    """Put Flash on the configured key ("first" = D, "second" = F)."""
    first, second = pair
    if flash_slot == "second" and first == FLASH_SPELL_ID:
        return (second, first)
    if flash_slot == "first" and second == FLASH_SPELL_ID:
        return (second, first)
    return pair


def reconcile_spells(
    current: SpellPair,
    recommended: SummonerSpells,
    disallowed: Optional[FrozenSet[int]],
    flash_slot: str = "first",
) -> SpellPair:
    """
    Spells to select given what is equipped and what is recommended.

    Args:
        current: Equipped (spell1, spell2)
        recommended: Build recommendation
        disallowed: Spells the game mode forbids; None when unknown
        flash_slot: Key Flash should sit on

    Returns:
        (spell1, spell2) to select
    """
    if disallowed is None:
        return current

    wanted = (recommended.first, recommended.second)
    if not disallowed:
        return order_flash(wanted, flash_slot)

    took = [spell not in disallowed for spell in wanted]
    result = [
        wanted[i] if took[i] else current[i]
        for i in range(2)
    ]

    if result[0] == result[1]:
        # The slot that took the recommendation gives it up
        for i in range(2):
            if took[i] and not took[1 - i]:
                result[i] = current[i]
                break

    return order_flash((result[0], result[1]), flash_slot)


class SpellReconciler:
    """Submits summoner spell changes to champion select."""

    def __init__(self, selection: SelectionProvider, flash_slot: str = "first"):
        self.selection = selection
        self.flash_slot = flash_slot
        self.log = get_logger()

    def apply(
        self,
        current: SpellPair,
        recommended: SummonerSpells,
        disallowed: Optional[FrozenSet[int]],
    ) -> bool:
        """
        Select the reconciled spells.

        Returns:
            True if a selection was submitted
        """
        target = reconcile_spells(current, recommended, disallowed, self.flash_slot)
        if target == tuple(current):
            self.log.debug(f"Spells already set to {target}")
            return False

        self.selection.set_selection(target[0], target[1])
        self.log.info(f"Selected summoner spells {target[0]}, {target[1]}")
        return True
