"""Simple opponent: picks draft cards and plays out a turn"""
import logging
from typing import List, Optional, TYPE_CHECKING

from slotcraft.models.card import Card
from slotcraft.models.game_state import FRONT_SLOTS, BACK_SLOTS
from slotcraft.services.error_handler import GameRuleError
from slotcraft.services.unit_factory import has_innate_rush

if TYPE_CHECKING:
    from slotcraft.services.game_manager import GameManager

logger = logging.getLogger(__name__)


class SimpleOpponent:
    """Greedy move chooser.

    Drafts the highest tier it can afford, takes the option with the best
    stat total, fills front slots first (Ranged units prefer the back row)
    and attacks with everything that can.
    """

    def __init__(self, player_id: str):
        self.player_id = player_id

    def choose_draft_card(self, options: List[Card]) -> Optional[Card]:
        if not options:
            return None
        return max(options, key=lambda c: (c.attack + c.health, has_innate_rush(c.ability)))

    def choose_slot(self, manager: 'GameManager', card: Card) -> Optional[int]:
        player = manager.state.player(self.player_id)
        order = BACK_SLOTS + FRONT_SLOTS if 'ranged' in card.ability.lower() else FRONT_SLOTS + BACK_SLOTS
        for slot in order:
            if player.battlefield[slot] is None:
                return slot
        return None

    def draft(self, manager: 'GameManager') -> Optional[Card]:
        player = manager.state.player(self.player_id)
        if len(player.hand) >= manager.config.hand_limit:
            return None
        affordable = [t for t in manager.draft.tiers if manager.config.tier_cost(t) <= player.gold]
        if not affordable:
            return None
        try:
            options = manager.start_draft(max(affordable), self.player_id)
            choice = self.choose_draft_card(options)
            return manager.select_draft_card(choice, self.player_id) if choice else None
        except GameRuleError as e:
            logger.info(f"{self.player_id} could not draft: {e.reason}")
            return None

    def take_turn(self, manager: 'GameManager') -> None:
        """Draft, play every card that fits, attack with every ready unit, end the turn."""
        self.draft(manager)

        for card in list(manager.state.player(self.player_id).hand):
            if manager.state.game_over:
                return
            slot = self.choose_slot(manager, card)
            if slot is None:
                break
            manager.play_card(card, slot, self.player_id)

        for slot in range(6):
            if manager.state.game_over:
                return
            if manager.store.unit_at(self.player_id, slot) is None:
                continue
            try:
                manager.attack(slot, self.player_id)
            except GameRuleError as e:
                logger.debug(f"{self.player_id} slot {slot} does not attack: {e.reason}")

        if not manager.state.game_over:
            manager.end_turn(self.player_id)
