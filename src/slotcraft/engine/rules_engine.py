"""
RulesEngine - shared handle through which effects, triggers and combat act on a game
"""
import logging
import random
from typing import Any, Dict, List, Optional

from slotcraft.engine.state_store import StateStore
from slotcraft.engine.trigger_router import TriggerRouter
from slotcraft.models.card import Card, Color
from slotcraft.models.effect import Effect, TriggerContext
from slotcraft.models.unit import Unit
from slotcraft.services.ability_parser import AbilityParser, ability_parser, trigger_text
from slotcraft.services.data_loader import GameConfig
from slotcraft.services.error_handler import EmptyDeck, HandFull, InsufficientGold, Severity
from slotcraft.services.stat_calculator import StatCalculator
from slotcraft.services.tags import has_tag
from slotcraft.services.unit_factory import base_card_for, create_unit

logger = logging.getLogger(__name__)


class RulesEngine:
    """Owns the store, trigger router, parser and randomness for one game.

    Effect handlers, trigger handlers and the combat resolver all receive this
    object, so every mutation funnels through the same store.
    """

    def __init__(self, store: StateStore, config: Optional[GameConfig] = None,
                 rng: Optional[random.Random] = None, parser: Optional[AbilityParser] = None,
                 router: Optional[TriggerRouter] = None):
        self.store = store
        self.config = config or GameConfig()
        self.rng = rng or random.Random()
        self.parser = parser or ability_parser
        self.router = router or TriggerRouter()
        self.stats = StatCalculator
        # Effects executed since the last reset, for operation results
        self.resolution_log: List[Dict[str, Any]] = []

    @property
    def state(self):
        return self.store.state

    def publish(self, event: str, payload: Dict[str, Any] = None) -> None:
        self.router.publish(event, payload)

    def reset_log(self) -> None:
        self.resolution_log = []

    # ------------------------------------------------------------- abilities

    def resolve_ability(self, tail: Optional[str], context: TriggerContext) -> List[Dict[str, Any]]:
        """Parse an ability tail and execute the resulting effects in order."""
        if not tail:
            return []
        effects = self.parser.parse(tail, context)
        return self.execute_effects(effects, context)

    def execute_effects(self, effects: List[Effect], context: TriggerContext) -> List[Dict[str, Any]]:
        # Deferred import: handlers import this module for type hints
        from slotcraft.services.effects import execute_effect

        records: List[Dict[str, Any]] = []
        for effect in effects:
            if self.state.game_over:
                break
            results = execute_effect(effect, context, self)
            record = {
                'trigger': context.trigger,
                'source': context.unit_name,
                'owner': context.owner,
                'effect': effect.type.value,
                'target': effect.target.value,
                'text': effect.source_text,
                'results': results,
            }
            records.append(record)
            self.resolution_log.append(record)
        return records

    def context_for(self, unit: Unit, trigger: str, **payload) -> TriggerContext:
        return TriggerContext(owner=unit.owner, slot_index=unit.slot_index, unit=unit,
                              trigger=trigger, payload=payload)

    # ------------------------------------------------------------- placement

    def place_card(self, card: Card, player_id: str, slot_index: int, summoned: bool) -> Optional[Unit]:
        unit = create_unit(card, player_id, slot_index, summoned=summoned)
        return self.store.place_unit(player_id, slot_index, unit)

    def summon(self, card: Card, player_id: str, slot_index: int) -> Optional[Unit]:
        """Place a token unit. Summons never fire Unleash."""
        unit = self.place_card(card, player_id, slot_index, summoned=True)
        if unit is not None:
            logger.debug(f"{player_id} summoned {card.name} into slot {slot_index}")
            self.publish('unit_summoned', {'player_id': player_id, 'slot': slot_index, 'unit_id': unit.id})
        return unit

    # ----------------------------------------------------------------- death

    def check_death(self, player_id: str, slot_index: int, cause: str = 'damage') -> bool:
        """Remove the unit in a slot if its health is at or below zero.

        Returns:
            True when a unit died
        """
        unit = self.store.unit_at(player_id, slot_index)
        if unit is None or unit.current_health > 0:
            return False
        self.destroy_unit(player_id, slot_index, cause=cause)
        return True

    def destroy_unit(self, player_id: str, slot_index: int, cause: str = 'damage') -> Optional[Unit]:
        """Remove a unit, route its card and queue its death triggers.

        Banish is applied before removal so a banished card never reaches the
        deck. The remaining Last Gasp effects resolve from the queue after the
        slot is cleared, which lets "summon a Skeleton here" use the slot.
        """
        unit = self.store.unit_at(player_id, slot_index)
        if unit is None:
            self.store.report(f"destroy_unit: slot {slot_index} is empty", 'destroy_unit',
                              severity=Severity.LOW, player_id=player_id)
            return None

        last_gasp = trigger_text(unit.ability, 'last_gasp')
        if last_gasp and 'banish this' in last_gasp:
            self.store.update_unit(player_id, slot_index, operation='banish', banished=True)
        returns_to_hand = bool(last_gasp and 'return this to your hand' in last_gasp)

        self.store.remove_unit(player_id, slot_index)
        if not unit.banished:
            card = base_card_for(unit)
            if returns_to_hand:
                self.store.add_to_hand(player_id, card)
            else:
                self.store.add_to_deck(player_id, card)
        logger.info(f"{unit.name} ({player_id} slot {slot_index}) died: {cause}"
                    f"{' [banished]' if unit.banished else ''}")

        self.publish('unit_died', {
            'player_id': player_id,
            'slot': slot_index,
            'unit': unit,
            'cause': cause,
            'last_gasp': last_gasp,
        })
        if has_tag(unit, 'Undead'):
            self.store.add_souls(player_id, 1)
            self.publish('souls_gained', {'player_id': player_id, 'amount': 1})
        return unit

    def damage_unit(self, player_id: str, slot_index: int, amount: int, source: str = 'ability') -> Dict[str, Any]:
        """Damage a unit and resolve its death or survival immediately."""
        unit = self.store.damage_unit(player_id, slot_index, amount, operation=f'damage:{source}')
        if unit is None:
            return {'player_id': player_id, 'slot': slot_index, 'amount': 0, 'died': False}
        died = self.check_death(player_id, slot_index, cause=source)
        if not died and amount > 0:
            self.publish('unit_survived_damage', {'player_id': player_id, 'slot': slot_index, 'amount': amount})
        return {'player_id': player_id, 'slot': slot_index, 'unit_id': unit.id, 'amount': amount, 'died': died}

    # ------------------------------------------------------------------ cards

    def draw_card(self, player_id: str, free: bool = False, from_player: Optional[str] = None) -> Card:
        """Move the top deck card into a hand.

        Raises:
            HandFull, EmptyDeck, InsufficientGold (checked in that order)
        """
        player = self.store.player(player_id)
        deck_owner = from_player or player_id
        if len(player.hand) >= self.config.hand_limit:
            raise HandFull()
        if not self.store.player(deck_owner).deck:
            raise EmptyDeck()
        cost = 0 if free else self.config.deck_draw_cost
        if not player.can_afford(cost):
            raise InsufficientGold()

        if cost:
            self.store.spend_gold(player_id, cost)
        card = self.store.pop_deck(deck_owner)
        self.store.add_to_hand(player_id, card)
        logger.debug(f"{player_id} drew {card.name} from {deck_owner}'s deck (free={free})")
        return card

    def fires_manacharge(self, unit: Unit) -> bool:
        return unit.color == Color.BLUE
