"""
Ability triggers - subscribes trigger handlers that map game events to the
ability categories that fire in response.
"""
import logging
import re
from typing import Any, Dict, Iterator, TYPE_CHECKING

from slotcraft.models.game_state import opponent_of
from slotcraft.models.unit import Unit
from slotcraft.services.ability_parser import trigger_text
from slotcraft.services.error_handler import Severity

if TYPE_CHECKING:
    from slotcraft.engine.rules_engine import RulesEngine

logger = logging.getLogger(__name__)

_FRONT_ROW_CONDITION = re.compile(r'^if this is in the front row,?\s*')
_TAKES_DAMAGE = re.compile(r'this takes (\d+) damage')


class AbilityTriggers:
    """Trigger handlers for one game.

    Every handler re-reads units from the store before acting, because
    earlier handlers in the same drain may have killed or replaced them.
    """

    def __init__(self, engine: 'RulesEngine'):
        self.engine = engine
        self.store = engine.store

    def register(self) -> 'AbilityTriggers':
        router = self.engine.router
        router.subscribe('unit_played', self.on_unit_played)
        router.subscribe('unit_summoned', self.on_unit_summoned)
        router.subscribe('card_played', self.on_card_played)
        router.subscribe('manacharge_activated', self.on_manacharge_activated)
        router.subscribe('unit_died', self.on_unit_died)
        router.subscribe('last_gasp_resolved', self.on_last_gasp_resolved)
        router.subscribe('souls_gained', self.on_souls_gained)
        router.subscribe('turn_started', self.on_turn_started)
        router.subscribe('turn_ended', self.on_turn_ended)
        router.subscribe('attack_completed', self.on_attack_completed)
        router.subscribe('unit_survived_damage', self.on_survived_damage)
        router.subscribe('unit_survived_attacking', self.on_survived_attacking)
        return self

    # --------------------------------------------------------------- helpers

    def _is_live(self, unit: Unit) -> bool:
        return self.store.unit_at(unit.owner, unit.slot_index) is unit

    def _live_units(self, player_id: str) -> Iterator[Unit]:
        """Snapshot of a battlefield, skipping units removed while iterating."""
        for unit in list(self.store.units(player_id)):
            if self.store.unit_at(player_id, unit.slot_index) is unit:
                yield unit

    def _fire(self, unit: Unit, trigger: str, **payload) -> None:
        tail = trigger_text(unit.ability, trigger)
        if tail is None:
            return
        logger.debug(f"{trigger} fires for {unit.name} ({unit.owner} slot {unit.slot_index})")
        self.engine.resolve_ability(tail, self.engine.context_for(unit, trigger, **payload))

    # ------------------------------------------------------------- placement

    def on_unit_played(self, payload: Dict[str, Any]) -> None:
        owner, slot = payload['player_id'], payload['slot']
        unit = self.store.unit_at(owner, slot)
        if unit is None:
            return

        tail = trigger_text(unit.ability, 'unleash')
        if tail is not None:
            if 'banish this' in tail:
                self.store.update_unit(owner, slot, operation='banish', banished=True)
                self.engine.destroy_unit(owner, slot, cause='banished')
            else:
                self.engine.resolve_ability(tail, self.engine.context_for(unit, 'unleash'))
            if self.engine.fires_manacharge(unit):
                self.engine.publish('manacharge_activated', {'player_id': owner, 'source': unit.id})

        self._kindred(owner, slot, unit)

    def on_unit_summoned(self, payload: Dict[str, Any]) -> None:
        owner, slot = payload['player_id'], payload['slot']
        unit = self.store.unit_at(owner, slot)
        if unit is not None:
            self._kindred(owner, slot, unit)
        self._opponent_summoned(owner)

    def on_card_played(self, payload: Dict[str, Any]) -> None:
        self._opponent_summoned(payload['player_id'])

    def _kindred(self, owner: str, slot: int, placed: Unit) -> None:
        """Fire Kindred both ways between the placed unit and each tag-sharing friend."""
        for other in self._live_units(owner):
            if other is placed or not placed.shares_tag_with(other):
                continue
            if 'kindred' in other.ability_text():
                self._fire(other, 'kindred', related=placed.id)
            if 'kindred' in placed.ability_text() and self._is_live(placed):
                self._fire(placed, 'kindred', related=other.id)

    def _opponent_summoned(self, summoner: str) -> None:
        reacting_player = opponent_of(summoner)
        for unit in self._live_units(reacting_player):
            tail = trigger_text(unit.ability, 'opponent_summons')
            if tail is None:
                continue
            match = _TAKES_DAMAGE.search(tail)
            if match:
                self.engine.damage_unit(reacting_player, unit.slot_index, int(match.group(1)),
                                        source='opponent_summoned')
            else:
                self.engine.resolve_ability(tail, self.engine.context_for(unit, 'opponent_summons'))

    def on_manacharge_activated(self, payload: Dict[str, Any]) -> None:
        owner = payload['player_id']
        for unit in self._live_units(owner):
            if 'manacharge' not in unit.ability_text():
                continue
            if unit.owner != owner:
                self.store.report(f"{unit.name} in {owner}'s battlefield is owned by {unit.owner}",
                                  'manacharge', severity=Severity.HIGH, slot=unit.slot_index)
                continue
            self._fire(unit, 'manacharge')

    # ----------------------------------------------------------------- death

    def on_unit_died(self, payload: Dict[str, Any]) -> None:
        tail = payload.get('last_gasp')
        if tail is None:
            return
        unit: Unit = payload['unit']
        context = self.engine.context_for(unit, 'last_gasp', cause=payload.get('cause'))
        self.engine.resolve_ability(tail, context)
        self.engine.publish('last_gasp_resolved', {'player_id': payload['player_id'], 'unit_id': unit.id})

    def on_last_gasp_resolved(self, payload: Dict[str, Any]) -> None:
        for unit in self._live_units(payload['player_id']):
            self._fire(unit, 'friendly_last_gasp', related=payload.get('unit_id'))

    def on_souls_gained(self, payload: Dict[str, Any]) -> None:
        for _ in range(int(payload.get('amount', 1))):
            for unit in self._live_units(payload['player_id']):
                self._fire(unit, 'soul_gained')

    # ------------------------------------------------------------------ turns

    def on_turn_started(self, payload: Dict[str, Any]) -> None:
        for unit in self._live_units(payload['player_id']):
            self._fire(unit, 'start_of_turn')

    def on_turn_ended(self, payload: Dict[str, Any]) -> None:
        for unit in self._live_units(payload['player_id']):
            tail = trigger_text(unit.ability, 'end_of_turn')
            if tail is None:
                continue
            condition = _FRONT_ROW_CONDITION.match(tail)
            if condition:
                # Evaluated against the slot the unit holds right now
                if unit.row != 'front':
                    continue
                tail = tail[condition.end():]
            self.engine.resolve_ability(tail, self.engine.context_for(unit, 'end_of_turn'))

    # ----------------------------------------------------------------- combat

    def on_attack_completed(self, payload: Dict[str, Any]) -> None:
        owner, slot = payload['player_id'], payload['slot']
        unit = self.store.unit_at(owner, slot)
        if unit is None or unit is not payload.get('unit'):
            return
        hit_player = payload.get('target') == 'player'
        self._fire(unit, 'after_attack', target=payload.get('target'))
        if hit_player:
            self._fire(unit, 'after_attack_player', target='player')
            self._fire(unit, 'attacks_player', target='player')

    def on_survived_damage(self, payload: Dict[str, Any]) -> None:
        unit = self.store.unit_at(payload['player_id'], payload['slot'])
        if unit is not None:
            self._fire(unit, 'survived_damage', amount=payload.get('amount'))

    def on_survived_attacking(self, payload: Dict[str, Any]) -> None:
        unit = self.store.unit_at(payload['player_id'], payload['slot'])
        if unit is not None:
            self._fire(unit, 'survived_attacking')
