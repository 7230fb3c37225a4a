"""
Buff Effect Handler - Handles unit and slot stat buffs
"""
import logging
from typing import Dict, Any, List, TYPE_CHECKING
from slotcraft.models.effect import Effect, TriggerContext, EffectType
from slotcraft.services.effects import EffectHandler, register_effect_handler
from slotcraft.services.recipient_resolver import RecipientResolver

if TYPE_CHECKING:
    from slotcraft.engine.rules_engine import RulesEngine

logger = logging.getLogger(__name__)


class BuffHandler(EffectHandler):
    """Handles buff effects.

    Permanent buffs raise base and current stats, temporary buffs only the
    current ones (and expire at the end of the owner's turn), slot buffs
    accumulate on the slot itself.
    """

    def execute(self, effect: Effect, context: TriggerContext, engine: 'RulesEngine') -> List[Dict[str, Any]]:
        if effect.params.get('slot_buff'):
            return self._buff_slots(effect, context, engine)
        if effect.params.get('double_attack'):
            return self._double_attack(context, engine)

        multiplier = self._multiplier(effect, context, engine)
        attack = int(effect.params.get('attack', 0)) * multiplier
        health = int(effect.params.get('health', 0)) * multiplier
        if attack == 0 and health == 0:
            return []

        results = []
        for unit in RecipientResolver.find_units(effect, context, engine):
            updated = engine.store.apply_buff(unit.owner, unit.slot_index, attack, health,
                                              temporary=effect.temporary, operation='buff')
            if updated is not None:
                results.append({'player_id': unit.owner, 'slot': unit.slot_index, 'unit_id': unit.id,
                                'attack': attack, 'health': health, 'temporary': effect.temporary})
        if not results:
            logger.debug(f"Buff from {context.unit_name} found no recipients ({effect.target.value})")
        return results

    def _multiplier(self, effect: Effect, context: TriggerContext, engine: 'RulesEngine') -> int:
        per = effect.params.get('per')
        if per is None:
            return 1
        state = engine.state
        if per == 'other_unit':
            return len([u for u in engine.store.units(context.owner) if u.slot_index != context.slot_index])
        if per == 'soul':
            return state.souls.get(context.owner, 0)
        if per == 'dragon_soul':
            return state.dragon_souls.get(context.owner, 0)
        raise ValueError(f"Unknown buff scaling: {per}")

    def _buff_slots(self, effect: Effect, context: TriggerContext, engine: 'RulesEngine') -> List[Dict[str, Any]]:
        attack = int(effect.params.get('attack', 0))
        health = int(effect.params.get('health', 0))
        results = []
        for slot in RecipientResolver.find_slots(effect, context, engine):
            engine.store.add_slot_buff(context.owner, slot, attack, health)
            results.append({'player_id': context.owner, 'slot': slot, 'attack': attack, 'health': health,
                            'slot_buff': True})
        return results

    def _double_attack(self, context: TriggerContext, engine: 'RulesEngine') -> List[Dict[str, Any]]:
        unit = RecipientResolver.live_source(context, engine)
        if unit is None:
            return []
        gained = unit.current_attack
        engine.store.update_unit(unit.owner, unit.slot_index, {'current_attack': gained},
                                 operation='double_attack')
        return [{'player_id': unit.owner, 'slot': unit.slot_index, 'unit_id': unit.id, 'attack': gained}]


# Register the handler
register_effect_handler(EffectType.BUFF, BuffHandler())
