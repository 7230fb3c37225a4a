"""
Heal Effect Handler - Handles player heals and full unit heals
"""
from typing import Dict, Any, List, TYPE_CHECKING
from slotcraft.models.effect import Effect, TriggerContext, EffectType, TargetType
from slotcraft.services.effects import EffectHandler, register_effect_handler
from slotcraft.services.recipient_resolver import RecipientResolver

if TYPE_CHECKING:
    from slotcraft.engine.rules_engine import RulesEngine


class HealHandler(EffectHandler):
    """Handles heal effects. Player health never exceeds the configured maximum."""

    def execute(self, effect: Effect, context: TriggerContext, engine: 'RulesEngine') -> List[Dict[str, Any]]:
        if effect.target == TargetType.SELF:
            unit = RecipientResolver.live_source(context, engine)
            if unit is None or unit.current_health >= unit.max_health:
                return []
            missing = unit.max_health - unit.current_health
            engine.store.update_unit(unit.owner, unit.slot_index, {'current_health': missing},
                                     operation='heal')
            return [{'player_id': unit.owner, 'slot': unit.slot_index, 'amount': missing}]

        amount = int(effect.params.get('amount', 0))
        if amount <= 0:
            return []
        health = engine.store.heal_player(context.owner, amount, cap=engine.config.max_player_health)
        return [{'player_id': context.owner, 'amount': amount, 'player_health': health}]


# Register the handler
register_effect_handler(EffectType.HEAL, HealHandler())
