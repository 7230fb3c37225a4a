"""
Grant Ability Effect Handler - Handles keyword grants such as "Gain Rush"
"""
import re
from typing import Dict, Any, List, TYPE_CHECKING
from slotcraft.models.effect import Effect, TriggerContext, EffectType
from slotcraft.services.effects import EffectHandler, register_effect_handler
from slotcraft.services.recipient_resolver import RecipientResolver

if TYPE_CHECKING:
    from slotcraft.engine.rules_engine import RulesEngine


def append_ability(ability: str, keyword: str) -> str:
    """Append a keyword to an ability string unless it is already present."""
    if re.search(rf'\b{re.escape(keyword)}\b', ability or '', re.IGNORECASE):
        return ability
    return f"{ability}, {keyword}" if ability else keyword


class GrantAbilityHandler(EffectHandler):
    """Handles ability grants. Granting an ability the unit already has is a no-op."""

    def execute(self, effect: Effect, context: TriggerContext, engine: 'RulesEngine') -> List[Dict[str, Any]]:
        keyword = effect.params.get('ability', '')
        unit = RecipientResolver.live_source(context, engine)
        if unit is None or not keyword:
            return []

        new_ability = append_ability(unit.ability, keyword)
        if new_ability == unit.ability:
            return []

        flags = {'ability': new_ability}
        if keyword.lower() == 'rush':
            flags['can_attack'] = True
        engine.store.update_unit(unit.owner, unit.slot_index, operation='grant_ability', **flags)
        return [{'player_id': unit.owner, 'slot': unit.slot_index, 'unit_id': unit.id, 'ability': keyword}]


# Register the handler
register_effect_handler(EffectType.GRANT_ABILITY, GrantAbilityHandler())
