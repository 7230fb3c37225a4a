"""
Summon Effect Handler - Handles token summons and add-to-hand effects
"""
import logging
from typing import Dict, Any, List, Optional, TYPE_CHECKING
from slotcraft.models.effect import Effect, TriggerContext, EffectType, TargetType
from slotcraft.models.game_state import FRONT_SLOTS
from slotcraft.services.effects import EffectHandler, register_effect_handler
from slotcraft.services.unit_factory import TOKEN_TEMPLATES

if TYPE_CHECKING:
    from slotcraft.engine.rules_engine import RulesEngine

logger = logging.getLogger(__name__)


class SummonHandler(EffectHandler):
    """Handles summon effects.

    Hand additions skip the hand-size check; callers pre-check when it
    matters. Board summons go to the first empty slot (or this slot for
    "here") and are silently skipped when the battlefield is full.
    """

    def execute(self, effect: Effect, context: TriggerContext, engine: 'RulesEngine') -> List[Dict[str, Any]]:
        template = TOKEN_TEMPLATES.get(effect.params.get('template', ''))
        if template is None:
            logger.warning(f"Unknown summon template {effect.params.get('template')!r}")
            return []

        owner = context.owner
        if effect.target == TargetType.HAND:
            results = []
            for _ in range(int(effect.params.get('count', 1))):
                engine.store.add_to_hand(owner, template)
                results.append({'player_id': owner, 'card_id': template.id, 'destination': 'hand'})
            return results

        if effect.params.get('fill'):
            allowed = FRONT_SLOTS if effect.target == TargetType.FRONT_ROW else range(6)
            slots = [s for s in engine.store.player(owner).empty_slots() if s in allowed]
        else:
            slots = []
            for _ in range(int(effect.params.get('count', 1))):
                slot = self._choose_slot(effect, context, engine, taken=slots)
                if slot is None:
                    logger.debug(f"No empty slot for {template.name} summoned by {context.unit_name}")
                    break
                slots.append(slot)

        results = []
        for slot in slots:
            unit = engine.summon(template, owner, slot)
            if unit is not None:
                results.append({'player_id': owner, 'card_id': template.id, 'slot': slot,
                                'destination': 'battlefield'})
        return results

    def _choose_slot(self, effect: Effect, context: TriggerContext, engine: 'RulesEngine',
                     taken: List[int]) -> Optional[int]:
        empty = [s for s in engine.store.player(context.owner).empty_slots() if s not in taken]
        if effect.params.get('here') and context.slot_index in empty:
            return context.slot_index
        return empty[0] if empty else None


# Register the handler
register_effect_handler(EffectType.SUMMON, SummonHandler())
