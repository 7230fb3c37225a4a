"""
Resource Effect Handlers - dragon soul gains and soul consumption
"""
from typing import Dict, Any, List, TYPE_CHECKING
from slotcraft.models.effect import Effect, TriggerContext, EffectType
from slotcraft.services.effects import EffectHandler, register_effect_handler
from slotcraft.services.effects.draw import free_draws

if TYPE_CHECKING:
    from slotcraft.engine.rules_engine import RulesEngine


class DragonSoulHandler(EffectHandler):
    """Adds dragon souls to the owner's pool"""

    def execute(self, effect: Effect, context: TriggerContext, engine: 'RulesEngine') -> List[Dict[str, Any]]:
        amount = int(effect.params.get('amount', 0))
        if amount <= 0:
            return []
        total = engine.store.add_dragon_souls(context.owner, amount)
        return [{'player_id': context.owner, 'dragon_souls': total, 'amount': amount}]


class SoulHandler(EffectHandler):
    """Consumes souls: "consume up to N souls. draw that many cards"."""

    def execute(self, effect: Effect, context: TriggerContext, engine: 'RulesEngine') -> List[Dict[str, Any]]:
        if effect.params.get('mode') != 'consume_draw':
            return []
        owner = context.owner
        player = engine.store.player(owner)
        room = max(0, engine.config.hand_limit - len(player.hand))
        count = min(engine.state.souls.get(owner, 0), int(effect.params.get('amount', 0)), room,
                    len(player.deck))
        if count <= 0:
            return []
        engine.store.spend_souls(owner, count)
        return free_draws(engine, owner, count)


# Register the handlers
register_effect_handler(EffectType.DRAGON_SOUL, DragonSoulHandler())
register_effect_handler(EffectType.SOUL, SoulHandler())
