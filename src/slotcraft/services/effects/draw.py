"""
Draw Effect Handler - Handles ability-triggered card draws
"""
import logging
from typing import Dict, Any, List, TYPE_CHECKING
from slotcraft.models.effect import Effect, TriggerContext, EffectType, TargetType
from slotcraft.models.game_state import opponent_of
from slotcraft.services.effects import EffectHandler, register_effect_handler
from slotcraft.services.error_handler import GameRuleError

if TYPE_CHECKING:
    from slotcraft.engine.rules_engine import RulesEngine

logger = logging.getLogger(__name__)


def free_draws(engine: 'RulesEngine', player_id: str, amount: int, from_player: str = None) -> List[Dict[str, Any]]:
    """Draw up to ``amount`` cards without paying gold, stopping at the first refusal."""
    results = []
    for _ in range(amount):
        try:
            card = engine.draw_card(player_id, free=True, from_player=from_player)
        except GameRuleError as e:
            logger.info(f"Ability draw for {player_id} stopped: {e.reason}")
            results.append({'player_id': player_id, 'drawn': None, 'reason': e.reason})
            break
        results.append({'player_id': player_id, 'drawn': card.id})
    return results


class DrawHandler(EffectHandler):
    """Handles draw effects. Ability draws are always free."""

    def execute(self, effect: Effect, context: TriggerContext, engine: 'RulesEngine') -> List[Dict[str, Any]]:
        amount = int(effect.params.get('amount', 1))
        from_player = opponent_of(context.owner) if effect.target == TargetType.OPPONENT else None
        return free_draws(engine, context.owner, amount, from_player=from_player)


# Register the handler
register_effect_handler(EffectType.DRAW, DrawHandler())
