"""
Damage Effect Handler - Handles damage effects in abilities
"""
from typing import Dict, Any, List, TYPE_CHECKING
from slotcraft.models.effect import Effect, TriggerContext, EffectType, TargetType, Selection
from slotcraft.models.game_state import BACK_SLOTS, FRONT_SLOTS, opponent_of
from slotcraft.services.effects import EffectHandler, register_effect_handler
from slotcraft.services.recipient_resolver import RecipientResolver

if TYPE_CHECKING:
    from slotcraft.engine.rules_engine import RulesEngine


class DamageHandler(EffectHandler):
    """Handles damage effects"""

    def execute(self, effect: Effect, context: TriggerContext, engine: 'RulesEngine') -> List[Dict[str, Any]]:
        amount = self._amount(effect, context, engine)
        if amount <= 0:
            return []

        owner = context.owner
        enemy = opponent_of(owner)
        target = effect.target

        if target == TargetType.OWN_PLAYER:
            return [self._hit_player(engine, owner, amount)]
        if target == TargetType.ENEMY_PLAYER:
            return [self._hit_player(engine, enemy, amount)]
        if target == TargetType.BOTH_PLAYERS:
            return [self._hit_player(engine, owner, amount), self._hit_player(engine, enemy, amount)]

        slots = self._unit_slots(effect, context, engine, enemy)
        if slots is None:
            # Column damage with an empty enemy column reaches the player
            return [self._hit_player(engine, enemy, amount)]

        victim_owner = owner if target == TargetType.FRIENDLY_UNIT else enemy
        return [engine.damage_unit(victim_owner, slot, amount, source='ability') for slot in slots]

    def _amount(self, effect: Effect, context: TriggerContext, engine: 'RulesEngine') -> int:
        amount = int(effect.params.get('amount', 0))
        if effect.params.get('per') == 'soul':
            amount *= engine.state.souls.get(context.owner, 0)
        return amount

    def _hit_player(self, engine: 'RulesEngine', player_id: str, amount: int) -> Dict[str, Any]:
        health = engine.store.damage_player(player_id, amount, source='ability')
        return {'player_id': player_id, 'amount': amount, 'player_health': health}

    def _unit_slots(self, effect: Effect, context: TriggerContext, engine: 'RulesEngine', enemy: str):
        """Enemy (or friendly) slots to damage; None means "hit the enemy player instead"."""
        store = engine.store
        target = effect.target
        here = context.slot_index

        if target in (TargetType.ENEMY_COLUMN, TargetType.ENEMY_COLUMN_UNITS, TargetType.ENEMY_BACK_ROW_HERE):
            if here is None:
                return []
            column = here % 3
            front, back = column, column + 3
            if target == TargetType.ENEMY_BACK_ROW_HERE:
                return [back] if store.unit_at(enemy, back) else []
            occupied = [s for s in (front, back) if store.unit_at(enemy, s)]
            if target == TargetType.ENEMY_COLUMN_UNITS:
                return occupied
            return occupied[:1] if occupied else None

        if target == TargetType.ENEMY_FRONT_ROW:
            return [s for s in FRONT_SLOTS if store.unit_at(enemy, s)]
        if target == TargetType.ENEMY_BACK_ROW:
            return [s for s in BACK_SLOTS if store.unit_at(enemy, s)]

        if target == TargetType.ENEMY_UNIT:
            candidates = [u.slot_index for u in store.units(enemy)]
            if effect.selection == Selection.TARGETED and context.target_slot in candidates:
                return [context.target_slot]
            return RecipientResolver.pick(candidates, effect.selection, engine)

        if target == TargetType.FRIENDLY_UNIT:
            candidates = [u.slot_index for u in store.units(context.owner)]
            if effect.selection == Selection.TARGETED and context.target_slot in candidates:
                return [context.target_slot]
            return RecipientResolver.pick(candidates, effect.selection, engine)
        return []


# Register the handler
register_effect_handler(EffectType.DAMAGE, DamageHandler())
