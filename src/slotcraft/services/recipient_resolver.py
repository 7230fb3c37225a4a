"""
Recipient Resolver - Handles finding effect recipients based on target type
"""
from typing import List, Optional, TYPE_CHECKING

from slotcraft.models.effect import Effect, Selection, TargetType, TriggerContext
from slotcraft.models.game_state import BACK_SLOTS, FRONT_SLOTS, SLOT_COUNT, column_partner, row_slots
from slotcraft.models.unit import Unit
from slotcraft.services.stat_calculator import StatCalculator
from slotcraft.services.tags import has_tag

if TYPE_CHECKING:
    from slotcraft.engine.rules_engine import RulesEngine


class RecipientResolver:
    """Handles finding units and slots an effect applies to"""

    @staticmethod
    def live_source(context: TriggerContext, engine: 'RulesEngine') -> Optional[Unit]:
        """The triggering unit as it currently sits on the battlefield, if still there."""
        if context.slot_index is None:
            return None
        unit = engine.store.unit_at(context.owner, context.slot_index)
        if unit is None:
            return None
        if context.unit is not None and unit is not context.unit:
            return None
        return unit

    @staticmethod
    def pick(candidates: List, selection: Selection, engine: 'RulesEngine') -> List:
        if not candidates:
            return []
        if selection == Selection.ALL:
            return list(candidates)
        return [engine.rng.choice(candidates)]

    @staticmethod
    def find_units(effect: Effect, context: TriggerContext, engine: 'RulesEngine') -> List[Unit]:
        """
        Find friendly unit recipients for a unit-targeting effect.

        Args:
            effect: Parsed effect
            context: Trigger context (owner and source slot)
            engine: Rules engine for state and randomness

        Returns:
            List of recipient units, possibly empty
        """
        target = effect.target
        source = RecipientResolver.live_source(context, engine)

        if target == TargetType.SELF:
            return [source] if source is not None else []

        units = engine.store.units(context.owner)
        if effect.params.get('exclude_self') and context.slot_index is not None:
            units = [u for u in units if u.slot_index != context.slot_index]

        if target in (TargetType.ALL_FRIENDLY_UNITS, TargetType.FRIENDLY_UNIT):
            candidates = units
        elif target == TargetType.TAGGED_UNITS:
            tags = effect.params.get('tags', [])
            candidates = [u for u in units if any(has_tag(u, t) for t in tags)]
        elif target == TargetType.ANOTHER_WITH_ABILITY:
            ability = effect.params.get('ability', '')
            candidates = [u for u in units
                          if u is not source and StatCalculator.has_ability(u, ability, engine.state)]
        else:
            return []
        return RecipientResolver.pick(candidates, effect.selection, engine)

    @staticmethod
    def find_slots(effect: Effect, context: TriggerContext, engine: 'RulesEngine') -> List[int]:
        """Find friendly slot indices for a slot buff."""
        target = effect.target
        here = context.slot_index

        if target == TargetType.FRONT_SLOTS:
            return list(FRONT_SLOTS)
        if target == TargetType.ALL_SLOTS:
            return list(range(SLOT_COUNT))
        if target == TargetType.RANDOM_SLOT:
            return [engine.rng.choice(range(SLOT_COUNT))]
        if target == TargetType.RANDOM_BACK_ROW_SLOT:
            return [engine.rng.choice(BACK_SLOTS)]
        if target == TargetType.SLOT_WITH_TAG:
            tags = effect.params.get('tags', [])
            state = engine.state
            candidates = [
                u.slot_index for u in engine.store.units(context.owner)
                if (effect.selection == Selection.ALL or u.slot_index != here)
                and any(has_tag(u, t) or StatCalculator.has_ability(u, t, state) for t in tags)
            ]
            return RecipientResolver.pick(candidates, effect.selection, engine)

        if here is None:
            return []
        if target == TargetType.THIS_SLOT:
            return [here]
        if target == TargetType.OTHER_SLOT_IN_COLUMN:
            return [column_partner(here)]
        if target == TargetType.OTHER_SLOTS_IN_ROW:
            return [i for i in row_slots(here) if i != here]
        if target == TargetType.ADJACENT_SLOTS:
            return [i for i in (here - 1, here + 1) if 0 <= i < SLOT_COUNT]
        return []
