"""
Combat resolver - validates attacks, picks column-deterministic targets and
applies combat damage
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, TYPE_CHECKING

from slotcraft.models.game_state import opponent_of
from slotcraft.models.unit import Unit
from slotcraft.services.error_handler import InvalidAttack
from slotcraft.services.stat_calculator import StatCalculator
from slotcraft.services.tags import has_tag

if TYPE_CHECKING:
    from slotcraft.engine.rules_engine import RulesEngine

logger = logging.getLogger(__name__)


class AttackState(Enum):
    REQUESTED = "requested"
    VALIDATED = "validated"
    TARGET_RESOLVED = "target_resolved"
    DAMAGE_APPLIED = "damage_applied"
    DEATH_CHECK = "death_check"
    COMPLETED = "completed"
    REJECTED = "rejected"


@dataclass
class AttackTarget:
    """Exactly one of: an enemy unit slot, or the enemy player"""
    kind: str  # 'unit' or 'player'
    player_id: str
    slot: Optional[int] = None

    @property
    def is_player(self) -> bool:
        return self.kind == 'player'


@dataclass
class AttackResult:
    attacker_slot: int
    target: AttackTarget
    damage: Dict[str, int] = field(default_factory=dict)
    deaths: List[Dict[str, Any]] = field(default_factory=list)
    states: List[AttackState] = field(default_factory=list)


class CombatResolver:
    """Handles attack validation, target selection and damage"""

    def __init__(self, engine: 'RulesEngine'):
        self.engine = engine
        self.store = engine.store

    def _has(self, unit: Unit, keyword: str) -> bool:
        return StatCalculator.has_ability(unit, keyword, self.engine.state)

    def validate(self, attacker_slot: int, player_id: str) -> Unit:
        """Check an attack request without touching state.

        Raises:
            InvalidAttack: with a stable reason tag
        """
        state = self.engine.state
        if state.game_over:
            raise InvalidAttack('game_over')
        unit = self.store.unit_at(player_id, attacker_slot)
        if unit is None:
            raise InvalidAttack('no_unit')

        text = unit.ability_text()
        if "can't attack" in text or 'cannot attack' in text:
            raise InvalidAttack('cannot_attack')
        if state.current_player != player_id:
            raise InvalidAttack('not_players_turn')
        if attacker_slot in self.store.player(player_id).has_attacked:
            raise InvalidAttack('already_attacked')
        if not unit.can_attack and not self._has(unit, 'rush'):
            raise InvalidAttack('summoning_sickness')
        if 'goblin in each column' in text and not self._goblin_in_each_column(player_id):
            raise InvalidAttack('goblin_machine_requirement')
        return unit

    def _goblin_in_each_column(self, player_id: str) -> bool:
        for column in range(3):
            column_units = [self.store.unit_at(player_id, s) for s in (column, column + 3)]
            if not any(u is not None and has_tag(u, 'Goblin') for u in column_units):
                return False
        return True

    def _select_target(self, attacker: Unit) -> AttackTarget:
        """Resolve the defender from the attacker's column and keywords."""
        enemy = opponent_of(attacker.owner)
        column = attacker.column
        front = self.store.unit_at(enemy, column)
        back = self.store.unit_at(enemy, column + 3)
        player_target = AttackTarget('player', enemy)

        if self._has(attacker, 'sneaky') and not attacker.has_attacked_player:
            return player_target
        if self._has(attacker, 'flying'):
            for defender in (front, back):
                if defender is not None and self._has(defender, 'flying'):
                    return AttackTarget('unit', enemy, defender.slot_index)
            return player_target
        if self._has(attacker, 'ranged'):
            return AttackTarget('unit', enemy, back.slot_index) if back is not None else player_target
        for defender in (front, back):
            if defender is not None:
                return AttackTarget('unit', enemy, defender.slot_index)
        return player_target

    def _calculate_damage(self, unit: Unit) -> int:
        return StatCalculator.effective_attack(unit, self.engine.state)

    def resolve(self, attacker_slot: int, player_id: str) -> AttackResult:
        states = [AttackState.REQUESTED]
        try:
            attacker = self.validate(attacker_slot, player_id)
        except InvalidAttack as e:
            logger.info(f"{player_id} attack from slot {attacker_slot} rejected: {e.reason}")
            raise
        states.append(AttackState.VALIDATED)

        target = self._select_target(attacker)
        states.append(AttackState.TARGET_RESOLVED)
        result = AttackResult(attacker_slot=attacker_slot, target=target, states=states)

        if target.is_player:
            self._attack_player(attacker, target, result)
        else:
            self._attack_unit(attacker, target, result)

        self.store.mark_attacked(player_id, attacker_slot)
        states.append(AttackState.COMPLETED)
        self.engine.publish('attack_completed', {
            'player_id': player_id,
            'slot': attacker_slot,
            'unit': attacker,
            'target': target.kind,
            'target_slot': target.slot,
        })
        logger.info(f"{attacker.name} ({player_id} slot {attacker_slot}) attacked "
                    f"{'player' if target.is_player else 'slot %s' % target.slot}: {result.damage}")
        return result

    def _attack_player(self, attacker: Unit, target: AttackTarget, result: AttackResult) -> None:
        damage = self._calculate_damage(attacker)
        self.store.damage_player(target.player_id, damage, source=attacker.id)
        self.store.update_unit(attacker.owner, attacker.slot_index, operation='attacked_player',
                               has_attacked_player=True)
        result.damage = {'to_player': damage}
        result.states.append(AttackState.DAMAGE_APPLIED)

    def _attack_unit(self, attacker: Unit, target: AttackTarget, result: AttackResult) -> None:
        engine = self.engine
        owner, enemy = attacker.owner, target.player_id
        defender = self.store.unit_at(enemy, target.slot)

        attack_damage = self._calculate_damage(attacker)
        return_damage = self._calculate_damage(defender)

        to_defender, excess = attack_damage, 0
        if self._has(attacker, 'trample'):
            excess = max(0, attack_damage - max(0, defender.current_health))
            to_defender = attack_damage - excess

        self.store.damage_unit(enemy, target.slot, to_defender, operation='combat')
        if excess:
            self.store.damage_player(enemy, excess, source=f'{attacker.id}:trample')

        to_attacker = return_damage
        if self._has(attacker, 'first strike') and defender.is_dead:
            to_attacker = 0
        self.store.damage_unit(owner, attacker.slot_index, to_attacker, operation='combat')
        result.damage = {'to_unit': to_defender, 'to_attacker': to_attacker, 'trample': excess}
        result.states.append(AttackState.DAMAGE_APPLIED)

        result.states.append(AttackState.DEATH_CHECK)
        defender_died = engine.check_death(enemy, target.slot, cause='combat')
        attacker_died = engine.check_death(owner, attacker.slot_index, cause='combat')
        if defender_died:
            result.deaths.append({'player_id': enemy, 'slot': target.slot, 'unit_id': defender.id})
        elif to_defender > 0:
            engine.publish('unit_survived_damage', {'player_id': enemy, 'slot': target.slot,
                                                    'amount': to_defender})
        if attacker_died:
            result.deaths.append({'player_id': owner, 'slot': attacker.slot_index, 'unit_id': attacker.id})
        else:
            if to_attacker > 0:
                engine.publish('unit_survived_damage', {'player_id': owner, 'slot': attacker.slot_index,
                                                        'amount': to_attacker})
            engine.publish('unit_survived_attacking', {'player_id': owner, 'slot': attacker.slot_index})
