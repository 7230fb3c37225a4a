"""
StateStore - owns the authoritative GameState and applies named mutations
"""
from typing import Any, Dict, List, Optional
import logging

from slotcraft.engine.event_dispatcher import EventDispatcher
from slotcraft.models.card import Card
from slotcraft.models.game_state import GameState, PlayerState, SLOT_COUNT, opponent_of
from slotcraft.models.unit import Unit
from slotcraft.services.error_handler import ErrorHandler, InvariantViolation, Severity

logger = logging.getLogger(__name__)

# Integer fields update_unit accepts deltas for
_STAT_FIELDS = ('attack', 'health', 'current_attack', 'current_health', 'max_health',
                'temp_attack', 'temp_health')
_FLAG_FIELDS = ('can_attack', 'summoned_this_turn', 'has_attacked_player', 'banished', 'ability')


class StateStore:
    """Encapsulates the authoritative state for a game.

    Every component reads through the store and mutates only through its
    named operations, so a trigger resolved mid-combat always sees the
    writes made earlier in the same resolution chain.
    """

    def __init__(self, state: Optional[GameState] = None,
                 dispatcher: Optional[EventDispatcher] = None,
                 error_handler: Optional[ErrorHandler] = None):
        self.state = state or GameState()
        self.dispatcher = dispatcher or EventDispatcher()
        self.error_handler = error_handler or ErrorHandler(event_callback=self.dispatcher.emit)

    # ------------------------------------------------------------------ reads

    def player(self, player_id: str) -> PlayerState:
        return self.state.players[player_id]

    def unit_at(self, player_id: str, slot_index: int) -> Optional[Unit]:
        return self.state.unit_at(player_id, slot_index)

    def units(self, player_id: str) -> List[Unit]:
        return self.state.players[player_id].units()

    def first_empty_slot(self, player_id: str) -> Optional[int]:
        empty = self.state.players[player_id].empty_slots()
        return empty[0] if empty else None

    def emit(self, event_type: str, data: Optional[Dict[str, Any]] = None) -> None:
        self.dispatcher.emit(event_type, data)

    def report(self, message: str, operation: str, severity: Severity = Severity.MEDIUM, **context) -> None:
        """Report an invariant violation; the caller skips its mutation."""
        self.error_handler.handle(InvariantViolation(message), context, operation=operation,
                                  component='state_store', severity=severity)

    # ------------------------------------------------------------- battlefield

    def place_unit(self, player_id: str, slot_index: int, unit: Unit) -> Optional[Unit]:
        """Put a unit into an empty slot, applying the slot's accumulated buff."""
        if not 0 <= slot_index < SLOT_COUNT:
            self.report(f"slot {slot_index} out of range", 'place_unit', player_id=player_id)
            return None
        player = self.player(player_id)
        if player.battlefield[slot_index] is not None:
            self.report(f"slot {slot_index} already occupied", 'place_unit', player_id=player_id)
            return None

        unit.owner = player_id
        unit.slot_index = slot_index
        buff = player.slot_buffs[slot_index]
        if not buff.is_empty:
            unit.current_attack = unit.attack + buff.attack
            unit.max_health = unit.health + buff.health
            unit.current_health = unit.max_health
        player.battlefield[slot_index] = unit
        self.emit('unit_placed', {'player_id': player_id, 'slot': slot_index, 'unit': unit.to_dict()})
        return unit

    def remove_unit(self, player_id: str, slot_index: int) -> Optional[Unit]:
        player = self.player(player_id)
        unit = player.battlefield[slot_index]
        if unit is None:
            self.report(f"no unit to remove in slot {slot_index}", 'remove_unit', player_id=player_id)
            return None
        player.battlefield[slot_index] = None
        self.emit('unit_removed', {'player_id': player_id, 'slot': slot_index, 'unit_id': unit.id})
        return unit

    def update_unit(self, player_id: str, slot_index: int, deltas: Optional[Dict[str, int]] = None,
                    operation: str = 'update_unit', **flags) -> Optional[Unit]:
        """Single stat-update primitive.

        Validates the slot still holds a unit, applies integer deltas and flag
        assignments, keeps current health within max health and emits a
        ``unit_stats_changed`` notification.

        Returns:
            The updated unit, or None when the slot was empty
        """
        unit = self.unit_at(player_id, slot_index)
        if unit is None:
            self.report(f"{operation}: slot {slot_index} holds no unit", operation,
                        player_id=player_id, slot=slot_index, deltas=deltas or {})
            return None

        for name, delta in (deltas or {}).items():
            if name not in _STAT_FIELDS:
                raise ValueError(f"Unknown stat field: {name}")
            setattr(unit, name, getattr(unit, name) + int(delta))
        for name, value in flags.items():
            if name not in _FLAG_FIELDS:
                raise ValueError(f"Unknown unit flag: {name}")
            setattr(unit, name, value)

        if unit.current_health > unit.max_health:
            unit.current_health = unit.max_health

        self.emit('unit_stats_changed', {
            'player_id': player_id,
            'slot': slot_index,
            'operation': operation,
            'deltas': dict(deltas or {}),
            'unit': unit.to_dict(),
        })
        return unit

    def apply_buff(self, player_id: str, slot_index: int, attack: int, health: int,
                   temporary: bool = False, operation: str = 'buff') -> Optional[Unit]:
        if temporary:
            deltas = {'current_attack': attack, 'current_health': health, 'max_health': health,
                      'temp_attack': attack, 'temp_health': health}
        else:
            deltas = {'attack': attack, 'health': health, 'current_attack': attack,
                      'current_health': health, 'max_health': health}
        return self.update_unit(player_id, slot_index, deltas, operation=operation)

    def damage_unit(self, player_id: str, slot_index: int, amount: int,
                    operation: str = 'damage') -> Optional[Unit]:
        if amount <= 0:
            return self.unit_at(player_id, slot_index)
        return self.update_unit(player_id, slot_index, {'current_health': -amount}, operation=operation)

    def add_slot_buff(self, player_id: str, slot_index: int, attack: int, health: int) -> None:
        """Accumulate a slot buff and apply it to the current occupant."""
        if not 0 <= slot_index < SLOT_COUNT:
            self.report(f"slot {slot_index} out of range", 'add_slot_buff', player_id=player_id)
            return
        buff = self.player(player_id).slot_buffs[slot_index]
        buff.attack += attack
        buff.health += health
        self.emit('slot_buffed', {'player_id': player_id, 'slot': slot_index,
                                  'attack': attack, 'health': health,
                                  'total': {'attack': buff.attack, 'health': buff.health}})
        if self.unit_at(player_id, slot_index) is not None:
            self.update_unit(player_id, slot_index,
                             {'current_attack': attack, 'current_health': health, 'max_health': health},
                             operation='slot_buff')

    def expire_temporary_buffs(self, player_id: str) -> None:
        for unit in self.units(player_id):
            if unit.temp_attack == 0 and unit.temp_health == 0:
                continue
            self.update_unit(player_id, unit.slot_index, {
                'current_attack': -unit.temp_attack,
                'max_health': -unit.temp_health,
                'temp_attack': -unit.temp_attack,
                'temp_health': -unit.temp_health,
            }, operation='expire_temporary')

    def ready_units(self, player_id: str) -> None:
        """Clear summoning sickness for every unit the player controls."""
        for unit in self.units(player_id):
            unit.can_attack = True
            unit.summoned_this_turn = False
        self.emit('units_readied', {'player_id': player_id})

    # ----------------------------------------------------------------- players

    def damage_player(self, player_id: str, amount: int, source: Optional[str] = None) -> int:
        player = self.player(player_id)
        player.health = max(0, player.health - max(0, amount))
        self.emit('player_damaged', {'player_id': player_id, 'amount': amount,
                                     'health': player.health, 'source': source})
        if player.health <= 0 and self.state.winner is None:
            self.state.winner = opponent_of(player_id)
            logger.info("%s defeated, %s wins", player_id, self.state.winner)
            self.emit('game_over', {'winner': self.state.winner, 'loser': player_id})
        return player.health

    def heal_player(self, player_id: str, amount: int, cap: int) -> int:
        player = self.player(player_id)
        player.health = min(cap, player.health + max(0, amount))
        self.emit('player_healed', {'player_id': player_id, 'amount': amount, 'health': player.health})
        return player.health

    def set_gold(self, player_id: str, gold: int, max_gold: Optional[int] = None) -> None:
        player = self.player(player_id)
        player.gold = gold
        if max_gold is not None:
            player.max_gold = max_gold
        self.emit('gold_changed', {'player_id': player_id, 'gold': player.gold, 'max_gold': player.max_gold})

    def spend_gold(self, player_id: str, amount: int) -> bool:
        player = self.player(player_id)
        if not player.can_afford(amount):
            return False
        self.set_gold(player_id, player.gold - amount)
        return True

    # ------------------------------------------------------------ hand & deck

    def add_to_hand(self, player_id: str, card: Card) -> None:
        self.player(player_id).hand.append(card)
        self.emit('card_added_to_hand', {'player_id': player_id, 'card': card.to_dict()})

    def remove_from_hand(self, player_id: str, card: Card) -> bool:
        hand = self.player(player_id).hand
        if card not in hand:
            return False
        hand.remove(card)
        return True

    def add_to_deck(self, player_id: str, card: Card) -> None:
        self.player(player_id).deck.append(card)
        self.emit('card_returned_to_deck', {'player_id': player_id, 'card_id': card.id})

    def pop_deck(self, player_id: str) -> Optional[Card]:
        deck = self.player(player_id).deck
        if not deck:
            return None
        return deck.pop(0)

    # ---------------------------------------------------------- turn & combat

    def mark_attacked(self, player_id: str, slot_index: int) -> None:
        attacked = self.player(player_id).has_attacked
        if slot_index in attacked:
            self.report(f"slot {slot_index} already marked as attacked", 'mark_attacked',
                        severity=Severity.LOW, player_id=player_id)
            return
        attacked.add(slot_index)

    def clear_attacked(self, player_id: str) -> None:
        self.player(player_id).has_attacked.clear()

    def set_current_player(self, player_id: str) -> None:
        self.state.current_player = player_id
        self.emit('current_player_changed', {'player_id': player_id, 'turn': self.state.turn})

    def advance_turn(self) -> int:
        self.state.turn += 1
        return self.state.turn

    # -------------------------------------------------------------- resources

    def add_souls(self, player_id: str, amount: int) -> int:
        self.state.souls[player_id] = self.state.souls.get(player_id, 0) + amount
        self.emit('souls_changed', {'player_id': player_id, 'souls': self.state.souls[player_id]})
        return self.state.souls[player_id]

    def spend_souls(self, player_id: str, amount: int) -> int:
        spent = min(amount, self.state.souls.get(player_id, 0))
        self.state.souls[player_id] -= spent
        self.emit('souls_changed', {'player_id': player_id, 'souls': self.state.souls[player_id]})
        return spent

    def add_dragon_souls(self, player_id: str, amount: int) -> int:
        self.state.dragon_souls[player_id] = self.state.dragon_souls.get(player_id, 0) + amount
        self.emit('dragon_souls_changed', {'player_id': player_id,
                                           'dragon_souls': self.state.dragon_souls[player_id]})
        return self.state.dragon_souls[player_id]

    # ------------------------------------------------------------------ draft

    def set_draft(self, player_id: str, tier: int, options: List[Card]) -> None:
        self.state.drafting_player = player_id
        self.state.current_draft_tier = tier
        self.state.draft_options = list(options)
        self.emit('draft_options', {'player_id': player_id, 'tier': tier,
                                    'options': [c.to_dict() for c in options]})

    def clear_draft(self) -> None:
        self.state.drafting_player = None
        self.state.current_draft_tier = None
        self.state.draft_options = []

    def mark_drafted(self, pool_id: Optional[str]) -> None:
        if pool_id:
            self.state.drafted_pool_ids.add(pool_id)
