"""Game manager - public entry points for the rules core"""
import logging
import os
import random
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from ..engine.event_dispatcher import EventDispatcher
from ..engine.rules_engine import RulesEngine
from ..engine.state_store import StateStore
from ..models.card import Card
from ..models.game_state import GameState, PLAYER, PLAYER_IDS, PlayerState, SLOT_COUNT, opponent_of
from ..models.unit import Unit
from ..services.combat_resolver import AttackResult, CombatResolver
from ..services.data_loader import GameData, load_game_data
from ..services.draft import DraftService
from ..services.error_handler import (
    ErrorHandler, GameRuleError, HandFull, InsufficientGold, InvalidPlacement,
    NoCardsAvailable, NoDraftActive,
)
from ..services.stat_calculator import StatCalculator
from ..services.triggers import AbilityTriggers

bot_logger = logging.getLogger('slotcraft')


@dataclass
class PlayResult:
    unit: Unit
    triggered_effects: List[Dict[str, Any]] = field(default_factory=list)


def _default_seed() -> Optional[int]:
    if os.getenv('SLOTCRAFT_DETERMINISTIC', '0').lower() in ('1', 'true', 'yes'):
        return 0
    return None


class GameManager:
    """Manages one game: validates player intents and runs them to completion.

    Every mutating call resolves all cascading triggers before it returns.
    Rejected intents raise a ``GameRuleError`` subclass before any state
    changes.
    """

    def __init__(self, data: Optional[GameData] = None, seed: Optional[int] = None,
                 event_callback: Optional[Callable[[str, Dict[str, Any]], None]] = None):
        self.data = data or load_game_data()
        self.config = self.data.config
        self._callbacks = [event_callback] if event_callback else []
        self.new_game(seed)

    # ------------------------------------------------------------------ setup

    def new_game(self, seed: Optional[int] = None) -> GameState:
        """Reset to a fresh game: 20 health, 2 gold, empty hands, decks and battlefields."""
        if seed is None:
            seed = _default_seed()
        self.rng = random.Random(seed)

        players = {
            pid: PlayerState(player_id=pid, health=self.config.starting_health,
                             gold=self.config.starting_gold, max_gold=self.config.starting_gold)
            for pid in PLAYER_IDS
        }
        state = GameState(current_player=PLAYER, turn=1, players=players)
        self.dispatcher = EventDispatcher()
        for callback in self._callbacks:
            self.dispatcher.subscribe(callback)
        self.error_handler = ErrorHandler(event_callback=self.dispatcher.emit)
        self.store = StateStore(state, dispatcher=self.dispatcher, error_handler=self.error_handler)
        self.engine = RulesEngine(self.store, config=self.config, rng=self.rng)
        self.triggers = AbilityTriggers(self.engine).register()
        self.combat = CombatResolver(self.engine)
        self.draft = DraftService(self.data.cards_by_tier, copies_per_card=self.config.copies_per_card,
                                  rng=self.rng)
        bot_logger.info(f"New game started (seed={seed})")
        return state

    def subscribe(self, callback: Callable[[str, Dict[str, Any]], None]) -> None:
        """Register an observer for UI-facing events (also kept across new_game)."""
        if callback not in self._callbacks:
            self._callbacks.append(callback)
        self.dispatcher.subscribe(callback)

    def get_state(self) -> GameState:
        return self.store.state

    @property
    def state(self) -> GameState:
        return self.store.state

    def effective_attack(self, player_id: str, slot_index: int) -> Optional[int]:
        unit = self.store.unit_at(player_id, slot_index)
        if unit is None:
            return None
        return StatCalculator.effective_attack(unit, self.state)

    def _require_turn(self, player_id: str, error: type = GameRuleError) -> None:
        if self.state.game_over:
            raise error('game_over')
        if self.state.current_player != player_id:
            raise error('not_players_turn')

    # ---------------------------------------------------------------- playing

    def play_card(self, card: Card, slot_index: int, player_id: str) -> PlayResult:
        """Play a card from hand onto an empty slot and resolve its triggers.

        Raises:
            InvalidPlacement: game over, not the player's turn, slot out of
                range or occupied, or card not in hand
        """
        self._require_turn(player_id, InvalidPlacement)
        if not 0 <= slot_index < SLOT_COUNT:
            raise InvalidPlacement('slot_out_of_range')
        if self.store.unit_at(player_id, slot_index) is not None:
            raise InvalidPlacement('slot_occupied')
        if card not in self.store.player(player_id).hand:
            raise InvalidPlacement('card_not_in_hand')

        self.engine.reset_log()
        with self.engine.router.batch():
            self.store.remove_from_hand(player_id, card)
            unit = self.engine.place_card(card, player_id, slot_index, summoned=False)
            bot_logger.info(f"{player_id} played {card.name} into slot {slot_index}")
            self.engine.publish('unit_played', {'player_id': player_id, 'slot': slot_index})
            self.engine.publish('card_played', {'player_id': player_id, 'card_id': card.id})
        return PlayResult(unit=unit, triggered_effects=list(self.engine.resolution_log))

    def attack(self, attacker_slot: int, player_id: str) -> AttackResult:
        """Attack with the unit in a slot.

        Raises:
            InvalidAttack: with reason cannot_attack, not_players_turn,
                already_attacked, summoning_sickness,
                goblin_machine_requirement, no_unit or game_over
        """
        self.engine.reset_log()
        with self.engine.router.batch():
            result = self.combat.resolve(attacker_slot, player_id)
        return result

    # ------------------------------------------------------------------ draft

    def _tier_cost(self, tier: int) -> int:
        if tier not in self.draft.pools:
            raise GameRuleError('invalid_tier', f"No draft pool for tier {tier}")
        return self.config.tier_cost(tier)

    def _check_hand_room(self, player_id: str) -> None:
        if len(self.store.player(player_id).hand) >= self.config.hand_limit:
            raise HandFull()

    def start_draft(self, tier: int, player_id: str) -> List[Card]:
        """Pay ``tier * 2`` gold and roll draft options.

        An already open draft of the same tier is shown again without
        charging.
        """
        self._require_turn(player_id)
        cost = self._tier_cost(tier)
        state = self.state
        if state.drafting_player == player_id and state.current_draft_tier == tier and state.draft_options:
            return list(state.draft_options)

        self._check_hand_room(player_id)
        if not self.store.player(player_id).can_afford(cost):
            raise InsufficientGold()
        options = self.draft.roll(tier, state.drafted_pool_ids, count=self.config.draft_options)
        if not options:
            raise NoCardsAvailable()

        self.store.spend_gold(player_id, cost)
        self.store.set_draft(player_id, tier, options)
        bot_logger.info(f"{player_id} started a tier {tier} draft for {cost} gold")
        return options

    def reroll_draft(self, tier: int, player_id: str) -> List[Card]:
        """Replace the open draft's options for a flat reroll cost."""
        self._require_turn(player_id)
        self._tier_cost(tier)
        state = self.state
        if state.drafting_player != player_id or not state.draft_options:
            raise NoDraftActive()
        self._check_hand_room(player_id)
        if not self.store.player(player_id).can_afford(self.config.reroll_cost):
            raise InsufficientGold()
        options = self.draft.roll(tier, state.drafted_pool_ids, count=self.config.draft_options)
        if not options:
            raise NoCardsAvailable()

        self.store.spend_gold(player_id, self.config.reroll_cost)
        self.store.set_draft(player_id, tier, options)
        return options

    def select_draft_card(self, card: Card, player_id: str) -> Card:
        """Take one of the open draft's options into hand and close the draft."""
        self._require_turn(player_id)
        state = self.state
        if state.drafting_player != player_id or not state.draft_options:
            raise NoDraftActive()
        chosen = next((c for c in state.draft_options
                       if (card.pool_id and c.pool_id == card.pool_id) or (not card.pool_id and c == card)),
                      None)
        if chosen is None:
            raise GameRuleError('card_not_offered')
        self._check_hand_room(player_id)

        self.store.add_to_hand(player_id, chosen)
        self.store.mark_drafted(chosen.pool_id)
        self.store.clear_draft()
        bot_logger.info(f"{player_id} drafted {chosen.name}")
        return chosen

    # ------------------------------------------------------------ deck & turn

    def draw_from_deck(self, player_id: str, free: bool = False) -> Card:
        """Draw the top card of the player's deck, paying the draw cost unless free.

        Raises:
            HandFull, EmptyDeck, InsufficientGold
        """
        self._require_turn(player_id)
        with self.engine.router.batch():
            card = self.engine.draw_card(player_id, free=free)
        return card

    def end_turn(self, player_id: str) -> str:
        """Finish the player's turn and start the opponent's.

        Returns:
            The new current player
        """
        self._require_turn(player_id)
        self.engine.reset_log()

        with self.engine.router.batch():
            self.engine.publish('turn_ended', {'player_id': player_id})
        for pid in PLAYER_IDS:
            self.store.expire_temporary_buffs(pid)
        if self.state.game_over:
            return self.state.current_player

        next_player = opponent_of(player_id)
        with self.engine.router.batch():
            if next_player == PLAYER:
                turn = self.store.advance_turn()
                max_gold = min(turn + 1, self.config.max_gold)
                for pid in PLAYER_IDS:
                    self.store.set_gold(pid, max_gold, max_gold)
            if self.state.drafting_player is not None:
                self.store.clear_draft()
            self.store.set_current_player(next_player)
            self.store.clear_attacked(next_player)
            self.store.ready_units(next_player)
            self.engine.publish('turn_started', {'player_id': next_player, 'turn': self.state.turn})
        bot_logger.info(f"Turn {self.state.turn}: {next_player} to act")
        return next_player
