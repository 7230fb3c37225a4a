"""Game state models shared by every engine component"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

from slotcraft.models.card import Card
from slotcraft.models.unit import Unit

PLAYER = 'player'
AI = 'ai'
PLAYER_IDS = (PLAYER, AI)

SLOT_COUNT = 6
FRONT_SLOTS = (0, 1, 2)
BACK_SLOTS = (3, 4, 5)


def opponent_of(player_id: str) -> str:
    return AI if player_id == PLAYER else PLAYER


def column_partner(slot_index: int) -> int:
    """Other slot sharing the column (0<->3, 1<->4, 2<->5)"""
    return (slot_index + 3) % SLOT_COUNT


def row_slots(slot_index: int) -> tuple:
    return FRONT_SLOTS if slot_index < 3 else BACK_SLOTS


@dataclass
class SlotBuff:
    """Persistent stat bonus attached to a battlefield position"""
    attack: int = 0
    health: int = 0

    @property
    def is_empty(self) -> bool:
        return self.attack == 0 and self.health == 0


@dataclass
class PlayerState:
    """Resources and battlefield owned by one player"""
    player_id: str
    health: int = 20
    gold: int = 2
    max_gold: int = 2
    hand: List[Card] = field(default_factory=list)
    deck: List[Card] = field(default_factory=list)
    battlefield: List[Optional[Unit]] = field(default_factory=lambda: [None] * SLOT_COUNT)
    slot_buffs: List[SlotBuff] = field(default_factory=lambda: [SlotBuff() for _ in range(SLOT_COUNT)])
    has_attacked: Set[int] = field(default_factory=set)

    def can_afford(self, cost: int) -> bool:
        """Check if player can afford something"""
        return self.gold >= cost

    def units(self) -> List[Unit]:
        """Occupied slots in slot order"""
        return [u for u in self.battlefield if u is not None]

    def empty_slots(self) -> List[int]:
        return [i for i, u in enumerate(self.battlefield) if u is None]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'player_id': self.player_id,
            'health': self.health,
            'gold': self.gold,
            'max_gold': self.max_gold,
            'hand': [c.to_dict() for c in self.hand],
            'deck_size': len(self.deck),
            'battlefield': [u.to_dict() if u else None for u in self.battlefield],
            'slot_buffs': [{'attack': b.attack, 'health': b.health} for b in self.slot_buffs],
            'has_attacked': sorted(self.has_attacked),
        }


@dataclass
class GameState:
    """Complete state of one game"""
    current_player: str = PLAYER
    turn: int = 1
    players: Dict[str, PlayerState] = field(default_factory=dict)
    souls: Dict[str, int] = field(default_factory=lambda: {PLAYER: 0, AI: 0})
    dragon_souls: Dict[str, int] = field(default_factory=lambda: {PLAYER: 0, AI: 0})
    draft_options: List[Card] = field(default_factory=list)
    current_draft_tier: Optional[int] = None
    drafting_player: Optional[str] = None
    drafted_pool_ids: Set[str] = field(default_factory=set)
    winner: Optional[str] = None

    def __post_init__(self):
        for pid in PLAYER_IDS:
            if pid not in self.players:
                self.players[pid] = PlayerState(player_id=pid)

    @property
    def game_over(self) -> bool:
        return self.winner is not None

    def player(self, player_id: str) -> PlayerState:
        return self.players[player_id]

    def unit_at(self, player_id: str, slot_index: int) -> Optional[Unit]:
        if not 0 <= slot_index < SLOT_COUNT:
            return None
        return self.players[player_id].battlefield[slot_index]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'current_player': self.current_player,
            'turn': self.turn,
            'players': {pid: p.to_dict() for pid, p in self.players.items()},
            'souls': dict(self.souls),
            'dragon_souls': dict(self.dragon_souls),
            'draft_options': [c.to_dict() for c in self.draft_options],
            'current_draft_tier': self.current_draft_tier,
            'winner': self.winner,
        }
