"""Battlefield unit model"""
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Optional

from slotcraft.models.card import Card, Color


@dataclass
class Unit:
    """A card instance placed on a battlefield slot"""
    id: str
    name: str
    owner: str
    slot_index: int
    attack: int  # base, mutated by permanent buffs
    health: int  # base, mutated by permanent buffs
    current_attack: int
    current_health: int
    max_health: int
    ability: str = ""
    tags: FrozenSet[str] = field(default_factory=frozenset)
    color: Color = Color.RED
    can_attack: bool = False
    summoned_this_turn: bool = False
    has_attacked_player: bool = False
    banished: bool = False
    # Temporary bonuses still applied, reverted at the end of the owner's turn
    temp_attack: int = 0
    temp_health: int = 0
    card: Optional[Card] = None

    @property
    def row(self) -> str:
        return 'front' if self.slot_index < 3 else 'back'

    @property
    def column(self) -> int:
        return self.slot_index % 3

    @property
    def is_dead(self) -> bool:
        return self.current_health <= 0

    def has_tag(self, tag: str) -> bool:
        return tag.lower() in {t.lower() for t in self.tags}

    def shares_tag_with(self, other: 'Unit') -> bool:
        mine = {t.lower() for t in self.tags}
        return any(t.lower() in mine for t in other.tags)

    def ability_text(self) -> str:
        return (self.ability or "").lower()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'owner': self.owner,
            'slot_index': self.slot_index,
            'attack': self.attack,
            'health': self.health,
            'current_attack': self.current_attack,
            'current_health': self.current_health,
            'max_health': self.max_health,
            'ability': self.ability,
            'tags': sorted(self.tags),
            'color': self.color.value,
            'can_attack': self.can_attack,
            'summoned_this_turn': self.summoned_this_turn,
            'has_attacked_player': self.has_attacked_player,
            'banished': self.banished,
        }
