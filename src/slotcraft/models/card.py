from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Optional
from enum import Enum


class Color(Enum):
    """Card colors"""
    RED = "red"
    YELLOW = "yellow"
    GREEN = "green"
    BLUE = "blue"
    PURPLE = "purple"


@dataclass(frozen=True)
class Card:
    """Immutable card template as drafted, held in hand or shuffled into a deck"""
    id: str
    name: str
    attack: int
    health: int
    ability: str = ""
    tags: FrozenSet[str] = field(default_factory=frozenset)
    color: Color = Color.RED
    tier: int = 1
    # Unique per draft-pool entry so duplicate cards can coexist undrafted
    pool_id: Optional[str] = field(default=None, compare=False)

    def __post_init__(self):
        if isinstance(self.color, str):
            object.__setattr__(self, 'color', Color(self.color))
        if not isinstance(self.tags, frozenset):
            object.__setattr__(self, 'tags', frozenset(self.tags or ()))

    def has_tag(self, tag: str) -> bool:
        return tag.lower() in {t.lower() for t in self.tags}

    def with_pool_id(self, pool_id: str) -> 'Card':
        return Card(
            id=self.id,
            name=self.name,
            attack=self.attack,
            health=self.health,
            ability=self.ability,
            tags=self.tags,
            color=self.color,
            tier=self.tier,
            pool_id=pool_id,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'attack': self.attack,
            'health': self.health,
            'ability': self.ability,
            'tags': sorted(self.tags),
            'color': self.color.value,
            'tier': self.tier,
            'pool_id': self.pool_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], tier: Optional[int] = None) -> 'Card':
        """Create Card from a card database entry"""
        return cls(
            id=data['id'],
            name=data['name'],
            attack=int(data['attack']),
            health=int(data['health']),
            ability=data.get('ability', '') or '',
            tags=frozenset(data.get('tags', [])),
            color=data.get('color', 'red'),
            tier=tier if tier is not None else int(data.get('tier', 1)),
            pool_id=data.get('pool_id'),
        )
