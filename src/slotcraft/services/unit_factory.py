"""Unit factory - builds battlefield units and token cards"""
import re
from typing import Dict

from slotcraft.models.card import Card, Color
from slotcraft.models.unit import Unit

SKELETON = Card(id='skeleton', name='Skeleton', attack=1, health=1,
                ability='Last Gasp: Banish this', tags=frozenset({'Undead'}),
                color=Color.PURPLE, tier=0)
MANA_SURGE = Card(id='mana_surge', name='Mana Surge', attack=1, health=1,
                  ability='Unleash: Banish this', tags=frozenset(),
                  color=Color.BLUE, tier=0)
SPIDER = Card(id='spider', name='Spider', attack=5, health=1, ability='',
              tags=frozenset({'Beast'}), color=Color.PURPLE, tier=0)

TOKEN_TEMPLATES: Dict[str, Card] = {
    'skeleton': SKELETON,
    'mana_surge': MANA_SURGE,
    'spider': SPIDER,
}

_RUSH_RE = re.compile(r'\brush\b', re.IGNORECASE)


def has_innate_rush(ability: str) -> bool:
    return bool(_RUSH_RE.search(ability or ''))


def create_unit(card: Card, owner: str, slot_index: int, summoned: bool = False) -> Unit:
    """Create a fresh unit for a card.

    Played units are ready to attack only if they have Rush; summoned units
    always start with summoning sickness.
    """
    return Unit(
        id=card.id,
        name=card.name,
        owner=owner,
        slot_index=slot_index,
        attack=card.attack,
        health=card.health,
        current_attack=card.attack,
        current_health=card.health,
        max_health=card.health,
        ability=card.ability,
        tags=card.tags,
        color=card.color,
        can_attack=False if summoned else has_innate_rush(card.ability),
        summoned_this_turn=True,
        card=card,
    )


def base_card_for(unit: Unit) -> Card:
    """Card returned to the deck when a unit dies, at its printed stats."""
    if unit.card is not None:
        return unit.card
    return Card(id=unit.id, name=unit.name, attack=unit.attack, health=unit.health,
                ability=unit.ability, tags=unit.tags, color=unit.color)
