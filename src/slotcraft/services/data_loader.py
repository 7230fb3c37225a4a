import json
import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

from slotcraft.models.card import Card

DATA_FILE = Path(__file__).resolve().parents[1] / "data" / "cards.json"

REQUIRED_CARD_FIELDS = ('id', 'name', 'attack', 'health')

logger = logging.getLogger(__name__)


@dataclass
class GameConfig:
    """Tunable rules constants, read from the ``config`` section of the card file"""
    starting_health: int = 20
    starting_gold: int = 2
    hand_limit: int = 3
    max_gold: int = 10
    draft_options: int = 3
    copies_per_card: int = 2
    reroll_cost: int = 1
    deck_draw_cost: int = 3
    max_player_health: int = 20

    def tier_cost(self, tier: int) -> int:
        return tier * 2

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GameConfig':
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            logger.warning(f"Ignoring unknown config keys: {sorted(unknown)}")
        return cls(**{k: int(v) for k, v in data.items() if k in known})


class GameData:
    def __init__(self, cards_by_tier: Dict[int, List[Card]], tokens: Dict[str, Card], config: GameConfig):
        self.cards_by_tier = cards_by_tier
        self.tokens = tokens
        self.config = config

    @property
    def cards(self) -> List[Card]:
        return [c for tier in sorted(self.cards_by_tier) for c in self.cards_by_tier[tier]]

    def find_card(self, card_id: str) -> Optional[Card]:
        for card in self.cards:
            if card.id == card_id:
                return card
        return self.tokens.get(card_id)


def _build_card(entry: Dict[str, Any], tier: int) -> Optional[Card]:
    missing = [f for f in REQUIRED_CARD_FIELDS if f not in entry]
    if missing:
        logger.error(f"Card entry {entry.get('id', 'unknown')} missing fields {missing}, skipping")
        return None
    try:
        return Card.from_dict(entry, tier=tier)
    except (TypeError, ValueError) as e:
        logger.error(f"Failed to build card {entry.get('id', 'unknown')}: {e}")
        return None


def load_game_data(path: Optional[Path] = None) -> GameData:
    """Load the card database keyed by tier plus token templates and config.

    The file can be overridden with the ``SLOTCRAFT_CARDS_FILE`` environment
    variable.
    """
    data_path = Path(path or os.getenv('SLOTCRAFT_CARDS_FILE') or DATA_FILE)
    with open(data_path, "r", encoding="utf-8") as f:
        data = json.load(f)

    cards_by_tier: Dict[int, List[Card]] = {}
    for tier_key, entries in data.get("tiers", {}).items():
        tier = int(tier_key)
        cards = [c for c in (_build_card(e, tier) for e in entries) if c is not None]
        cards_by_tier[tier] = cards
        logger.debug(f"Tier {tier}: {len(cards)} cards loaded")

    tokens = {}
    for entry in data.get("tokens", []):
        card = _build_card(entry, 0)
        if card is not None:
            tokens[card.id] = card

    config = GameConfig.from_dict(data.get("config", {}))
    return GameData(cards_by_tier=cards_by_tier, tokens=tokens, config=config)
