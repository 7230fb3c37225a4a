import random
from typing import Dict, Iterable, List, Optional

from slotcraft.models.card import Card


class DraftService:
    """Per-tier draft pools. Every pool entry carries a unique pool id so
    duplicate cards can sit in the pool side by side until one is drafted."""

    def __init__(self, cards_by_tier: Dict[int, List[Card]], copies_per_card: int = 1,
                 rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()
        self.pools: Dict[int, List[Card]] = {}
        for tier, cards in cards_by_tier.items():
            pool = []
            for card in cards:
                for copy in range(max(1, copies_per_card)):
                    pool.append(card.with_pool_id(f"{card.id}#{tier}.{copy}"))
            self.pools[tier] = pool

    @property
    def tiers(self) -> List[int]:
        return sorted(self.pools)

    def available(self, tier: int, drafted: Iterable[str] = ()) -> List[Card]:
        taken = set(drafted)
        return [c for c in self.pools.get(tier, []) if c.pool_id not in taken]

    def roll(self, tier: int, drafted: Iterable[str] = (), count: int = 3) -> List[Card]:
        """Pick up to ``count`` distinct undrafted entries from a tier's pool"""
        candidates = self.available(tier, drafted)
        if not candidates:
            return []
        return self.rng.sample(candidates, min(count, len(candidates)))
