"""
Stat Calculator - derives effective stats and granted abilities from game state
"""
import re
from typing import Set, Tuple, TYPE_CHECKING

from slotcraft.services.tags import has_tag

if TYPE_CHECKING:
    from slotcraft.models.game_state import GameState
    from slotcraft.models.unit import Unit

KEYWORDS = ('rush', 'flying', 'ranged', 'trample', 'first strike', 'sneaky')

_WHILE_YOUR_TURN_RE = re.compile(r"\+(\d+)/\+(\d+) while it'?s your turn")
_ATTACK_AURA_RE = re.compile(r"your (other )?([a-z]+) have \+(\d+)(?:/\+(\d+)| attack)")
_KEYWORD_AURA_RE = re.compile(r"your (other )?([a-z]+) have ([a-z ,]+?)(?:\.|$)")


class StatCalculator:
    """Pure stat derivations. Nothing here mutates state."""

    @staticmethod
    def conditional_bonus(unit: 'Unit', state: 'GameState') -> Tuple[int, int]:
        """
        Bonus from "+N/+M while it's your turn" style text.

        Args:
            unit: The unit whose own ability is inspected
            state: Current game state (for the current player)

        Returns:
            (attack, health) bonus, zero outside the owner's turn
        """
        match = _WHILE_YOUR_TURN_RE.search(unit.ability_text())
        if match and unit.owner == state.current_player:
            return int(match.group(1)), int(match.group(2))
        return 0, 0

    @staticmethod
    def aura_bonus(unit: 'Unit', state: 'GameState') -> Tuple[int, int]:
        """
        Bonus granted by other units' "your (other) Xs have +N attack" auras.

        Args:
            unit: The unit receiving the aura
            state: Current game state

        Returns:
            (attack, health) bonus summed over all aura sources
        """
        attack = health = 0
        for source in state.players[unit.owner].units():
            for match in _ATTACK_AURA_RE.finditer(source.ability_text()):
                excludes_self = bool(match.group(1))
                if excludes_self and source is unit:
                    continue
                if not has_tag(unit, match.group(2)):
                    continue
                attack += int(match.group(3))
                if match.group(4):
                    health += int(match.group(4))
        return attack, health

    @staticmethod
    def effective_attack(unit: 'Unit', state: 'GameState') -> int:
        cond_attack, _ = StatCalculator.conditional_bonus(unit, state)
        aura_attack, _ = StatCalculator.aura_bonus(unit, state)
        return max(0, unit.current_attack + cond_attack + aura_attack)

    @staticmethod
    def granted_abilities(unit: 'Unit', state: 'GameState') -> Set[str]:
        """Keywords other friendly units grant, e.g. "your other Undead have Trample and Rush"."""
        granted: Set[str] = set()
        for source in state.players[unit.owner].units():
            for match in _KEYWORD_AURA_RE.finditer(source.ability_text()):
                if match.group(1) and source is unit:
                    continue
                if not has_tag(unit, match.group(2)):
                    continue
                listed = match.group(3)
                granted.update(k for k in KEYWORDS if re.search(rf'\b{k}\b', listed))
        return granted

    @staticmethod
    def has_ability(unit: 'Unit', name: str, state: 'GameState' = None) -> bool:
        """Whether the unit has a keyword, innately or granted by an aura."""
        keyword = name.lower()
        if re.search(rf'\b{re.escape(keyword)}\b', unit.ability_text()):
            return True
        if state is None:
            return False
        return keyword in StatCalculator.granted_abilities(unit, state)
