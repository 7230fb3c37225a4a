from dataclasses import dataclass, field
from typing import Dict, Any, Optional
from enum import Enum


class TargetType(Enum):
    """Types of targets for ability effects"""
    SELF = "self"
    # Slot targets (slot buffs)
    THIS_SLOT = "this_slot"
    OTHER_SLOT_IN_COLUMN = "other_slot_in_column"
    OTHER_SLOTS_IN_ROW = "other_slots_in_row"
    ADJACENT_SLOTS = "adjacent_slots"
    FRONT_SLOTS = "front_slots"
    ALL_SLOTS = "all_slots"
    RANDOM_SLOT = "random_slot"
    RANDOM_BACK_ROW_SLOT = "random_back_row_slot"
    SLOT_WITH_TAG = "slot_with_tag"
    # Friendly unit targets
    ALL_FRIENDLY_UNITS = "all_friendly_units"
    FRIENDLY_UNIT = "friendly_unit"
    TAGGED_UNITS = "tagged_units"
    ANOTHER_WITH_ABILITY = "another_with_ability"
    # Enemy targets
    ENEMY_UNIT = "enemy_unit"
    ENEMY_FRONT_ROW = "enemy_front_row"
    ENEMY_BACK_ROW = "enemy_back_row"
    ENEMY_BACK_ROW_HERE = "enemy_back_row_here"
    ENEMY_COLUMN = "enemy_column"
    ENEMY_COLUMN_UNITS = "enemy_column_units"
    ENEMY_PLAYER = "enemy_player"
    # Players
    OWN_PLAYER = "own_player"
    BOTH_PLAYERS = "both_players"
    OPPONENT = "opponent"
    # Card destinations
    HAND = "hand"
    BATTLEFIELD = "battlefield"
    FRONT_ROW = "front_row"


class EffectType(Enum):
    """Types of ability effects"""
    DAMAGE = "damage"
    BUFF = "buff"
    GRANT_ABILITY = "grant_ability"
    SUMMON = "summon"
    DRAW = "draw"
    HEAL = "heal"
    DRAGON_SOUL = "dragon_soul"
    SOUL = "soul"


class Selection(Enum):
    """How many of the eligible targets an effect touches"""
    RANDOM = "random"
    ALL = "all"
    TARGETED = "targeted"


@dataclass
class Effect:
    """Structured effect produced by the ability parser"""
    type: EffectType
    target: TargetType = TargetType.SELF
    selection: Selection = Selection.ALL
    # Effect-specific parameters (amount, attack, health, temporary, tags, ...)
    params: Dict[str, Any] = field(default_factory=dict)
    source_text: str = ""

    def __post_init__(self):
        """Validate effect after initialization"""
        if isinstance(self.type, str):
            self.type = EffectType(self.type)
        if isinstance(self.target, str):
            self.target = TargetType(self.target)
        if isinstance(self.selection, str):
            self.selection = Selection(self.selection)

    @property
    def temporary(self) -> bool:
        return bool(self.params.get('temporary', False))


@dataclass
class TriggerContext:
    """Context for executing the effects of one ability activation"""
    owner: str
    slot_index: Optional[int] = None
    unit: Optional[Any] = None  # Unit snapshot at activation time
    trigger: str = ""
    # Explicit slot for "targeted" selections, when the caller chose one
    target_slot: Optional[int] = None
    # Extra event data (attack target kind, souls gained, ...)
    payload: Dict[str, Any] = field(default_factory=dict)

    @property
    def unit_name(self) -> str:
        return getattr(self.unit, 'name', '?')
