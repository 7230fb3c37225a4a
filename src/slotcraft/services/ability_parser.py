"""
Ability Parser - turns free-text ability tails into structured effects
"""
import logging
import re
from typing import Any, Callable, List, Optional, Tuple

from slotcraft.models.effect import Effect, EffectType, Selection, TargetType
from slotcraft.services.tags import singularize

Builder = Callable[[re.Match, str], Optional[Effect]]

COMPOUND_SEPARATOR = ', then '

# Trigger phrase -> pattern consuming everything up to and including it
TRIGGER_PREFIXES = {
    'unleash': re.compile(r'^.*?unleash:\s*'),
    'last_gasp': re.compile(r'^.*?last gasp:\s*'),
    'kindred': re.compile(r'^.*?kindred(?:\s+and\s+manacharge)?:\s*'),
    'manacharge': re.compile(r'^.*?(?:kindred\s+and\s+)?manacharge:\s*'),
    'start_of_turn': re.compile(r'^.*?at the start of your turn,?\s*'),
    'end_of_turn': re.compile(r'^.*?at the end of your turn,?\s*'),
    'survived_damage': re.compile(r'^.*?when this survives damage,?\s*'),
    'survived_attacking': re.compile(r'^.*?when this survives attacking,?\s*'),
    'after_attack': re.compile(r'^.*?after this attacks,\s*'),
    'after_attack_player': re.compile(r'^.*?after this attacks the other player,?\s*'),
    'attacks_player': re.compile(r'^.*?when this attacks the opposing player,?\s*'),
    'soul_gained': re.compile(r'^.*?when you gain a soul,?\s*'),
    'friendly_last_gasp': re.compile(r'^.*?when a friendly last gasp activates,?\s*'),
    'opponent_summons': re.compile(r'^.*?when your opponent summons a unit,?\s*'),
}

_COUNT_WORDS = {'a': 1, 'an': 1, 'one': 1, 'two': 2, 'three': 3}
_NON_TAG_WORDS = {'slot', 'slots', 'unit', 'units', 'player', 'other', 'random'}


def trigger_text(ability: str, trigger: str) -> Optional[str]:
    """Return the ability text following a trigger phrase, or None if absent."""
    text = (ability or '').lower()
    match = TRIGGER_PREFIXES[trigger].search(text)
    if not match:
        return None
    return text[match.end():].strip()


def _count(word: Optional[str]) -> int:
    if not word:
        return 1
    word = word.strip()
    if word.isdigit():
        return int(word)
    return _COUNT_WORDS.get(word, 1)


class AbilityParser:
    """Parses ability text into effects through ordered per-category pattern tables.

    Every category whose keyword filter matches contributes at most one effect
    (the first pattern that builds one). A filter hit with no pattern hit is a
    parse miss: logged, never raised.
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self.categories: List[Tuple[str, Callable[[str], bool], List[Tuple[re.Pattern, Builder]]]] = [
            ('damage', lambda t: 'deal' in t and 'damage' in t, self._damage_patterns()),
            ('buff', lambda t: 'give' in t or 'gain' in t or ' have +' in t or "double this unit" in t,
             self._buff_patterns()),
            ('grant', lambda t: re.search(r'gain (rush|flying|ranged)', t) is not None, self._grant_patterns()),
            ('summon', lambda t: 'summon' in t or 'add' in t or 'fill' in t, self._summon_patterns()),
            ('draw', lambda t: 'draw from your deck' in t or 'draw ' in t, self._draw_patterns()),
            ('soul', lambda t: 'consume' in t and 'soul' in t, self._soul_patterns()),
            ('heal', lambda t: 'heal' in t, self._heal_patterns()),
            ('dragon_soul', lambda t: 'dragon soul' in t or 'dragon flame' in t, self._dragon_soul_patterns()),
        ]

    # ------------------------------------------------------------------ entry

    def parse(self, effect_text: str, context: Any = None) -> List[Effect]:
        """Parse ability text (trigger prefix already stripped) into effects.

        Args:
            effect_text: Ability tail, e.g. "deal 2 damage to a random enemy unit"
            context: Optional trigger context, only used for diagnostics

        Returns:
            Effects in execution order, possibly empty
        """
        text = (effect_text or '').strip().lower()
        if not text:
            return []

        if COMPOUND_SEPARATOR in text:
            effects: List[Effect] = []
            for part in text.split(COMPOUND_SEPARATOR):
                effects.extend(self.parse(part, context))
            return effects

        effects = []
        for name, matches_filter, patterns in self.categories:
            if not matches_filter(text):
                continue
            effect = self._first_match(text, patterns)
            if effect is None:
                self.logger.info(f"Unrecognised {name} ability text from {getattr(context, 'unit_name', '?')}: {text!r}")
                continue
            effects.append(effect)
        return effects

    def _first_match(self, text: str, patterns: List[Tuple[re.Pattern, Builder]]) -> Optional[Effect]:
        for pattern, build in patterns:
            match = pattern.search(text)
            if not match:
                continue
            effect = build(match, text)
            if effect is not None:
                effect.source_text = text
                return effect
        return None

    # ----------------------------------------------------------------- damage

    def _damage_patterns(self) -> List[Tuple[re.Pattern, Builder]]:
        def fixed(target: TargetType) -> Builder:
            return lambda m, t: self._damage(target, Selection.ALL, m.group(1), t)

        return [
            (re.compile(r'deal (\d+) damage to your player'), fixed(TargetType.OWN_PLAYER)),
            (re.compile(r'deal (\d+) damage to both players'), fixed(TargetType.BOTH_PLAYERS)),
            (re.compile(r'deal (\d+) damage in this column'), fixed(TargetType.ENEMY_COLUMN)),
            (re.compile(r'deal (\d+) damage to enemies in this column'), fixed(TargetType.ENEMY_COLUMN_UNITS)),
            (re.compile(r'deal (\d+) damage to the back row enemy here'), fixed(TargetType.ENEMY_BACK_ROW_HERE)),
            (re.compile(r'deal (\d+) damage to (.+?)(?:\.|,|$)'), self._build_generic_damage),
        ]

    def _damage(self, target: TargetType, selection: Selection, amount: str, text: str) -> Effect:
        params = {'amount': int(amount)}
        if 'for each of your souls' in text:
            params['per'] = 'soul'
        return Effect(type=EffectType.DAMAGE, target=target, selection=selection, params=params)

    def _build_generic_damage(self, match: re.Match, text: str) -> Optional[Effect]:
        description = match.group(2)
        target = self.classify_damage_target(description)
        if target is None:
            return None
        return self._damage(target, self.selection_mode(description), match.group(1), text)

    @staticmethod
    def classify_damage_target(description: str) -> Optional[TargetType]:
        """Classify a "deal N damage to TARGET" description."""
        d = description.lower()
        if 'enem' in d or 'opponent' in d:
            if 'column' in d:
                return None
            if 'back row' in d:
                return TargetType.ENEMY_BACK_ROW
            if 'front row' in d:
                return TargetType.ENEMY_FRONT_ROW
            if 'unit' in d or 'enemies' in d:
                return TargetType.ENEMY_UNIT
            return TargetType.ENEMY_PLAYER
        if 'friendly' in d or 'allied' in d or re.search(r'\byour (?:other )?units?\b', d):
            return TargetType.FRIENDLY_UNIT
        return None

    @staticmethod
    def selection_mode(description: str) -> Selection:
        d = description.lower()
        if re.search(r'\ball\b', d) or 'enemies' in d:
            return Selection.ALL
        if 'random' in d:
            return Selection.RANDOM
        if 'target' in d:
            return Selection.TARGETED
        return Selection.RANDOM

    # ------------------------------------------------------------------- buff

    def _buff_patterns(self) -> List[Tuple[re.Pattern, Builder]]:
        return [
            (re.compile(r'give another ([a-z]+) unit \+(\d+)/\+(\d+)'), self._build_another_with_ability),
            (re.compile(r'give all (?:of )?your units \+(\d+) health'),
             lambda m, t: self._buff(TargetType.ALL_FRIENDLY_UNITS, 0, m.group(1), t)),
            (re.compile(r'give your other ([a-z]+) and ([a-z]+) \+(\d+) attack'),
             lambda m, t: self._multi_tag(m, t, exclude_self=True, temporary=False)),
            (re.compile(r'give (?:your )?([a-z]+) and ([a-z]+) \+(\d+) attack'),
             lambda m, t: self._multi_tag(m, t, exclude_self=False, temporary=False)),
            (re.compile(r'([a-z]+) and ([a-z]+) have \+(\d+) attack this turn'),
             lambda m, t: self._multi_tag(m, t, exclude_self=False, temporary=True)),
            (re.compile(r'your front slots gain \+(\d+)/\+(\d+)'),
             lambda m, t: self._slot_buff(TargetType.FRONT_SLOTS, m.group(1), m.group(2))),
            (re.compile(r'give the other slots in (?:this|the same) row \+(\d+)/\+(\d+)'),
             lambda m, t: self._slot_buff(TargetType.OTHER_SLOTS_IN_ROW, m.group(1), m.group(2))),
            (re.compile(r'give the other slot in (?:this|the same) column \+(\d+)/\+(\d+)'),
             lambda m, t: self._slot_buff(TargetType.OTHER_SLOT_IN_COLUMN, m.group(1), m.group(2))),
            (re.compile(r'give (?:the )?adjacent slots \+(\d+)/\+(\d+)'),
             lambda m, t: self._slot_buff(TargetType.ADJACENT_SLOTS, m.group(1), m.group(2))),
            (re.compile(r'give all (?:of )?(?:your )?slots with (?:a |an )?([a-z]+)(?: units?)? \+(\d+)/\+(\d+)'),
             lambda m, t: self._slot_buff(TargetType.SLOT_WITH_TAG, m.group(2), m.group(3),
                                          selection=Selection.ALL, tags=[singularize(m.group(1))])),
            (re.compile(r'give a slot with (?:another |an? )?(?:random )?([a-z]+) or ([a-z]+) \+(\d+)/\+(\d+)'),
             lambda m, t: self._slot_buff(TargetType.SLOT_WITH_TAG, m.group(3), m.group(4),
                                          selection=Selection.RANDOM,
                                          tags=[singularize(m.group(1)), singularize(m.group(2))])),
            (re.compile(r'give (your |an? )(random )?(friendly )?(other )?([a-z]+) \+(\d+)/\+(\d+)'),
             self._build_tag_buff),
            (re.compile(r'gain \+?(\d+) attack this turn'),
             lambda m, t: self._buff(TargetType.SELF, m.group(1), 0, t, temporary=True)),
            (re.compile(r'gain \+?(\d+)(?:/\+?(\d+)| attack) for each (other unit|of your souls|dragon (?:flame|soul))'),
             self._build_scaled_buff),
            (re.compile(r'gain \+?(\d+) attack\b(?! this turn)'),
             lambda m, t: self._buff(TargetType.SELF, m.group(1), 0, t, temporary=False)),
            (re.compile(r'gain \+?(\d+)/\+?(\d+)\b(?! this turn)'),
             lambda m, t: self._buff(TargetType.SELF, m.group(1), m.group(2), t, temporary=False)),
            (re.compile(r'gain \+?(\d+)/\+?(\d+) this turn'),
             lambda m, t: self._buff(TargetType.SELF, m.group(1), m.group(2), t, temporary=True)),
            (re.compile(r"double this unit'?s attack"),
             lambda m, t: Effect(type=EffectType.BUFF, target=TargetType.SELF, params={'double_attack': True})),
            (re.compile(r'give (?:the )?(.+?) \+(\d+)/\+(\d+)'), self._build_described_buff),
        ]

    def _buff(self, target: TargetType, attack, health, text: str, temporary: Optional[bool] = None,
              selection: Selection = Selection.ALL, **params) -> Effect:
        params.update({
            'attack': int(attack or 0),
            'health': int(health or 0),
            'temporary': ('this turn' in text) if temporary is None else temporary,
        })
        return Effect(type=EffectType.BUFF, target=target, selection=selection, params=params)

    def _slot_buff(self, target: TargetType, attack, health, selection: Selection = Selection.ALL,
                   **params) -> Effect:
        params.update({'attack': int(attack), 'health': int(health), 'slot_buff': True})
        return Effect(type=EffectType.BUFF, target=target, selection=selection, params=params)

    def _build_another_with_ability(self, match: re.Match, text: str) -> Effect:
        return self._buff(TargetType.ANOTHER_WITH_ABILITY, match.group(2), match.group(3), text,
                          selection=Selection.RANDOM, ability=match.group(1), exclude_self=True)

    def _multi_tag(self, match: re.Match, text: str, exclude_self: bool, temporary: bool) -> Effect:
        tags = [singularize(match.group(1)), singularize(match.group(2))]
        return self._buff(TargetType.TAGGED_UNITS, match.group(3), 0, text, temporary=temporary,
                          tags=tags, exclude_self=exclude_self)

    def _build_tag_buff(self, match: re.Match, text: str) -> Optional[Effect]:
        article, random_word, _friendly, other, tag, attack, health = match.groups()
        if tag in _NON_TAG_WORDS:
            if tag in ('unit', 'units') and article == 'your ':
                return self._buff(TargetType.ALL_FRIENDLY_UNITS, attack, health, text,
                                  exclude_self=bool(other))
            return None
        single = article.strip() in ('a', 'an') or bool(random_word)
        return self._buff(TargetType.TAGGED_UNITS, attack, health, text,
                          selection=Selection.RANDOM if single else Selection.ALL,
                          tags=[singularize(tag)], exclude_self=bool(other))

    def _build_scaled_buff(self, match: re.Match, text: str) -> Effect:
        per = {'other unit': 'other_unit', 'of your souls': 'soul'}.get(match.group(3), 'dragon_soul')
        return self._buff(TargetType.SELF, match.group(1), match.group(2) or 0, text,
                          temporary=False, per=per)

    def _build_described_buff(self, match: re.Match, text: str) -> Optional[Effect]:
        description, attack, health = match.group(1), match.group(2), match.group(3)
        if re.search(r'other slot in (?:this )?column', description):
            return self._slot_buff(TargetType.OTHER_SLOT_IN_COLUMN, attack, health)
        if 'random back row slot' in description:
            return self._slot_buff(TargetType.RANDOM_BACK_ROW_SLOT, attack, health, selection=Selection.RANDOM)
        if 'random slot' in description:
            return self._slot_buff(TargetType.RANDOM_SLOT, attack, health, selection=Selection.RANDOM)
        if re.search(r'all (?:of )?your slots', description):
            return self._slot_buff(TargetType.ALL_SLOTS, attack, health)
        if 'this slot' in description or description == 'slot':
            return self._slot_buff(TargetType.THIS_SLOT, attack, health)
        if re.search(r'all (?:of )?your units', description):
            return self._buff(TargetType.ALL_FRIENDLY_UNITS, attack, health, text)
        if description in ('this', 'this unit', 'it', 'itself'):
            return self._buff(TargetType.SELF, attack, health, text)
        return None

    # ------------------------------------------------------------------ grant

    def _grant_patterns(self) -> List[Tuple[re.Pattern, Builder]]:
        return [
            (re.compile(r'gain (rush|flying|ranged)'),
             lambda m, t: Effect(type=EffectType.GRANT_ABILITY, target=TargetType.SELF,
                                 params={'ability': m.group(1).capitalize()})),
        ]

    # ----------------------------------------------------------------- summon

    def _summon_patterns(self) -> List[Tuple[re.Pattern, Builder]]:
        return [
            (re.compile(r'add (?:(a|an|one|two|three|\d+) )?(skeleton|mana surge|mana spirit)s? to your hand'),
             self._build_add_to_hand),
            (re.compile(r'summon (?:(a|an|one|two|three|\d+) )?skeletons?( here)?'),
             lambda m, t: Effect(type=EffectType.SUMMON, target=TargetType.BATTLEFIELD,
                                 params={'template': 'skeleton', 'count': _count(m.group(1)),
                                         'here': bool(m.group(2))})),
            (re.compile(r'fill your (front row|battlefield) with (?:\d+/\d+ )?(spider|skeleton)s?'),
             lambda m, t: Effect(type=EffectType.SUMMON,
                                 target=TargetType.FRONT_ROW if m.group(1) == 'front row' else TargetType.BATTLEFIELD,
                                 params={'template': m.group(2), 'fill': True})),
        ]

    def _build_add_to_hand(self, match: re.Match, text: str) -> Effect:
        name = match.group(2)
        template = 'skeleton' if name == 'skeleton' else 'mana_surge'
        return Effect(type=EffectType.SUMMON, target=TargetType.HAND,
                      params={'template': template, 'count': _count(match.group(1))})

    # ------------------------------------------------------------------- draw

    def _draw_patterns(self) -> List[Tuple[re.Pattern, Builder]]:
        return [
            (re.compile(r"draw from your opponent'?s deck"),
             lambda m, t: Effect(type=EffectType.DRAW, target=TargetType.OPPONENT, params={'amount': 1})),
            (re.compile(r'draw from your deck'),
             lambda m, t: Effect(type=EffectType.DRAW, target=TargetType.SELF, params={'amount': 1})),
            (re.compile(r'draw (\d+|a card)'),
             lambda m, t: Effect(type=EffectType.DRAW, target=TargetType.SELF,
                                 params={'amount': _count(m.group(1)) if m.group(1) != 'a card' else 1})),
        ]

    # ------------------------------------------------------------------- soul

    def _soul_patterns(self) -> List[Tuple[re.Pattern, Builder]]:
        return [
            (re.compile(r'consume up to (\d+) souls?'),
             lambda m, t: Effect(type=EffectType.SOUL, target=TargetType.SELF,
                                 params={'mode': 'consume_draw', 'amount': int(m.group(1))})),
        ]

    # ------------------------------------------------------------------- heal

    def _heal_patterns(self) -> List[Tuple[re.Pattern, Builder]]:
        return [
            (re.compile(r'heal (?:your player|yourself) (\d+)'),
             lambda m, t: Effect(type=EffectType.HEAL, target=TargetType.OWN_PLAYER,
                                 params={'amount': int(m.group(1))})),
            (re.compile(r'fully heal this'),
             lambda m, t: Effect(type=EffectType.HEAL, target=TargetType.SELF, params={'full': True})),
        ]

    # ------------------------------------------------------------ dragon soul

    def _dragon_soul_patterns(self) -> List[Tuple[re.Pattern, Builder]]:
        return [
            (re.compile(r'gain (\d+) dragon (?:soul|flame)s?'),
             lambda m, t: Effect(type=EffectType.DRAGON_SOUL, target=TargetType.SELF,
                                 params={'amount': int(m.group(1))})),
        ]


# Global parser instance
ability_parser = AbilityParser()
