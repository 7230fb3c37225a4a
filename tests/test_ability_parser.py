import logging

import pytest

from slotcraft.models.effect import EffectType, Selection, TargetType
from slotcraft.services.ability_parser import AbilityParser, ability_parser, trigger_text


@pytest.mark.parametrize('text,target,selection', [
    ('deal 2 damage to a random enemy unit', TargetType.ENEMY_UNIT, Selection.RANDOM),
    ('deal 1 damage to all enemies', TargetType.ENEMY_UNIT, Selection.ALL),
    ('deal 3 damage to target enemy unit', TargetType.ENEMY_UNIT, Selection.TARGETED),
    ('deal 2 damage to all enemies in the back row', TargetType.ENEMY_BACK_ROW, Selection.ALL),
    ('deal 1 damage in this column', TargetType.ENEMY_COLUMN, Selection.ALL),
    ('deal 2 damage to enemies in this column', TargetType.ENEMY_COLUMN_UNITS, Selection.ALL),
    ('deal 3 damage to the back row enemy here', TargetType.ENEMY_BACK_ROW_HERE, Selection.ALL),
    ('deal 2 damage to your player', TargetType.OWN_PLAYER, Selection.ALL),
    ('deal 1 damage to both players', TargetType.BOTH_PLAYERS, Selection.ALL),
    ('deal 2 damage to a random friendly unit', TargetType.FRIENDLY_UNIT, Selection.RANDOM),
])
def test_damage_targets(text, target, selection):
    effects = ability_parser.parse(text)
    assert len(effects) == 1
    effect = effects[0]
    assert effect.type == EffectType.DAMAGE
    assert effect.target == target
    assert effect.selection == selection
    assert effect.params['amount'] == int(text.split()[1])


def test_damage_to_enemy_player():
    effect = ability_parser.parse('Deal 3 damage to the enemy player')[0]
    assert effect.target == TargetType.ENEMY_PLAYER
    assert effect.params == {'amount': 3}


def test_damage_scaled_by_souls():
    effect = ability_parser.parse('deal 1 damage to the enemy player for each of your souls')[0]
    assert effect.params['per'] == 'soul'


def test_permanent_and_temporary_self_buffs():
    perm = ability_parser.parse('gain +1/+1')[0]
    assert (perm.target, perm.params['attack'], perm.params['health']) == (TargetType.SELF, 1, 1)
    assert perm.temporary is False

    temp = ability_parser.parse('gain +2/+2 this turn')[0]
    assert temp.temporary is True
    assert temp.params['attack'] == 2

    attack_only = ability_parser.parse('gain +3 attack this turn')[0]
    assert attack_only.temporary is True
    assert (attack_only.params['attack'], attack_only.params['health']) == (3, 0)

    perm_attack = ability_parser.parse('gain +2 attack')[0]
    assert perm_attack.temporary is False
    assert perm_attack.params['attack'] == 2


@pytest.mark.parametrize('text,per', [
    ('gain +1/+1 for each other unit', 'other_unit'),
    ('gain +1 attack for each of your souls', 'soul'),
    ('gain +2/+2 for each dragon soul', 'dragon_soul'),
])
def test_scaled_buffs(text, per):
    effect = ability_parser.parse(text)[0]
    assert effect.type == EffectType.BUFF
    assert effect.target == TargetType.SELF
    assert effect.params['per'] == per


def test_tag_buffs():
    all_elves = ability_parser.parse('give your elves +1/+1')[0]
    assert all_elves.target == TargetType.TAGGED_UNITS
    assert all_elves.selection == Selection.ALL
    assert all_elves.params['tags'] == ['elf']

    random_dwarf = ability_parser.parse('give a random dwarf +2/+2')[0]
    assert random_dwarf.selection == Selection.RANDOM
    assert random_dwarf.params['tags'] == ['dwarf']

    others = ability_parser.parse('give your other goblins +1/+0')[0]
    assert others.params['exclude_self'] is True

    multi = ability_parser.parse('give your other beasts and goblins +1 attack')[0]
    assert multi.params['tags'] == ['beast', 'goblin']
    assert multi.params['exclude_self'] is True


def test_another_with_ability():
    effect = ability_parser.parse('give another flying unit +1/+1')[0]
    assert effect.target == TargetType.ANOTHER_WITH_ABILITY
    assert effect.params['ability'] == 'flying'
    assert effect.selection == Selection.RANDOM


def test_all_units_health():
    effect = ability_parser.parse('Give all of your units +2 Health')[0]
    assert effect.target == TargetType.ALL_FRIENDLY_UNITS
    assert (effect.params['attack'], effect.params['health']) == (0, 2)


@pytest.mark.parametrize('text,target', [
    ('your front slots gain +1/+1', TargetType.FRONT_SLOTS),
    ('give the other slots in this row +1/+0', TargetType.OTHER_SLOTS_IN_ROW),
    ('give the other slot in this column +0/+2', TargetType.OTHER_SLOT_IN_COLUMN),
    ('give adjacent slots +1/+1', TargetType.ADJACENT_SLOTS),
    ('give this slot +1/+1', TargetType.THIS_SLOT),
    ('give a random slot +2/+2', TargetType.RANDOM_SLOT),
    ('give a random back row slot +1/+1', TargetType.RANDOM_BACK_ROW_SLOT),
    ('give all of your slots +1/+0', TargetType.ALL_SLOTS),
    ('give all slots with dwarves +1/+1', TargetType.SLOT_WITH_TAG),
])
def test_slot_buffs(text, target):
    effect = ability_parser.parse(text)[0]
    assert effect.type == EffectType.BUFF
    assert effect.target == target
    assert effect.params['slot_buff'] is True


def test_slot_with_either_tag():
    effect = ability_parser.parse('give a slot with another flying or ranged +1/+1')[0]
    assert effect.target == TargetType.SLOT_WITH_TAG
    assert effect.selection == Selection.RANDOM
    assert effect.params['tags'] == ['flying', 'ranged']


def test_double_attack():
    effect = ability_parser.parse("double this unit's attack")[0]
    assert effect.params == {'double_attack': True}


def test_grant_ability_is_capitalised():
    effects = ability_parser.parse('gain rush')
    grants = [e for e in effects if e.type == EffectType.GRANT_ABILITY]
    assert len(grants) == 1
    assert grants[0].params['ability'] == 'Rush'


def test_summon_and_hand_effects():
    here = ability_parser.parse('summon a skeleton here')[0]
    assert here.type == EffectType.SUMMON
    assert here.params == {'template': 'skeleton', 'count': 1, 'here': True}

    two = ability_parser.parse('summon two skeletons')[0]
    assert two.params['count'] == 2
    assert two.params['here'] is False

    hand = ability_parser.parse('add a mana surge to your hand')[0]
    assert hand.target == TargetType.HAND
    assert hand.params['template'] == 'mana_surge'

    fill = ability_parser.parse('fill your front row with 5/1 spiders')[0]
    assert fill.target == TargetType.FRONT_ROW
    assert fill.params == {'template': 'spider', 'fill': True}


def test_draw_soul_heal_and_dragon_soul():
    assert ability_parser.parse('draw from your deck')[0].target == TargetType.SELF
    assert ability_parser.parse("draw from your opponent's deck")[0].target == TargetType.OPPONENT
    assert ability_parser.parse('draw 2')[0].params['amount'] == 2

    soul = ability_parser.parse('consume up to 2 souls')[0]
    assert soul.type == EffectType.SOUL
    assert soul.params == {'mode': 'consume_draw', 'amount': 2}

    heal = ability_parser.parse('heal your player 2')[0]
    assert heal.type == EffectType.HEAL
    assert heal.params['amount'] == 2
    assert ability_parser.parse('fully heal this')[0].params == {'full': True}

    dragon = [e for e in ability_parser.parse('gain 2 dragon souls') if e.type == EffectType.DRAGON_SOUL]
    assert dragon[0].params['amount'] == 2


def test_compound_abilities_keep_order():
    effects = ability_parser.parse('gain +2/+2, then deal 1 damage to your player')
    assert [e.type for e in effects] == [EffectType.BUFF, EffectType.DAMAGE]
    assert effects[1].target == TargetType.OWN_PLAYER


def test_unrecognised_text_is_logged_not_raised(caplog):
    parser = AbilityParser()
    with caplog.at_level(logging.INFO, logger='slotcraft.services.ability_parser'):
        effects = parser.parse('deal 2 damage to the moon')
    assert effects == []
    assert any('Unrecognised damage' in r.getMessage() for r in caplog.records)


def test_empty_text_parses_to_nothing():
    assert ability_parser.parse('') == []
    assert ability_parser.parse(None) == []


def test_trigger_text():
    assert trigger_text('Rush, Kindred: Gain +1/+1', 'kindred') == 'gain +1/+1'
    assert trigger_text('Kindred and Manacharge: Deal 3 damage in this column', 'manacharge') == \
        'deal 3 damage in this column'
    assert trigger_text('Kindred and Manacharge: Deal 3 damage in this column', 'kindred') == \
        'deal 3 damage in this column'
    assert trigger_text('Sneaky. After this attacks the other player, give this slot +1/+1',
                        'after_attack') is None
    assert trigger_text('Sneaky. After this attacks the other player, give this slot +1/+1',
                        'after_attack_player') == 'give this slot +1/+1'
    assert trigger_text('Trample', 'unleash') is None


def test_one_text_yields_effects_from_several_categories():
    effects = ability_parser.parse('deal 1 damage to a random enemy unit and gain +1/+1')
    assert [(e.type, e.target) for e in effects] == [
        (EffectType.DAMAGE, TargetType.ENEMY_UNIT),
        (EffectType.BUFF, TargetType.SELF),
    ]
    assert effects[0].selection == Selection.RANDOM
    assert (effects[1].params['attack'], effects[1].params['health']) == (1, 1)


def test_miss_in_one_category_keeps_the_others(caplog):
    parser = AbilityParser()
    with caplog.at_level(logging.INFO, logger='slotcraft.services.ability_parser'):
        effects = parser.parse('deal 2 damage to the moon and gain +1/+1')
    assert [e.type for e in effects] == [EffectType.BUFF]
    assert effects[0].target == TargetType.SELF
    assert any('Unrecognised damage' in r.getMessage() for r in caplog.records)
