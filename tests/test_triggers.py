"""Trigger cascades resolved through the public operations"""
import pytest

from slotcraft.models.game_state import AI, PLAYER
from slotcraft.services.error_handler import Severity

from helpers import make_card, play, put_unit


# ----------------------------------------------------------------- unleash

def test_unleash_damage_kills_enemy_and_returns_it_to_deck(manager):
    put_unit(manager, AI, 0, name='Orc', attack=1, health=2)
    result = play(manager, PLAYER, 0, name='Archer', attack=1, health=1,
                  ability='Unleash: Deal 2 damage to a random enemy unit')

    assert manager.store.unit_at(AI, 0) is None
    assert [c.name for c in manager.state.player(AI).deck] == ['Orc']
    assert result.triggered_effects[0]['trigger'] == 'unleash'
    assert result.triggered_effects[0]['effect'] == 'damage'


def test_unleash_self_buff(manager):
    result = play(manager, PLAYER, 2, attack=1, health=1, ability='Unleash: Gain +2/+2')
    assert (result.unit.current_attack, result.unit.current_health) == (3, 3)
    assert (result.unit.attack, result.unit.health) == (3, 3)


def test_mana_surge_banishes_itself(manager):
    result = play(manager, PLAYER, 0, name='Mana Surge', attack=1, health=1, color='blue',
                  ability='Unleash: Banish this')
    assert manager.store.unit_at(PLAYER, 0) is None
    assert result.unit.banished is True
    assert manager.state.player(PLAYER).deck == []


# ----------------------------------------------------------------- kindred

def test_kindred_fires_for_existing_unit(manager):
    goblin = put_unit(manager, PLAYER, 0, name='Knife Goblin', attack=2, health=2, tags=('Goblin',),
                      ability='Rush, Kindred: Gain +1/+1')
    play(manager, PLAYER, 1, name='Goblin Grunt', attack=1, health=1, tags=('Goblin',))

    assert (goblin.current_attack, goblin.current_health) == (3, 3)


def test_kindred_fires_both_ways(manager):
    first = put_unit(manager, PLAYER, 0, name='Spear Goblin', attack=1, health=1, tags=('Goblin',),
                     ability='Ranged, Kindred: Gain +1/+1')
    second = play(manager, PLAYER, 1, name='Sword Goblin', attack=1, health=1, tags=('Goblin',),
                  ability='Sneaky, Kindred: Gain +1/+1').unit

    assert first.current_attack == 2
    assert second.current_attack == 2


def test_kindred_never_fires_on_itself(manager):
    lone = play(manager, PLAYER, 0, name='Alpha Wolf', attack=3, health=3, tags=('Beast',),
                ability='Sneaky. Kindred: Gain +2 Attack').unit
    assert lone.current_attack == 3


def test_kindred_ignores_other_tags(manager):
    elf = put_unit(manager, PLAYER, 0, name='Elf', tags=('Elf',), ability='Kindred: Gain +1/+1')
    play(manager, PLAYER, 1, name='Boar', tags=('Beast',))
    assert elf.current_attack == 2


def test_kindred_fires_for_summoned_tokens(manager):
    bones = put_unit(manager, PLAYER, 0, name='Bone Lord', attack=1, health=1, tags=('Undead',),
                     ability='Kindred: Gain +1/+0')
    play(manager, PLAYER, 1, name='Raiser', ability='Unleash: Summon a Skeleton')

    assert manager.store.unit_at(PLAYER, 2).name == 'Skeleton'
    assert bones.current_attack == 2


# -------------------------------------------------------------- manacharge

def test_manacharge_fires_after_blue_unleash(manager):
    wisp = put_unit(manager, PLAYER, 0, name='Wisp', attack=1, health=1, ability='Manacharge: Gain +1/+1')
    play(manager, PLAYER, 1, name='Frost Mage', color='blue', ability='Unleash: Heal your player 1')

    assert wisp.current_attack == 2


def test_manacharge_needs_blue_unleash(manager):
    wisp = put_unit(manager, PLAYER, 0, name='Wisp', attack=1, health=1, ability='Manacharge: Gain +1/+1')
    play(manager, PLAYER, 1, name='Red Mage', color='red', ability='Unleash: Heal your player 1')
    play(manager, PLAYER, 2, name='Blue Brute', color='blue')

    assert wisp.current_attack == 1


def test_manacharge_only_for_the_casting_player(manager):
    theirs = put_unit(manager, AI, 0, name='Wisp', attack=1, health=1, ability='Manacharge: Gain +1/+1')
    play(manager, PLAYER, 1, name='Frost Mage', color='blue', ability='Unleash: Heal your player 1')
    assert theirs.current_attack == 1


def test_manacharge_rejects_unit_with_wrong_owner(manager):
    stray = put_unit(manager, PLAYER, 0, name='Wisp', attack=1, health=1, ability='Manacharge: Gain +1/+1')
    stray.owner = AI

    manager.engine.publish('manacharge_activated', {'player_id': PLAYER, 'source': 'test'})

    assert stray.current_attack == 1
    report = manager.error_handler.history[-1]
    assert report.severity == Severity.HIGH
    assert report.operation == 'manacharge'


def test_column_damage_reaches_player_when_column_empty(manager):
    put_unit(manager, PLAYER, 1, name='Fae', attack=1, health=1,
             ability='Manacharge: Deal 1 damage in this column')
    play(manager, PLAYER, 0, name='Sparkle', color='blue', ability='Unleash: Heal your player 1')

    assert manager.state.player(AI).health == 19


def test_column_damage_hits_front_unit_first(manager):
    put_unit(manager, PLAYER, 1, name='Fae', attack=1, health=1,
             ability='Manacharge: Deal 1 damage in this column')
    front = put_unit(manager, AI, 1, attack=1, health=3)
    back = put_unit(manager, AI, 4, attack=1, health=3)
    play(manager, PLAYER, 0, name='Sparkle', color='blue', ability='Unleash: Heal your player 1')

    assert (front.current_health, back.current_health) == (2, 3)
    assert manager.state.player(AI).health == 20


# ---------------------------------------------------------------- last gasp

def test_last_gasp_summons_into_the_freed_slot(manager):
    put_unit(manager, PLAYER, 3, name='Grave Keeper', attack=1, health=1,
             ability='Last Gasp: Summon a Skeleton here')

    manager.engine.damage_unit(PLAYER, 3, 5)

    skeleton = manager.store.unit_at(PLAYER, 3)
    assert skeleton is not None and skeleton.name == 'Skeleton'
    assert skeleton.can_attack is False
    assert [c.name for c in manager.state.player(PLAYER).deck] == ['Grave Keeper']


def test_banished_unit_skips_the_deck(manager):
    put_unit(manager, PLAYER, 0, name='Skeleton', attack=1, health=1, ability='Last Gasp: Banish this')
    put_unit(manager, PLAYER, 1, name='Zombie', attack=1, health=1)

    manager.engine.damage_unit(PLAYER, 0, 1)
    manager.engine.damage_unit(PLAYER, 1, 1)

    assert [c.name for c in manager.state.player(PLAYER).deck] == ['Zombie']


def test_last_gasp_return_to_hand(manager):
    put_unit(manager, PLAYER, 0, name='Phoenix', attack=2, health=1,
             ability='Last Gasp: Return this to your hand')
    manager.engine.damage_unit(PLAYER, 0, 3)

    assert [c.name for c in manager.state.player(PLAYER).hand] == ['Phoenix']
    assert manager.state.player(PLAYER).deck == []


def test_friendly_last_gasp_feeds_necromancer(manager):
    necro = put_unit(manager, PLAYER, 0, name='Necromancer', attack=1, health=1, tags=('Undead',),
                     ability='When a friendly Last Gasp activates, gain +3/+3')
    put_unit(manager, PLAYER, 1, name='Grave Keeper', attack=1, health=1,
             ability='Last Gasp: Summon a Skeleton here')
    put_unit(manager, AI, 1, name='Orc', attack=4, health=4)

    manager.engine.damage_unit(PLAYER, 1, 1)
    assert (necro.current_attack, necro.current_health) == (4, 4)


def test_undead_death_grants_a_soul_and_fires_soul_triggers(manager):
    wraith = put_unit(manager, PLAYER, 0, name='Wraith', attack=2, health=2,
                      ability='Sneaky. When you gain a Soul, gain +1/+1')
    put_unit(manager, PLAYER, 1, name='Ghoul', attack=1, health=1, tags=('Undead',))

    manager.engine.damage_unit(PLAYER, 1, 2)

    assert manager.state.souls[PLAYER] == 1
    assert (wraith.current_attack, wraith.current_health) == (3, 3)


def test_souls_scale_unleash(manager):
    manager.store.add_souls(PLAYER, 3)
    colossus = play(manager, PLAYER, 0, name='Bone Colossus', attack=2, health=6, tags=('Undead',),
                    ability='Unleash: Gain +1 Attack for each of your Souls').unit
    assert colossus.current_attack == 5


def test_consume_souls_draws_free(manager):
    manager.store.add_souls(PLAYER, 3)
    for name in ('A', 'B', 'C'):
        manager.store.add_to_deck(PLAYER, make_card(name=name))
    gold = manager.state.player(PLAYER).gold

    play(manager, PLAYER, 0, name='Soul Eater', ability='Unleash: Consume up to 2 Souls')

    assert manager.state.souls[PLAYER] == 1
    assert [c.name for c in manager.state.player(PLAYER).hand] == ['A', 'B']
    assert manager.state.player(PLAYER).gold == gold


# ------------------------------------------------------------------ turns

def test_start_of_turn_trigger(manager):
    grower = put_unit(manager, PLAYER, 0, name='Sapling', attack=1, health=1,
                      ability='At the start of your turn, gain +1/+1')
    manager.end_turn(PLAYER)
    assert grower.current_attack == 1
    manager.end_turn(AI)
    assert grower.current_attack == 2


def test_start_of_turn_draw_is_free(manager):
    put_unit(manager, AI, 0, name='Seer', attack=0, health=3,
             ability="Can't attack. At the start of your turn, draw 1")
    manager.store.add_to_deck(AI, make_card(name='Omen'))
    manager.store.set_gold(AI, 0)

    manager.end_turn(PLAYER)

    ai = manager.state.player(AI)
    assert [c.name for c in ai.hand] == ['Omen']
    assert ai.deck == []
    assert ai.gold == 0


def test_start_of_turn_buffs_other_beasts(manager):
    leader = put_unit(manager, PLAYER, 0, name='Pack Leader', attack=2, health=2, tags=('Beast',),
                      ability='At the start of your turn, give your other Beasts +2/+2')
    wolf = put_unit(manager, PLAYER, 1, name='Wolf', attack=2, health=2, tags=('Beast',))
    knight = put_unit(manager, PLAYER, 2, name='Knight', attack=2, health=2, tags=('Human',))

    manager.end_turn(PLAYER)
    manager.end_turn(AI)

    assert (wolf.current_attack, wolf.current_health) == (4, 4)
    assert (wolf.attack, wolf.health) == (4, 4)
    assert leader.current_attack == 2
    assert knight.current_attack == 2


def test_start_of_turn_slot_buff_accumulates(manager):
    keeper = put_unit(manager, PLAYER, 4, name='Slot Keeper', attack=1, health=2,
                      ability='At the start of your turn, give this slot +1/+0.')

    manager.end_turn(PLAYER)
    manager.end_turn(AI)
    assert keeper.current_attack == 2
    assert manager.state.player(PLAYER).slot_buffs[4].attack == 1

    manager.end_turn(PLAYER)
    manager.end_turn(AI)
    assert keeper.current_attack == 3
    assert manager.state.player(PLAYER).slot_buffs[4].attack == 2


def test_start_of_turn_full_heal(manager):
    healer = put_unit(manager, AI, 0, name='Regenerator', attack=1, health=4,
                      ability='At the start of your turn, fully heal this.')
    manager.engine.damage_unit(AI, 0, 3)
    assert healer.current_health == 1

    manager.end_turn(PLAYER)
    assert healer.current_health == 4


def test_end_of_turn_front_row_condition(manager):
    front = put_unit(manager, PLAYER, 0, name='Sentry', attack=1, health=1,
                     ability='At the end of your turn, if this is in the front row, gain +1/+0')
    back = put_unit(manager, PLAYER, 3, name='Sentry', attack=1, health=1,
                    ability='At the end of your turn, if this is in the front row, gain +1/+0')

    manager.end_turn(PLAYER)
    assert front.current_attack == 2
    assert back.current_attack == 1


def test_temporary_buff_expires_at_end_of_owner_turn(manager):
    unit = play(manager, PLAYER, 0, attack=2, health=2, ability='Unleash: Gain +2/+2 this turn').unit
    assert (unit.current_attack, unit.current_health, unit.max_health) == (4, 4, 4)

    manager.end_turn(PLAYER)
    assert (unit.current_attack, unit.max_health) == (2, 2)
    assert unit.current_health == 2
    assert (unit.attack, unit.health) == (2, 2)


def test_expired_temporary_health_clamps_current_health(manager):
    unit = play(manager, PLAYER, 0, attack=2, health=2, ability='Unleash: Gain +0/+3 this turn').unit
    manager.engine.damage_unit(PLAYER, 0, 1)
    manager.end_turn(PLAYER)
    assert unit.current_health == 2


def test_temporary_buff_gained_on_opponent_turn_expires_with_that_turn(manager):
    brute = put_unit(manager, AI, 0, name='Brute', attack=1, health=5,
                     ability='When this survives damage, gain +2 attack this turn')
    put_unit(manager, PLAYER, 0, name='Striker', attack=1, health=5)

    manager.attack(0, PLAYER)
    assert brute.current_attack == 3

    manager.end_turn(PLAYER)
    assert manager.state.current_player == AI
    assert brute.current_attack == 1
    assert (brute.temp_attack, brute.temp_health) == (0, 0)
    assert brute.max_health == 5


# ----------------------------------------------------------------- combat

def test_after_attacking_player_buffs_slot(manager):
    wolf = put_unit(manager, PLAYER, 0, name='Wolf', attack=2, health=2, tags=('Beast',),
                    ability='Sneaky. After this attacks the other player, give this slot +1/+1')
    manager.attack(0, PLAYER)

    assert (wolf.current_attack, wolf.current_health) == (3, 3)
    assert manager.state.player(PLAYER).slot_buffs[0].attack == 1


def test_attacks_player_draw(manager):
    manager.store.add_to_deck(PLAYER, make_card(name='Reward'))
    put_unit(manager, PLAYER, 0, name='Dire Wolf', attack=3, health=3,
             ability='Sneaky. When this attacks the opposing player, draw 1')
    manager.attack(0, PLAYER)
    assert [c.name for c in manager.state.player(PLAYER).hand] == ['Reward']


def test_after_attack_does_not_fire_for_dead_attacker(manager):
    manager.store.add_to_deck(PLAYER, make_card(name='Reward'))
    put_unit(manager, PLAYER, 0, name='Scout', attack=1, health=1, ability='After this attacks, draw 1')
    put_unit(manager, AI, 0, attack=3, health=3)

    manager.attack(0, PLAYER)
    assert manager.state.player(PLAYER).hand == []


def test_survived_damage_trigger(manager):
    tough = put_unit(manager, PLAYER, 0, name='Troll', attack=1, health=5,
                     ability='When this survives damage, gain +2 attack')
    manager.engine.damage_unit(PLAYER, 0, 1)
    assert tough.current_attack == 3


def test_survived_attacking_trigger(manager):
    brawler = put_unit(manager, PLAYER, 0, name='Brawler', attack=1, health=5,
                       ability='When this survives attacking, gain +1/+1')
    put_unit(manager, AI, 0, attack=1, health=5)
    manager.attack(0, PLAYER)
    assert brawler.current_attack == 2


def test_opponent_summon_damages_watcher(manager):
    watcher = put_unit(manager, AI, 0, name='Frail Watcher', attack=1, health=3,
                       ability='When your opponent summons a unit, this takes 1 damage')
    play(manager, PLAYER, 0)
    assert watcher.current_health == 2


def test_opponent_summon_kills_watcher_and_cascades_last_gasp(manager):
    put_unit(manager, AI, 0, name='Frail Watcher', attack=1, health=1,
             ability='When your opponent summons a unit, this takes 1 damage. '
                     'Last Gasp: Deal 2 damage to the opponent')

    play(manager, PLAYER, 1)

    assert manager.store.unit_at(AI, 0) is None
    assert [c.name for c in manager.state.player(AI).deck] == ['Frail Watcher']
    assert manager.state.player(PLAYER).health == 18
    assert manager.engine.router.pending == 0


# ------------------------------------------------------------------ events

def test_cascade_completes_before_play_returns(manager, events):
    put_unit(manager, PLAYER, 0, name='Wisp', attack=1, health=1, ability='Manacharge: Gain +1/+1')
    play(manager, PLAYER, 1, name='Frost Mage', color='blue', ability='Unleash: Heal your player 1')

    assert manager.engine.router.pending == 0
    seqs = [payload['seq'] for _, payload in events]
    assert seqs == sorted(seqs)
    assert len(set(seqs)) == len(seqs)


@pytest.mark.parametrize('ability', [
    'Unleash: Give your Goblins +1/+1',
    'Unleash: Give your other Goblins +1/+1',
])
def test_tag_buffs_from_unleash(manager, ability):
    ally = put_unit(manager, PLAYER, 0, name='Goblin', tags=('Goblin',))
    caster = play(manager, PLAYER, 1, name='Warchief', tags=('Goblin',), ability=ability).unit

    assert ally.current_attack == 3
    expected = 2 if 'other' in ability else 3
    assert caster.current_attack == expected
