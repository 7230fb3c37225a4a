"""Shared builders for rules-engine tests"""
from slotcraft.models.card import Card


def make_card(name='Dummy', attack=2, health=2, ability='', tags=(), color='red', tier=1, card_id=None):
    return Card(
        id=card_id or name.lower().replace(' ', '_'),
        name=name,
        attack=attack,
        health=health,
        ability=ability,
        tags=frozenset(tags),
        color=color,
        tier=tier,
    )


def put_unit(manager, player_id, slot, card=None, ready=True, **card_kwargs):
    """Place a unit directly on the battlefield without firing play triggers."""
    card = card or make_card(**card_kwargs)
    unit = manager.engine.place_card(card, player_id, slot, summoned=False)
    if ready:
        unit.can_attack = True
    return unit


def play(manager, player_id, slot, card=None, **card_kwargs):
    """Put a card in hand and play it through the public API."""
    card = card or make_card(**card_kwargs)
    manager.store.player(player_id).hand.append(card)
    return manager.play_card(card, slot, player_id)
