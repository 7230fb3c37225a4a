import sys
import argparse
import logging
import os
from pathlib import Path

# Allow running as a script by fixing sys.path when package context is missing
pkg_root = Path(__file__).resolve().parents[1]
if str(pkg_root) not in sys.path:
    sys.path.append(str(pkg_root))

from slotcraft.models.game_state import AI, PLAYER
from slotcraft.services.ability_parser import ability_parser
from slotcraft.services.data_loader import load_game_data
from slotcraft.services.game_manager import GameManager
from slotcraft.services.opponent import SimpleOpponent


def demo_game(seed, max_turns: int):
    """Play a game between two greedy opponents and print a summary."""
    counts = {}

    def count_event(event_type, payload):
        counts[event_type] = counts.get(event_type, 0) + 1

    manager = GameManager(seed=seed, event_callback=count_event)
    opponents = {PLAYER: SimpleOpponent(PLAYER), AI: SimpleOpponent(AI)}

    while not manager.state.game_over and manager.state.turn <= max_turns:
        opponents[manager.state.current_player].take_turn(manager)

    state = manager.state
    print(f"Turn {state.turn}, winner: {state.winner or 'none'}")
    for pid in (PLAYER, AI):
        p = state.player(pid)
        board = ', '.join(f"{u.name} {u.current_attack}/{u.current_health}" for u in p.units()) or '-'
        print(f" {pid:>6}: hp={p.health} gold={p.gold}/{p.max_gold} hand={len(p.hand)} deck={len(p.deck)} "
              f"souls={state.souls[pid]} board=[{board}]")
    print("Events:", ', '.join(f"{k}={v}" for k, v in sorted(counts.items())))


def show_parse(text: str):
    effects = ability_parser.parse(text)
    if not effects:
        print("(no effects)")
    for effect in effects:
        print(f" - {effect.type.value} -> {effect.target.value} [{effect.selection.value}] {effect.params}")


def list_cards(tier: int):
    data = load_game_data()
    for card in data.cards_by_tier.get(tier, []):
        print(f" - {card.name} {card.attack}/{card.health} [{', '.join(sorted(card.tags))}] {card.ability}")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Slotcraft rules engine CLI")
    parser.add_argument('--demo', action='store_true', help='Play a demo game between two simple opponents')
    parser.add_argument('--seed', type=int, default=None, help='Random seed for the demo game')
    parser.add_argument('--max-turns', type=int, default=30, help='Stop the demo after this many turns')
    parser.add_argument('--parse', metavar='TEXT', help='Show the effects parsed from an ability tail')
    parser.add_argument('--list-tier', type=int, metavar='TIER', help='List the cards of a tier')
    parser.add_argument('--log-level', default=os.getenv('SLOTCRAFT_LOG_LEVEL', 'WARNING'),
                        help='Logging level (default from SLOTCRAFT_LOG_LEVEL)')

    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format='%(levelname)s %(name)s: %(message)s')

    if args.parse:
        show_parse(args.parse)
    elif args.list_tier is not None:
        list_cards(args.list_tier)
    elif args.demo:
        demo_game(args.seed, args.max_turns)
    else:
        parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
