"""
Deckforge CLI - Command-line interface for the engine.

Usage:
    deckforge cards                          List the card catalog
    deckforge simulate --players 3 --seed 7  Play a bot-only game
    deckforge replay <log_file>              Project a saved event log
    deckforge serve                          Run the HTTP API
"""

import argparse
import json
import sys

from .config import Settings, configure_logging


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Deckforge - Event-sourced deck-building rules engine",
        prog="deckforge",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Cards command
    cards_parser = subparsers.add_parser("cards", help="List the card catalog")
    cards_parser.add_argument("--kingdom-only", action="store_true", help="Only kingdom cards")

    # Simulate command
    simulate_parser = subparsers.add_parser("simulate", help="Play a bot-only game")
    simulate_parser.add_argument("--players", type=int, default=2, help="Number of bot seats (2-4)")
    simulate_parser.add_argument("--seed", type=int, default=None, help="Game seed")
    simulate_parser.add_argument("--kingdom", nargs="+", default=None, help="Ten kingdom cards")
    simulate_parser.add_argument("--policy", default="big_money", help="Bot policy for every seat")
    simulate_parser.add_argument("--max-steps", type=int, default=10_000, help="Bot command limit")
    simulate_parser.add_argument("--output", "-o", help="Write the event log to this file")

    # Replay command
    replay_parser = subparsers.add_parser("replay", help="Project a saved event log")
    replay_parser.add_argument("log_file", help="Path to an event log JSON file")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port")

    args = parser.parse_args(argv)

    settings = Settings.from_env()
    configure_logging(settings)

    if args.command == "cards":
        cmd_cards(args)
    elif args.command == "simulate":
        cmd_simulate(args, settings)
    elif args.command == "replay":
        cmd_replay(args)
    elif args.command == "serve":
        cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_cards(args):
    """List the card catalog."""
    from .cards.catalog import CARDS, KINGDOM_CARDS

    names = KINGDOM_CARDS if args.kingdom_only else list(CARDS)
    for name in names:
        card = CARDS[name]
        types = ", ".join(t.value for t in card.types)
        print(f"{card.name:<14} ${card.cost}  [{types}]  {card.description}")


def cmd_simulate(args, settings):
    """Play a bot-only game and print the result."""
    from .engine_core.events import events_to_dicts
    from .session import GameLoop, SessionError, SessionManager

    players = [f"p{i + 1}" for i in range(args.players)]
    seed = args.seed if args.seed is not None else settings.default_seed

    manager = SessionManager()
    try:
        session = manager.create_session(
            players,
            bots={player: args.policy for player in players},
            kingdom_cards=args.kingdom,
            seed=seed,
        )
    except SessionError as e:
        print(f"Error: {e}")
        sys.exit(1)

    state = session.game_state
    print(f"Seed: {state.seed}")
    print(f"Kingdom: {', '.join(state.kingdom_cards)}")

    result = GameLoop(session).run_bots(max_steps=args.max_steps)
    state = session.game_state

    print(f"Stopped: {result.loop_state.value} after {result.steps} commands")
    print(f"Turns: {state.turn}")
    print(f"Events: {len(session.events)}")
    if state.game_over:
        print(f"End: {state.end_reason}")
        for player in state.player_order:
            print(f"  {player}: {state.scores.get(player, 0)} VP")
        print(f"Winner: {state.winner}")

    if result.errors:
        print("\nErrors:")
        for e in result.errors:
            print(f"  - {e}")

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            json.dump(events_to_dicts(session.events), f, indent=2)
        print(f"Event log written to {args.output}")

    if not result.success:
        sys.exit(1)


def cmd_replay(args):
    """Project a saved event log and print the final state."""
    from .engine_core.events import events_from_dicts
    from .engine_core.projector import project

    try:
        with open(args.log_file, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        print(f"Error: File not found: {args.log_file}")
        sys.exit(1)
    except json.JSONDecodeError as e:
        print(f"Error: Invalid JSON in {args.log_file}: {e}")
        sys.exit(1)

    try:
        events = events_from_dicts(data)
    except (KeyError, ValueError) as e:
        print(f"Error: Invalid event log: {e}")
        sys.exit(1)

    state = project(events)
    print(f"Events: {len(events)}")
    print(f"Turn: {state.turn}")
    print(f"Phase: {state.phase.value}")
    print(f"Active player: {state.active_player}")
    for player_id in state.player_order:
        player = state.players[player_id]
        print(
            f"  {player_id}: hand={len(player.hand)} deck={len(player.deck)} "
            f"discard={len(player.discard)}"
        )
    if state.game_over:
        print(f"Game over ({state.end_reason}), winner: {state.winner}")
        for player_id, score in state.scores.items():
            print(f"  {player_id}: {score} VP")


def cmd_serve(args):
    """Run the HTTP API with uvicorn."""
    import uvicorn

    uvicorn.run("deckforge.api.app:app", host=args.host, port=args.port)


if __name__ == "__main__":
    main()
