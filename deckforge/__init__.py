"""
Deckforge - Event-Sourced Deck-Building Rules Engine

A deterministic rules engine for a deck-building card game. The engine provides:
- An ordered, causally-linked event log as the single source of truth
- A pure projector that replays the log into game state
- Pure card resolvers that pause for player input and resume later
- A command engine that validates moves before emitting events
- Bot policies, an in-memory session layer, a REST API and a CLI
"""

__version__ = "0.1.0"
