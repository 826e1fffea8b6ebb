"""
Bots module - Automated seats.

Provides:
- BotPolicy: Interface for bot decision-making
- RandomPolicy / FirstLegalPolicy: Baselines for tests and fuzzing
- BigMoneyPolicy: A simple money-first strategy
"""

from .policy import (
    POLICIES,
    BigMoneyPolicy,
    BotDecision,
    BotPolicy,
    ChoiceDecision,
    FirstLegalPolicy,
    RandomPolicy,
    make_policy,
)

__all__ = [
    "POLICIES",
    "BigMoneyPolicy",
    "BotDecision",
    "BotPolicy",
    "ChoiceDecision",
    "FirstLegalPolicy",
    "RandomPolicy",
    "make_policy",
]
