"""Cards with fixed benefits only."""

from ..effect_types import create_simple_card_effect

smithy = create_simple_card_effect(cards=3)
village = create_simple_card_effect(cards=1, actions=2)
laboratory = create_simple_card_effect(cards=2, actions=1)
festival = create_simple_card_effect(actions=2, buys=1, coins=2)
market = create_simple_card_effect(cards=1, actions=1, buys=1, coins=1)
moat = create_simple_card_effect(cards=2)

# The +$1 on the first Silver is applied by the engine when treasures are played.
merchant = create_simple_card_effect(cards=1, actions=1)
