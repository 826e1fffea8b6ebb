"""Stage names shared by multi-stage resolvers and the engine."""

INITIAL = "initial"

TRASH = "trash"
DISCARD = "discard"
GAIN = "gain"
TOPDECK = "topdeck"
OPPONENT_DISCARD = "opponent_discard"
OPPONENT_TOPDECK = "opponent_topdeck"
VICTIM_TRASH_CHOICE = "victim_trash_choice"
CHOOSE_ACTION = "choose_action"
SET_ASIDE = "set_aside"
ORDER = "order"
PLAY_ACTION = "play_action"

# Engine-owned
REACTION = "reaction"
