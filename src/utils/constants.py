"""Game constants for the stare-down card game server."""

# Suits (compact encoding)
SPADES = "s"
HEARTS = "h"
DIAMONDS = "d"
CLUBS = "c"
JOKER_SUIT = "j"
SUITS = [SPADES, HEARTS, DIAMONDS, CLUBS]
RED_SUITS = {HEARTS, DIAMONDS}

# Suit display symbols
SUIT_SYMBOLS = {
    SPADES: "♠",
    HEARTS: "♥",
    DIAMONDS: "♦",
    CLUBS: "♣",
    JOKER_SUIT: "★",
}

# Ranks, lowest to highest
RANKS = ["3", "4", "5", "6", "7", "8", "9", "10", "J", "Q", "K", "A", "2"]
JOKER_RANK = "Joker"
JOKER_IDS = ["Joker1", "Joker2"]

COLOR_RED = "red"
COLOR_BLACK = "black"

# Game parameters
TOTAL_CARDS = 54  # 13*4 + 2
DEALER_CARDS = 6
PLAYER_CARDS = 5
MAX_PLAYERS = 6
MIN_PLAYERS = 2
BOMB_SIZES = (3, 4)
RECENT_PLAYS_LIMIT = 4
MAX_NAME_LENGTH = 20

# Room statuses
STATUS_WAITING = "waiting"
STATUS_IN_PROGRESS = "in_progress"

# Play categories
PLAY_ANY = "any"
PLAY_BOMB = "bomb"
PLAY_NEW_ROUND = "new_round"
PLAY_NORMAL = "normal"

SPECIAL_CELESTIAL_WIN = "celestial_win"

# Outbox event types
EVENT_PLAYER_JOINED = "player_joined"
EVENT_PLAYER_LEFT = "player_left"
EVENT_GAME_STARTED = "game_started"
EVENT_PLAYER_HAND = "player_hand"
EVENT_CARD_PLAYED = "card_played"
EVENT_TURN_PASSED = "turn_passed"
EVENT_GAME_ENDED = "game_ended"

# Error codes
ERR_ROOM_NOT_FOUND = "room_not_found"
ERR_NOT_SEATED = "not_seated"
ERR_ROOM_FULL = "room_full"
ERR_ALREADY_STARTED = "already_started"
ERR_INSUFFICIENT_PLAYERS = "insufficient_players"
ERR_NOT_STARTED = "not_started"
ERR_NOT_YOUR_TURN = "not_your_turn"
ERR_ILLEGAL_PLAY = "illegal_play"
ERR_MALFORMED_REQUEST = "malformed_request"
ERR_INTERNAL = "internal_error"

# Expiry policy (seconds)
SESSION_TIMEOUT = 5 * 60
ROOM_WAITING_IDLE = 60 * 60
ROOM_STARTED_IDLE = 2 * 60 * 60
ROOM_MAX_AGE = 6 * 60 * 60
SWEEP_INTERVAL = 60

# Rooms
ROOM_CODE_LENGTH = 6
