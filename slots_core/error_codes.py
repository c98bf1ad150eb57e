class ErrorCodes:
    INVALID_CONFIG = "SLOTS_INVALID_CONFIG"
    INVALID_ARGUMENT = "SLOTS_INVALID_ARGUMENT"
    INSUFFICIENT_FUNDS = "SLOTS_INSUFFICIENT_FUNDS"
    GAME_LOGIC_ERROR = "SLOTS_GAME_LOGIC_ERROR"
    PERSISTENCE_ERROR = "SLOTS_PERSISTENCE_ERROR"
