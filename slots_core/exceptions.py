from slots_core.error_codes import ErrorCodes

class SlotsException(Exception):
    def __init__(self, error_code, status_message, details=None):
        super().__init__(status_message)
        self.error_code = error_code
        self.status_message = status_message
        self.details = details if details is not None else {}

    def to_dict(self):
        return {
            "error_code": self.error_code,
            "status_message": self.status_message,
            "details": self.details,
        }

class InvalidConfigException(SlotsException):
    def __init__(self, status_message="Invalid slot configuration", details=None):
        super().__init__(
            error_code=ErrorCodes.INVALID_CONFIG,
            status_message=status_message,
            details=details
        )

class InvalidArgumentException(SlotsException):
    def __init__(self, status_message="Invalid argument", details=None):
        super().__init__(
            error_code=ErrorCodes.INVALID_ARGUMENT,
            status_message=status_message,
            details=details
        )

class InsufficientFundsException(SlotsException):
    def __init__(self, status_message="Insufficient funds", details=None):
        super().__init__(
            error_code=ErrorCodes.INSUFFICIENT_FUNDS,
            status_message=status_message,
            details=details
        )

class GameLogicException(SlotsException):
    def __init__(self, status_message="Game logic error", details=None):
        super().__init__(
            error_code=ErrorCodes.GAME_LOGIC_ERROR,
            status_message=status_message,
            details=details
        )
