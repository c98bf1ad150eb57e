import pytest
from slots_core.exceptions import (
    SlotsException,
    InvalidConfigException,
    InvalidArgumentException,
    InsufficientFundsException,
    GameLogicException,
)
from slots_core.error_codes import ErrorCodes


def test_slots_exception_instantiation():
    details = {"field": "value"}
    exc = SlotsException(error_code="TEST_001", status_message="Test message", details=details)

    assert exc.error_code == "TEST_001"
    assert exc.status_message == "Test message"
    assert exc.details == details
    assert str(exc) == "Test message"


def test_slots_exception_defaults():
    exc = SlotsException(error_code="TEST_002", status_message="Default test")
    assert exc.details == {}


def test_to_dict():
    exc = InsufficientFundsException(details={"balance_cents": 10, "bet_cents": 100})
    assert exc.to_dict() == {
        "error_code": ErrorCodes.INSUFFICIENT_FUNDS,
        "status_message": "Insufficient funds",
        "details": {"balance_cents": 10, "bet_cents": 100},
    }


@pytest.mark.parametrize("exc_class,error_code,default_message", [
    (InvalidConfigException, ErrorCodes.INVALID_CONFIG, "Invalid slot configuration"),
    (InvalidArgumentException, ErrorCodes.INVALID_ARGUMENT, "Invalid argument"),
    (InsufficientFundsException, ErrorCodes.INSUFFICIENT_FUNDS, "Insufficient funds"),
    (GameLogicException, ErrorCodes.GAME_LOGIC_ERROR, "Game logic error"),
])
def test_subclass_codes_and_defaults(exc_class, error_code, default_message):
    exc = exc_class()
    assert isinstance(exc, SlotsException)
    assert exc.error_code == error_code
    assert exc.status_message == default_message
    assert exc.details == {}
    with pytest.raises(exc_class):
        raise exc


def test_custom_message_and_details():
    exc = InvalidArgumentException(status_message="Bet must be positive", details={"bet_cents": 0})
    assert exc.status_message == "Bet must be positive"
    assert exc.details == {"bet_cents": 0}
