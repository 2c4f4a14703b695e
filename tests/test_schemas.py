import pytest

import chat
from errors import InvalidLimit, ValidationError
from schemas import validate_message, validate_participant


def test_validate_participant_ok():
    assert validate_participant({"name": "ana"}).name == "ana"


@pytest.mark.parametrize("payload", [{}, {"name": ""}, {"name": None}, [], "ana"])
def test_validate_participant_rejects(payload):
    with pytest.raises(ValidationError):
        validate_participant(payload)


def test_validate_message_ok():
    msg = validate_message({"from": "ana", "to": "Todos", "text": "oi", "type": "message"})
    assert msg.sender == "ana"
    assert msg.type == "message"


def test_validate_message_reports_every_violation():
    with pytest.raises(ValidationError) as exc:
        validate_message({"type": "status"})
    fields = {err["loc"][0] for err in exc.value.errors}
    assert fields == {"to", "text", "type", "from"}


def test_status_type_not_accepted_from_clients():
    with pytest.raises(ValidationError):
        validate_message({"from": "ana", "to": "Todos", "text": "oi", "type": "status"})


def test_parse_limit():
    assert chat.parse_limit(None) == 0
    assert chat.parse_limit("7") == 7
    assert chat.parse_limit(" 12 ") == 12
    for bad in ("0", "-1", "x", "", "2.5", "1_000", "+3", "\u00b2"):
        with pytest.raises(InvalidLimit):
            chat.parse_limit(bad)
