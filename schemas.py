"""
Database Schemas for the Chat Room

Each Pydantic model below describes a document in a MongoDB collection, or a
request payload checked before anything touches the database.
"""
from typing import Any, Dict, Literal

import pydantic
from pydantic import BaseModel, ConfigDict, Field

from errors import ValidationError

STATUS = "status"
MESSAGE = "message"
PRIVATE_MESSAGE = "private_message"

EVERYONE = "Todos"
JOIN_TEXT = "entra na sala..."
LEAVE_TEXT = "sai da sala..."


class Participant(BaseModel):
    """
    Someone present in the room
    Collection: "participants"
    """
    name: str = Field(..., description="Unique display name")
    lastStatus: int = Field(..., description="Last heartbeat, epoch milliseconds")


class Message(BaseModel):
    """
    Entry in the room feed, never modified after insert
    Collection: "messages"
    """
    model_config = ConfigDict(populate_by_name=True)

    sender: str = Field(..., alias="from", description="Participant name")
    to: str = Field(..., description="Recipient name or \"Todos\"")
    text: str
    type: Literal["message", "private_message", "status"]
    time: str = Field(..., description="Wall-clock hh:mm:ss, no date")


# Request payloads

class NewParticipant(BaseModel):
    name: str = Field(..., min_length=1)


class NewMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    to: str = Field(..., min_length=1)
    text: str = Field(..., min_length=1)
    type: Literal["message", "private_message"]
    sender: str = Field(..., alias="from", min_length=1)


def _violations(exc: pydantic.ValidationError):
    return [
        {"loc": list(err["loc"]), "msg": err["msg"], "type": err["type"]}
        for err in exc.errors()
    ]


def validate_participant(payload: Any) -> NewParticipant:
    try:
        return NewParticipant.model_validate(payload)
    except pydantic.ValidationError as e:
        raise ValidationError(_violations(e)) from e


def validate_message(payload: Any) -> NewMessage:
    """Check a message payload, reporting all violations at once.

    `from` is expected inside the payload; handlers merge it from the
    `User` header before calling this.
    """
    try:
        return NewMessage.model_validate(payload)
    except pydantic.ValidationError as e:
        raise ValidationError(_violations(e)) from e


def message_document(sender: str, to: str, text: str, type: str, time: str) -> Dict[str, Any]:
    return Message(sender=sender, to=to, text=text, type=type, time=time).model_dump(by_alias=True)
