"""
Participant registry and message log.

Plain functions over the `participants` and `messages` collections. Each one
maps pymongo failures to `StoreError`; no retries, no cleanup of partial
writes.
"""
import functools
import logging
from typing import Any, Dict, List, Optional

from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError

from database import (
    MESSAGES,
    PARTICIPANTS,
    clock_time,
    create_document,
    get_documents,
    now_ms,
    to_str_id,
)
from errors import Conflict, InvalidLimit, NotFound, StoreError, UnknownSender
from schemas import (
    EVERYONE,
    JOIN_TEXT,
    MESSAGE,
    PRIVATE_MESSAGE,
    STATUS,
    message_document,
)

logger = logging.getLogger("chatroom")


def _store_errors(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except PyMongoError as e:
            logger.exception("Store failure in %s", func.__name__)
            raise StoreError() from e
    return wrapper


# Participants

@_store_errors
def register(db: Database, name: str) -> None:
    # unique index on name makes the insert the duplicate check
    try:
        create_document(db, PARTICIPANTS, {"name": name, "lastStatus": now_ms()})
    except DuplicateKeyError as e:
        raise Conflict() from e
    create_document(db, MESSAGES, message_document(name, EVERYONE, JOIN_TEXT, STATUS, clock_time()))
    logger.info("Participant joined: %s", name)


@_store_errors
def list_participants(db: Database) -> List[Dict[str, Any]]:
    return [to_str_id(p) for p in get_documents(db, PARTICIPANTS)]


@_store_errors
def heartbeat(db: Database, name: str) -> None:
    result = db[PARTICIPANTS].update_one({"name": name}, {"$set": {"lastStatus": now_ms()}})
    if result.matched_count == 0:
        raise NotFound()


# Messages

def visible_to(requester: str) -> Dict[str, Any]:
    """Mongo filter for the messages `requester` may read."""
    return {
        "$or": [
            {"type": MESSAGE},
            {"type": STATUS},
            {"type": PRIVATE_MESSAGE, "from": requester},
            {"type": PRIVATE_MESSAGE, "to": requester},
        ]
    }


def parse_limit(raw: Optional[str]) -> int:
    """`None` means no limit (0); anything else must be a positive integer.

    Only plain decimal digits are accepted, so fractions like "2.5" and
    forms like "1_000" or "+3" are rejected.
    """
    if raw is None:
        return 0
    digits = raw.strip()
    if not (digits.isascii() and digits.isdigit()):
        raise InvalidLimit()
    limit = int(digits)
    if limit <= 0:
        raise InvalidLimit()
    return limit


@_store_errors
def post_message(db: Database, sender: str, to: str, text: str, type: str) -> None:
    if not db[PARTICIPANTS].find_one({"name": sender}):
        raise UnknownSender()
    create_document(db, MESSAGES, message_document(sender, to, text, type, clock_time()))


@_store_errors
def list_messages(db: Database, requester: str, limit: int = 0) -> List[Dict[str, Any]]:
    """Newest first; `limit` 0 returns the whole visible feed."""
    msgs = db[MESSAGES].find(visible_to(requester)).sort("_id", -1)
    if limit > 0:
        msgs = msgs.limit(limit)
    return [to_str_id(m) for m in msgs]
