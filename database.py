"""
MongoDB access for the chat room.

The client is opened once per process by `open_database` (used from the app
lifespan) and closed when the context exits. Everything else receives the
`Database` handle explicitly.
"""
import logging
import time
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional

from pymongo import MongoClient
from pymongo.database import Database

from settings import Settings

logger = logging.getLogger("chatroom")

PARTICIPANTS = "participants"
MESSAGES = "messages"


@contextmanager
def open_database(settings: Settings) -> Iterator[Database]:
    client = MongoClient(settings.database_url)
    logger.info("Connected to MongoDB database=%s", settings.database_name)
    try:
        db = client[settings.database_name]
        db[PARTICIPANTS].create_index("name", unique=True)
        yield db
    finally:
        client.close()
        logger.info("MongoDB connection closed")


def now_ms() -> int:
    return int(time.time() * 1000)


def clock_time() -> str:
    # 12-hour wall clock, no date component
    return datetime.now().strftime("%I:%M:%S")


def create_document(db: Database, collection_name: str, data: Dict[str, Any]) -> str:
    result = db[collection_name].insert_one(dict(data))
    return str(result.inserted_id)


def get_documents(
    db: Database,
    collection_name: str,
    filter_dict: Optional[Dict[str, Any]] = None,
) -> List[Dict[str, Any]]:
    return list(db[collection_name].find(filter_dict or {}))


def to_str_id(doc):
    if not doc:
        return doc
    d = dict(doc)
    if "_id" in d:
        d["id"] = str(d.pop("_id"))
    return d
