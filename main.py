import asyncio
import contextlib
import logging
from typing import Any, Optional

from fastapi import Body, Depends, FastAPI, Header, Query, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.database import Database

import chat
from database import open_database
from errors import ChatError, Unauthenticated
from reaper import run_reaper
from schemas import validate_message, validate_participant
from settings import Settings, get_settings


logging.basicConfig(level=get_settings().log_level, format="[%(asctime)s] %(levelname)s - %(message)s")
logger = logging.getLogger("chatroom")


def get_db(request: Request) -> Database:
    return request.app.state.db


def current_user(user: Optional[str] = Header(None)) -> str:
    # Presence claim only: any caller may send any name.
    if not user:
        raise Unauthenticated()
    return user


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI):
        with open_database(settings) as db:
            app.state.db = db
            reaper = None
            if settings.reaper_enabled:
                reaper = asyncio.create_task(
                    run_reaper(db, settings.reaper_interval_ms, settings.stale_after_ms)
                )
            try:
                yield
            finally:
                if reaper is not None:
                    reaper.cancel()
                    with contextlib.suppress(asyncio.CancelledError):
                        await reaper

    app = FastAPI(title="Chat Room API", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ChatError)
    async def chat_error_handler(request: Request, exc: ChatError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    @app.get("/")
    def read_root():
        return {"message": "Chat API ready"}

    @app.get("/health")
    def health(db: Database = Depends(get_db)):
        response = {
            "backend": "running",
            "database": "unavailable",
            "database_name": settings.database_name,
            "collections": [],
        }
        try:
            db.client.admin.command("ping")
            response["collections"] = db.list_collection_names()
            response["database"] = "connected"
        except Exception as e:
            response["database"] = f"error: {str(e)[:80]}"
        return response

    # Participants
    @app.post("/participants")
    def create_participant(payload: Any = Body(None), db: Database = Depends(get_db)):
        data = validate_participant(payload)
        chat.register(db, data.name)
        return Response(status_code=201)

    @app.get("/participants")
    def list_participants(db: Database = Depends(get_db)):
        return chat.list_participants(db)

    # Messages
    @app.post("/messages")
    def send_message(
        payload: Any = Body(None),
        user: str = Depends(current_user),
        db: Database = Depends(get_db),
    ):
        if isinstance(payload, dict):
            payload = {**payload, "from": user}
        data = validate_message(payload)
        chat.post_message(db, data.sender, data.to, data.text, data.type)
        return Response(status_code=201)

    @app.get("/messages")
    def list_messages(
        limit: Optional[str] = Query(None),
        user: str = Depends(current_user),
        db: Database = Depends(get_db),
    ):
        return chat.list_messages(db, user, chat.parse_limit(limit))

    # Presence
    @app.post("/status")
    def status(user: str = Depends(current_user), db: Database = Depends(get_db)):
        chat.heartbeat(db, user)
        return Response(status_code=200)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=get_settings().port)
