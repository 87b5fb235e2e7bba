"""
FastAPI backend for friendmap.

Routes mirror the FriendmapDB facade one to one; every response uses the
``{"success": true, ...}`` envelope and every error the
``{"success": false, "error": ...}`` one.

Configuration (environment, optionally from a .env file):
    FRIENDMAP_DB_PATH      SQLite file (default: data/friendmap.db)
    FRIENDMAP_LOG_DIR      Log directory (default: no file logging)
    FRIENDMAP_DB_TIMEOUT   Seconds to wait on a locked database (default: 5)

Run with uvicorn: uvicorn friendmap.api.main:app --reload
"""
import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic.alias_generators import to_camel

from friendmap.core.exceptions import DatabaseError, NotFoundError, ValidationError
from friendmap.core.paths import DB_PATH
from friendmap.core.validators import DataValidator
from friendmap.database import FriendmapDB
from friendmap.database.manager import DEFAULT_TIMEOUT
from .schemas import PersonBody

# Load .env from repo root or the working directory
for path in (
    Path(__file__).resolve().parent.parent.parent / ".env",
    Path.cwd() / ".env",
):
    if path.exists():
        load_dotenv(path)
        break

logger = logging.getLogger(__name__)


def db_from_env() -> FriendmapDB:
    db_path = os.environ.get("FRIENDMAP_DB_PATH", "").strip() or str(DB_PATH)
    log_dir = os.environ.get("FRIENDMAP_LOG_DIR", "").strip() or None
    timeout = os.environ.get("FRIENDMAP_DB_TIMEOUT", "").strip()
    return FriendmapDB(
        db_path=db_path,
        log_dir=log_dir,
        timeout=float(timeout) if timeout else DEFAULT_TIMEOUT,
    )


def get_db(request: Request) -> FriendmapDB:
    return request.app.state.db


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        content={"success": False, "error": message}, status_code=status_code
    )


def camelize(record: dict) -> dict:
    """Person record with camelCase keys, matching the request bodies."""
    return {to_camel(key): value for key, value in record.items()}


def create_app(db: Optional[FriendmapDB] = None) -> FastAPI:
    """
    Build the application.

    Args:
        db: Database to serve; built from the environment at startup when
            omitted. A database passed in is not disposed at shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = db is None
        app.state.db = db_from_env() if owned else db
        logger.info("Serving friendmap database %s", app.state.db.db_path)
        try:
            yield
        finally:
            if owned:
                app.state.db.dispose()

    app = FastAPI(title="friendmap API", lifespan=lifespan)

    # --- Errors ---

    @app.exception_handler(ValidationError)
    async def handle_validation(request: Request, exc: ValidationError):
        return error_response(400, str(exc))

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        messages = []
        for error in exc.errors():
            location = ".".join(str(part) for part in error["loc"] if part != "body")
            messages.append(f"{location}: {error['msg']}" if location else error["msg"])
        return error_response(400, "; ".join(messages) or "Invalid request")

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return error_response(404, str(exc))

    @app.exception_handler(DatabaseError)
    async def handle_database(request: Request, exc: DatabaseError):
        logger.warning("Database error on %s: %s", request.url.path, exc)
        return error_response(503, str(exc))

    # --- Health ---

    @app.get("/health")
    def health(request: Request):
        return {"success": True, "status": "ok", "stats": get_db(request).get_stats()}

    # --- People ---

    @app.get("/people")
    def list_people(
        request: Request,
        starred: Optional[str] = None,
        tags: Optional[List[str]] = Query(default=None),
        country: Optional[str] = None,
        city: Optional[str] = None,
        location: Optional[str] = None,
    ):
        people = get_db(request).list_persons(
            starred=DataValidator.normalize_bool(starred),
            tags=tags,
            country=country,
            city=city,
            location=location,
        )
        return {"success": True, "people": [camelize(p) for p in people]}

    @app.get("/people/search")
    def search_people(request: Request, q: Optional[str] = None, limit: int = 10):
        return {"success": True, "people": get_db(request).search_persons(q, limit)}

    @app.get("/people/{person_id}")
    def get_person(request: Request, person_id: int):
        person = get_db(request).get_person(person_id)
        return {"success": True, "person": camelize(person)}

    @app.post("/people", status_code=201)
    def create_person(request: Request, body: PersonBody):
        person = get_db(request).create_person(body.to_payload())
        return {"success": True, "personId": person["id"], "person": camelize(person)}

    @app.put("/people/{person_id}")
    def update_person(request: Request, person_id: int, body: PersonBody):
        person = get_db(request).update_person(person_id, body.to_payload())
        return {"success": True, "person": camelize(person)}

    @app.delete("/people/{person_id}")
    def delete_person(request: Request, person_id: int):
        result = get_db(request).delete_person(person_id)
        return {"success": True, "removed": result["removed"]}

    # --- Listings ---

    @app.get("/tags")
    def list_tags(request: Request):
        return {"success": True, "tags": get_db(request).list_tags()}

    @app.get("/locations")
    def list_locations(request: Request):
        return {"success": True, "locations": get_db(request).list_locations()}

    @app.get("/cities")
    def list_cities(request: Request):
        return {"success": True, "cities": get_db(request).list_cities()}

    @app.get("/cities/overview")
    def city_overview(
        request: Request, country: Optional[str] = None, city: Optional[str] = None
    ):
        return {"success": True, **get_db(request).city_overview(country, city)}

    return app


app = create_app()
