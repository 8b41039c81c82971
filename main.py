import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import List, Optional

from bson import ObjectId
from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from pymongo.errors import PyMongoError

from config import Settings, settings as default_settings
from database import Database, serialize
from errors import BadRequestError, BookingError, NotFoundError
from schemas import SAMPLE_LESSONS, LessonUpdate, Order, OrderCreated, OrderIn
from validators import (
    is_valid_name,
    is_valid_object_id,
    is_valid_phone,
    parse_search_number,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stdout,
    )


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def parse_lesson_id(lesson_id: str) -> ObjectId:
    if not is_valid_object_id(lesson_id):
        raise BadRequestError(f"Invalid lesson id: {lesson_id}")
    return ObjectId(lesson_id)


# Error handlers

async def booking_error_handler(request: Request, exc: BookingError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request body", "details": jsonable_encoder(exc.errors())},
    )


async def database_error_handler(request: Request, exc: PyMongoError):
    logger.error("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


@router.get("/")
def root():
    return {"message": "After School Classes API running"}


@router.get("/health")
def health(db: Database = Depends(get_database)):
    try:
        db.ping()
    except PyMongoError:
        logger.warning("Health check failed: database unreachable")
        return JSONResponse(status_code=503, content={"status": "unavailable"})
    return {"status": "ok", "database": db.name}


# Lessons
@router.get("/lessons")
def list_lessons(db: Database = Depends(get_database)) -> List[dict]:
    return [serialize(doc) for doc in db.list_lessons()]


@router.put("/lessons/{lesson_id}")
def update_lesson(lesson_id: str, update: LessonUpdate, db: Database = Depends(get_database)):
    obj_id = parse_lesson_id(lesson_id)
    fields = update.model_dump(exclude_unset=True)
    if not fields:
        raise BadRequestError("No valid fields to update")
    if db.update_lesson(obj_id, fields) == 0:
        raise NotFoundError("Lesson not found")
    logger.info("Lesson %s updated: %s", lesson_id, ", ".join(fields))
    return {"message": "Lesson updated successfully", "updatedFields": fields}


# Orders
def release_reservations(db: Database, lesson_ids: List[ObjectId]) -> None:
    for obj_id in lesson_ids:
        try:
            db.release_space(obj_id)
        except PyMongoError:
            logger.exception("Failed to release reserved space on lesson %s", obj_id)


@router.post("/orders", status_code=201, response_model=OrderCreated)
def create_order(order: OrderIn, db: Database = Depends(get_database)):
    if not order.lessonIds:
        raise BadRequestError("lessonIds must be a non-empty array")
    if not is_valid_name(order.name):
        raise BadRequestError("Name must contain only letters and spaces")
    if not is_valid_phone(order.phone):
        raise BadRequestError("Phone must contain only digits")

    obj_ids = [parse_lesson_id(lesson_id) for lesson_id in order.lessonIds]
    lessons = db.get_lessons(obj_ids)
    for obj_id in obj_ids:
        if obj_id not in lessons:
            raise NotFoundError(f"Lesson not found: {obj_id}")

    reserved: List[ObjectId] = []
    try:
        for obj_id in obj_ids:
            if db.reserve_space(obj_id) is None:
                raise BadRequestError(f"No spaces available for {lessons[obj_id]['subject']}")
            reserved.append(obj_id)
        order_id = db.insert_order(Order(
            name=order.name,
            phone=order.phone,
            lesson_ids=obj_ids,
            lesson_subjects=[lessons[obj_id]["subject"] for obj_id in obj_ids],
        ))
    except Exception:
        release_reservations(db, reserved)
        raise

    logger.info("Order %s created for %d lesson(s)", order_id, len(obj_ids))
    return {
        "message": "Order created successfully",
        "orderId": order_id,
        "lessons": [
            {
                "subject": lessons[obj_id]["subject"],
                "location": lessons[obj_id]["location"],
                "price": lessons[obj_id]["price"],
            }
            for obj_id in obj_ids
        ],
    }


# Search
@router.get("/search")
def search(q: Optional[str] = None, db: Database = Depends(get_database)) -> List[dict]:
    if q is None or not q.strip():
        raise BadRequestError("Search query is required")
    docs = db.search_lessons(q.strip(), parse_search_number(q))
    return [serialize(doc) for doc in docs]


# Images
@router.get("/images/{filename}")
def get_image(filename: str, settings: Settings = Depends(get_settings)):
    images_dir = Path(settings.images_dir).resolve()
    path = (images_dir / filename).resolve()
    if images_dir not in path.parents or not path.is_file():
        raise NotFoundError("Image not found")
    return FileResponse(path)


def create_app(database: Optional[Database] = None, settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings
    setup_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        db = database or Database.from_settings(settings)
        db.connect()
        if settings.seed_sample_data:
            try:
                db.seed_lessons(SAMPLE_LESSONS)
            except PyMongoError:
                logger.exception("Error initializing sample data")
        app.state.database = db
        try:
            yield
        finally:
            db.close()

    app = FastAPI(title="After School Classes API", lifespan=lifespan)
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(BookingError, booking_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(PyMongoError, database_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=default_settings.host, port=default_settings.port)
