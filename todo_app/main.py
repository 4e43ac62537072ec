import asyncio
import contextlib
from contextlib import asynccontextmanager

from fastapi import FastAPI, Depends, HTTPException, Request, WebSocket, WebSocketDisconnect, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.orm import Session

from todo_app import schemas
from todo_app.config import get_settings
from todo_app.database import get_db, init_db
from todo_app.exceptions import EmptyTrashError, StorageFailure, TaskNotFound
from todo_app.logger import logger
from todo_app.service import TaskService
from todo_app.store import TaskStore

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle startup and shutdown events"""
    # Startup
    logger.info(f"Starting {settings.app_name}")
    try:
        init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database: {str(e)}")
        raise
    app.state.service = TaskService(TaskStore())

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.app_name}")
    app.state.service.close(wait=settings.shutdown_wait)


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    description="Task list with a trash bin",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_credentials,
    allow_methods=settings.cors_methods,
    allow_headers=settings.cors_headers,
)


def get_service(request: Request) -> TaskService:
    return request.app.state.service


# Exception handlers
@app.exception_handler(TaskNotFound)
async def task_not_found_handler(request, exc: TaskNotFound):
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"detail": str(exc)}
    )


@app.exception_handler(EmptyTrashError)
async def empty_trash_error_handler(request, exc: EmptyTrashError):
    logger.error(f"Empty trash failed: {str(exc)}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "Some trashed tasks could not be deleted",
            "deleted": exc.deleted,
            "failed": exc.failed,
        }
    )


@app.exception_handler(StorageFailure)
async def storage_failure_handler(request, exc: StorageFailure):
    logger.error(f"Database error: {str(exc)}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Database error occurred"}
    )


@app.exception_handler(Exception)
async def general_exception_handler(request, exc: Exception):
    logger.error(f"Unexpected error: {str(exc)}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "An unexpected error occurred"}
    )


# Health check endpoints
@app.get("/health", tags=["Health"])
def health_check():
    """Basic health check"""
    return {"status": "healthy", "service": settings.app_name}


@app.get("/health/ready", tags=["Health"])
def readiness_check(db: Session = Depends(get_db)):
    """Check if service is ready (including database)"""
    try:
        db.execute(text("SELECT 1"))
        return {
            "status": "ready",
            "service": settings.app_name,
            "database": "connected"
        }
    except Exception as e:
        logger.error(f"Readiness check failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service not ready"
        )


@app.get("/", tags=["Root"])
def read_root():
    """Root endpoint"""
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.version,
        "docs": "/docs"
    }


# Task endpoints
@app.get("/tasks/", response_model=list[schemas.Task], tags=["Tasks"])
def read_active_tasks(service: TaskService = Depends(get_service)):
    """Tasks that are not in the trash"""
    return service.active_tasks.snapshot


@app.get("/tasks/trash", response_model=list[schemas.Task], tags=["Trash"])
def read_trashed_tasks(service: TaskService = Depends(get_service)):
    """Tasks in the trash"""
    return service.trashed_tasks.snapshot


@app.delete("/tasks/trash", response_model=schemas.EmptyTrashResult, tags=["Trash"])
def empty_trash(service: TaskService = Depends(get_service)):
    """Permanently delete every trashed task"""
    return service.empty_trash().result()


@app.post(
    "/tasks/",
    response_model=schemas.Task,
    status_code=status.HTTP_201_CREATED,
    tags=["Tasks"]
)
def create_task(task: schemas.TaskUpdate, service: TaskService = Depends(get_service)):
    """Create a new task"""
    return service.create_task(task.description).result()


@app.get("/tasks/{task_id}", response_model=schemas.Task, tags=["Tasks"])
def read_task(task_id: int, service: TaskService = Depends(get_service)):
    """Get a specific task by ID, trashed or not"""
    return service.get_task(task_id).result()


@app.put("/tasks/{task_id}", response_model=schemas.Task, tags=["Tasks"])
def update_task(
        task_id: int,
        task: schemas.TaskUpdate,
        service: TaskService = Depends(get_service)
):
    """Change a task's description"""
    current = service.get_task(task_id).result()
    return service.edit_task(current, task.description).result()


@app.post("/tasks/{task_id}/trash", response_model=schemas.Task, tags=["Trash"])
def trash_task(task_id: int, service: TaskService = Depends(get_service)):
    """Move a task to the trash"""
    current = service.get_task(task_id).result()
    return service.move_to_trash(current).result()


@app.post("/tasks/{task_id}/restore", response_model=schemas.Task, tags=["Trash"])
def restore_task(task_id: int, service: TaskService = Depends(get_service)):
    """Bring a task back from the trash"""
    current = service.get_task(task_id).result()
    return service.restore(current).result()


# Live updates
@app.websocket("/ws/tasks")
async def task_updates(websocket: WebSocket):
    """Push the active and trashed lists every time either changes"""
    service: TaskService = websocket.app.state.service
    await websocket.accept()

    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue()

    def forward(list_name: str):
        # Called on the store worker thread
        def callback(tasks: list[schemas.Task]) -> None:
            loop.call_soon_threadsafe(queue.put_nowait, (list_name, tasks))
        return callback

    subscriptions = [
        service.active_tasks.subscribe(forward("active")),
        service.trashed_tasks.subscribe(forward("trashed")),
    ]
    sender = asyncio.create_task(_send_updates(websocket, queue))
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.info("Task update listener disconnected")
    finally:
        for subscription in subscriptions:
            subscription.cancel()
        sender.cancel()
        with contextlib.suppress(asyncio.CancelledError, WebSocketDisconnect):
            await sender


async def _send_updates(websocket: WebSocket, queue: asyncio.Queue) -> None:
    while True:
        list_name, tasks = await queue.get()
        await websocket.send_json({
            "list": list_name,
            "tasks": [task.model_dump(mode="json") for task in tasks],
        })
