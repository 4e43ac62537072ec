from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from todo_app import models, schemas
from todo_app.exceptions import StorageFailure, TaskNotFound
from todo_app.logger import logger
from typing import Optional


def get_active_tasks(db: Session) -> list[models.Task]:
    """Get all tasks that are not in the trash, in insertion order"""
    try:
        return (
            db.query(models.Task)
            .filter(models.Task.deletion_date.is_(None))
            .order_by(models.Task.id)
            .all()
        )
    except SQLAlchemyError as e:
        logger.error(f"Error fetching active tasks: {str(e)}")
        raise StorageFailure("Failed to fetch active tasks") from e


def get_trashed_tasks(db: Session) -> list[models.Task]:
    """Get all tasks currently in the trash, in insertion order"""
    try:
        return (
            db.query(models.Task)
            .filter(models.Task.deletion_date.is_not(None))
            .order_by(models.Task.id)
            .all()
        )
    except SQLAlchemyError as e:
        logger.error(f"Error fetching trashed tasks: {str(e)}")
        raise StorageFailure("Failed to fetch trashed tasks") from e


def get_tasks_count(db: Session) -> int:
    """Get total count of tasks, trashed ones included"""
    try:
        return db.query(models.Task).count()
    except SQLAlchemyError as e:
        logger.error(f"Error counting tasks: {str(e)}")
        raise StorageFailure("Failed to count tasks") from e


def get_task(db: Session, task_id: int) -> Optional[models.Task]:
    """Get a single task by ID"""
    try:
        return db.query(models.Task).filter(models.Task.id == task_id).first()
    except SQLAlchemyError as e:
        logger.error(f"Error fetching task {task_id}: {str(e)}")
        raise StorageFailure(f"Failed to fetch task {task_id}") from e


def create_task(db: Session, task: schemas.TaskCreate) -> models.Task:
    """Create a new task; the id is assigned by the database"""
    try:
        db_task = models.Task(**task.model_dump())
        db.add(db_task)
        db.commit()
        db.refresh(db_task)
        logger.info(f"Created task with ID: {db_task.id}")
        return db_task
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error creating task: {str(e)}")
        raise StorageFailure("Failed to create task") from e


def update_task(db: Session, task: schemas.Task) -> models.Task:
    """Overwrite the stored row matching task.id with the snapshot's fields"""
    db_task = get_task(db, task.id)
    if db_task is None:
        raise TaskNotFound(task.id)
    try:
        db_task.description = task.description
        db_task.creation_date = task.creation_date
        db_task.deletion_date = task.deletion_date
        db.commit()
        db.refresh(db_task)
        logger.info(f"Updated task with ID: {task.id}")
        return db_task
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error updating task {task.id}: {str(e)}")
        raise StorageFailure(f"Failed to update task {task.id}") from e


def delete_task(db: Session, task_id: int) -> Optional[models.Task]:
    """Delete a task; returns None when it was already gone"""
    db_task = get_task(db, task_id)
    if db_task is None:
        return None
    try:
        db.delete(db_task)
        db.commit()
        logger.info(f"Deleted task with ID: {task_id}")
        return db_task
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error deleting task {task_id}: {str(e)}")
        raise StorageFailure(f"Failed to delete task {task_id}") from e
