from sqlalchemy import Column, Integer, Text, DateTime
from todo_app.database import Base


class Task(Base):
    """Task model for database

    A row with a NULL deletion_date is active, any other row is in the trash.
    """
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    description = Column(Text, nullable=False, default="")
    creation_date = Column(DateTime, nullable=False)
    deletion_date = Column(DateTime, nullable=True, index=True)

    def __repr__(self):
        return (
            f"<Task(id={self.id}, description='{self.description}', "
            f"deletion_date={self.deletion_date})>"
        )
