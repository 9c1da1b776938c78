"""
Base model with common fields
"""
from sqlalchemy import Column, DateTime, Integer, func

from metaextract.core.database import Base


class TimestampMixin:
    """created_at / updated_at maintained by the database"""

    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )


class BaseModel(Base, TimestampMixin):
    """Abstract base: integer primary key plus timestamps"""

    __abstract__ = True

    id = Column(Integer, primary_key=True, index=True)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id}>"
