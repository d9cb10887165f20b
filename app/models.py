from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, index=True, nullable=False)
    # NULL until the first login sets it
    password = Column(String, nullable=True)
    isadmin = Column(Boolean, nullable=False, default=False)


class News(Base):
    __tablename__ = "news"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    content = Column(Text, nullable=False)
    short = Column(Text, nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    image_path = Column(String, nullable=False)
    ispinned = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False)


SCHEDULE_DAYS = ("ponedjeljak", "utorak", "srijeda", "cetvrtak", "petak", "subota")
SCHEDULE_FIELDS = tuple(
    name for day in SCHEDULE_DAYS for name in (day, f"{day}_time")
)


class ScheduleRow(Base):
    """One row of the weekly grid: a label and a time for Monday to Saturday."""

    __tablename__ = "raspored"

    id = Column(Integer, primary_key=True)
    ponedjeljak = Column(String, nullable=True)
    ponedjeljak_time = Column(String, nullable=True)
    utorak = Column(String, nullable=True)
    utorak_time = Column(String, nullable=True)
    srijeda = Column(String, nullable=True)
    srijeda_time = Column(String, nullable=True)
    cetvrtak = Column(String, nullable=True)
    cetvrtak_time = Column(String, nullable=True)
    petak = Column(String, nullable=True)
    petak_time = Column(String, nullable=True)
    subota = Column(String, nullable=True)
    subota_time = Column(String, nullable=True)


def row_to_dict(row: Base) -> dict:
    return {column.name: getattr(row, column.name) for column in row.__table__.columns}
