from sqlalchemy import Column, String, Text
from models.base import Base

VERSION_MARKER_KEY = "TextVersion"


class ConfigEntry(Base):
    """
    Key/value settings persisted in the store.

    Purpose:
    - Hold the version marker (id = "TextVersion") naming the last
      dataset version applied

    Design:
    - One row per key, written only by the ingestion runner
    """
    __tablename__ = "config"

    id = Column(String(100), primary_key=True)
    value = Column(Text, nullable=True)
