"""
Database models for the snapshot service.
Station and weather payloads are stored as opaque JSON; a link row ties one of each to a timestamp.
"""
import uuid

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()

JSONPayload = JSON().with_variant(JSONB(), "postgresql")


class StationSnapshotRecord(Base):
    """One capture of the Indego station feed."""
    __tablename__ = "indego_snapshots"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    timestamp = Column(DateTime(timezone=True), nullable=False)
    data = Column(JSONPayload, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<StationSnapshotRecord(id={self.id}, timestamp={self.timestamp})>"


class WeatherSnapshotRecord(Base):
    """One capture of the weather feed."""
    __tablename__ = "weather_snapshots"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    timestamp = Column(DateTime(timezone=True), nullable=False)
    data = Column(JSONPayload, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<WeatherSnapshotRecord(id={self.id}, timestamp={self.timestamp})>"


class SnapshotLink(Base):
    """Associates a station snapshot and a weather snapshot captured together."""
    __tablename__ = "snapshots"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    timestamp = Column(DateTime(timezone=True), nullable=False, index=True)
    indego_snapshot_id = Column(Uuid, ForeignKey("indego_snapshots.id"), nullable=False)
    weather_snapshot_id = Column(Uuid, ForeignKey("weather_snapshots.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return (
            f"<SnapshotLink(id={self.id}, timestamp={self.timestamp}, "
            f"indego={self.indego_snapshot_id}, weather={self.weather_snapshot_id})>"
        )
