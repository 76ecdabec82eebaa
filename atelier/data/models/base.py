# atelier/data/models/base.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def id_column():
    return Column(String(36), primary_key=True, default=new_id)


def created_at_column():
    return Column(DateTime(timezone=True), nullable=False, default=utcnow)


def updated_at_column():
    return Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
