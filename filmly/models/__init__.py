"""
Import all models to ensure they are registered with SQLAlchemy
"""
from filmly.models.blob import KeyValueBlob

__all__ = [
    "KeyValueBlob",
]
