from sqlalchemy import Column, String, LargeBinary, DateTime
from sqlalchemy.sql import func
from filmly.database import Base


class KeyValueBlob(Base):
    """
    Durable key/value blob storage
    One row per key; the value is opaque bytes owned by the caller
    """
    __tablename__ = "key_value_blobs"

    key = Column(String(255), primary_key=True)
    value = Column(LargeBinary, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<KeyValueBlob(key={self.key}, size={len(self.value or b'')})>"
