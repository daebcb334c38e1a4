from sqlalchemy import Column, Integer, String, LargeBinary, DateTime
from notepad.db.base_class import Base
from datetime import datetime

class BlobObject(Base):
    __tablename__ = "blob_object"

    key = Column(String(512), primary_key=True, index=True)
    body = Column(LargeBinary, nullable=False)
    size = Column(Integer, nullable=False, default=0)

    # Bumped on every write; conditional writes compare against it
    version = Column(Integer, nullable=False, default=1)

    uploaded_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
