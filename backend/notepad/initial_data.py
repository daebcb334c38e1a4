import logging

from notepad import crud
from notepad.core.config import settings
from notepad.db.base import Base
from notepad.db.session import SessionLocal, engine

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

def init() -> None:
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        if crud.admin.get(db):
            logger.info("Admin account already exists")
            return
        if not settings.ADMIN_USERNAME or not settings.ADMIN_PASSWORD:
            logger.info("ADMIN_USERNAME/ADMIN_PASSWORD not set, leaving setup to /api/setup")
            return
        crud.admin.create(db, username=settings.ADMIN_USERNAME, password=settings.ADMIN_PASSWORD)
        logger.info("Admin account created")
    finally:
        db.close()

if __name__ == "__main__":
    logger.info("Creating initial data")
    init()
    logger.info("Initial data created")
