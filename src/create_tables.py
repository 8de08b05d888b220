# create_tables.py
import logging

from database import engine, Base
# Import every model so it registers with Base
from modules.contracts.models.contract import Contract
from modules.contracts.models.signature import Signature
from modules.notifications.models.email_log import EmailLog

logger = logging.getLogger(__name__)


def create_tables():
    """Creates every table in the database"""
    logger.info("Tables to create: %s", list(Base.metadata.tables.keys()))
    Base.metadata.create_all(bind=engine)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    create_tables()
