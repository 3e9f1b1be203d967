import logging

from sqlalchemy.engine import Engine
from tenacity import retry, stop_after_attempt, wait_fixed

from database.models import Base

logger = logging.getLogger(__name__)


# The database container may still be starting when the service boots
@retry(stop=stop_after_attempt(5), wait=wait_fixed(2), reraise=True)
def init_db(bind: Engine) -> None:
    """Create all tables that do not exist yet."""
    logger.info("Initializing database...")
    try:
        Base.metadata.create_all(bind=bind)
        logger.info(f"Tables created or verified ({bind.url.render_as_string(hide_password=True)})")
    except Exception as e:
        logger.error(f"Error initializing DB: {e}")
        raise
