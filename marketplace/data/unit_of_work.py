# marketplace/data/unit_of_work.py
from contextlib import contextmanager

from sqlalchemy.orm import Session

from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


@contextmanager
def unit_of_work(db: Session):
    """
    Commits everything written inside the block, or nothing.
    Repositories only add/flush, the commit happens here.
    """
    try:
        yield db
        db.commit()
    except Exception:
        logger.warning("Unit of work failed, rolling back")
        db.rollback()
        raise
