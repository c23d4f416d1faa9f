# marketplace/main.py
import uvicorn

from marketplace.api import create_app
from marketplace.data import models  # noqa: F401  rejestruje wszystkie tabele w Base.metadata
from marketplace.data.database import Base, engine
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)

logger.info(f"Initializing database, tables: {list(Base.metadata.tables.keys())}")

try:
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created")
except Exception as e:
    logger.error(f"Failed to create tables: {e}")
    raise


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
