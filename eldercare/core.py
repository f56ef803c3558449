import os
import asyncio
from prometheus_client import Counter, start_http_server
import logging

logger = logging.getLogger(__name__)

METRICS_PORT = int(os.getenv('METRICS_PORT', '8001'))

MESSAGES_SENT = Counter('eldercare_messages_sent_total', 'Messages persisted')
MESSAGES_MARKED_READ = Counter(
    'eldercare_messages_marked_read_total',
    'Messages flipped from unread to read',
    ['trigger'],
)
ALERTS_CREATED = Counter('eldercare_emergency_alerts_created_total', 'Emergency alerts created')

def init_metrics(port: int = METRICS_PORT):
    """Initialize Prometheus metrics server"""
    try:
        start_http_server(port)
        logger.info(f"Prometheus metrics server started on port {port}")
    except Exception as e:
        logger.warning(f'Prometheus start failed: {e}')

async def db_startup():
    """Create tables, retrying while the database comes up"""
    from .models import engine, Base

    max_retries = 3
    retry_delay = 3  # seconds

    for attempt in range(max_retries):
        try:
            logger.info(f"Attempting to initialise database schema (attempt {attempt + 1}/{max_retries})")
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            logger.info("Database schema ready")
            return
        except Exception as e:
            logger.warning(f'Database startup attempt {attempt + 1} failed: {e}')
            if attempt < max_retries - 1:
                logger.info(f"Retrying database connection in {retry_delay} seconds...")
                await asyncio.sleep(retry_delay)
            else:
                logger.error("Failed to initialise database after all retries")
                raise

async def shutdown_connections():
    """Dispose of the connection pool"""
    from .models import engine

    logger.info("Shutting down connections...")
    try:
        await engine.dispose()
        logger.info("Database engine disposed")
    except Exception as e:
        logger.error(f"Error disposing database engine: {e}")
