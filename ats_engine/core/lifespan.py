import logging
from contextlib import asynccontextmanager

from ats_engine.pipeline import ScoringChannel

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app):
    channel = ScoringChannel()
    app.state.scoring_channel = channel
    logger.info("scoring_channel_ready timeout=%s", channel.timeout)
    try:
        yield
    finally:
        await channel.aclose()
        logger.info("scoring_channel_closed requests=%s worker_starts=%s", channel.requests_sent, channel.worker_starts)
