from apscheduler.schedulers.asyncio import AsyncIOScheduler
import logging
from fastapi import FastAPI
from contextlib import asynccontextmanager

from hideseek.config import log_level, superseded_round_ttl_hours
from hideseek.db import init_db
from hideseek.routers import rounds
from hideseek.routers.rounds import round_service

scheduler = AsyncIOScheduler()
logging.basicConfig(level=log_level)


@asynccontextmanager
async def lifespan(app):
    """Create missing tables and schedule the cleanup of superseded rounds.
    This function is called to start the server.
    """
    await init_db()

    # Rounds replaced by a newer round of the same room are kept for a while, then deleted
    scheduler.add_job(
        round_service.delete_superseded_rounds,
        "interval",
        hours=24,
        args=[superseded_round_ttl_hours],
    )
    scheduler.start()
    try:
        yield
    finally:
        scheduler.shutdown()
        logging.info("Stop Server")


app = FastAPI(lifespan=lifespan)
app.include_router(rounds.round_router)


# if __name__ == "__main__":
#     uvicorn.run(app, host="0.0.0.0", port=8080, reload=True)
