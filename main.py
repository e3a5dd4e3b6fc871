# main.py
import logging
logger = logging.getLogger("uvicorn.error")
from datetime import datetime

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI

load_dotenv()
from config import BASE_PATH, default_db_path
from db.migrate import run_migrations
from api.analytics import router as analytics_router
from api.budget import router as budget_router
from api.reserves import router as reserves_router
from api.transactions import router as transactions_router


app = FastAPI(title="Daily Budget", root_path=BASE_PATH)

app.include_router(budget_router)
app.include_router(analytics_router)
app.include_router(transactions_router)
app.include_router(reserves_router)


@app.on_event("startup")
async def startup():
    db_path = default_db_path()
    try:
        applied = run_migrations(db_path)
        if applied:
            logger.info(f"[MIGRATIONS] Applied: {', '.join(applied)}")
        else:
            logger.info("[MIGRATIONS] No pending migrations")
    except Exception as e:
        logger.exception(f"[MIGRATIONS] Failed to run migrations on {db_path}: {e}")
        raise
    logger.info(f"[INIT] Daily Budget startup complete (db={db_path}).")


@app.get("/api/health")
def health():
    return {"status": "ok", "timestamp": datetime.utcnow().isoformat(timespec="seconds") + "Z"}


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
