# Role: FastAPI app bootstrap. Loads environment config early, registers routers, and exposes health/docs endpoints.

from fastapi import FastAPI

import alumni_bot.config
alumni_bot.config.load_env()

from alumni_bot.utils.logger import configure
configure(alumni_bot.config.LOG_LEVEL)

from alumni_bot.api.chat import router as chat_router
from alumni_bot.api.state import router as state_router

app = FastAPI(title="JY Alumni Bot API", version="0.1.0")
app.include_router(chat_router)
app.include_router(state_router)


@app.get("/")
def root() -> dict:
    # Role: quick discoverability for clients (where are docs/health).
    return {
        "message": "JY Alumni Bot API is running",
        "docs": "/docs",
        "health": "/health",
    }


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}
