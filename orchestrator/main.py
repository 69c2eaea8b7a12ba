# Run from project root: uvicorn orchestrator.main:app --reload --port 9000

import logging

import uvicorn
from fastapi import FastAPI

from orchestrator.api.routes import router
from orchestrator.core.config import PORT

logging.basicConfig(level=logging.INFO)


app = FastAPI(title="Agent Orchestrator")
app.include_router(router)


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=PORT)
