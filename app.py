from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from wellengine.utils.logger import setup_logger
from wellengine.api.engine import router as engine_router

logger = setup_logger()

app = FastAPI(title="Well Health & Field-Route Engine", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(engine_router)


@app.get("/health")
def health_check():
    """Health check for the engine service"""
    return {"status": "active", "service": "Well Engine"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8300)
