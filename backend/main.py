# backend/main.py
import os

from app.core.lifespan import lifespan
from app.api import api_router
from app.core.middleware import setup_middleware
from fastapi import FastAPI


app = FastAPI(
    title="Document Export API",
    version="1.0.0",
    description="Render extracted real-estate documents into Excel workbooks",
    lifespan=lifespan
)

# Setup middleware
setup_middleware(app)

# Register API routes (/api/export, /api/health, /metrics)
app.include_router(api_router)

# ---------- Run ----------

if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=port,
        log_level="info"
    )
