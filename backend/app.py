import sys
import pathlib

# Ensure the project root (parent of backend/) is on sys.path so that
# ``import dxfbuilder`` resolves without an install.
_project_root = str(pathlib.Path(__file__).parent.parent)
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend import config
from backend.routers import dxf

app = FastAPI(
    title="dxfbuilder API",
    description="Backend API for exporting OpenStreetMap areas as 2.5D DXF drawings",
    version="0.1.0",
)

# ---------------------------------------------------------------------------
# CORS -- allow the map UI dev server
# ---------------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
app.include_router(dxf.router)


@app.get("/")
async def root():
    return {"status": "ok", "service": config.SERVICE_NAME}
