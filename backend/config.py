import os

SERVICE_NAME = "dxfbuilder API"

# Comma-separated list of origins allowed to call the API (map UI dev server)
CORS_ORIGINS = [
    o.strip() for o in os.environ.get(
        "DXFBUILDER_CORS_ORIGINS",
        "http://localhost:5173,http://127.0.0.1:5173",
    ).split(",")
    if o.strip()
]

DXF_FILENAME = "export.dxf"
DXF_MEDIA_TYPE = "application/dxf"
