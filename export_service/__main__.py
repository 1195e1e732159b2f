"""
Run the export service: ``python -m export_service``.

Host and port come from EXPORT_SERVICE_HOST / EXPORT_SERVICE_PORT.
"""

import os

import uvicorn

from export_service.app import app

if __name__ == "__main__":
    uvicorn.run(
        app,
        host=os.getenv("EXPORT_SERVICE_HOST", "0.0.0.0"),
        port=int(os.getenv("EXPORT_SERVICE_PORT", "8001")),
    )
