"""
Run the opportunity API locally.

Usage:
    python serve.py
    BIDFINDER_PORT=9000 python serve.py
"""

import os

import uvicorn

from bidfinder.api.server import app

if __name__ == "__main__":
    uvicorn.run(app, host=os.getenv("BIDFINDER_HOST", "0.0.0.0"), port=int(os.getenv("BIDFINDER_PORT", "8000")))
