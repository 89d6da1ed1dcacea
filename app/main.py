"""
ASGI entry point for the Finance Tracker API.

Run with:
    uvicorn app.main:app --reload

The upstream auth proxy must set the caller's user id in the header named
by AUTH_USER_HEADER (X-User-Id by default). Payments are stored under
STORAGE_DATA_DIR (data/users by default), one JSON file per user.
"""

import os

import uvicorn

from finance_tracker.api import create_app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "app.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", 8000)),
        reload=False,
    )
