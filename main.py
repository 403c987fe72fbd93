"""
Root entrypoint. Run with:
    uvicorn main:app --reload
    or:  python main.py
"""

from sigo.core.config import settings
from sigo.main import app  # noqa: F401

if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=settings.PORT, reload=True)
