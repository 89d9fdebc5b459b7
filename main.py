"""
ASGI entrypoint for deployments (e.g. Render).

The FastAPI app lives in `backend/listing_api/`. When the project is not
pip-installed, `backend/` is put on `PYTHONPATH` so `import listing_api` resolves.

  uvicorn main:app --host 0.0.0.0 --port $PORT
"""

from __future__ import annotations

import sys
from pathlib import Path


_ROOT = Path(__file__).resolve().parent
_BACKEND_DIR = _ROOT / "backend"

if str(_BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(_BACKEND_DIR))

from listing_api.config import port  # noqa: E402
from listing_api.main import create_app  # noqa: E402

app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=port())
