# api/run.py
# Launcher for the FastAPI app.
# - Prints a banner on start
# - Imports api.main:app and starts Uvicorn on HOST:PORT from Settings
# - If import/start fails, prints the full traceback and exits non-zero,
#   so `docker compose logs -f api` always shows the reason.

import os
import sys
import traceback


def main():
    print("============================================================")
    print("Starting Clipbook Dialer backend (api.run)")
    print("CWD       :", os.getcwd())
    print("============================================================", flush=True)

    try:
        # Import here so we can catch any import-time errors
        from api.main import app  # noqa: F401
        from clipbook.config import settings

        import uvicorn
        print(f"Uvicorn serving on http://{settings.HOST}:{settings.PORT}", flush=True)
        uvicorn.run("api.main:app", host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())
    except Exception:
        print("api.run: FAILED to start the server", flush=True)
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
