"""Command-line entry point for the Document Analysis Hub.

RUN_MODE selects how the API and the NiceGUI page are served:

- ``integrated`` (default): one uvicorn process on HOST:PORT serves the
  API routes and mounts the page at ``/``.
- ``separate``: the API runs on HOST:PORT and the page on UI_PORT, each in
  its own child process. The page reaches the API through API_BASE_URL.

Environment variables are loaded from a .env file before anything else.
"""

import asyncio
import logging
import os
import subprocess
import sys

from dotenv import load_dotenv

load_dotenv()

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def _host() -> str:
    return os.getenv("HOST", "0.0.0.0")


def _port(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


def _api_base_url(port: int) -> str:
    """UI-side address of the API, defaulting to the local API port."""
    return os.getenv("API_BASE_URL") or f"http://localhost:{port}"


def run_integrated(host: str, port: int) -> None:
    """Serve the API and the page from a single uvicorn process."""
    import uvicorn
    from nicegui import ui

    # The page's HTTP client reads this at import time.
    os.environ["API_BASE_URL"] = _api_base_url(port)

    from analysis_hub.api.app import create_app
    from analysis_hub.ui.analysis_page import analysis_page  # noqa: F401 - registers "/"

    app = create_app()
    ui.run_with(
        app,
        title="Document Analysis Hub",
        favicon="📄",
        storage_secret=os.getenv("NICEGUI_STORAGE_SECRET", "analysis-hub-secret"),
    )

    logger.info(f"Serving API and UI on http://{host}:{port} (docs at /docs)")
    uvicorn.run(app, host=host, port=port, log_level=os.getenv("LOG_LEVEL", "info").lower())


def _spawn_api(host: str, port: int) -> subprocess.Popen:
    return subprocess.Popen(
        [
            sys.executable,
            "-m",
            "uvicorn",
            "analysis_hub.api.app:app",
            "--host",
            host,
            "--port",
            str(port),
        ]
    )


def _spawn_ui(ui_port: int, api_base_url: str) -> subprocess.Popen:
    env = {**os.environ, "UI_PORT": str(ui_port), "API_BASE_URL": api_base_url}
    return subprocess.Popen([sys.executable, "-m", "analysis_hub.ui.analysis_page"], env=env)


async def _wait_for_first_exit(processes: list[subprocess.Popen]) -> None:
    while all(process.poll() is None for process in processes):
        await asyncio.sleep(1)
    for process in processes:
        if process.returncode is not None:
            logger.warning(f"Process {process.args[:3]} exited with code {process.returncode}")


def run_separate(host: str, port: int, ui_port: int) -> None:
    """Run the API and the page as two child processes.

    Both are stopped when either exits or on Ctrl+C.
    """
    api_base_url = _api_base_url(port)
    logger.info(f"Starting API on http://{host}:{port}")
    logger.info(f"Starting UI on http://{host}:{ui_port} (API at {api_base_url})")

    processes = [_spawn_api(host, port), _spawn_ui(ui_port, api_base_url)]
    try:
        asyncio.run(_wait_for_first_exit(processes))
    except KeyboardInterrupt:
        logger.info("Shutting down servers...")
    finally:
        for process in processes:
            process.terminate()
        for process in processes:
            process.wait()


def main() -> None:
    """Start the hub in the mode named by RUN_MODE."""
    configure_logging()
    mode = os.getenv("RUN_MODE", "integrated").strip().lower()
    host = _host()
    port = _port("PORT", 8000)

    logger.info(f"Starting Document Analysis Hub in {mode} mode")
    if mode == "separate":
        run_separate(host, port, _port("UI_PORT", 8080))
    elif mode == "integrated":
        run_integrated(host, port)
    else:
        raise SystemExit(f"Unknown RUN_MODE {mode!r}; use 'integrated' or 'separate'")


if __name__ == "__main__":
    main()
