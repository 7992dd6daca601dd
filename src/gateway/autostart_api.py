# gateway/autostart_api.py
"""
Runs the MedTools gateway (gateway.api) next to the Streamlit app.

The Streamlit process spawns one uvicorn child on first use and reuses it on
every rerun. A port that answers /health as `medtools-api` counts as ours;
anything else on that port is reported, never replaced.
"""

from __future__ import annotations

import atexit
import contextlib
import os
import subprocess
import sys
import time
from pathlib import Path
from typing import Callable, Optional

import requests
import streamlit as st
from pydantic import BaseModel

from utils.logging_config import get_logger
from utils.supabase_utils import sflag, sget

logger = get_logger(__name__)

SERVICE_NAME = "medtools-api"
SRC_DIR = Path(__file__).resolve().parents[1]


class GatewaySettings(BaseModel):
    enabled: bool = True
    app: str = "gateway.api:app"
    host: str = "127.0.0.1"
    port: int = 7000
    reload: bool = False
    log_dir: Path = Path("logs")

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}"

    @classmethod
    def from_env(cls) -> "GatewaySettings":
        return cls(
            enabled=sflag("MT_API_AUTOSTART", default=True),
            app=sget("MT_API_APP") or cls.model_fields["app"].default,
            host=sget("MT_API_HOST") or cls.model_fields["host"].default,
            port=int(sget("MT_API_PORT") or cls.model_fields["port"].default),
            reload=sflag("MT_API_RELOAD"),
            log_dir=Path(sget("LOG_FILE_DIR") or "logs"),
        )


def running_service(url: str, timeout: float = 0.5) -> Optional[str]:
    """Service name answering GET {url}/health, "" for a foreign server, None when nothing listens."""
    try:
        resp = requests.get(f"{url}/health", timeout=timeout)
    except requests.RequestException:
        return None
    try:
        body = resp.json()
    except ValueError:
        return ""
    return body.get("service", "") if isinstance(body, dict) else ""


def uvicorn_command(settings: GatewaySettings) -> list[str]:
    cmd = [
        sys.executable, "-m", "uvicorn", settings.app,
        "--host", settings.host, "--port", str(settings.port),
        "--workers", "1", "--log-level", "info",
    ]
    if settings.reload:
        cmd += ["--reload", "--reload-dir", str(SRC_DIR)]
    return cmd


def child_env() -> dict[str, str]:
    # uvicorn must import gateway.api from src/ even when the app was not pip-installed
    paths = [str(SRC_DIR), os.getenv("PYTHONPATH")]
    return {**os.environ, "PYTHONPATH": os.pathsep.join(p for p in paths if p)}


def start_gateway(
    settings: GatewaySettings,
    *,
    popen: Callable[..., subprocess.Popen] = subprocess.Popen,
    check: Callable[[str], Optional[str]] = running_service,
    wait: float = 10.0,
) -> dict:
    """Returns {status, url, pid}; status is disabled|already-running|port-in-use|started|failed."""
    if not settings.enabled:
        return {"status": "disabled", "url": None, "pid": None}

    running = check(settings.url)
    if running == SERVICE_NAME:
        return {"status": "already-running", "url": settings.url, "pid": None}
    if running is not None:
        logger.error("port %s is taken by another service (%r)", settings.port, running)
        return {"status": "port-in-use", "url": settings.url, "pid": None}

    settings.log_dir.mkdir(parents=True, exist_ok=True)
    log_path = settings.log_dir / "uvicorn.log"
    cmd = uvicorn_command(settings)
    logger.info("starting gateway: %s (output in %s)", " ".join(cmd), log_path)
    with open(log_path, "a", encoding="utf-8") as log_file:
        proc = popen(cmd, stdout=log_file, stderr=subprocess.STDOUT, close_fds=True, env=child_env())

    def _stop():
        with contextlib.suppress(ProcessLookupError):
            proc.terminate()
    atexit.register(_stop)

    deadline = time.monotonic() + wait
    while time.monotonic() < deadline:
        if check(settings.url) == SERVICE_NAME:
            logger.info("gateway up at %s (pid %s)", settings.url, proc.pid)
            return {"status": "started", "url": settings.url, "pid": proc.pid}
        if proc.poll() is not None:
            break
        time.sleep(0.2)

    logger.error("gateway failed to start on %s (see %s)", settings.url, log_path)
    return {"status": "failed", "url": settings.url, "pid": proc.pid, "log": str(log_path)}


@st.cache_resource(show_spinner=False)
def ensure_fastapi() -> dict:
    """Start the gateway once per Streamlit server process."""
    info = start_gateway(GatewaySettings.from_env())
    if info["status"] in ("failed", "port-in-use"):
        st.error(
            f"MedTools API is not available on {info['url']} ({info['status']}). "
            f"Check {info.get('log', 'logs/uvicorn.log')} and MT_API_APP / MT_API_PORT."
        )
    return info
