"""FastAPI server exposing the remote power listener to a UI."""

from __future__ import annotations

import html
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, Field

from power_controller.controller import RemoteShutdownServer
from power_controller.errors import BindError, ConfigurationLockedError

server = RemoteShutdownServer.from_settings()

app = FastAPI(title="Remote Shutdown API", version="0.1.0")

# Control panels served from another origin (dev server, desktop webview)
_origins = ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


class ConfigureRequest(BaseModel):
    port: int = Field(ge=0, le=65535)
    machine_identifier: str = Field(min_length=1, max_length=128)


@app.get("/status")
def status():
    return server.status()


@app.post("/server/start")
def start_server():
    try:
        started = server.start()
    except BindError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return {"status": "ok", "started": started, "bound_port": server.bound_port()}


@app.post("/server/stop")
def stop_server():
    return {"status": "ok", "stopped": server.stop()}


@app.get("/config")
def get_config():
    return server.current_config().to_dict()


@app.post("/config")
def configure(req: ConfigureRequest):
    try:
        config = server.configure(req.port, req.machine_identifier)
    except ConfigurationLockedError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return config.to_dict()


@app.get("/logs")
def list_logs(limit: Optional[int] = None):
    return {"items": [entry.to_dict() for entry in server.logs(limit)]}


@app.post("/logs/clear")
def clear_logs():
    server.clear_logs()
    return {"status": "ok"}


@app.post("/actions/cancel")
def cancel_actions():
    return {"status": "ok", "cancelled": server.cancel_pending_actions()}


@app.get("/", response_class=HTMLResponse)
def root():
    state = "Running" if server.is_running() else "Stopped"
    config = server.current_config()
    rows = "".join(
        f"<li>[{entry.severity.value}] {html.escape(entry.message)}</li>"
        for entry in server.logs(20)
    )
    return (
        "<html><body><h1>Remote Shutdown</h1>"
        f"<p>Status: {state} | UDP port {config.port} | "
        f"machine ID {html.escape(config.machine_identifier)}</p>"
        f"<ul>{rows}</ul></body></html>"
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("api.server:app", host="127.0.0.1", port=8000, reload=False)
