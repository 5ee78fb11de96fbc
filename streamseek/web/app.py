"""FastAPI app exposing the torrent resolver to stream-resolution clients."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import Body, FastAPI, HTTPException, Query
from pydantic import BaseModel

from ..core.event_bus import Events
from ..models.search_request import MediaKind
from .runtime import StreamSeekRuntime, build_runtime


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class SettingsUpdateRequest(BaseModel):
    values: Dict[str, Any] = {}


def create_app(runtime: Optional[StreamSeekRuntime] = None) -> FastAPI:
    runtime = runtime or build_runtime()

    app = FastAPI(title="StreamSeek API", version="1.0.0")

    @app.get("/health")
    def health() -> Dict:
        return {
            "ok": True,
            "time": _utc_now_iso(),
            "sources": runtime.aggregator.get_source_health_snapshot(),
        }

    @app.get("/api/torrents")
    def torrents(
        id: str = Query(""),
        title: str = Query(""),
        type: str = Query("movie"),
        year: Optional[str] = Query(None),
        season: Optional[str] = Query(None),
        episode: Optional[str] = Query(None),
    ) -> Dict:
        if MediaKind.parse(type) is None:
            raise HTTPException(status_code=400, detail="type must be movie, series or tv")
        # Numbers arrive as text so malformed ones reach SearchRequest.create.
        # Malformed lookups and lookups with no hits look the same to clients: an empty list.
        streams = runtime.aggregator.resolve_streams(
            id,
            title,
            type,
            year=year,
            season=season,
            episode=episode,
        )
        return {"streams": streams, "count": len(streams)}

    @app.get("/api/settings")
    def get_settings() -> Dict:
        return runtime.settings.get_all()

    @app.post("/api/settings")
    def update_settings(body: SettingsUpdateRequest = Body(...)) -> Dict:
        runtime.settings.update(body.values)
        runtime.aggregator.reload_from_settings()
        runtime.event_bus.emit(Events.SETTINGS_CHANGED, {"keys": sorted(body.values.keys())})
        return {"ok": True}

    return app


app = create_app()
