"""FastAPI application entrypoint for a11ylint service mode."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional, Union

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .. import __version__
from ..engine import ScanEngine, ScanOptions
from ..errors import ConfigurationError
from ..models import ScanReport
from ..report import report_to_dict


class ScanRequest(BaseModel):
    path: str
    tier: str = "full"
    check: Optional[str] = None
    workers: Union[int, str] = "sequential"
    collapse: bool = True
    check_timeout: float = 30.0


class CheckInfo(BaseModel):
    id: str
    content_type: str
    tier: str
    tiers: List[str]
    weight: int
    wcag: str
    description: str


class HealthResponse(BaseModel):
    status: str


def _default_engine() -> ScanEngine:
    return ScanEngine()


def create_app(
    engine_factory: Callable[[], ScanEngine] = _default_engine,
) -> FastAPI:
    """Create the FastAPI application exposing scans as JSON."""

    app = FastAPI(title="a11ylint Service", version=__version__)

    async def get_engine() -> ScanEngine:
        return engine_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.get("/checks", response_model=List[CheckInfo])
    async def list_checks(
        tier: Optional[str] = None,
        engine: ScanEngine = Depends(get_engine),
    ) -> List[CheckInfo]:
        registry = engine.registry
        definitions = registry.tier(tier) if tier else list(registry.values())
        return [
            CheckInfo(
                id=definition.id,
                content_type=definition.content_type.value,
                tier=definition.tier,
                tiers=sorted(definition.tiers),
                weight=definition.weight,
                wcag=definition.wcag,
                description=definition.description,
            )
            for definition in definitions
        ]

    @app.post("/scan")
    async def scan(
        payload: ScanRequest,
        engine: ScanEngine = Depends(get_engine),
    ) -> Dict[str, Any]:
        options = ScanOptions(
            tier=payload.tier,
            check=payload.check,
            workers=payload.workers,
            collapse=payload.collapse,
            check_timeout=payload.check_timeout,
        )

        def _run_scan() -> ScanReport:
            return engine.scan_path(payload.path, options)

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:  # pragma: no cover
            report = _run_scan()
        else:
            report = await loop.run_in_executor(None, _run_scan)
        return report_to_dict(report)

    @app.exception_handler(FileNotFoundError)
    async def file_not_found_handler(_: Any, exc: FileNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(ConfigurationError)
    async def configuration_error_handler(_: Any, exc: ConfigurationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(host: str = "127.0.0.1", port: int = 8000) -> None:  # pragma: no cover - integration path
    import uvicorn

    uvicorn.run(create_app(), host=host, port=port)


__all__ = ["create_app", "run_service"]
