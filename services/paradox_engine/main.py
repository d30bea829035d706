from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import Depends, FastAPI, HTTPException, Request

from paradox_core import InvalidParadoxInput, ScoringError, content_sha256, sigprint20

from .config import EngineSettings, get_settings
from .engine import ParadoxEngine
from .schemas import (
    BatchResolveReq,
    IntegrityHashReq,
    IntegrityHashResp,
    MemoryQueryReq,
    MemoryQueryResp,
    ParadoxRunReq,
    ParadoxRunResp,
)

logger = logging.getLogger(__name__)


def _excerpt(text: str, size: int = 50) -> str:
    return text if len(text) <= size else text[:size] + "..."


def get_engine(request: Request) -> ParadoxEngine:
    return request.app.state.engine


def create_app(engine: Optional[ParadoxEngine] = None, settings: Optional[EngineSettings] = None) -> FastAPI:
    """
    Builds the service around one ParadoxEngine. The engine lives on
    ``app.state`` and reaches handlers through the ``get_engine`` dependency.
    """
    settings = settings or get_settings()
    engine = engine or ParadoxEngine.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.engine.startup()
        yield
        app.state.engine.shutdown()

    app = FastAPI(
        title="Paradox Synthesis Engine",
        description="Deterministic paradox scoring with a similarity-searched memory bank.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.engine = engine
    app.state.settings = settings

    @app.get("/healthz")
    def health():
        return {"status": "ok"}

    @app.post("/paradox/run", response_model=ParadoxRunResp)
    def paradox_run(req: ParadoxRunReq, engine: ParadoxEngine = Depends(get_engine)):
        logger.info(
            f"Paradox synthesis initiated: session {req.session_id}, "
            f"T1 {_excerpt(req.thesis)!r}, emotion {req.emotion is not None}, post {req.post is not None}"
        )
        try:
            return engine.run(req.to_input(), strategy=req.strategy)
        except InvalidParadoxInput as e:
            raise HTTPException(status_code=400, detail=str(e))
        except ScoringError as e:
            logger.exception(
                f"Paradox synthesis failed at stage {e.stage}: session {req.session_id}, "
                f"thesis {_excerpt(req.thesis)!r}, antithesis {_excerpt(req.antithesis)!r}"
            )
            raise HTTPException(status_code=500, detail=f"Paradox synthesis failed: {e}")
        except Exception as e:
            logger.exception(
                f"Paradox synthesis failed: session {req.session_id}, thesis {_excerpt(req.thesis)!r}"
            )
            raise HTTPException(status_code=500, detail=f"Paradox synthesis failed: {e}")

    @app.get("/paradox/engine")
    def paradox_engine_state(engine: ParadoxEngine = Depends(get_engine)):
        return engine.state()

    @app.post("/paradox/batch")
    def paradox_batch(req: BatchResolveReq, engine: ParadoxEngine = Depends(get_engine)):
        return engine.resolve_batch(req.paradox_ids, strategy=req.strategy, session_id=req.session_id)

    @app.post("/paradox/archive")
    def paradox_archive(engine: ParadoxEngine = Depends(get_engine)):
        return engine.archive_resolved()

    @app.post("/memory/query", response_model=MemoryQueryResp)
    def memory_query(req: MemoryQueryReq, engine: ParadoxEngine = Depends(get_engine)):
        return engine.query_memory(req.query_type, thesis=req.thesis, antithesis=req.antithesis, limit=req.limit)

    @app.post("/integrity/hash", response_model=IntegrityHashResp)
    def integrity_hash(req: IntegrityHashReq):
        logger.info(f"Integrity hash requested for content length {len(req.content)}")
        return IntegrityHashResp(
            sigprint20=sigprint20(req.TT, req.CC, req.SS, req.PP, req.RR),
            content_sha256=content_sha256(req.content),
        )

    return app


def main():
    settings = get_settings()
    logging.basicConfig(
        format="%(asctime)s - %(levelname)s - %(name)s -   %(message)s",
        datefmt="%m/%d/%Y %H:%M:%S",
        level=getattr(logging, settings.log_level, logging.INFO),
    )
    uvicorn.run(create_app(settings=settings), host="0.0.0.0", port=settings.server_port)


if __name__ == "__main__":
    main()
