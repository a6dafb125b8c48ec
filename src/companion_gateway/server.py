from __future__ import annotations

import os
from contextlib import asynccontextmanager

import structlog

from .config import GatewayConfig
from .errors import ProviderError
from .http_security import install_middlewares
from .logging import configure_logging
from .metrics import maybe_start_metrics, server_errors_total
from .responses import JSONResponseSink, respond_with_error

log = structlog.get_logger()


def install_error_handlers(app, *, cfg: GatewayConfig) -> None:
    from fastapi.responses import JSONResponse

    @app.exception_handler(ProviderError)
    async def _provider_error_handler(_request, exc: ProviderError):
        kind = getattr(exc, "kind", None)
        kind_label = kind.value if kind is not None else "unknown"
        sink = JSONResponseSink()
        if respond_with_error(exc, sink):
            status_code = sink.response.status_code
            server_errors_total.labels(kind=kind_label, status=str(status_code)).inc()
            log.info("provider_error_mapped", kind=kind_label, status_code=status_code, error=str(exc))
            return sink.response

        log.error("provider_error_unhandled", kind=kind_label, error=str(exc))
        server_errors_total.labels(kind=kind_label, status="500").inc()
        return JSONResponse(status_code=500, content={"message": cfg.unhandled_error_message})


def create_app(cfg: GatewayConfig | None = None):
    try:
        from fastapi import FastAPI
    except ImportError as e:  # pragma: no cover
        raise RuntimeError('Install the "server" extra: pip install -e ".[server]"') from e

    cfg = cfg or GatewayConfig()
    configure_logging(level=cfg.log_level, fmt=cfg.log_format, secrets=cfg.redact_values)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        maybe_start_metrics(enable=cfg.enable_metrics, bind=cfg.metrics_bind, port=cfg.metrics_port)
        yield

    app = FastAPI(
        title="companion-gateway",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs" if cfg.enable_api_docs else None,
        redoc_url="/redoc" if cfg.enable_api_docs else None,
        openapi_url="/openapi.json" if cfg.enable_api_docs else None,
    )
    install_middlewares(app)
    install_error_handlers(app, cfg=cfg)

    @app.get("/healthz")
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    return app


app = create_app()


def main() -> None:  # pragma: no cover
    try:
        import uvicorn
    except ImportError as e:
        raise RuntimeError('Install the "server" extra: pip install -e ".[server]"') from e

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))
    uvicorn.run("companion_gateway.server:app", host=host, port=port)


if __name__ == "__main__":  # pragma: no cover
    main()
