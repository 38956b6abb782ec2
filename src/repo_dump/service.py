"""FastAPI application exposing repository analysis over HTTP."""

from __future__ import annotations

import asyncio
import time
from functools import partial
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from pydantic import ValidationError

from repo_dump import __version__
from repo_dump.analyzer import AnalysisResult, AnalyzeRequest, analyze_remote
from repo_dump.config import OutputFormat
from repo_dump.exceptions import GitCommandError, MissingCredentialError, RepositoryAccessError, WorkspaceError
from repo_dump.logging import logger
from repo_dump.settings import Settings, load_settings

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    Analyzer = Callable[[AnalyzeRequest, Settings], AnalysisResult]


def create_app(
    settings: Settings | None = None,
    analyzer: Analyzer = analyze_remote,
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        settings: runtime configuration; loaded from the environment when omitted.
        analyzer: callable doing the clone + analysis of one request.

    Returns:
        FastAPI: the application with `/health` and `/analyze`.
    """
    app_settings = settings if settings is not None else load_settings()
    app = FastAPI(title="repo_dump", version=__version__)

    @app.middleware("http")
    async def log_requests(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        start = time.perf_counter()
        client = request.client.host if request.client else ""
        logger.info("request_received", method=request.method, path=request.url.path, client=client)
        response = await call_next(request)
        logger.info(
            "request_completed",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        return response

    @app.get("/health")
    async def health() -> JSONResponse:
        return JSONResponse({"status": "healthy"})

    @app.post("/analyze")
    async def analyze(request: Request, format: str = "markdown") -> Response:  # noqa: A002
        try:
            payload = AnalyzeRequest.model_validate_json(await request.body())
        except ValidationError as e:
            logger.warning("invalid_request_body", error=str(e))
            return PlainTextResponse(f"Invalid request body: {e}", status_code=400)

        if not payload.repo_url.strip():
            logger.warning("missing_repository_url")
            return PlainTextResponse("Repository URL is required", status_code=400)

        fmt = OutputFormat.parse(format)
        logger.info("requested_format", format=str(fmt))

        loop = asyncio.get_running_loop()
        try:
            result = await loop.run_in_executor(None, partial(analyzer, payload, app_settings))
        except (GitCommandError, MissingCredentialError) as e:
            logger.error("clone_failed", repo_url=payload.repo_url, error=str(e))
            return PlainTextResponse(f"Failed to clone repository: {e}", status_code=500)
        except WorkspaceError as e:
            logger.error("workspace_failed", repo_url=payload.repo_url, error=str(e))
            return PlainTextResponse(f"Failed to prepare workspace: {e}", status_code=500)
        except RepositoryAccessError as e:
            logger.error("analysis_failed", repo_url=payload.repo_url, error=str(e))
            return PlainTextResponse(f"Failed to analyze repository: {e}", status_code=500)

        body = result.report.render(fmt)
        headers: dict[str, str] = {}
        if fmt is not OutputFormat.JSON:
            filename = f"{result.repo_name}-analysis.{fmt.extension}"
            headers["Content-Disposition"] = f"attachment; filename={filename}"
        logger.info("response_sent", files=len(result.report.contents))
        return Response(content=body, media_type=fmt.media_type, headers=headers)

    return app
