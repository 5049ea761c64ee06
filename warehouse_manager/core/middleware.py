# warehouse_manager/core/middleware.py
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
import time
import uuid
import logging

from warehouse_manager.config.settings import settings

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def setup_middleware(app: FastAPI):
    """CORS for the browser UI and one log line per request"""

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:12]
        start_time = time.time()

        try:
            response = await call_next(request)
        except Exception:
            # Rendered as a 500 by the catch-all handler further out
            logger.error(
                f"[{request_id}] {request.method} {request.url.path} - "
                f"Status: 500 - "
                f"Time: {time.time() - start_time:.4f}s"
            )
            raise

        process_time = time.time() - start_time
        response.headers[REQUEST_ID_HEADER] = request_id

        # Rejected mutations (409/503) are worth seeing at the default level
        level = logging.WARNING if response.status_code >= 400 else logging.INFO
        logger.log(
            level,
            f"[{request_id}] {request.method} {request.url.path} - "
            f"Status: {response.status_code} - "
            f"Time: {process_time:.4f}s"
        )

        return response
