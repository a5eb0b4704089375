"""
HTTP request logging middleware.
"""
import time
from typing import Callable
from uuid import uuid4

from fastapi import Request, Response
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

REQUEST_ID_HEADER = "X-Request-ID"


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware для логирования HTTP запросов.

    Каждому запросу присваивается request_id: он попадает во все записи лога,
    сделанные во время обработки, и возвращается в заголовке X-Request-ID.
    Тело запроса не логируется (в нём эмбеддинги).
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
        client_host = request.client.host if request.client else "unknown"
        access_log = logger.bind(access=True, request_id=request_id)

        access_log.info(f"→ {request.method} {request.url.path} from {client_host}")

        with logger.contextualize(request_id=request_id):
            try:
                response = await call_next(request)
            except Exception as e:
                duration = time.perf_counter() - start_time
                access_log.error(
                    f"✗ {request.method} {request.url.path} - {type(e).__name__} - {duration:.3f}s"
                )
                raise

        duration = time.perf_counter() - start_time
        log_func = access_log.info if response.status_code < 400 else access_log.warning
        log_func(f"← {request.method} {request.url.path} - {response.status_code} - {duration:.3f}s")

        response.headers["X-Process-Time"] = f"{duration:.3f}"
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
