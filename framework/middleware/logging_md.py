import uuid
import time
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from framework.logging.logger import get_logger

logger = get_logger("http")


class LoggingMiddleware(BaseHTTPMiddleware):
    """Assign a trace id to each request and log its lifecycle."""

    async def dispatch(self, request: Request, call_next):
        trace_id = request.headers.get("X-Trace-ID") or uuid.uuid4().hex
        request.state.trace_id = trace_id

        # Every record emitted while handling the request carries this id
        with logger.contextualize(trace_id=trace_id):
            start_time = time.perf_counter()

            logger.info(
                f"Request Started | Method: {request.method} | Path: {request.url.path} | "
                f"Client: {request.client.host if request.client else 'unknown'}"
            )

            try:
                response = await call_next(request)
            except Exception as e:
                process_time = (time.perf_counter() - start_time) * 1000
                logger.error(
                    f"Request Failed | Error: {type(e).__name__} | Duration: {process_time:.2f}ms"
                )
                raise

            process_time = (time.perf_counter() - start_time) * 1000
            logger.info(
                f"Request Finished | Status: {response.status_code} | "
                f"Duration: {process_time:.2f}ms"
            )
            response.headers["X-Trace-ID"] = trace_id
            return response
