import logging
import time
import traceback

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger(__name__)

class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs every request with its status and latency"""

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()

        try:
            response = await call_next(request)
            process_time = (time.time() - start_time) * 1000

            icon = "✅" if response.status_code < 400 else "⚠️ "
            logger.info(
                f"{icon} {request.method} {request.url.path} - "
                f"{response.status_code} in {process_time:.2f}ms"
            )

            return response

        except Exception as e:
            process_time = (time.time() - start_time) * 1000
            tb_str = traceback.format_exc()

            logger.error(
                f"❌ {request.method} {request.url.path} - "
                f"Error: {e} - Took {process_time:.2f}ms\n"
                f"Traceback:\n{tb_str}"
            )

            # FastAPI turns it into a 500
            raise
