import time
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from rendezvous.core.logger import logger

class LogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(f"Method: {request.method} | Path: {request.url.path} | Unhandled error")
            raise

        process_time = time.time() - start_time

        logger.info(
            f"Method: {request.method} | "
            f"Path: {request.url.path} | "
            f"Status: {response.status_code} | "
            f"Duration: {process_time:.4f}s"
        )

        return response
