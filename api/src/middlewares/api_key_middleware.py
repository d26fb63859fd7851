from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware


class APIKeyMiddleware(BaseHTTPMiddleware):
    """
    Middleware to authenticate requests using the service API key.

    Checks for API key in X-API-Key or Authorization headers.
    Returns 401 Unauthorized if API key is missing or invalid.
    """

    def __init__(self, app, api_key: str, public_paths=("/api/v1/health", "/")):
        super().__init__(app)
        self.api_key = api_key
        self.public_paths = set(public_paths)

    async def dispatch(self, request: Request, call_next):
        if request.url.path in self.public_paths:
            return await call_next(request)

        # Check for API key in headers
        api_key = request.headers.get("X-API-Key") or request.headers.get("Authorization")

        if not api_key or api_key != self.api_key:
            return JSONResponse(
                content={
                    "success": False,
                    "statusCode": 401,
                    "message": "Valid API key required. Include 'X-API-Key' header with your request.",
                    "error": "Unauthorized",
                },
                status_code=401
            )

        return await call_next(request)
