from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse, Response
from starlette.requests import Request
import json


class TransformResponseMiddleware(BaseHTTPMiddleware):
    """
    Wrap every JSON response in the envelope {success, statusCode, message, data}.
    Bodies that already carry success/message keep them and gain statusCode.
    """

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        # Skip transformation for FastAPI internal endpoints
        skip_paths = ["/openapi.json", "/docs", "/redoc"]
        if any(request.url.path.startswith(path) for path in skip_paths):
            return response

        # Skip non-JSON responses (check content-type header)
        content_type = response.headers.get("content-type", "")
        if not content_type.startswith("application/json"):
            return response

        response_body = b""
        async for chunk in response.body_iterator:
            response_body += chunk

        try:
            body = json.loads(response_body.decode())
        except ValueError:
            # If we can't parse as JSON, return original response
            return Response(
                content=response_body,
                status_code=response.status_code,
                headers=dict(response.headers),
                media_type=response.media_type,
            )

        success = 200 <= response.status_code < 300

        # Already shaped by an endpoint or an exception handler
        if isinstance(body, dict) and "success" in body and "message" in body:
            body.setdefault("statusCode", response.status_code)
            return JSONResponse(content=body, status_code=response.status_code)

        transformed = {
            "success": success,
            "statusCode": response.status_code,
            "message": "OK" if success else "Error",
            "data": body,
        }
        return JSONResponse(content=transformed, status_code=response.status_code)
