"""Product (tenant) context: every /locations request runs against exactly one product partition."""
import logging
import re

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

logger = logging.getLogger(__name__)

PRODUCT_HEADER = "X-Product"
PRODUCT_EXEMPT_PATHS = {"/health", "/metrics", "/favicon.ico", "/docs", "/openapi.json"}
PRODUCT_MAX_LEN = 50
PRODUCT_PATTERN = re.compile(r"^[a-zA-Z0-9_\-.]+$")


def extract_product(request: Request, default_product: str = "") -> str | None:
    product = (request.headers.get(PRODUCT_HEADER) or "").strip()
    if not product:
        product = default_product.strip()
    if not product or len(product) > PRODUCT_MAX_LEN or not PRODUCT_PATTERN.match(product):
        return None
    return product


def get_product(request: Request) -> str:
    """Product resolved by ProductContextMiddleware for this request."""
    return request.state.product


class ProductContextMiddleware(BaseHTTPMiddleware):
    """Resolve the caller's product from X-Product (or the configured default) into request.state.product."""

    def __init__(self, app, default_product: str = ""):
        super().__init__(app)
        self.default_product = default_product

    async def dispatch(self, request: Request, call_next):
        if request.url.path in PRODUCT_EXEMPT_PATHS:
            return await call_next(request)
        product = extract_product(request, self.default_product)
        if product is None:
            logger.warning("telemetry product_missing path=%s", request.url.path)
            return JSONResponse(
                status_code=400,
                content={
                    "detail": f"Missing or invalid product. Provide the {PRODUCT_HEADER} header.",
                    "error": "invalid_argument",
                },
            )
        request.state.product = product
        return await call_next(request)
