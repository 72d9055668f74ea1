from src.middleware.product_context import ProductContextMiddleware, get_product
from src.middleware.request_logging import RequestLoggingMiddleware

__all__ = ["ProductContextMiddleware", "RequestLoggingMiddleware", "get_product"]
