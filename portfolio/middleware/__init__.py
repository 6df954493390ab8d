"""HTTP middleware. Applied in main; first added is outermost."""

from portfolio.middleware.request_id import RequestIDMiddleware

__all__ = ["RequestIDMiddleware"]
