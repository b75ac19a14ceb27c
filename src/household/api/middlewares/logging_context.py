"""Per-request log context: correlation id and the RPC procedure being served."""

import re

from asgi_correlation_id import correlation_id
from fastapi import Request, Response
from starlette.middleware.base import RequestResponseEndpoint

from src.household.core.logging import bind_request_context, clear_request_context

# /<package>.<Service>/<Method>, e.g. /expense.v1.ExpenseService/CreateExpense
_PROCEDURE_PATH = re.compile(r"/([a-z][\w]*(?:\.\w+)+/\w+)")


def procedure_name(path: str) -> str | None:
    """Return the procedure a request path addresses, or None for plain HTTP routes."""
    match = _PROCEDURE_PATH.fullmatch(path)
    return match.group(1) if match else None


async def logging_context_middleware(
    request: Request, call_next: RequestResponseEndpoint
) -> Response:
    clear_request_context()
    bind_request_context(correlation_id.get(), procedure_name(request.url.path))
    try:
        return await call_next(request)
    finally:
        clear_request_context()
