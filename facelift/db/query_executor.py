"""Timing and logging for database calls."""

import time
from contextlib import contextmanager
from typing import Any, Generator

import logfire


@contextmanager
def timed_query(operation_name: str, **log_context: Any) -> Generator[None, None, None]:
    """
    Log completion time of a database operation, or its error.

    Errors are logged and re-raised.

    Example:
        with timed_query("get_user_credits", user_id=user_id):
            result = client.table("user_credits").select("credits").eq("user_id", user_id).execute()
    """
    start_time = time.time()
    try:
        yield
    except Exception as e:
        logfire.error(
            f"{operation_name} failed",
            operation=operation_name,
            error=str(e),
            error_type=type(e).__name__,
            response_time_ms=(time.time() - start_time) * 1000,
            **log_context,
        )
        raise
    logfire.info(
        f"{operation_name} completed",
        operation=operation_name,
        response_time_ms=(time.time() - start_time) * 1000,
        **log_context,
    )
