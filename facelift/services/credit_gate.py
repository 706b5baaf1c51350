"""Credit gate: decides whether the requester may start a generation run.

Deduction happens elsewhere; the pipeline only asks whether credits exist.
"""

import asyncio
from typing import Callable, Protocol

import logfire

from facelift.db.credits import get_user_credits


class CreditGate(Protocol):
    """Protocol for credit-availability checks."""

    async def has_credits(self) -> bool:
        ...


class UnlimitedCreditGate:
    """Always allows runs (local use, CLI)."""

    async def has_credits(self) -> bool:
        return True


class SupabaseCreditGate:
    """Check the ``user_credits`` table for a user.

    A user without a row has not claimed the one-time welcome credit yet,
    so the run is allowed.
    """

    def __init__(
        self,
        user_id: str,
        lookup: Callable[[str], int | None] = get_user_credits,
    ):
        self.user_id = user_id
        self._lookup = lookup

    async def has_credits(self) -> bool:
        # supabase-py is synchronous
        credits = await asyncio.to_thread(self._lookup, self.user_id)
        if credits is None:
            logfire.info("No credits row, welcome credit available", user_id=self.user_id)
            return True
        logfire.info("Credit balance checked", user_id=self.user_id, credits=credits)
        return credits > 0
