"""User credit balance lookups."""

from typing import Callable

from supabase import Client

from facelift.db.client import get_supabase_client
from facelift.db.query_executor import timed_query

USER_CREDITS_TABLE = "user_credits"


def get_user_credits(
    user_id: str,
    client_factory: Callable[[], Client] = get_supabase_client,
) -> int | None:
    """
    Read a user's credit balance.

    Returns:
        Remaining credits, or None when the user has no credits row yet
    """
    client = client_factory()
    with timed_query("get_user_credits", user_id=user_id):
        result = (
            client.table(USER_CREDITS_TABLE)
            .select("credits")
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
    if not result.data:
        return None
    return int(result.data[0].get("credits") or 0)
