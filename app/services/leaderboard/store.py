from typing import Any

from app.services.leaderboard.errors import StoreUnavailableError
from app.services.logger import logger


def execute(operation: str, query: Any) -> Any:
    """Run a Supabase query, turning client failures into StoreUnavailableError."""
    try:
        return query.execute()
    except Exception as e:
        logger.error(
            f"Store call failed: {operation}",
            {"error": str(e), "operation": operation},
        )
        raise StoreUnavailableError(operation, e) from e


def rows(result: Any) -> list:
    """Rows of a query result; maybe_single() may hand back None."""
    if not result or not result.data:
        return []
    data = result.data
    return data if isinstance(data, list) else [data]
