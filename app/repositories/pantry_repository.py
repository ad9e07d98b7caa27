"""
Pantry repository for database operations
"""
from typing import List
from supabase import Client
import logging

logger = logging.getLogger(__name__)


class PantryRepository:
    """
    Read access to the caller's pantry.

    The client must carry the caller's JWT; row-level security limits
    pantry_items to rows the caller owns.
    """

    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.table_name = "pantry_items"

    async def get_item_names(self) -> List[str]:
        """
        Get the names of all pantry items visible to the caller.

        Returns:
            Item names, in table order
        """
        try:
            response = self.supabase.table(self.table_name).select("name").execute()
            return [row["name"] for row in (response.data or []) if row.get("name")]
        except Exception as e:
            logger.error(f"Error fetching pantry items: {str(e)}")
            raise
