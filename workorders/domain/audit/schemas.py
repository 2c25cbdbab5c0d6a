"""Change log schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class ChangeEntryResponse(BaseModel):
    """One change log row, whatever the entity kind"""

    id: int
    entity_id: int
    user_id: str
    description: str
    created_at: Optional[datetime] = None


def change_entry_response(entry, id_column: str) -> ChangeEntryResponse:
    return ChangeEntryResponse(
        id=entry.id,
        entity_id=getattr(entry, id_column),
        user_id=entry.user_id,
        description=entry.description,
        created_at=entry.created_at,
    )
