from typing import Optional

from duebook.schemas.common import CamelModel


class UserSummary(CamelModel):
    id: int
    name: Optional[str] = None
    email: Optional[str] = None
