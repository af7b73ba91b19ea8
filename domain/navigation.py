"""Dashboard sections visible per staff role."""
from typing import List, Optional, Tuple

from pydantic import BaseModel

from domain.models.staff_member import StaffRole


class MenuItem(BaseModel):
    id: str
    label: str
    roles: Tuple[str, ...]


ALL_ROLES = (StaffRole.ADMIN.value, StaffRole.STAFF.value, StaffRole.VIEWER.value)

MENU_ITEMS: List[MenuItem] = [
    MenuItem(id="overview", label="Overview", roles=ALL_ROLES),
    MenuItem(id="forms", label="Submitted Forms", roles=ALL_ROLES),
    MenuItem(id="reports", label="Reports", roles=ALL_ROLES),
    MenuItem(id="staff", label="Manage Staff", roles=(StaffRole.ADMIN.value,)),
    MenuItem(id="logs", label="Activity Logs", roles=(StaffRole.ADMIN.value, StaffRole.STAFF.value)),
]


def effective_role(role: Optional[str]) -> str:
    """Unknown or missing roles get the most restrictive one."""
    if role in ALL_ROLES:
        return role
    return StaffRole.VIEWER.value


def visible_sections(role: Optional[str], menu: Optional[List[MenuItem]] = None) -> List[MenuItem]:
    role = effective_role(role)
    return [item for item in (menu if menu is not None else MENU_ITEMS) if role in item.roles]


def can_view(role: Optional[str], section_id: str) -> bool:
    return any(item.id == section_id for item in visible_sections(role))
