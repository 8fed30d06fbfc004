"""
Permission engine for cell access.

Stateless policy functions deciding whether a user may view or edit a cell.
The decision depends only on the user's role, the cell's optional
permission record and the default policy:

============  ===================  ==========================
operation     permission record    no record (default)
============  ===================  ==========================
view          role in roles        every signed-in role
              and viewable
edit          role in roles        producer role only
              and editable
============  ===================  ==========================

Admins bypass every check. Cells that do not exist yet are viewable and
editable.
"""

from enum import Enum
from typing import Optional, Union

from ..access_control import Role, User
from .models import CellPermissions, Table


class Operation(str, Enum):
    """Cell operations subject to permission checks."""

    VIEW = "view"
    EDIT = "edit"


# Seed policy assigned to new tables, rotating by column index
DEFAULT_COLUMN_POLICIES = (
    CellPermissions(
        roles=[Role.ADMIN, Role.DATA_PRODUCER], editable=True, viewable=True
    ),
    CellPermissions(
        roles=[Role.ADMIN, Role.DATA_PRODUCER, Role.REVIEWER],
        editable=True,
        viewable=True,
    ),
    CellPermissions(roles=[Role.ADMIN, Role.REVIEWER], editable=False, viewable=True),
)


def default_column_permissions(col: int) -> CellPermissions:
    return DEFAULT_COLUMN_POLICIES[col % len(DEFAULT_COLUMN_POLICIES)]


def evaluate(
    role: Role,
    override: Optional[CellPermissions],
    operation: Union[str, Operation],
    producer_role: Role = Role.DATA_PRODUCER,
) -> bool:
    """
    Decide a single operation for a role.

    Args:
        role: Role of the acting user
        override: The cell's permission record, if any
        operation: ``view`` or ``edit``
        producer_role: Role allowed to edit cells without a record

    Returns:
        True if the operation is allowed
    """
    operation = Operation(operation)

    if role == Role.ADMIN:
        return True

    if override is not None:
        flag = override.viewable if operation == Operation.VIEW else override.editable
        return override.allows(role) and flag

    if operation == Operation.VIEW:
        return True
    return role == producer_role


def _check(
    user: Optional[User],
    table: Optional[Table],
    row: int,
    col: int,
    operation: Operation,
    producer_role: Role,
) -> bool:
    if table is None or user is None:
        return False
    if user.role == Role.ADMIN:
        return True

    cell = table.cell_at(row, col)
    if cell is None:
        return True

    return evaluate(user.role, cell.permissions, operation, producer_role)


def can_view(
    user: Optional[User],
    table: Optional[Table],
    row: int,
    col: int,
    producer_role: Role = Role.DATA_PRODUCER,
) -> bool:
    """Check whether ``user`` may view cell (row, col) of ``table``."""
    return _check(user, table, row, col, Operation.VIEW, producer_role)


def can_edit(
    user: Optional[User],
    table: Optional[Table],
    row: int,
    col: int,
    producer_role: Role = Role.DATA_PRODUCER,
) -> bool:
    """Check whether ``user`` may edit cell (row, col) of ``table``."""
    return _check(user, table, row, col, Operation.EDIT, producer_role)
