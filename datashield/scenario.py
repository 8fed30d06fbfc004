"""
Scripted sessions.

A scenario is a YAML document listing the actions one or more users take,
in order. Running it replays every step through a fresh Session and
TableStore so the resulting tables, notices and audit trail can be
inspected or exported. Example::

    users:
      - {id: "9", name: Lab Tech, email: tech@medytox.com,
         role: data_producer, password: s3cret}
    steps:
      - login: {email: dp@medytox.com, password: datashield}
      - create_table: {name: QC Run 1, headers: [Batch, Result], initial_rows: 2}
      - update_cell: {row: 0, col: 1, value: 42}
      - logout: {}
      - login: {email: qa@medytox.com, password: datashield}
      - confirm_cell: {row: 0, col: 1, comments: Checked}
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

import yaml

from .access_control import IdentityProvider
from .audit_trail import AuditLog
from .config import DataShieldConfig, get_config
from .notifications import Notifier
from .session import Session
from .tables import CellPermissions, TableStore

logger = logging.getLogger(__name__)


@dataclass
class StepOutcome:
    """Result of one scenario step."""

    index: int
    action: str
    result: Any = None


@dataclass
class ScenarioResult:
    """Everything a finished scenario leaves behind."""

    session: Session
    store: TableStore
    audit: AuditLog
    notifier: Notifier
    outcomes: List[StepOutcome] = field(default_factory=list)


def load_scenario(path: Union[str, Path]) -> Dict[str, Any]:
    """Read a scenario document from a YAML file."""
    with open(path, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}
    if not isinstance(data, dict):
        raise ValueError("Scenario must be a mapping with a 'steps' list")
    return data


def _select_table(store: TableStore, args: Dict[str, Any]) -> Any:
    if "id" in args:
        return store.select_table(args["id"])
    name = args["name"]
    table = next((t for t in store.tables if t.name == name), None)
    if table is None:
        raise ValueError(f"Unknown table: {name}")
    return store.select_table(table.id)


def _cell_value(value: Any) -> Any:
    # YAML reads unquoted dates and timestamps as date objects
    if isinstance(value, date):
        return value.isoformat()
    return value


def _set_cell_permissions(store: TableStore, args: Dict[str, Any]) -> Any:
    permissions = CellPermissions.model_validate(
        {k: v for k, v in args.items() if k not in ("row", "col")}
    )
    return store.set_cell_permissions(args["row"], args["col"], permissions)


StepHandler = Callable[[ScenarioResult, Dict[str, Any]], Any]

STEP_HANDLERS: Dict[str, StepHandler] = {
    "login": lambda r, a: r.session.login(a["email"], str(a["password"])),
    "logout": lambda r, a: r.session.logout(),
    "create_table": lambda r, a: r.store.create_table(
        a["name"], a["headers"], a.get("initial_rows")
    ),
    "select_table": lambda r, a: _select_table(r.store, a),
    "add_row": lambda r, a: r.store.add_row(),
    "add_column": lambda r, a: r.store.add_column(a["header"]),
    "update_cell": lambda r, a: r.store.update_cell(
        a["row"], a["col"], _cell_value(a.get("value"))
    ),
    "confirm_cell": lambda r, a: r.store.confirm_cell(
        a["row"], a["col"], a.get("comments")
    ),
    "confirm_table": lambda r, a: r.store.confirm_table(a.get("comments")),
    "set_cell_permissions": lambda r, a: _set_cell_permissions(r.store, a),
    "export_pdf": lambda r, a: r.store.export_table_to_pdf(a.get("title")),
    "export_csv": lambda r, a: r.store.export_table_to_csv(a.get("include_headers")),
}


def run_scenario(
    data: Dict[str, Any], config: Optional[DataShieldConfig] = None
) -> ScenarioResult:
    """
    Replay a scenario document.

    Args:
        data: Parsed scenario with optional ``users`` and a ``steps`` list
        config: Configuration for the session (defaults to global config)

    Returns:
        The session, store, audit log and per-step outcomes

    Raises:
        ValueError: If a step is malformed or names an unknown action
    """
    config = config or get_config()
    identity = IdentityProvider(scheme=config.password_scheme)
    for user in data.get("users") or []:
        try:
            identity.add_user(
                id=str(user["id"]),
                name=user["name"],
                email=user["email"],
                role=user["role"],
                password=str(user["password"]),
                permissions=user.get("permissions"),
            )
        except KeyError as e:
            raise ValueError(f"User entry is missing {e}") from e

    audit = AuditLog(config)
    notifier = Notifier()
    session = Session(identity, audit, notifier)
    store = TableStore(session, config=config)
    result = ScenarioResult(
        session=session, store=store, audit=audit, notifier=notifier
    )

    for index, step in enumerate(data.get("steps") or [], start=1):
        if not isinstance(step, dict) or len(step) != 1:
            raise ValueError(f"Step {index} must be a single-key mapping")
        action, args = next(iter(step.items()))
        handler = STEP_HANDLERS.get(action)
        if handler is None:
            raise ValueError(f"Step {index}: unknown action '{action}'")

        try:
            outcome = handler(result, args or {})
        except KeyError as e:
            raise ValueError(f"Step {index} ({action}) is missing {e}") from e

        logger.debug(f"Step {index} {action} -> {outcome!r}")
        result.outcomes.append(StepOutcome(index=index, action=action, result=outcome))

    return result
