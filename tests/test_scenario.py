"""Tests for scripted scenarios."""

import pytest

from datashield.audit_trail import AuditAction
from datashield.notifications import NoticeLevel
from datashield.scenario import STEP_HANDLERS, load_scenario, run_scenario

QC_RUN = """
users:
  - id: "9"
    name: Lab Tech
    email: tech@medytox.com
    role: data_producer
    password: s3cret
steps:
  - login: {email: tech@medytox.com, password: s3cret}
  - create_table: {name: QC Run 1, headers: [Batch, Result], initial_rows: 2}
  - update_cell: {row: 0, col: 0, value: B-001}
  - update_cell: {row: 0, col: 1, value: 42}
  - logout: {}
  - login: {email: qa@medytox.com, password: datashield}
  - confirm_cell: {row: 0, col: 1, comments: Checked}
  - update_cell: {row: 0, col: 1, value: 99}
  - confirm_table: {comments: Approved}
  - export_csv: {}
"""

ADMIN_LOGIN = {"login": {"email": "admin@medytox.com", "password": "datashield"}}


def create_step(name):
    return {"create_table": {"name": name, "headers": ["X"], "initial_rows": 1}}


@pytest.fixture
def qc_run_file(tmp_path):
    path = tmp_path / "qc_run.yaml"
    path.write_text(QC_RUN, encoding="utf-8")
    return path


class TestLoadScenario:
    """Test reading scenario documents."""

    def test_load(self, qc_run_file):
        """Test a document loads as a mapping."""
        data = load_scenario(qc_run_file)
        assert len(data["steps"]) == 10
        assert data["users"][0]["email"] == "tech@medytox.com"

    def test_empty_document(self, tmp_path):
        """Test an empty file loads as an empty scenario."""
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_scenario(path) == {}

    def test_not_a_mapping(self, tmp_path):
        """Test a top-level list is rejected."""
        path = tmp_path / "list.yaml"
        path.write_text("- login: {}\n", encoding="utf-8")
        with pytest.raises(ValueError):
            load_scenario(path)


class TestRunScenario:
    """Test replaying scenarios."""

    def test_qc_run(self, qc_run_file):
        """Test the full QC run replays with the expected outcomes."""
        result = run_scenario(load_scenario(qc_run_file))

        table = result.store.current_table
        assert table.name == "QC Run 1"
        assert table.rows[0][0].value == "B-001"
        assert table.rows[0][1].value == 42
        assert table.rows[0][1].confirmed
        assert table.rows[0][1].confirmed_by == "3"
        assert table.version == 2

        outcomes = {o.index: o.result for o in result.outcomes}
        assert outcomes[1] is True
        assert outcomes[4] is True
        assert outcomes[8] is False
        assert outcomes[10] == "Batch,Result\nB-001,42\n,\n"

        assert result.session.user.id == "3"
        actions = [e.action for e in result.audit.entries]
        assert actions[0] == AuditAction.LOGIN
        assert actions[-1] == AuditAction.EXPORT
        assert result.audit.by_user("9")[0].user_name == "Lab Tech"
        assert [n.message for n in result.notifier.errors()] == [
            "This cell is confirmed and cannot be edited"
        ]

    def test_select_table_by_name(self):
        """Test selecting a table by name."""
        result = run_scenario(
            {
                "steps": [
                    ADMIN_LOGIN,
                    create_step("A"),
                    create_step("B"),
                    {"select_table": {"name": "A"}},
                    {"add_row": {}},
                ]
            }
        )
        table = result.store.current_table
        assert table.name == "A"
        assert len(table.rows) == 2

    def test_set_cell_permissions_step(self):
        """Test permission records are built from step arguments."""
        result = run_scenario(
            {
                "steps": [
                    ADMIN_LOGIN,
                    create_step("A"),
                    {
                        "set_cell_permissions": {
                            "row": 0,
                            "col": 0,
                            "roles": ["viewer"],
                            "editable": True,
                        }
                    },
                ]
            }
        )
        permissions = result.store.current_table.rows[0][0].permissions
        assert [r.value for r in permissions.roles] == ["viewer"]
        assert permissions.editable

    def test_date_values_stored_as_text(self, tmp_path):
        """Test unquoted YAML dates are entered as ISO text."""
        path = tmp_path / "dates.yaml"
        path.write_text(
            "steps:\n"
            "  - login: {email: dp@medytox.com, password: datashield}\n"
            "  - create_table: {name: Dates, headers: [Sampled], initial_rows: 1}\n"
            "  - update_cell: {row: 0, col: 0, value: 2024-01-15}\n",
            encoding="utf-8",
        )
        result = run_scenario(load_scenario(path))

        cell = result.store.current_table.rows[0][0]
        assert cell.value == "2024-01-15"
        assert result.outcomes[-1].result is True
        assert result.audit.by_resource("cell")[-1].details.endswith(
            'from null to "2024-01-15"'
        )

    def test_failed_login_continues(self):
        """Test a rejected login is reported and the run continues."""
        result = run_scenario(
            {
                "steps": [
                    {"login": {"email": "dp@medytox.com", "password": "nope"}},
                    {"create_table": {"name": "A", "headers": ["X"]}},
                ]
            }
        )
        assert result.outcomes[0].result is False
        assert result.outcomes[1].result is None
        assert result.store.tables == []
        assert result.notifier.notices[0].level == NoticeLevel.ERROR

    def test_unknown_action(self):
        """Test unknown actions stop the run."""
        with pytest.raises(ValueError, match="unknown action 'delete_table'"):
            run_scenario({"steps": [{"delete_table": {}}]})

    def test_malformed_step(self):
        """Test steps must be single-key mappings."""
        with pytest.raises(ValueError, match="single-key"):
            run_scenario({"steps": [{"login": {}, "logout": {}}]})
        with pytest.raises(ValueError):
            run_scenario({"steps": ["logout"]})

    def test_missing_argument(self):
        """Test missing step arguments are reported."""
        with pytest.raises(ValueError, match="missing"):
            run_scenario({"steps": [{"add_column": {}}]})

    def test_incomplete_user(self):
        """Test user entries need every field."""
        with pytest.raises(ValueError, match="missing"):
            run_scenario({"users": [{"id": "9", "name": "N"}], "steps": []})

    def test_every_step_has_a_handler(self):
        """Test the supported actions."""
        assert set(STEP_HANDLERS) == {
            "login",
            "logout",
            "create_table",
            "select_table",
            "add_row",
            "add_column",
            "update_cell",
            "confirm_cell",
            "confirm_table",
            "set_cell_permissions",
            "export_pdf",
            "export_csv",
        }
