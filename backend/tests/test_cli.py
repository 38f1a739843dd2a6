"""CLI command tests (flask system/catalog/users/shifts groups)."""

from shiftbook.models import User
from shiftbook.services import shift_service


class TestCli:

    def test_system_init_is_idempotent(self, app, db_session):
        runner = app.test_cli_runner()

        result = runner.invoke(args=["system", "init", "--admin-password", "Bakery2024"])
        assert result.exit_code == 0, result.output
        assert "Seeded default catalog (31 items)" in result.output
        assert "Created user: admin" in result.output

        result = runner.invoke(args=["system", "init", "--admin-password", "Bakery2024"])
        assert "Using existing catalog" in result.output
        assert "already exists" in result.output
        assert db_session.query(User).filter_by(username="admin").count() == 1

    def test_catalog_list(self, app, catalog):
        result = app.test_cli_runner().invoke(args=["catalog", "list"])
        assert result.exit_code == 0
        assert "PANDESAL (25)" in result.output

    def test_users_create_rejects_weak_password(self, app, db_session):
        result = app.test_cli_runner().invoke(
            args=["users", "create", "--username", "night", "--password", "short"]
        )
        assert "FAIL Password validation failed" in result.output
        assert db_session.query(User).count() == 0

    def test_shift_status(self, app, open_shift):
        shift_service.add_production("1", 10)
        result = app.test_cli_runner().invoke(args=["shifts", "status"])
        assert result.exit_code == 0
        assert f"Shift {open_shift.id}: OPEN" in result.output
        assert "Produced units:   10" in result.output
        assert "31 item(s) have no ending count yet" in result.output
