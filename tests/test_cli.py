"""
Tests for the rtctoken command-line interface.
"""

import json

from typer.testing import CliRunner

from rtctoken import __version__
from rtctoken.checksum import crc32
from rtctoken.cli import app

runner = CliRunner()


class TestIssueCommand:
    """Tests for `rtctoken issue`."""

    def test_prints_token(self, configured):
        """Prints a wire-form token."""
        result = runner.invoke(app, ["issue", "--channel", "lobby", "--uid", "12345"])

        assert result.exit_code == 0
        assert result.stdout.strip().startswith("006")

    def test_json_with_inspect(self, configured):
        """--json --inspect includes the decoded fields."""
        result = runner.invoke(app, ["issue", "--uid", "alice", "--json", "--inspect"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["tokenMode"] == "secure"
        assert data["channel"] == "finmentor-channel"
        assert data["inspect"]["uidCrc"] == crc32(b"alice")

    def test_rtm(self, configured):
        """--rtm builds over an empty channel."""
        result = runner.invoke(app, ["issue", "--uid", "alice", "--rtm", "--json", "--inspect"])

        data = json.loads(result.stdout)
        assert data["channel"] == ""
        assert data["inspect"]["channelCrc"] == 0

    def test_tokenless(self, tokenless):
        """Tokenless mode is reported and exits 0."""
        result = runner.invoke(app, ["issue", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["token"] is None
        assert data["tokenMode"] == "tokenless"

    def test_missing_app_id(self, configured, monkeypatch):
        """Missing app id exits with an error."""
        from rtctoken import config

        monkeypatch.setattr(config, "APP_ID", "")
        result = runner.invoke(app, ["issue"])

        assert result.exit_code == 1
        assert "App ID" in result.stdout

    def test_explicit_credentials(self, configured, monkeypatch):
        """--app-id and --cert override the configuration."""
        from rtctoken import config

        monkeypatch.setattr(config, "APP_ID", "")
        monkeypatch.setattr(config, "APP_CERTIFICATE", "")
        result = runner.invoke(
            app,
            [
                "issue",
                "--app-id", "4a410e05b4554ec1a81555f44bc3228e",
                "--cert", "02f9818234cb497d8ec7770cec6ffb82",
                "--json",
            ],
        )

        assert result.exit_code == 0
        assert json.loads(result.stdout)["tokenMode"] == "secure"


class TestInspectCommand:
    """Tests for `rtctoken inspect`."""

    def test_json(self, builder):
        """--json prints the inspector JSON."""
        token = builder.build_token("lobby", 12345, 1700003600)
        result = runner.invoke(app, ["inspect", token, "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["channelCrc"] == crc32(b"lobby")
        assert data["message"]["count"] == 1

    def test_table(self, builder, app_id):
        """Default output shows the decoded fields."""
        token = builder.build_token("lobby", 12345, 1700003600)
        result = runner.invoke(app, ["inspect", token])

        assert result.exit_code == 0
        assert app_id in result.stdout
        assert "1700003600" in result.stdout

    def test_matching_expectations(self, builder):
        """Matching --channel/--uid exits 0."""
        token = builder.build_token("lobby", 12345, 1700003600)
        result = runner.invoke(app, ["inspect", token, "--channel", "lobby", "--uid", "12345", "--json"])

        assert result.exit_code == 0
        assert json.loads(result.stdout)["mismatches"] == []

    def test_mismatched_expectations(self, builder):
        """A mismatched channel exits 1."""
        token = builder.build_token("lobby", 12345, 1700003600)
        result = runner.invoke(app, ["inspect", token, "--channel", "other", "--json"])

        assert result.exit_code == 1
        assert json.loads(result.stdout)["mismatches"] == ["channelCrc"]

    def test_malformed(self):
        """A malformed token exits 1."""
        result = runner.invoke(app, ["inspect", "not-base64!!"])
        assert result.exit_code == 1

    def test_best_effort(self):
        """--best-effort reports the error in the JSON output."""
        result = runner.invoke(app, ["inspect", "not-base64!!", "--best-effort", "--json"])

        assert result.exit_code == 1
        assert "error" in json.loads(result.stdout)


class TestMiscCommands:
    """Tests for config and version commands."""

    def test_version(self):
        """version prints the package version."""
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_config_masks_certificate(self, configured):
        """config never prints the full certificate."""
        result = runner.invoke(app, ["config"])

        assert result.exit_code == 0
        assert "02f9818234cb497d8ec7770cec6ffb82" not in result.stdout
        assert "02f9" in result.stdout
