"""Unit tests for the command-line interface."""

import json
from unittest.mock import Mock, patch

import pytest
import yaml

from ibmrp.cli.formatters import MASK, collect_sensitive_keys, format_output, mask_sensitive
from ibmrp.cli.main import execute_command, main, parse_args
from ibmrp.domain.core.exceptions import ValidationError
from ibmrp.infrastructure.registry.resource_registry import ResourceRegistry, UnsupportedResourceError
from ibmrp.providers.ibm.registration import register_ibm_resources
from ibmrp.providers.ibm.schemas import DATABASE_SCHEMA, EN_DESTINATION_SCHEMA

DB_ID = "crn:v1:bluemix:public:databases-for-redis:us-south:a/acct:guid-1::"


@pytest.fixture
def resource_file(tmp_path):
    path = tmp_path / "database.yaml"
    path.write_text(yaml.safe_dump({
        "name": "cache",
        "service": "databases-for-redis",
        "plan": "standard",
        "location": "us-south",
        "adminpassword": "password-123456",
    }))
    return str(path)


@pytest.mark.unit
class TestParseArgs:
    """Test cases for argument parsing."""

    def test_create(self):
        args = parse_args(["--format", "yaml", "create", "ibm_database", "--file", "db.yaml"])

        assert args.action == "create"
        assert args.resource_type == "ibm_database"
        assert args.file == "db.yaml"
        assert args.format == "yaml"
        assert args.show_sensitive is False

    def test_update_requires_id(self):
        with pytest.raises(SystemExit):
            parse_args(["update", "ibm_database", "--file", "db.yaml"])

    @pytest.mark.parametrize("action", ["read", "delete", "exists", "import"])
    def test_id_actions(self, action):
        args = parse_args([action, "ibm_en_destination", "--id", "guid/dest-1"])

        assert args.action == action
        assert args.id == "guid/dest-1"

    def test_no_action(self):
        assert parse_args([]).action is None


@pytest.mark.unit
class TestExecuteCommand:
    """Test cases for execute_command."""

    def setup_method(self):
        """Set up a mocked lifecycle service."""
        self.service = Mock()
        self.service.registry = register_ibm_resources(ResourceRegistry())

    def test_types(self):
        result = execute_command(parse_args(["types"]), self.service)

        assert result == {"resource_types": ["ibm_database", "ibm_en_destination", "ibm_en_subscription"]}

    def test_validate(self, resource_file):
        self.service.validate.return_value = {}

        result = execute_command(parse_args(["validate", "ibm_database", "--file", resource_file]), self.service)

        assert result == {"valid": True, "errors": {}}
        config = self.service.validate.call_args.args[1]
        assert config["service"] == "databases-for-redis"

    def test_create(self, resource_file):
        self.service.create.return_value = {"id": DB_ID}

        result = execute_command(parse_args(["create", "ibm_database", "--file", resource_file]), self.service)

        assert result == {"id": DB_ID}
        self.service.create.assert_called_once()
        assert self.service.create.call_args.args[0] == "ibm_database"

    def test_update(self, resource_file):
        execute_command(parse_args(["update", "ibm_database", "--id", DB_ID, "--file", resource_file]),
                        self.service)

        resource_type, resource_id, config = self.service.update.call_args.args
        assert (resource_type, resource_id) == ("ibm_database", DB_ID)
        assert config["name"] == "cache"

    def test_read_removed(self):
        self.service.read.return_value = None

        result = execute_command(parse_args(["read", "ibm_database", "--id", DB_ID]), self.service)

        assert result == {"id": DB_ID, "removed": True}

    def test_delete(self):
        result = execute_command(parse_args(["delete", "ibm_database", "--id", DB_ID]), self.service)

        assert result == {"id": DB_ID, "deleted": True}
        self.service.delete.assert_called_once_with("ibm_database", DB_ID)

    def test_exists(self):
        self.service.exists.return_value = False

        result = execute_command(parse_args(["exists", "ibm_database", "--id", DB_ID]), self.service)

        assert result == {"id": DB_ID, "exists": False}

    def test_import(self):
        self.service.import_resource.return_value = {"id": DB_ID, "name": "cache"}

        result = execute_command(parse_args(["import", "ibm_database", "--id", DB_ID]), self.service)

        assert result["name"] == "cache"


@pytest.mark.unit
class TestFormatters:
    """Test cases for output formatting and masking."""

    def test_collect_sensitive_keys(self):
        assert collect_sensitive_keys(DATABASE_SCHEMA) == {"adminpassword", "password"}
        assert collect_sensitive_keys(EN_DESTINATION_SCHEMA) == {
            "password", "client_secret", "api_key", "routing_key",
        }

    def test_mask_sensitive_nested(self):
        data = {
            "adminpassword": "password-123456",
            "users": [{"name": "reporter", "password": "password-one"}],
            "connectionstrings": [{"name": "admin", "password": ""}],
        }

        masked = mask_sensitive(data, {"adminpassword", "password"})

        assert masked == {
            "adminpassword": MASK,
            "users": [{"name": "reporter", "password": MASK}],
            "connectionstrings": [{"name": "admin", "password": ""}],
        }
        assert data["adminpassword"] == "password-123456"

    def test_json(self):
        assert json.loads(format_output({"b": 1, "a": [1, 2]}, "json")) == {"a": [1, 2], "b": 1}

    def test_yaml(self):
        assert yaml.safe_load(format_output({"name": "cache"}, "yaml")) == {"name": "cache"}

    def test_table(self):
        output = format_output({"name": "cache", "tags": ["env:dev"], "version": None}, "table")

        assert "Attribute" in output
        assert "cache" in output
        assert "env:dev" in output

    def test_table_empty(self):
        assert format_output({}, "table") == "No attributes."


@pytest.mark.unit
class TestMain:
    """Test cases for the main entry point."""

    @pytest.fixture(autouse=True)
    def _patch(self):
        with patch("ibmrp.cli.main.ConfigurationManager") as manager_class, \
                patch("ibmrp.cli.main.setup_logging") as setup_logging, \
                patch("ibmrp.cli.main.ResourceLifecycleService") as service_class:
            self.manager_class = manager_class
            self.setup_logging = setup_logging
            self.service = service_class.return_value
            self.service.registry = register_ibm_resources(ResourceRegistry())
            yield

    def test_no_action(self, capsys):
        assert main([]) == 1
        assert "No action specified" in capsys.readouterr().err

    def test_read_masks_sensitive_values(self, capsys):
        self.service.read.return_value = {"id": DB_ID, "adminpassword": "password-123456"}

        assert main(["read", "ibm_database", "--id", DB_ID]) == 0

        output = json.loads(capsys.readouterr().out)
        assert output == {"id": DB_ID, "adminpassword": MASK}

    def test_show_sensitive(self, capsys):
        self.service.read.return_value = {"id": DB_ID, "adminpassword": "password-123456"}

        assert main(["--show-sensitive", "read", "ibm_database", "--id", DB_ID]) == 0

        assert json.loads(capsys.readouterr().out)["adminpassword"] == "password-123456"

    def test_log_level_override(self):
        self.manager_class.return_value.get_logging_config.return_value.model_copy.return_value = "debug-config"

        main(["--log-level", "DEBUG", "types"])

        self.setup_logging.assert_called_once_with("debug-config")

    def test_output_file(self, tmp_path):
        output = tmp_path / "out.json"

        assert main(["--output", str(output), "types"]) == 0

        assert json.loads(output.read_text())["resource_types"][0] == "ibm_database"

    def test_domain_error(self, capsys):
        self.service.delete.side_effect = ValidationError("Invalid ID 'x'")

        assert main(["delete", "ibm_en_destination", "--id", "x"]) == 1
        assert "Invalid ID" in capsys.readouterr().err

    def test_unsupported_type(self):
        self.service.read.side_effect = UnsupportedResourceError("Unsupported resource type: ibm_x")

        assert main(["read", "ibm_x", "--id", "x"]) == 2

    def test_invalid_configuration(self, resource_file, capsys):
        self.service.validate.return_value = {"plan": "must contain a value"}

        assert main(["validate", "ibm_database", "--file", resource_file]) == 1
        assert json.loads(capsys.readouterr().out)["valid"] is False
