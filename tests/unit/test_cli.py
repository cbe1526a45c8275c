"""Unit tests for the command-line entry point."""

import json

import pytest

from tag_compliance import config
from tag_compliance.__main__ import ResourceInputError, build_parser, load_resources, main


@pytest.fixture
def policy_file(policy_data, write_policy_file):
    return write_policy_file(policy_data)


class TestValidateCommand:

    def test_valid_policy(self, policy_file, capsys):
        assert main(["validate", "--policy", str(policy_file)]) == 0

        output = json.loads(capsys.readouterr().out)
        assert output == {"file": str(policy_file), "valid": True, "version": "1.0"}

    def test_invalid_policy(self, policy_data, write_policy_file):
        policy_data["version"] = "2.0"
        policy_file = write_policy_file(policy_data)

        assert main(["validate", "--policy", str(policy_file)]) == 1

    def test_missing_policy(self, tmp_path):
        assert main(["validate", "--policy", str(tmp_path / "none.yaml")]) == 1


class TestGenerateCommand:

    def test_generate_writes_loadable_policy(self, tmp_path, capsys):
        path = tmp_path / "out" / "policy.yaml"

        assert main(["generate", str(path)]) == 0
        assert main(["validate", "--policy", str(path)]) == 0
        assert json.loads(capsys.readouterr().out)["valid"] is True

    def test_generate_refuses_to_overwrite(self, tmp_path):
        path = tmp_path / "policy.yaml"
        path.write_text("keep me")

        assert main(["generate", str(path)]) == 1
        assert path.read_text() == "keep me"

    def test_generate_force_overwrites(self, tmp_path):
        path = tmp_path / "policy.yaml"
        path.write_text("replace me")

        assert main(["generate", str(path), "--force"]) == 0
        assert "version" in path.read_text()


class TestCheckCommand:

    def write_resources(self, tmp_path, resources):
        path = tmp_path / "resources.json"
        path.write_text(json.dumps(resources))
        return path

    def test_all_compliant(self, policy_file, tmp_path, capsys):
        resources = self.write_resources(
            tmp_path,
            [{"resource_id": "bucket", "resource_type": "s3", "tags": {"DataClassification": "x"}}],
        )

        assert main(["check", "--policy", str(policy_file), str(resources)]) == 0

        report = json.loads(capsys.readouterr().out)
        assert report["summary"]["compliant_resources"] == 1

    def test_non_compliant_exit_code(self, policy_file, tmp_path, capsys):
        resources = self.write_resources(
            tmp_path, [{"resource_id": "bucket", "resource_type": "s3", "tags": {}}]
        )

        assert main(["check", "--policy", str(policy_file), str(resources)]) == 2

        report = json.loads(capsys.readouterr().out)
        violation = report["results"][0]["result"]["violations"][0]
        assert violation["kind"] == "missing_required_tag"
        assert report["summary"]["global_violations"] == {"missing_required_tag": 1}


class TestParser:

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestCheckCommandInputErrors:
    """Unreadable or malformed resources files end in exit status 1."""

    @pytest.mark.parametrize(
        "content",
        [
            "not json",
            json.dumps({"a": 1}),
            json.dumps([{"resource_id": "b"}]),
            json.dumps([{"resource_id": "b", "resource_type": "s3", "tags": {"Cost": 100}}]),
        ],
        ids=["malformed-json", "not-a-list", "missing-type", "non-string-tag"],
    )
    def test_invalid_resources_file(self, policy_file, tmp_path, caplog, content):
        resources = tmp_path / "resources.json"
        resources.write_text(content)

        assert main(["check", "--policy", str(policy_file), str(resources)]) == 1
        assert str(resources) in caplog.text

    def test_missing_resources_file(self, policy_file, tmp_path, caplog):
        resources = tmp_path / "absent.json"

        assert main(["check", "--policy", str(policy_file), str(resources)]) == 1
        assert "Error reading resources file" in caplog.text

    def test_load_resources_reports_index(self, tmp_path):
        resources = tmp_path / "resources.json"
        resources.write_text(
            json.dumps([{"resource_id": "ok", "resource_type": "s3"}, {"resource_id": "bad"}])
        )

        with pytest.raises(ResourceInputError) as exc_info:
            load_resources(resources)

        assert "index 1" in str(exc_info.value)


class TestConfigurationErrors:

    def test_invalid_log_level(self, monkeypatch, policy_file, caplog):
        monkeypatch.setenv("LOG_LEVEL", "verbose")
        monkeypatch.setattr(config, "_settings", None)

        assert main(["validate", "--policy", str(policy_file)]) == 1
        assert "Invalid configuration" in caplog.text
