"""Tests for vaultexplorer.cli — command line interface."""

import json

import pytest

from vaultexplorer.cli import main
from vaultexplorer.secrets import CertificateValueObject, fingerprint


@pytest.fixture
def write_json(tmp_path):
    def _write(name, obj):
        path = tmp_path / name
        path.write_text(json.dumps(obj))
        return str(path)

    return _write


class TestCli:
    def test_version(self, capsys):
        rc = main(["version"])
        assert rc == 0
        out = capsys.readouterr().out
        assert "vaultexplorer" in out
        assert "0.1.0" in out

    def test_version_flag(self, capsys):
        assert main(["--version"]) == 0
        assert "vaultexplorer" in capsys.readouterr().out

    def test_no_args(self, capsys):
        assert main([]) == 0

    def test_config(self, capsys, monkeypatch):
        monkeypatch.setenv("VAULTEXPLORER_CHANGED_BY", "CORP\\alice")
        assert main(["config"]) == 0
        out = capsys.readouterr().out
        assert "CORP\\alice" in out
        assert "1,048,576 bytes" in out

    def test_aliases(self, capsys, write_json):
        path = write_json("aliases.json", [{"alias": "Prod", "vaultNames": ["kv-prod"]}])
        assert main(["aliases", "--file", path]) == 0
        assert "Prod: kv-prod" in capsys.readouterr().out

    def test_aliases_missing_file(self, capsys, tmp_path):
        assert main(["aliases", "--file", str(tmp_path / "nope.json")]) == 1
        assert "Error" in capsys.readouterr().out


class TestCodecCommands:
    def test_decode_json(self, capsys, tmp_path):
        path = tmp_path / "raw.json"
        path.write_text('{"a":1}')
        assert main(["decode", "--type", "application/json", str(path)]) == 0
        assert capsys.readouterr().out == '{\n  "a": 1\n}\n'

    def test_encode_json(self, capsys, tmp_path):
        path = tmp_path / "display.json"
        path.write_text('{\n  "a": 1\n}\n')
        assert main(["encode", "-t", "application/json", str(path)]) == 0
        assert capsys.readouterr().out == '{"a":1}\n'

    def test_fingerprint(self, capsys, tmp_path):
        path = tmp_path / "secret.txt"
        path.write_text("hunter2")
        assert main(["fingerprint", str(path)]) == 0
        assert capsys.readouterr().out.strip() == fingerprint("hunter2")

    def test_decode_malformed_certificate(self, capsys, tmp_path):
        path = tmp_path / "cert.txt"
        path.write_text("not a certificate")
        assert main(["decode", "-t", "application/x-pkcs12", str(path)]) == 1
        assert "Error" in capsys.readouterr().out

    def test_encode_oversized(self, capsys, tmp_path, monkeypatch):
        monkeypatch.setenv("VAULTEXPLORER_MAX_VALUE_BYTES", "4")
        path = tmp_path / "secret.txt"
        path.write_text("hunter2")
        assert main(["encode", str(path)]) == 1
        assert "Maximum size" in capsys.readouterr().out


class TestPlanCommand:
    def test_create(self, capsys, write_json):
        desired = write_json("desired.json", {"name": "db-pass", "value": "hunter2"})
        assert main(["plan", desired, "--changed-by", "CORP\\alice"]) == 0
        out = json.loads(capsys.readouterr().out)
        assert out["action"] == "create"
        assert out["operations"][0]["op"] == "set"
        assert out["operations"][0]["tags"] == {
            "Md5": fingerprint("hunter2"),
            "ChangedBy": "CORP\\alice",
        }

    def test_rename(self, capsys, write_json):
        desired = write_json("desired.json", {"name": "new-name", "value": "hunter2"})
        prior = write_json("prior.json", {"name": "old-name", "value": "hunter2"})
        assert main(["plan", desired, "--prior", prior]) == 0
        out = json.loads(capsys.readouterr().out)
        assert out["action"] == "rename"
        assert [op["op"] for op in out["operations"]] == ["set", "delete"]
        assert out["operations"][1]["name"] == "old-name"

    def test_duplicates_reported(self, capsys, write_json):
        desired = write_json("desired.json", {"name": "db-pass", "value": "hunter2"})
        existing = write_json(
            "existing.json",
            [
                {"name": "db-pass", "tags": {"Md5": fingerprint("hunter2")}},
                {"name": "copy", "tags": {"Md5": fingerprint("hunter2")}},
            ],
        )
        assert main(["plan", desired, "--existing", existing]) == 0
        captured = capsys.readouterr()
        assert json.loads(captured.out)["duplicates"] == ["copy"]
        assert "1 other secret(s)" in captured.err

    def test_invalid_name(self, capsys, write_json):
        desired = write_json("desired.json", {"name": "", "value": "hunter2"})
        assert main(["plan", desired]) == 1
        assert "Invalid secret name" in capsys.readouterr().out

    def test_invalid_input(self, capsys, write_json):
        desired = write_json("desired.json", {"value": "hunter2"})
        assert main(["plan", desired]) == 1
        assert "Error" in capsys.readouterr().out

    def test_kind_name_rule(self, capsys, write_json, monkeypatch):
        aliases = write_json(
            "aliases.json",
            [{"alias": "Prod", "secretKinds": [{"alias": "Svc", "nameRegex": "^svc-.+$"}]}],
        )
        monkeypatch.setenv("VAULTEXPLORER_ALIASES_FILE", aliases)
        desired = write_json("desired.json", {"name": "db-pass", "value": "x"})
        assert main(["plan", desired, "--kind", "Svc"]) == 1
        assert "must match" in capsys.readouterr().out


class TestToggleCommand:
    def test_toggle_from_listing_entry(self, capsys, write_json):
        prior = write_json(
            "prior.json", {"name": "db-pass", "enabled": True, "tags": {"owner": "ops"}}
        )
        assert main(["toggle", prior, "--changed-by", "CORP\\alice"]) == 0
        out = json.loads(capsys.readouterr().out)
        assert out["action"] == "toggle"
        op = out["operations"][0]
        assert op["attributes"]["enabled"] is False
        assert op["tags"] == {"owner": "ops", "ChangedBy": "CORP\\alice"}

    def test_force_enable(self, capsys, write_json):
        prior = write_json("prior.json", {"name": "db-pass", "enabled": True})
        assert main(["toggle", prior, "--enable"]) == 0
        out = json.loads(capsys.readouterr().out)
        assert out["operations"][0]["attributes"]["enabled"] is True


class TestExportCommand:
    def test_export_text(self, capsys, write_json, tmp_path):
        record = write_json(
            "record.json", {"name": "db-pass", "value": "hunter2", "contentType": "text/plain"}
        )
        out_dir = tmp_path / "out"
        assert main(["export", record, "--out", str(out_dir)]) == 0
        assert (out_dir / "db-pass.txt").read_bytes() == b"hunter2"

    def test_export_certificate(self, write_json, tmp_path):
        raw = CertificateValueObject(data=b"\x30\x82binary", password="pw").serialize()
        record = write_json(
            "record.json",
            {"name": "web-cert", "value": raw, "contentType": "application/x-pkcs12"},
        )
        assert main(["export", record, "--out", str(tmp_path)]) == 0
        assert (tmp_path / "web-cert.pfx").read_bytes() == b"\x30\x82binary"

    def test_clipboard_certificate(self, capsys, write_json):
        raw = CertificateValueObject(data=b"binary", password="pw").serialize()
        record = write_json(
            "record.json",
            {"name": "web-cert", "value": raw, "contentType": "application/x-pkcs12"},
        )
        assert main(["export", record, "--clipboard"]) == 0
        assert capsys.readouterr().out == "pw\n"


class TestDescribeCommand:
    def test_not_a_certificate(self, capsys, write_json):
        record = write_json("record.json", {"name": "db-pass", "value": "hunter2"})
        assert main(["describe", record]) == 1
        assert "not a certificate" in capsys.readouterr().out

    def test_describe_cer(self, capsys, write_json):
        from datetime import UTC, datetime

        from cryptography import x509
        from cryptography.hazmat.primitives import hashes, serialization
        from cryptography.hazmat.primitives.asymmetric import ec
        from cryptography.x509.oid import NameOID

        key = ec.generate_private_key(ec.SECP256R1())
        name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "cli-test")])
        cert = (
            x509.CertificateBuilder()
            .subject_name(name)
            .issuer_name(name)
            .public_key(key.public_key())
            .serial_number(1)
            .not_valid_before(datetime(2026, 1, 1, tzinfo=UTC))
            .not_valid_after(datetime(2027, 1, 1, tzinfo=UTC))
            .sign(key, hashes.SHA256())
        )
        raw = CertificateValueObject(
            data=cert.public_bytes(serialization.Encoding.DER)
        ).serialize()
        record = write_json(
            "record.json", {"name": "root-ca", "value": raw, "contentType": "application/pkix-cert"}
        )
        assert main(["describe", record]) == 0
        out = capsys.readouterr().out
        assert "CN=cli-test" in out
        assert "Certificate (CER)" in out
