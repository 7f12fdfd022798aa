from __future__ import annotations

import io
import json

import pytest
import yaml

from relplan.cli.main import app


@pytest.fixture
def schema_file(tmp_path, schema_document):
    path = tmp_path / "schema.yaml"
    path.write_text(yaml.safe_dump(schema_document))
    return path


@pytest.fixture
def payload_file(tmp_path):
    path = tmp_path / "payload.json"
    path.write_text(json.dumps({
        "title": "Hi",
        "tags": [{"id": "t1"}, {"id": "t2", "apiAction": "delete"}],
    }))
    return path


def test_no_command_prints_help(capsys):
    assert app([]) == 0
    assert "relplan" in capsys.readouterr().out


def test_check(schema_file, tmp_path, capsys):
    code = app(["check", "--schema", str(schema_file), "--config", str(tmp_path / "none.yaml")])

    out = capsys.readouterr().out
    assert code == 0
    assert "tags -> Tag[]" in out
    assert "category -> Category" in out
    assert "unique: email, username" in out
    assert "  fields: author_id, category_id, id, slug, title" in out
    assert "Schema OK: 6 entities" in out


def test_check_invalid_schema(tmp_path, capsys):
    path = tmp_path / "schema.yaml"
    path.write_text(yaml.safe_dump({"entities": {"Post": {"relations": {"x": {"target": "Nope"}}}}}))

    code = app(["check", "--schema", str(path), "--config", str(tmp_path / "none.yaml")])

    assert code == 1
    assert "Unknown target entity 'Nope'" in capsys.readouterr().err


def test_plan_create(schema_file, payload_file, tmp_path, capsys):
    code = app([
        "plan", "Post", str(payload_file),
        "--schema", str(schema_file),
        "--config", str(tmp_path / "none.yaml"),
    ])

    assert code == 0
    assert json.loads(capsys.readouterr().out) == {
        "data": {"title": "Hi", "tags": {"connect": [{"id": "t1"}]}},
    }


def test_plan_update_from_stdin_with_config(schema_file, tmp_path, monkeypatch, capsys):
    config_path = tmp_path / "relplan.yaml"
    config_path.write_text(yaml.safe_dump({"schema": schema_file.name}))
    monkeypatch.setattr("sys.stdin", io.StringIO(json.dumps({
        "tags": [{"id": "t2", "apiAction": "delete"}],
    })))

    code = app([
        "plan", "Post", "-",
        "--mode", "update",
        "--where", '{"id": "p1"}',
        "--config", str(config_path),
    ])

    assert code == 0
    assert json.loads(capsys.readouterr().out) == {
        "where": {"id": "p1"},
        "data": {"tags": {"deleteMany": {"id": {"in": ["t2"]}}}},
    }


def test_plan_create_many(schema_file, tmp_path, capsys):
    path = tmp_path / "many.json"
    path.write_text(json.dumps([{"title": "A"}, {"title": "B", "category": {"id": "c1"}}]))

    code = app([
        "plan", "Post", str(path),
        "--schema", str(schema_file),
        "--config", str(tmp_path / "none.yaml"),
    ])

    assert code == 0
    assert json.loads(capsys.readouterr().out) == {"data": [
        {"title": "A"},
        {"title": "B", "category": {"connect": {"id": "c1"}}},
    ]}


def test_plan_resolution_error(schema_file, tmp_path, capsys):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"tags": [{"apiAction": "bogus"}]}))

    code = app([
        "plan", "Post", str(path),
        "--schema", str(schema_file),
        "--config", str(tmp_path / "none.yaml"),
    ])

    assert code == 1
    assert 'Unknown value "bogus"' in capsys.readouterr().err


def test_plan_without_schema(tmp_path, payload_file, capsys):
    code = app(["plan", "Post", str(payload_file), "--config", str(tmp_path / "none.yaml")])

    assert code == 1
    assert "No schema given" in capsys.readouterr().err


def test_plan_missing_payload(schema_file, tmp_path, capsys):
    code = app([
        "plan", "Post", str(tmp_path / "missing.json"),
        "--schema", str(schema_file),
        "--config", str(tmp_path / "none.yaml"),
    ])

    assert code == 1
    assert "Error reading input" in capsys.readouterr().err
