import base64
import json
import logging

import pytest

import interact
import skill_store.config as config


@pytest.fixture
def state_file(tmp_path, monkeypatch):
    path = tmp_path / "ledger.json"
    monkeypatch.setattr(config, "LEDGER_STATE_FILE", str(path))
    return path


def _index(path) -> list[str]:
    entries = json.loads(path.read_text())["entries"]
    return json.loads(base64.b64decode(entries["skill_keys"]))


def test_submit_persists_between_invocations(state_file, caplog):
    interact.main(["--backend", "file", "submit", "Blockchain", "5", "Solidity, Rust"])
    interact.main(["--backend", "file", "submit", "DevOps", "3", "Terraform"])

    assert len(_index(state_file)) == 2

    caplog.set_level(logging.INFO, logger="skillgraph")
    interact.main(["--backend", "file", "list", "--search", "devops"])
    assert "SKILL RECORDS (1 found)" in caplog.text


def test_verify_and_stats(state_file, caplog):
    interact.main(["--backend", "file", "submit", "AI/ML", "8", "PyTorch"])
    [record_id] = _index(state_file)

    caplog.set_level(logging.INFO, logger="skillgraph")
    interact.main(["--backend", "file", "verify", record_id])
    assert f"Record {record_id} is now verified" in caplog.text

    interact.main(["--backend", "file", "stats"])
    assert "Verified   : 1" in caplog.text


def test_invalid_transition_exits_nonzero(state_file):
    interact.main(["--backend", "file", "submit", "AI/ML", "8", "PyTorch"])
    [record_id] = _index(state_file)
    interact.main(["--backend", "file", "reject", record_id])

    with pytest.raises(SystemExit) as exc:
        interact.main(["--backend", "file", "verify", record_id])
    assert exc.value.code == 1


def test_experience_out_of_range(state_file):
    with pytest.raises(SystemExit) as exc:
        interact.main(["--backend", "file", "submit", "AI/ML", "120", "PyTorch"])
    assert exc.value.code == 1
    assert not state_file.exists()


def test_reconcile_command(state_file, caplog):
    interact.main(["--backend", "file", "submit", "AI/ML", "8", "PyTorch"])
    caplog.set_level(logging.INFO, logger="skillgraph")
    interact.main(["--backend", "file", "reconcile"])
    assert "Index already complete" in caplog.text
