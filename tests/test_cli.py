import json

import main as cli


def test_chunks_command_prints_flattened_profile(tmp_path, capsys):
    kb = tmp_path / "kb.json"
    kb.write_text(json.dumps({"name": "Jordan", "skills": ["Python", "Kafka"]}), encoding="utf-8")

    code = cli.main(["--kb", str(kb), "chunks"])

    out = capsys.readouterr().out
    assert code == 0
    assert "2 chunks" in out
    assert "Python | Kafka" in out


def test_missing_knowledge_base_exits_with_error(tmp_path):
    assert cli.main(["--kb", str(tmp_path / "missing.json"), "chunks"]) == 1


def test_bad_backend_configuration_exits_with_error(tmp_path, monkeypatch):
    kb = tmp_path / "kb.json"
    kb.write_text("{}", encoding="utf-8")
    monkeypatch.setenv("PROFILE_RAG_INDEX_BACKEND", "pinecone")

    assert cli.main(["--kb", str(kb), "ask", "what skills?"]) == 1
