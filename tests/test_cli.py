"""End-to-end tests for the social-graph command line."""

import json

import pytest

from social_graph.cli import main
from social_graph.importer import write_social_dir


@pytest.fixture
def social_dir(tmp_path, monkeypatch):
    monkeypatch.delenv("SOCIAL_DB_URL", raising=False)
    monkeypatch.delenv("SOCIAL_HANDLE", raising=False)
    path = write_social_dir(
        tmp_path / "social",
        [{"handle": "@drift", "community": "memory"}, {"handle": "@spin"}, {"handle": "@lex"}],
        [
            {"from": "@drift", "to": "@spin", "type": "mention", "strength": 0.9},
            {"from": "@spin", "to": "@lex", "type": "comment"},
        ],
        [{"author_handle": "@spin", "content": "memory decay notes", "timestamp": "2026-01-01T00:00:00Z"}],
    )
    (path / "baseline.json").write_text(json.dumps({
        "identity": {"name": "Drift"},
        "agent": {"amikonet_handle": "@drift"},
        "capabilities": {"interests": ["ai"]},
    }), encoding="utf-8")
    return path


def run(social_dir, *argv):
    return main(["--social-path", str(social_dir), *argv])


class TestQueries:
    def test_path(self, social_dir, capsys):
        assert run(social_dir, "--json", "path", "drift", "lex") == 0
        out = json.loads(capsys.readouterr().out)
        assert out["path"] == ["@drift", "@spin", "@lex"]

    def test_queries_do_not_create_db(self, social_dir, capsys):
        assert run(social_dir, "path", "@drift", "@lex") == 0
        assert run(social_dir, "status") == 0
        assert not (social_dir / "social_graph.db").exists()

    def test_path_text(self, social_dir, capsys):
        assert run(social_dir, "path", "@drift", "@lex") == 0
        assert "@drift -> @spin -> @lex" in capsys.readouterr().out

    def test_unknown_node_exits_nonzero(self, social_dir, capsys):
        assert run(social_dir, "neighbors", "@nobody") == 1
        assert "Node not found" in capsys.readouterr().err

    def test_neighbors(self, social_dir, capsys):
        assert run(social_dir, "--json", "neighbors", "@spin", "--hops", "1") == 0
        out = json.loads(capsys.readouterr().out)
        assert set(out["keys"]) == {"@spin", "@drift", "@lex"}

    def test_common(self, social_dir, capsys):
        assert run(social_dir, "--json", "common", "@drift", "@lex") == 0
        assert json.loads(capsys.readouterr().out)["common"] == ["@spin"]

    def test_centrality(self, social_dir, capsys):
        assert run(social_dir, "--json", "centrality", "--metric", "degree", "--top", "1") == 0
        assert json.loads(capsys.readouterr().out)["results"] == [["@spin", 2]]

    def test_communities(self, social_dir, capsys):
        assert run(social_dir, "communities", "--tie-break", "lexicographic") == 0
        assert "Communities found" in capsys.readouterr().out


class TestFeedAndStatus:
    def test_feed_records_run(self, social_dir, capsys):
        assert run(social_dir, "--json", "feed") == 0
        result = json.loads(capsys.readouterr().out)
        assert result["profile"]["handle"] == "@drift"
        assert result["feed"][0]["author_handle"] == "@spin"

        assert run(social_dir, "--json", "status") == 0
        status = json.loads(capsys.readouterr().out)
        assert status["feed"]["items_count"] == 1
        assert status["graph"]["edges"] == 2

    def test_feed_text(self, social_dir, capsys):
        assert run(social_dir, "feed") == 0
        out = capsys.readouterr().out
        assert "YOUR FEED" in out
        assert "COMMUNITY" in out

    def test_feed_without_baseline(self, tmp_path, capsys, monkeypatch):
        monkeypatch.delenv("SOCIAL_DB_URL", raising=False)
        monkeypatch.delenv("SOCIAL_HANDLE", raising=False)
        assert main(["--social-path", str(tmp_path), "feed"]) == 1
        assert "Baseline not found" in capsys.readouterr().err

    def test_feed_handle_from_env(self, tmp_path, capsys, monkeypatch):
        monkeypatch.delenv("SOCIAL_DB_URL", raising=False)
        monkeypatch.setenv("SOCIAL_HANDLE", "@me")
        assert main(["--social-path", str(tmp_path), "--json", "feed"]) == 0
        assert json.loads(capsys.readouterr().out)["profile"]["handle"] == "@me"

    def test_status_never_collected(self, social_dir, capsys):
        assert run(social_dir, "status") == 0
        assert "Never collected" in capsys.readouterr().out


class TestImport:
    def test_import_then_query_db(self, social_dir, tmp_path, capsys):
        export = tmp_path / "agents.json"
        export.write_text(json.dumps({
            "agents": [{"handle": "@a"}, {"handle": "@b"}],
            "edges": [{"from": "@a", "to": "@b", "type": "mention"}],
        }), encoding="utf-8")
        assert run(social_dir, "import", str(export)) == 0
        assert "Imported 2 agents" in capsys.readouterr().out
        written = json.loads((social_dir / "nodes.json").read_text(encoding="utf-8"))
        assert [n["handle"] for n in written] == ["@a", "@b"]
        assert (social_dir / "edges.json").exists()
        assert (social_dir / "posts.json").exists()

        # Snapshot DB now takes precedence over the JSON files
        assert run(social_dir, "--json", "path", "@a", "@b") == 0
        assert json.loads(capsys.readouterr().out)["path"] == ["@a", "@b"]

    def test_import_bad_file(self, social_dir, tmp_path, capsys):
        bad = tmp_path / "agents.txt"
        bad.write_text("x", encoding="utf-8")
        assert run(social_dir, "import", str(bad)) == 1
        assert "Unsupported file type" in capsys.readouterr().err

    def test_import_invalid_utf8(self, social_dir, tmp_path, capsys):
        bad = tmp_path / "agents.json"
        bad.write_bytes(b"\xff\xfe[1")
        assert run(social_dir, "import", str(bad)) == 1
        assert "Invalid JSON" in capsys.readouterr().err

    def test_import_missing_file(self, social_dir, tmp_path, capsys):
        assert run(social_dir, "import", str(tmp_path / "missing.json")) == 1


class TestVisualize:
    def test_png_written(self, social_dir, tmp_path, capsys):
        output = tmp_path / "out" / "graph.png"
        assert run(social_dir, "viz", "--output", str(output)) == 0
        assert output.exists()

    def test_empty_graph(self, tmp_path, capsys, monkeypatch):
        monkeypatch.delenv("SOCIAL_DB_URL", raising=False)
        assert main(["--social-path", str(tmp_path), "visualize", "--output", str(tmp_path / "g.png")]) == 1
