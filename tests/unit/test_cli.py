"""
Unit tests for the lexsearch command line
"""

import json
import os

import pytest

from lexsearch import cli


@pytest.fixture
def docs_folder(tmp_path):
    root = tmp_path / "docs"
    root.mkdir()
    (root / "a.xml").write_bytes(b"<doc>the cat sat</doc>")
    (root / "b.xml").write_bytes(b"<doc>the cat ran ran</doc>")
    (root / "broken.xml").write_bytes(b"<doc>")
    return root


class TestIndexCommand:
    """lexsearch index <folder>"""

    def test_index_writes_model(self, docs_folder, tmp_path):
        output = tmp_path / "index.json"

        assert cli.main(["index", str(docs_folder), "-o", str(output)]) == 0

        data = json.loads(output.read_text(encoding="utf-8"))
        assert set(data["docs"]) == {str(docs_folder / "a.xml"), str(docs_folder / "b.xml")}
        assert data["df"]["RAN"] == 1

    def test_parallel_index_matches_sequential(self, docs_folder, tmp_path):
        sequential = tmp_path / "seq.json"
        parallel = tmp_path / "par.json"

        assert cli.main(["index", str(docs_folder), "-o", str(sequential)]) == 0
        assert cli.main(["index", str(docs_folder), "-o", str(parallel), "--workers", "3"]) == 0

        assert json.loads(sequential.read_text()) == json.loads(parallel.read_text())

    def test_missing_folder(self, tmp_path):
        output = tmp_path / "index.json"
        assert cli.main(["index", str(tmp_path / "missing"), "-o", str(output)]) == 1
        assert not output.exists()

    def test_undecodable_file_name_does_not_abort(self, docs_folder, tmp_path, write_undecodable_name):
        write_undecodable_name(docs_folder)
        output = tmp_path / "index.json"

        assert cli.main(["index", str(docs_folder), "-o", str(output)]) == 0

        data = json.loads(output.read_text(encoding="utf-8"))
        assert set(data["docs"]) == {str(docs_folder / "a.xml"), str(docs_folder / "b.xml")}

    def test_invalid_workers(self, docs_folder, tmp_path):
        assert cli.main(["index", str(docs_folder), "-o", str(tmp_path / "x.json"), "--workers", "0"]) == 1

    def test_default_output_from_env(self, docs_folder, tmp_path, monkeypatch):
        monkeypatch.setenv("LEXSEARCH_INDEX_PATH", str(tmp_path / "from-env.json"))
        cli.get_settings.cache_clear()

        assert cli.main(["index", str(docs_folder)]) == 0
        assert (tmp_path / "from-env.json").exists()


class TestCheckAndSearch:
    """lexsearch check / search"""

    @pytest.fixture
    def index_file(self, docs_folder, tmp_path):
        output = tmp_path / "index.json"
        assert cli.main(["index", str(docs_folder), "-o", str(output)]) == 0
        return output

    def test_check(self, index_file, capsys):
        assert cli.main(["check", str(index_file)]) == 0
        assert "contains 2 files" in capsys.readouterr().out

    def test_search(self, index_file, docs_folder, capsys):
        assert cli.main(["search", str(index_file), "ran"]) == 0

        lines = capsys.readouterr().out.splitlines()
        assert len(lines) == 2
        assert lines[0].strip().startswith(str(docs_folder / "b.xml"))

    def test_search_top(self, index_file, capsys):
        assert cli.main(["search", str(index_file), "the", "cat", "--top", "1"]) == 0
        assert len(capsys.readouterr().out.splitlines()) == 1

    def test_search_rejects_invalid_utf8_query(self, index_file, capsys):
        query = os.fsdecode(b"ran\xff")
        assert cli.main(["search", str(index_file), query]) == 1
        assert capsys.readouterr().out == ""

    def test_missing_index(self, tmp_path):
        assert cli.main(["check", str(tmp_path / "missing.json")]) == 1

    def test_corrupt_index(self, tmp_path):
        path = tmp_path / "index.json"
        path.write_text("{broken", encoding="utf-8")
        assert cli.main(["search", str(path), "cat"]) == 1


class TestParser:
    def test_subcommand_required(self):
        with pytest.raises(SystemExit):
            cli.main([])

    def test_unknown_subcommand(self):
        with pytest.raises(SystemExit):
            cli.main(["frobnicate"])

    def test_serve_rejects_bad_address(self, tmp_path, cat_model):
        from lexsearch.storage import IndexStore

        path = IndexStore(tmp_path / "index.json").save(cat_model)
        assert cli.main(["serve", str(path), "no-port-here"]) == 1
