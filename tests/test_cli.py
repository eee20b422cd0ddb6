"""Tests for the command-line ingest/export script."""

import importlib.util
import json
import zipfile
from pathlib import Path

import pytest

HEADER = "id,name,category,price,create_date\n"
SCRIPT = Path(__file__).resolve().parent.parent / "scripts" / "prices_cli.py"


@pytest.fixture(scope="module")
def cli():
    spec = importlib.util.spec_from_file_location("prices_cli", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite:///{tmp_path / 'prices.db'}"


def test_ingest_then_export(cli, database_url, tmp_path, make_tar, capsys):
    archive = tmp_path / "prices.tar"
    archive.write_bytes(make_tar({"data.csv": HEADER + "1,Apple,Fruit,1.00,2024-01-01\n2,Milk,Dairy,2.50,2024-03-01\n"}))
    output = tmp_path / "out.zip"

    assert cli.main(["--database-url", database_url, "ingest", str(archive), "--type", "tar"]) == 0
    out = capsys.readouterr().out
    summary = json.loads(out[out.index("{"):])
    assert summary["inserted_count"] == 2
    assert summary["total_price"] == "3.50"

    assert cli.main(["--database-url", database_url, "export", str(output), "--start", "2024-02-01"]) == 0
    with zipfile.ZipFile(output) as exported:
        assert exported.read("data.csv").decode().splitlines()[1:] == ["2,Milk,Dairy,2.50,2024-03-01"]


def test_corrupt_archive_exits_non_zero(cli, database_url, tmp_path):
    archive = tmp_path / "broken.zip"
    archive.write_bytes(b"nope")

    assert cli.main(["--database-url", database_url, "ingest", str(archive)]) == 1


def test_init_db(cli, database_url):
    assert cli.main(["--database-url", database_url, "init-db"]) == 0
