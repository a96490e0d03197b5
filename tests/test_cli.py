"""Tests for the statgraph command line."""

import json
from datetime import datetime, timedelta

import pytest
import yaml

from statgraph import __version__
from statgraph.cli import main
from statgraph.errors import TopologyError
from statgraph.storage.topology import HttpTopology

START = datetime(2026, 10, 19, 10, 0, 0)


@pytest.fixture
def config_path(tmp_path):
    stats = tmp_path / "stats"
    path = stats / "2026-10-19" / "ms1" / "datasource" / "jdbc_OrdersDS.csv"
    path.parent.mkdir(parents=True)
    lines = ["DateTime,ActiveConnectionsCurrentCount"]
    for i in range(10):
        lines.append(f"{START + timedelta(minutes=i):%d/%m/%Y %H:%M:%S},{i}")
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")

    cfg = tmp_path / "statgraph.yaml"
    cfg.write_text(yaml.dump({
        "storage": {"output_path": str(stats)},
        "topology": {"hosts": ["ms1", "ms2"]},
    }))
    return cfg


def test_version(capsys):
    main(["version"])
    assert capsys.readouterr().out.strip() == f"statgraph {__version__}"


def test_series_json(config_path, capsys):
    main([
        "--config", str(config_path), "series", "datasource/jdbc_OrdersDS/ActiveConnectionsCurrentCount",
        "--end", "2026-10-19T10:06:00", "--duration", "4", "--json",
    ])
    data = json.loads(capsys.readouterr().out)
    assert data["host_count"] == 2
    assert [len(s["points"]) for s in data["series"]] == [5, 0]


def test_series_table_and_output(config_path, tmp_path, capsys):
    out_file = tmp_path / "out" / "dataset.json"
    main([
        "--config", str(config_path), "series", "datasource/jdbc_OrdersDS/ActiveConnectionsCurrentCount",
        "--end", "19/10/2026 10:09:00", "--duration", "60", "--scope", "ms1", "--output", str(out_file),
    ])
    assert "1 host(s), 10 point(s)" in capsys.readouterr().out
    assert json.loads(out_file.read_text())["series"][0]["label"] == "ms1"


def test_series_bad_path(config_path):
    with pytest.raises(SystemExit) as info:
        main(["--config", str(config_path), "series", "bogus/x/y"])
    assert info.value.code == 1


def test_series_topology_failure(config_path, monkeypatch):
    def unreachable(self):
        raise TopologyError("admin server unreachable")

    monkeypatch.setenv("STATGRAPH_TOPOLOGY_URL", "http://admin:7001/servers")
    monkeypatch.setattr(HttpTopology, "list_hosts", unreachable)
    with pytest.raises(SystemExit) as info:
        main(["--config", str(config_path), "series", "core/HeapFreeCurrent", "--no-table"])
    assert info.value.code == 2


def test_no_command():
    with pytest.raises(SystemExit):
        main([])
