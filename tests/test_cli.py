from __future__ import annotations

import json
from pathlib import Path

import pytest

from trimcheck.cli import main

RUC = "System.Diagnostics.CodeAnalysis.RequiresUnreferencedCodeAttribute"

MODEL = f"""
compilation:
  name: App
  properties: {{PublishTrimmed: "{{trimmed}}"}}
types:
  - name: Marked
    members:
      - name: M
        attributes:
          - {{type: {RUC}, arguments: ["Uses reflection"]}}
  - name: Program
    members:
      - name: Main
        body:
          - {{kind: invocation, target: Marked.M, location: "Program.cs:3:5"}}
"""


def _model(tmp_path: Path, trimmed: str = "true") -> Path:
    p = tmp_path / "app.model.yaml"
    p.write_text(MODEL.replace("{trimmed}", trimmed), encoding="utf-8")
    return p


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path: Path, monkeypatch):
    # keep config auto-discovery away from the repository's own files
    monkeypatch.chdir(tmp_path)


def test_text_output(tmp_path: Path, capsys):
    code = main(["check", str(_model(tmp_path))])
    out = capsys.readouterr().out
    assert code == 0
    assert "Program.cs(3,5): warning IL2026: Calling 'Marked.M()'" in out
    assert "Uses reflection." in out
    assert "1 warning(s)" in out


def test_json_output(tmp_path: Path, capsys):
    code = main(["check", str(_model(tmp_path)), "--json"])
    data = json.loads(capsys.readouterr().out)
    assert code == 0
    assert data["compilation"] == "App"
    assert data["total_findings"] == 1
    detail = data["finding_details"][0]
    assert detail["id"] == "IL2026"
    assert detail["member"] == "Marked.M()"
    assert detail["caller"] == "Program.Main()"
    assert detail["location"] == {"file": "Program.cs", "line": 3, "column": 5}


def test_trimming_disabled(tmp_path: Path, capsys):
    code = main(["check", str(_model(tmp_path, trimmed="false"))])
    assert code == 0
    assert "No trimming hazards found." in capsys.readouterr().out


def test_publish_trimmed_flag_overrides_model(tmp_path: Path, capsys):
    main(["check", str(_model(tmp_path, trimmed="false")), "--publish-trimmed", "true"])
    assert "IL2026" in capsys.readouterr().out


def test_warnings_as_errors(tmp_path: Path):
    assert main(["check", str(_model(tmp_path)), "--warnings-as-errors"]) == 1


def test_config_file_is_discovered(tmp_path: Path, capsys):
    (tmp_path / "trimcheck.yaml").write_text("exclude: ['Program.cs']\n", encoding="utf-8")
    main(["check", str(_model(tmp_path))])
    assert "No trimming hazards found." in capsys.readouterr().out


def test_bad_model_exits_2(tmp_path: Path, capsys):
    bad = tmp_path / "bad.yaml"
    bad.write_text("types: 5\n", encoding="utf-8")
    assert main(["check", str(bad)]) == 2
    assert "error:" in capsys.readouterr().err


def test_missing_model_exits_2(tmp_path: Path, capsys):
    assert main(["check", str(tmp_path / "missing.yaml")]) == 2


def test_init_writes_config(tmp_path: Path):
    assert main(["init"]) == 0
    assert (tmp_path / "trimcheck.yaml").exists()
    assert main(["init"]) == 2
    assert main(["init", "--force"]) == 0


def test_graph_writes_dot(tmp_path: Path, monkeypatch):
    import trimcheck.graphviz_render as gr

    def fake_render(findings, output_base, fmt="svg"):
        dot = gr.build_findings_graph(findings)
        dot.save(f"{output_base}.dot")
        return f"{output_base}.dot", ""

    monkeypatch.setattr(gr, "render_findings_graph", fake_render)
    code = main(["check", str(_model(tmp_path)), "--graph", "--output", str(tmp_path / "out")])
    assert code == 0
    assert (tmp_path / "out" / "trimcheck.dot").exists()


def test_no_command_prints_help(capsys):
    assert main([]) == 0
    assert "usage" in capsys.readouterr().out.lower()


@pytest.mark.parametrize(
    "content",
    [
        b"types: [\n  - {name: X\n",
        b"types: [{name: \xff\xfe}]\n",
        b"types: [{name: C, members: [{name: M, parameters: 5}]}]\n",
    ],
    ids=["malformed-yaml", "not-utf8", "parameters-not-a-list"],
)
def test_unreadable_model_exits_2(tmp_path: Path, capsys, content: bytes):
    bad = tmp_path / "bad.yaml"
    bad.write_bytes(content)
    assert main(["check", str(bad)]) == 2
    assert "error:" in capsys.readouterr().err


def test_malformed_toml_config_exits_2(tmp_path: Path, capsys):
    cfg = tmp_path / "x.toml"
    cfg.write_text("[tool.trimcheck\n", encoding="utf-8")
    assert main(["check", str(_model(tmp_path)), "--config", str(cfg)]) == 2
    assert "error:" in capsys.readouterr().err


def test_malformed_yaml_config_exits_2(tmp_path: Path, capsys):
    (tmp_path / "trimcheck.yaml").write_text("exclude: [\n", encoding="utf-8")
    assert main(["check", str(_model(tmp_path))]) == 2
    assert "error:" in capsys.readouterr().err
