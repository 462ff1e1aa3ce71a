from __future__ import annotations

import json
from pathlib import Path

import typer
from typer.testing import CliRunner

from pkgexplorer.bundle.io import read_package
from pkgexplorer.cli.common import LaunchViewer
from pkgexplorer.cli.main import app
from pkgexplorer.core.content import BytesContent, read_bytes

from conftest import DEMO_FILES, write_demo_package


def _paths(pkg: Path) -> set[str]:
    return {p for p, _ in read_package(pkg).entries}


def test_version_command():
    from pkgexplorer import __version__

    res = CliRunner().invoke(app, ["version"])
    assert res.exit_code == 0
    assert res.stdout.strip() == __version__


def test_ls_prints_and_writes_csv(tmp_path: Path):
    runner = CliRunner()
    pkg = write_demo_package(tmp_path / "demo.pkg")

    res = runner.invoke(app, ["ls", str(pkg)])
    assert res.exit_code == 0
    assert "lib/net45/Foo.dll" in res.stdout

    out = tmp_path / "files.csv"
    res2 = runner.invoke(app, ["ls", str(pkg), "--csv", str(out)])
    assert res2.exit_code == 0
    assert out.read_text(encoding="utf-8").splitlines()[0] == "path,folder,name,size,sha256"


def test_cat_prints_text_and_rejects_binary(tmp_path: Path):
    runner = CliRunner()
    pkg = write_demo_package(tmp_path / "demo.pkg")

    res = runner.invoke(app, ["cat", str(pkg), "content/readme.txt"])
    assert res.exit_code == 0
    assert res.stdout == "hello\n"

    res2 = runner.invoke(app, ["cat", str(pkg), "lib/net45/Foo.dll"])
    assert res2.exit_code == 1

    res3 = runner.invoke(app, ["cat", str(pkg), "nope.txt"])
    assert res3.exit_code == 2


def test_check_reports_ok_and_incomplete(tmp_path: Path):
    runner = CliRunner()
    good = write_demo_package(tmp_path / "good.pkg")
    empty = write_demo_package(tmp_path / "empty.pkg", files={})

    assert runner.invoke(app, ["check", str(good), "--validate-hashes"]).exit_code == 0
    res = runner.invoke(app, ["check", str(empty)])
    assert res.exit_code == 1


def test_export_and_manifest_confirmation(tmp_path: Path):
    runner = CliRunner()
    pkg = write_demo_package(tmp_path / "demo.pkg")
    dest = tmp_path / "out"
    dest.mkdir()

    res = runner.invoke(app, ["export", str(pkg), str(dest)])
    assert res.exit_code == 0
    manifest = dest / "Demo.Package.manifest.json"
    assert json.loads(manifest.read_text(encoding="utf-8"))["metadata"]["id"] == "Demo.Package"
    assert (dest / "content" / "readme.txt").read_bytes() == b"hello\n"

    manifest.write_text("keep", encoding="utf-8")
    res2 = runner.invoke(app, ["export-manifest", str(pkg), str(manifest)], input="n\n")
    assert res2.exit_code == 1
    assert manifest.read_text(encoding="utf-8") == "keep"

    res3 = runner.invoke(app, ["export-manifest", str(pkg), str(manifest), "--yes"])
    assert res3.exit_code == 0
    assert manifest.read_text(encoding="utf-8") != "keep"


def test_export_to_missing_directory_is_bad_parameter(tmp_path: Path):
    pkg = write_demo_package(tmp_path / "demo.pkg")
    res = CliRunner().invoke(app, ["export", str(pkg), str(tmp_path / "missing")])
    assert res.exit_code == 2
    assert not (tmp_path / "missing").exists()


def test_add_rm_mv_edit_package(tmp_path: Path):
    runner = CliRunner()
    pkg = write_demo_package(tmp_path / "demo.pkg")
    src = tmp_path / "tools"
    src.mkdir()
    (src / "install.ps1").write_text("echo hi\n", encoding="utf-8")

    assert runner.invoke(app, ["add", str(pkg), str(src)]).exit_code == 0
    assert "tools/install.ps1" in _paths(pkg)

    out = tmp_path / "moved.pkg"
    res = runner.invoke(app, ["mv", str(pkg), "content/readme.txt", "docs", "--name", "README.txt", "--out", str(out)])
    assert res.exit_code == 0
    assert "docs/README.txt" in _paths(out)
    assert "content/readme.txt" in _paths(pkg)

    assert runner.invoke(app, ["rm", str(pkg), "lib"]).exit_code == 0
    assert _paths(pkg) == {"content/readme.txt", "tools/install.ps1"}

    assert runner.invoke(app, ["add", str(pkg), str(src)]).exit_code == 2


def test_set_field_commits_and_saves(tmp_path: Path):
    runner = CliRunner()
    pkg = write_demo_package(tmp_path / "demo.pkg")

    res = runner.invoke(app, ["set", str(pkg), "version", "2.1.0"])
    assert res.exit_code == 0
    assert read_package(pkg).metadata.version == "2.1.0"

    res2 = runner.invoke(app, ["set", str(pkg), "dependencies", "A 1.0, B"])
    assert res2.exit_code == 0
    deps = read_package(pkg).metadata.dependencies
    assert [(d.id, d.version_spec) for d in deps] == [("A", "1.0"), ("B", "")]

    res3 = runner.invoke(app, ["set", str(pkg), "version", "bogus"])
    assert res3.exit_code == 2
    assert read_package(pkg).metadata.version == "2.1.0"

    assert runner.invoke(app, ["set", str(pkg), "nope", "x"]).exit_code == 2


def test_saved_content_matches_original_bytes(tmp_path: Path):
    pkg = write_demo_package(tmp_path / "demo.pkg")
    assert CliRunner().invoke(app, ["set", str(pkg), "title", "T"]).exit_code == 0
    src = read_package(pkg, validate_hashes=True)
    assert {p: read_bytes(c) for p, c in src.entries} == DEMO_FILES


def test_mv_renames_against_destination_folder(tmp_path: Path):
    runner = CliRunner()
    pkg = write_demo_package(tmp_path / "demo.pkg")

    res = runner.invoke(app, ["mv", str(pkg), "lib/net45/Foo.dll", "content", "--name", "Bar.dll"])
    assert res.exit_code == 0, res.output
    assert {"content/Bar.dll", "content/readme.txt"} <= _paths(pkg)
    assert "lib/net45/Foo.dll" not in _paths(pkg)

    res = runner.invoke(app, ["mv", str(pkg), "content/Bar.dll", "content", "--name", "readme.txt"])
    assert res.exit_code == 2
    assert "content/Bar.dll" in _paths(pkg)


def test_export_fails_when_manifest_overwrite_declined(tmp_path: Path):
    runner = CliRunner()
    pkg = write_demo_package(tmp_path / "demo.pkg")
    dest = tmp_path / "out"
    dest.mkdir()
    manifest = dest / "Demo.Package.manifest.json"
    manifest.write_text("keep", encoding="utf-8")

    res = runner.invoke(app, ["export", str(pkg), str(dest)], input="n\n")
    assert res.exit_code == 1
    assert manifest.read_text(encoding="utf-8") == "keep"
    assert (dest / "content" / "readme.txt").read_bytes() == b"hello\n"

    res = runner.invoke(app, ["export", str(pkg), str(dest), "--yes"])
    assert res.exit_code == 0
    assert manifest.read_text(encoding="utf-8") != "keep"


def test_launch_viewer_reuses_one_directory(tmp_path: Path, monkeypatch):
    launched: list[str] = []
    monkeypatch.setattr(typer, "launch", lambda target, **kw: launched.append(target) or 0)
    viewer = LaunchViewer(view_dir=tmp_path / "view")

    viewer.open("readme.txt", BytesContent(b"one"))
    viewer.open("readme.txt", BytesContent(b"two"))

    assert [p.name for p in (tmp_path / "view").iterdir()] == ["readme.txt"]
    assert (tmp_path / "view" / "readme.txt").read_bytes() == b"two"
    assert launched == [str(tmp_path / "view" / "readme.txt")] * 2
