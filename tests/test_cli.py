import struct

from lampcap.cli import main


def test_presets_lists_bundled(capsys):
    assert main(["presets"]) == 0
    out = capsys.readouterr().out.split()
    assert "default" in out
    assert "standing" in out


def test_export_design_file(tmp_path, capsys):
    design = tmp_path / "small.yaml"
    design.write_text(
        "surface:\n"
        "  resolution: low\n"
        "mount: standing\n"
        "slot:\n"
        "  enabled: true\n"
        "  centerline_angle: 45\n"
    )
    out = tmp_path / "small.stl"
    assert main(["export", "--design", str(design), str(out)]) == 0

    data = out.read_bytes()
    count = struct.unpack("<I", data[80:84])[0]
    assert count > 0
    assert len(data) == 84 + 50 * count
    assert "complete" in capsys.readouterr().out


def test_export_ascii(tmp_path):
    design = tmp_path / "plain.yaml"
    design.write_text("surface:\n  resolution: low\n")
    out = tmp_path / "plain.stl"
    assert main(["export", "--design", str(design), "--ascii", str(out)]) == 0
    assert out.read_text().startswith("solid plain")


def test_export_bad_design_reports_error(tmp_path, capsys):
    design = tmp_path / "bad.yaml"
    design.write_text("mount: ceiling\n")
    assert main(["export", "--design", str(design), str(tmp_path / "x.stl")]) == 1
    assert "Error" in capsys.readouterr().err
