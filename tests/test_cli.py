"""
Tests for the treegen command-line interface.
"""

import json

import pytest


class TestCliListing:
    """Table listing commands."""

    def test_species(self, capsys):
        from treegen.cli import main

        assert main(["species"]) == 0
        out = capsys.readouterr().out
        for name in ("linden", "oak", "maple", "birch", "spruce", "pine", "young", "old"):
            assert name in out

    def test_styles(self, capsys):
        from treegen.cli import main

        assert main(["styles"]) == 0
        out = capsys.readouterr().out
        assert "conifer" in out
        assert "crown=umbrella" in out

    def test_no_command_prints_help(self, capsys):
        from treegen.cli import main

        assert main([]) == 1
        assert "usage" in capsys.readouterr().out

    def test_unknown_generator_is_rejected(self):
        from treegen.cli import main

        with pytest.raises(SystemExit):
            main(["generate", "--generator", "voronoi"])


class TestCliGenerate:
    """The generate command."""

    def test_spec_with_overrides(self, tmp_path):
        from treegen.cli import build_parser, spec_from_args

        spec_path = tmp_path / "spec.json"
        spec_path.write_text(json.dumps({"generator": "organic", "height": 9.0, "seed": 3}))

        args = build_parser().parse_args([
            "generate",
            "--spec", str(spec_path),
            "--seed", "11",
            "--foliage", "palm",
            "--model-scale", "150",
            "--output", str(tmp_path / "out"),
        ])
        spec = spec_from_args(args)

        assert spec.generator == "organic"
        assert spec.height == 9.0
        assert spec.seed == 11
        assert spec.foliage.enabled
        assert spec.foliage.style == "palm"
        assert spec.export.model_scale == 150
        assert spec.export.output_dir == str(tmp_path / "out")

    def test_generate_writes_files(self, tmp_path, capsys):
        from treegen.cli import main

        spec_path = tmp_path / "spec.json"
        spec_path.write_text(json.dumps({"generator": "lsystem", "min_radius": 0.0, "lsystem": {"depth": 2}}))
        out_dir = tmp_path / "out"

        code = main(["generate", "--spec", str(spec_path), "--model-scale", "200", "--output", str(out_dir)])

        assert code == 0
        assert (out_dir / "tree.stl").exists()
        report = json.loads((out_dir / "report.json").read_text())
        assert report["requested_policy"]["export"]["model_scale"] == 200
        assert "Wrote stl" in capsys.readouterr().out

    def test_invalid_height(self, tmp_path, capsys):
        from treegen.cli import main

        code = main(["generate", "--height", "-1", "--output", str(tmp_path)])
        assert code == 2
        assert "height must be positive" in capsys.readouterr().err

    def test_missing_geometry_reports_stage(self, tmp_path, capsys):
        from treegen.cli import main

        spec_path = tmp_path / "spec.json"
        spec_path.write_text(json.dumps({"generator": "attractor", "attractor": {"iterations": 1}}))

        code = main(["generate", "--spec", str(spec_path), "--output", str(tmp_path)])
        assert code == 1
        assert "[assembly]" in capsys.readouterr().err
