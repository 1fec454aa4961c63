"""Tests for the reader, writer, pipeline and CLI commands."""

import json

import numpy as np
import pytest
from click.testing import CliRunner

from mscr.cli import main
from mscr.config import PipelineConfig, SamplerConfig
from mscr.errors import InvalidValue
from mscr.io.reader import read_matrix
from mscr.io.writer import write_matrix
from mscr.pipeline import run_preparation


@pytest.fixture
def tables(tmp_path, small_histories):
    capture, test = small_histories
    capture = capture.copy()
    capture[1, 4] = np.nan
    write_matrix(tmp_path / "capture.csv", capture)
    write_matrix(tmp_path / "test.csv", test)
    return tmp_path / "capture.csv", tmp_path / "test.csv"


class TestReader:
    def test_round_trip_with_missing(self, tables):
        capture_path, _ = tables
        m = read_matrix(capture_path)
        assert m.shape == (4, 5)
        assert np.isnan(m[1, 4])
        assert m[0, 0] == 1.0

    def test_header_and_whitespace(self, tmp_path):
        path = tmp_path / "t.txt"
        path.write_text("o1 o2 o3\n1 0 NA\n0 1 1\n")
        m = read_matrix(path, delimiter=None, header=True)
        assert m.shape == (2, 3)
        assert np.isnan(m[0, 2])

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_matrix(tmp_path / "nope.csv")

    def test_unparseable_token_raises(self, tmp_path):
        """A non-numeric cell is rejected with its position, not read as missing."""
        path = tmp_path / "c.csv"
        path.write_text("1,yes,1\n1,0,1\n")
        with pytest.raises(InvalidValue) as exc:
            read_matrix(path)
        assert (exc.value.row, exc.value.col) == (0, 1)
        assert exc.value.value == "yes"

    def test_empty_field_is_missing(self, tmp_path):
        path = tmp_path / "c.csv"
        path.write_text("1,,0\n0,1,NA\n")
        m = read_matrix(path)
        assert np.isnan(m[0, 1])
        assert np.isnan(m[1, 2])
        assert m[1, 1] == 1.0

    def test_single_column_keeps_individuals_on_rows(self, tmp_path):
        path = tmp_path / "c.csv"
        path.write_text("1\n0\n1\n")
        assert read_matrix(path).shape == (3, 1)

    def test_single_row(self, tmp_path):
        path = tmp_path / "c.csv"
        path.write_text("1,0,1\n")
        assert read_matrix(path).shape == (1, 3)


class TestPipeline:
    def test_writes_bundle(self, tables, tmp_path):
        capture_path, test_path = tables
        out = tmp_path / "out"
        config = PipelineConfig(
            capture_path=capture_path,
            test_path=test_path,
            output_dir=out,
            sampler=SamplerConfig(n_chains=2, seed=1),
        )
        bundle, paths = run_preparation(config)

        assert set(paths) == {"data", "model", "inits_chain1", "inits_chain2"}
        data = np.load(paths["data"])
        np.testing.assert_array_equal(data["y"], bundle.data.y)
        np.testing.assert_array_equal(data["first"], [0, 1, 4, 0])

        inits = np.load(paths["inits_chain1"])
        assert 0.0 <= float(inits["phi_a"]) <= 1.0
        assert inits["z"].shape == (4, 5)

        model = json.loads(paths["model"].read_text())
        assert model["sampler"]["n_chains"] == 2
        assert model["monitored"] == ["phi_a", "phi_b", "psi_ab", "psi_ba", "p_a", "p_b"]

    def test_drop_never_detected(self, tmp_path, small_histories):
        capture, test = small_histories
        capture = np.vstack([capture, np.zeros((1, 5))])
        test = np.vstack([test, np.zeros((1, 5))])
        write_matrix(tmp_path / "c.csv", capture)
        write_matrix(tmp_path / "t.csv", test)

        config = PipelineConfig(
            capture_path=tmp_path / "c.csv",
            test_path=tmp_path / "t.csv",
            output_dir=tmp_path / "out",
            drop_never_detected=True,
        )
        bundle, _ = run_preparation(config)
        assert bundle.data.n_individuals == 4
        kept = np.loadtxt(tmp_path / "out" / "kept_rows.txt", dtype=int)
        np.testing.assert_array_equal(kept, [0, 1, 2, 3])

    def test_single_occasion_rejected(self, tmp_path):
        (tmp_path / "c.csv").write_text("1\n1\n1\n")
        (tmp_path / "t.csv").write_text("0\n1\n0\n")
        config = PipelineConfig(
            capture_path=tmp_path / "c.csv",
            test_path=tmp_path / "t.csv",
            output_dir=tmp_path / "out",
        )
        with pytest.raises(ValueError, match="at least 2 occasions"):
            run_preparation(config)

    def test_missing_input(self, tmp_path):
        config = PipelineConfig(
            capture_path=tmp_path / "missing.csv",
            test_path=tmp_path / "missing.csv",
            output_dir=tmp_path / "out",
        )
        with pytest.raises(FileNotFoundError):
            run_preparation(config)


class TestCLI:
    def test_prepare_and_inspect(self, tables, tmp_path):
        capture_path, test_path = tables
        out = tmp_path / "bundle"
        runner = CliRunner()

        result = runner.invoke(main, [
            "prepare", "--capture", str(capture_path), "--test", str(test_path),
            "--output-dir", str(out), "--chains", "2", "--seed", "3",
        ])
        assert result.exit_code == 0, result.output
        assert "4 individuals x 5 occasions" in result.output
        assert (out / "inits_chain2.npz").exists()

        result = runner.invoke(main, ["inspect-bundle", "--output-dir", str(out)])
        assert result.exit_code == 0, result.output
        assert "Individuals: 4" in result.output
        assert "Monitored: phi_a" in result.output

    def test_prepare_never_detected_fails(self, tmp_path):
        write_matrix(tmp_path / "c.csv", np.array([[1, 0], [0, 0]]))
        write_matrix(tmp_path / "t.csv", np.zeros((2, 2)))
        result = CliRunner().invoke(main, [
            "prepare", "--capture", str(tmp_path / "c.csv"),
            "--test", str(tmp_path / "t.csv"), "--output-dir", str(tmp_path / "out"),
        ])
        assert result.exit_code != 0
        assert "never detected" in str(result.exception)

    def test_simulate_then_prepare(self, tmp_path):
        runner = CliRunner()
        sim_dir = tmp_path / "sim"
        result = runner.invoke(main, [
            "simulate", "--output-dir", str(sim_dir), "--occasions", "4",
            "--released", "10", "--seed", "1",
        ])
        assert result.exit_code == 0, result.output
        assert read_matrix(sim_dir / "capture.csv").shape == (30, 4)

        result = runner.invoke(main, [
            "prepare", "--capture", str(sim_dir / "capture.csv"),
            "--test", str(sim_dir / "test.csv"), "--output-dir", str(tmp_path / "out"),
        ])
        assert result.exit_code == 0, result.output

    def test_prepare_with_priors(self, tables, tmp_path):
        capture_path, test_path = tables
        out = tmp_path / "bundle"
        result = CliRunner().invoke(main, [
            "prepare", "--capture", str(capture_path), "--test", str(test_path),
            "--output-dir", str(out), "--seed", "2",
            "--prior", "phi_a", "0.5", "0.9", "--prior", "p_b", "0.1", "0.3",
        ])
        assert result.exit_code == 0, result.output

        model = json.loads((out / "model.json").read_text())
        assert model["priors"]["phi_a"]["lower"] == 0.5
        assert model["priors"]["phi_a"]["upper"] == 0.9
        assert model["priors"]["p_b"]["upper"] == 0.3
        assert model["priors"]["psi_ab"]["lower"] == 0.0

        inits = np.load(out / "inits_chain1.npz")
        assert 0.5 <= float(inits["phi_a"]) <= 0.9

    def test_prepare_rejects_bad_prior(self, tables, tmp_path):
        capture_path, test_path = tables
        runner = CliRunner()
        args = ["prepare", "--capture", str(capture_path), "--test", str(test_path),
                "--output-dir", str(tmp_path / "out")]

        result = runner.invoke(main, args + ["--prior", "phi_a", "0.9", "0.5"])
        assert result.exit_code == 2
        assert "phi_a" in result.output

        result = runner.invoke(main, args + ["--prior", "omega", "0.1", "0.5"])
        assert result.exit_code == 2
