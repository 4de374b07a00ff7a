"""Tests for the command line runner."""

import json

import pytest

from legionella_src.runner import build_samples, load_rows, main, parse_sample_arg
from legionella_src.rules.schemas import INTERFERED, Channel, ValidationError
from legionella_src.rules.ufc_criteria import INTERFERENCE_NOTICE


class TestParseSampleArg:
    """Test TYPE=d,n_1,n_2 parsing."""

    def test_valid(self):
        """Test counts are split onto the three channels."""
        assert parse_sample_arg("A=0,0,50") == ("A", {"d": "0", "n_1": "0", "n_2": "50"})

    @pytest.mark.parametrize("value", ["A", "A=1,2", "=1,2,3", "A=1,2,3,4"])
    def test_invalid(self, value):
        """Test malformed sample arguments are rejected."""
        with pytest.raises(Exception):
            parse_sample_arg(value)


class TestBuildSamples:
    """Test per-cell interference marks."""

    def test_x_marks_channel_interfered(self):
        """Test an x cell becomes an interfered reading."""
        samples = build_samples({"B": {"d": "5", "n_1": "0", "n_2": "x"}}, set())
        assert samples["B"].filtrate_100ml is INTERFERED
        assert samples["B"].to_counts() == (5, 0, -1)

    def test_global_interference(self):
        """Test --interfered channels apply to every row."""
        samples = build_samples({"A": {"d": "5", "n_1": "0", "n_2": "0"}}, {Channel.DIRECT})
        assert samples["A"].direct is INTERFERED


class TestLoadRows:
    """Test reading counts from files."""

    def test_csv(self, tmp_path):
        """Test CSV rows are keyed by the type column."""
        path = tmp_path / "counts.csv"
        path.write_text("type,d,n_1,n_2\nA,0,0,50\nB,5,0,x\n", encoding="utf-8")
        rows, interfered = load_rows(path)
        assert list(rows) == ["A", "B"]
        assert rows["A"]["n_2"] == "50"
        assert interfered == []

    def test_csv_without_type_column(self, tmp_path):
        """Test a CSV file must name its sample types."""
        path = tmp_path / "counts.csv"
        path.write_text("d,n_1,n_2\n0,0,50\n", encoding="utf-8")
        with pytest.raises(ValidationError, match="'type' column"):
            load_rows(path)

    def test_json_with_interference(self, tmp_path):
        """Test the samples/interfered JSON layout."""
        path = tmp_path / "counts.json"
        path.write_text(json.dumps({
            "samples": {"A": {"d": 0, "n_1": 0, "n_2": 50}},
            "interfered": ["n_1"],
        }), encoding="utf-8")
        rows, interfered = load_rows(path)
        assert rows == {"A": {"d": 0, "n_1": 0, "n_2": 50}}
        assert interfered == ["n_1"]

    @pytest.mark.parametrize("data,message", [
        ({"samples": [1, 2]}, "'samples'"),
        ({"samples": {"A": {}}, "interfered": "n_1"}, "'interfered'"),
        ([1, 2, 3], "must be an object"),
    ])
    def test_json_wrong_shape(self, tmp_path, data, message):
        """Test JSON with misplaced lists is rejected as invalid input."""
        path = tmp_path / "counts.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        with pytest.raises(ValidationError, match=message):
            load_rows(path)

    @pytest.mark.parametrize("name", ["counts.csv", "counts.json"])
    def test_non_utf8_file(self, tmp_path, name):
        """Test undecodable bytes raise ValidationError, not UnicodeDecodeError."""
        path = tmp_path / name
        path.write_bytes(b"type,d,n_1,n_2\nA,\xff,0,0\n")
        with pytest.raises(ValidationError, match="UTF-8"):
            load_rows(path)


class TestMain:
    """Test the CLI end to end."""

    def test_text_report(self, capsys):
        """Test one line per reported type plus the notice."""
        code = main(["--sample", "A=0,0,50", "--sample", "B=0,0,0", "--sample", "C=5,0,x"])
        out = capsys.readouterr().out
        assert code == 0
        assert "Type A: Concentration : 500 UFC/L" in out
        assert "Type B" not in out
        assert "Type C: Concentration : 25000 UFC/L" in out
        assert INTERFERENCE_NOTICE in out

    def test_json_report(self, capsys):
        """Test --json prints the report dictionary."""
        code = main(["--sample", "A=200,0,0", "--json"])
        data = json.loads(capsys.readouterr().out)
        assert code == 0
        assert data["results"]["A"]["message"] == ">750 000 UFC/L"
        assert data["interference_detected"] is False

    def test_input_file_and_global_interference(self, tmp_path, capsys):
        """Test file counts combined with --interfered channels."""
        path = tmp_path / "counts.csv"
        path.write_text("type,d,n_1,n_2\nA,3,0,0\nB,0,0,0\n", encoding="utf-8")
        code = main(["--input", str(path), "--interfered", "n_1", "n_2"])
        out = capsys.readouterr().out
        assert code == 0
        assert "Type A: Concentration : 15000 UFC/L" in out
        assert "Type B" not in out
        assert INTERFERENCE_NOTICE in out

    def test_interference_only_prints_notice(self, capsys):
        """Test interfered channels without counts report no type."""
        assert main(["--sample", "A=x,0,0", "--sample", "B=0,0,0"]) == 0
        out = capsys.readouterr().out
        assert "Type" not in out
        assert out.strip() == INTERFERENCE_NOTICE

    def test_nothing_to_report(self, capsys):
        """Test an all-zero sheet prints a placeholder line."""
        assert main(["--sample", "A=0,0,0"]) == 0
        assert "Nothing to report." in capsys.readouterr().out

    def test_invalid_count(self, capsys):
        """Test a negative count exits with status 2."""
        code = main(["--sample", "A=-3,0,0"])
        assert code == 2
        assert "Type A" in capsys.readouterr().err

    def test_missing_file(self, tmp_path):
        """Test an unreadable file exits with status 2."""
        assert main(["--input", str(tmp_path / "missing.json")]) == 2

    def test_misshapen_json_file(self, tmp_path, capsys):
        """Test a samples list exits with status 2 instead of a traceback."""
        path = tmp_path / "counts.json"
        path.write_text(json.dumps({"samples": [1, 2]}), encoding="utf-8")
        assert main(["--input", str(path)]) == 2
        assert capsys.readouterr().err.startswith("Error:")

    def test_non_utf8_file(self, tmp_path, capsys):
        """Test a non UTF-8 CSV exits with status 2 instead of a traceback."""
        path = tmp_path / "counts.csv"
        path.write_bytes(b"type,d,n_1,n_2\nA,\xff,0,0\n")
        assert main(["--input", str(path)]) == 2
        assert "UTF-8" in capsys.readouterr().err

    def test_no_counts_given(self):
        """Test missing counts is a usage error."""
        with pytest.raises(SystemExit) as exc:
            main([])
        assert exc.value.code == 2
