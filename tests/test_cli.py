"""Tests for configuration and the command-line interface."""

import pytest

from color_search.cli import main
from color_search.config import DEFAULT_EXTENSIONS, SearchConfig, normalize_extensions


class TestSearchConfig:
    """Tests for configuration defaults and validation."""

    def test_defaults_validate(self):
        config = SearchConfig(depth=3, workers=4, top_n=5)
        config.validate()
        assert config.buckets == 512
        assert config.extensions == DEFAULT_EXTENSIONS

    def test_extensions_normalized(self):
        assert normalize_extensions(["JPG", ".Png", " ", "webp "]) == {".jpg", ".png", ".webp"}
        assert SearchConfig(extensions=["TIF"]).extensions == {".tif"}

    @pytest.mark.parametrize("field,value", [
        ("workers", -1),
        ("top_n", 0),
        ("depth", 12),
        ("workers", 2.0),
        ("top_n", False),
    ])
    def test_invalid_values(self, field, value):
        config = SearchConfig(depth=3, workers=2, top_n=5)
        setattr(config, field, value)
        with pytest.raises(ValueError, match=field):
            config.validate()


class TestCli:
    """Tests for the color-search command."""

    def test_search_prints_ranking(self, query_path, dataset_dir, capsys):
        status = main(["search", query_path, str(dataset_dir), "--workers", "4", "--top-n", "3"])

        out = capsys.readouterr().out
        assert status == 0
        assert "Finding similarity with K=4" in out
        assert "Top 3 similar images:" in out
        assert "1: match.png - Score: 1.000000" in out
        assert "4:" not in out

    def test_search_with_extension_filter(self, query_path, dataset_dir, capsys):
        status = main(["search", query_path, str(dataset_dir), "--ext", "bmp"])
        out = capsys.readouterr().out
        assert status == 0
        assert "1: gray.bmp" in out
        assert "match.png" not in out

    def test_missing_query_exits_with_error(self, tmp_path, dataset_dir, capsys):
        status = main(["search", str(tmp_path / "nope.jpg"), str(dataset_dir)])
        captured = capsys.readouterr()
        assert status == 1
        assert captured.err.startswith("Error:")
        assert "Top" not in captured.out

    def test_missing_dataset_exits_with_error(self, query_path, tmp_path, capsys):
        status = main(["search", query_path, str(tmp_path / "nowhere")])
        assert status == 1
        assert "Error:" in capsys.readouterr().err

    def test_invalid_worker_count(self, query_path, dataset_dir, capsys):
        status = main(["search", query_path, str(dataset_dir), "--workers", "0"])
        assert status == 1
        assert "workers" in capsys.readouterr().err

    def test_benchmark_prints_each_k(self, query_path, dataset_dir, capsys):
        status = main(["benchmark", query_path, str(dataset_dir), "--workers", "1", "3"])
        out = capsys.readouterr().out
        assert status == 0
        assert "Execution time for K=1:" in out
        assert "Execution time for K=3:" in out

    def test_requires_command(self):
        with pytest.raises(SystemExit):
            main([])
