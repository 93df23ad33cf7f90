from pathlib import Path

import pandas as pd
import pytest

from aggregate_stability.cli import ask_parent_directory, build_config, main, parse_args
from aggregate_stability.config import CropRect
from conftest import block_image


def test_build_config_preset_with_overrides(tmp_path):
    args = parse_args([str(tmp_path), "--preset", "slakes", "--no-circle", "--workers", "2"])
    config = build_config(args)
    assert config.parent_directory == tmp_path
    assert config.crop_rect == CropRect(799, 3200, 599, 3000)
    assert config.circle_diameter is None
    assert config.workers == 2


def test_build_config_explicit_crop():
    config = build_config(parse_args(["data", "--crop", "0", "10", "0", "20", "--circle-diameter", "8"]))
    assert config.crop_rect == CropRect(0, 10, 0, 20)
    assert config.circle_diameter == 8
    assert config.overwrite_policy == "prompt"


def test_crop_flags_are_exclusive():
    with pytest.raises(SystemExit):
        parse_args(["data", "--crop", "0", "1", "0", "1", "--no-crop"])


def test_main_writes_results_and_summary(tmp_path, write_sample):
    write_sample(tmp_path, "s1", block_image(block=5), block_image(block=3))
    code = main([str(tmp_path), "--no-crop", "--no-circle", "--overwrite", "overwrite", "--summary"])
    assert code == 0

    results = list(tmp_path.glob("results_*.csv"))
    assert len(results) == 1
    assert pd.read_csv(results[0])["Stability Index"][0] == pytest.approx(25 / 9)
    assert len(list(tmp_path.glob("results_*_summary.txt"))) == 1


def test_main_missing_directory(tmp_path):
    assert main([str(tmp_path / "missing"), "--overwrite", "abort"]) == 1


def test_parent_directory_prompt_repeats_on_empty_answer():
    answers = iter(["", "   ", " /data/AgStabData "])
    asked = []

    def prompt(message):
        asked.append(message)
        return next(answers)

    assert ask_parent_directory(prompt) == Path("/data/AgStabData")
    assert len(asked) == 3
