# File: tests/test_config.py
import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from listing_scout.config import ScoutConfig, load_config
from listing_scout.errors import ConfigurationError
from listing_scout.utils import build_start_url


def write_file(tmp_path: Path, content: str, suffix: str) -> Path:
    path = tmp_path / f"config{suffix}"
    path.write_text(content, encoding="utf-8")
    return path


@pytest.mark.parametrize(
    "content,suffix,expect_exc",
    [
        ("make: Toyota\nmodel: Camry\nresults_wanted: 5", ".yaml", None),
        (json.dumps({"make": "Toyota", "model": "Camry", "results_wanted": 5}), ".json", None),
        ("results_wanted: lots", ".yaml", ConfigurationError),
        ("results_wanted: 0", ".yaml", ConfigurationError),
        ("year_min: 2022\nyear_max: 2018", ".yaml", ConfigurationError),
        ("unknown_option: 1", ".yaml", ConfigurationError),
        ("- just\n- a list", ".yaml", ConfigurationError),
        ("key: [unclosed", ".yaml", ConfigurationError),
        ("{bad json", ".json", ConfigurationError),
        ("make = 'x'", ".toml", ConfigurationError),
    ],
)
def test_load_config_variants(tmp_path, content, suffix, expect_exc):
    cfg_path = write_file(tmp_path, content, suffix)
    if expect_exc:
        with pytest.raises(expect_exc):
            load_config(cfg_path)
    else:
        cfg = load_config(cfg_path)
        assert isinstance(cfg, ScoutConfig)
        assert (cfg.make, cfg.model) == ("toyota", "camry")
        assert cfg.results_wanted == 5
        assert cfg.max_pages == 10


def test_configuration_error_is_value_error(tmp_path):
    cfg_path = write_file(tmp_path, "max_pages: -1", ".yaml")
    with pytest.raises(ValueError):
        load_config(cfg_path)


def test_direct_construction_still_validates():
    with pytest.raises(ValidationError):
        ScoutConfig(concurrency=0)


def test_load_config_default_missing(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(FileNotFoundError):
        load_config(None)


def test_defaults_and_start_url():
    cfg = ScoutConfig()
    assert (cfg.make, cfg.model, cfg.results_wanted, cfg.max_pages) == ("chevrolet", "malibu", 20, 10)
    assert build_start_url(cfg) == (
        "https://www.truecar.com/used-cars-for-sale/listings/?makeSlug=chevrolet&modelSlug=malibu"
    )


def test_start_url_with_filters():
    cfg = ScoutConfig(make="Honda", model="Civic", year_min=2018, year_max="2021", zip=78701)
    assert build_start_url(cfg) == (
        "https://www.truecar.com/used-cars-for-sale/listings/"
        "?makeSlug=honda&modelSlug=civic&yearMin=2018&yearMax=2021&zip=78701"
    )


def test_explicit_start_url_wins():
    cfg = ScoutConfig(start_url="https://www.truecar.com/used-cars-for-sale/listings/ford/f-150/")
    assert build_start_url(cfg) == "https://www.truecar.com/used-cars-for-sale/listings/ford/f-150/"


def test_overrides_revalidate():
    cfg = ScoutConfig().with_overrides(results_wanted=3, max_pages=None)
    assert cfg.results_wanted == 3
    assert cfg.max_pages == 10
    with pytest.raises(ConfigurationError):
        cfg.with_overrides(results_wanted=-5)
