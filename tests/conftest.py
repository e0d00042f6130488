import json

import pytest
import yaml

from tests.fixtures.sample_portfolio import (
    APP_BACKUP,
    SAMPLE_PROFILE,
    make_settings,
    sample_assets,
    sample_liabilities,
    two_class_portfolio,
)


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def assets():
    return sample_assets()


@pytest.fixture
def liabilities():
    return sample_liabilities()


@pytest.fixture
def two_class():
    return two_class_portfolio()


@pytest.fixture
def profile_yaml(tmp_path):
    path = tmp_path / "profile.yaml"
    path.write_text(yaml.safe_dump(SAMPLE_PROFILE, sort_keys=False), encoding="utf-8")
    return path


@pytest.fixture
def app_backup_json(tmp_path):
    path = tmp_path / "backup.json"
    path.write_text(json.dumps(APP_BACKUP), encoding="utf-8")
    return path
