from pathsched import settings


def test_from_env_defaults(monkeypatch):
    for name in ("PATHSCHED_ARGS_PATH", "PATHSCHED_MIN_REFRESH_INTERVAL_S", "PATHSCHED_MAX_SCORE", "PATHSCHED_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)

    cfg = settings.from_env()

    assert cfg.args_path is None
    assert cfg.min_refresh_interval_s == 0.0
    assert cfg.max_score is None
    assert cfg.log_level == "INFO"


def test_invalid_numbers_fall_back(monkeypatch):
    monkeypatch.setenv("PATHSCHED_MIN_REFRESH_INTERVAL_S", "soon")
    monkeypatch.setenv("PATHSCHED_MAX_SCORE", "100")

    cfg = settings.from_env()

    assert cfg.min_refresh_interval_s == 0.0
    assert cfg.max_score == 100


def test_env_overrides_layer_on_args():
    cfg = settings.Settings(config_key="nodes.json")

    merged = cfg.apply_overrides({"storageConfig": {"configMapName": "paths"}})

    assert merged == {"storageConfig": {"configMapName": "paths", "configKey": "nodes.json"}}
    assert settings.Settings().apply_overrides(None) is None
