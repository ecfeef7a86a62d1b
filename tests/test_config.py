from config import DEFAULTS, load_config, save_config


def test_missing_file_gives_defaults(tmp_path):
    assert load_config(str(tmp_path / "missing.json")) == DEFAULTS


def test_round_trip_keeps_extra_keys(tmp_path):
    path = str(tmp_path / "cfg.json")
    save_config({"copy": True, "theme": "dark"}, path)

    cfg = load_config(path)

    assert cfg["copy"] is True
    assert cfg["theme"] == "dark"
    assert cfg["verbose"] is False


def test_corrupt_file_gives_defaults(tmp_path):
    path = tmp_path / "cfg.json"
    path.write_text("{not json")
    assert load_config(str(path)) == DEFAULTS

    path.write_text("[1, 2]")
    assert load_config(str(path)) == DEFAULTS
