from handcards.ml.runtime import GestureConfig, load_gesture_config


def test_packaged_config_matches_defaults():
    config = load_gesture_config()
    assert config.thumb_dx_threshold == 30
    assert config.min_extended_fingers == 3
    assert config.dwell_ms == 3000
    assert config.infer_every_ms == 100
    assert config.landmarker.num_hands == 1


def test_partial_config_falls_back_to_defaults(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text("hold:\n  dwell_ms: 1500\n", encoding="utf-8")

    config = load_gesture_config(str(path))

    assert config.dwell_ms == 1500
    assert config.thumb_dx_threshold == GestureConfig().thumb_dx_threshold
    assert config.landmarker == GestureConfig().landmarker


def test_empty_config_file(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text("", encoding="utf-8")
    assert load_gesture_config(str(path)) == GestureConfig()
