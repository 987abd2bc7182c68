from fleetdash.config import Settings


def test_settings_read_fleet_prefixed_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("FLEET_TRIPS_FILE", str(tmp_path / "trips.xlsx"))
    monkeypatch.setenv("FLEET_FIXED_VEHICLES", '["HR01AA0001", "HR01AA0002"]')
    monkeypatch.setenv("FLEET_SCOPE_DEBOUNCE_MS", "300")

    config = Settings(_env_file=None)

    assert config.trips_file == (tmp_path / "trips.xlsx").resolve()
    assert config.trips_file.is_absolute()
    assert config.fixed_vehicles == ("HR01AA0001", "HR01AA0002")
    assert config.scope_debounce_ms == 300


def test_only_used_paths_are_configurable():
    assert "data_root" not in Settings.model_fields
    assert "trips_file" in Settings.model_fields
