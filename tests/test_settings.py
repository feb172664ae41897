from territory_assignment.config.settings import Settings


def test_defaults_from_empty_env():
    settings = Settings.from_env({})

    assert settings.google_maps_api_key is None
    assert settings.usar_estimativa_cep is False
    assert settings.resync_pausa == 1.1
    assert settings.distance_matrix_batch_size == 25
    assert settings.db_params["host"] == "localhost"
    assert settings.db_params["dbname"] == "sales_territory_db"
    assert settings.jwt_secret_key is None


def test_env_overrides():
    settings = Settings.from_env({
        "GMAPS_API_KEY": "abc",
        "USE_CEP_ESTIMATE": "true",
        "RESYNC_PAUSE": "0",
        "POSTGRES_HOST": "db",
        "DB_PORT": "6543",
        "JWT_SECRET_KEY": "segredo",
        "LOG_LEVEL": "debug",
    })

    assert settings.google_maps_api_key == "abc"
    assert settings.usar_estimativa_cep is True
    assert settings.resync_pausa == 0
    assert settings.db_params["host"] == "db"
    assert settings.db_params["port"] == "6543"
    assert settings.jwt_secret_key == "segredo"
    assert settings.log_level == "DEBUG"


def test_blank_api_key_means_disabled():
    assert Settings.from_env({"GMAPS_API_KEY": ""}).google_maps_api_key is None
