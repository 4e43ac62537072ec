import pytest
from todo_app.config import get_settings, Settings


def test_get_settings():
    """Test that settings can be loaded"""
    settings = get_settings()
    assert settings is not None
    assert isinstance(settings, Settings)


def test_settings_has_required_fields():
    """Test that settings has all required fields"""
    settings = get_settings()
    assert hasattr(settings, 'app_name')
    assert hasattr(settings, 'database_url')
    assert hasattr(settings, 'log_level')
    assert hasattr(settings, 'cors_origins')


def test_settings_default_values():
    """Test default values in settings"""
    settings = Settings()
    assert settings.app_name == "Todo Service"
    assert settings.version == "1.0.0"
    assert settings.debug is False
    assert settings.log_level == "INFO"


def test_database_url_read_from_environment():
    """conftest points DATABASE_URL at an in-memory database"""
    assert get_settings().database_url == "sqlite://"


def test_settings_singleton():
    """Test that get_settings returns the same instance (cached)"""
    settings1 = get_settings()
    settings2 = get_settings()
    assert settings1 is settings2


def test_test_database_url_must_differ():
    settings = Settings(database_url="sqlite:///tasks.db", test_database_url="sqlite:///tasks.db")
    with pytest.raises(ValueError):
        settings.get_database_url(is_test=True)


def test_get_database_url():
    settings = Settings(database_url="sqlite:///tasks.db", test_database_url="sqlite://")
    assert settings.get_database_url() == "sqlite:///tasks.db"
    assert settings.get_database_url(is_test=True) == "sqlite://"


def test_is_production():
    assert Settings(environment="Production").is_production is True
    assert Settings(environment="development").is_production is False
