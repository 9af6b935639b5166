from datetime import timedelta

import pytest

from app.core.config import Settings
from app.queue.models import QueueConfig


def test_queue_config_from_settings_maps_every_option():
    settings = Settings(
        queue_capacity=7,
        queue_max_idle_wait_seconds=11,
        queue_max_idle_active_seconds=22,
        queue_max_active_lifetime_seconds=33,
        queue_retention_window_seconds=44,
        queue_promotion_tick_seconds=0.5,
        queue_sweep_interval_seconds=2,
        queue_default_estimated_wait_seconds=3,
        queue_release_history_size=9,
        queue_promotion_batch_size=4,
    )

    config = QueueConfig.from_settings(settings)

    assert config.capacity == 7
    assert config.max_idle_wait == timedelta(seconds=11)
    assert config.max_idle_active == timedelta(seconds=22)
    assert config.max_active_lifetime == timedelta(seconds=33)
    assert config.retention_window == timedelta(seconds=44)
    assert config.promotion_tick_seconds == 0.5
    assert config.sweep_interval_seconds == 2
    assert config.default_estimated_wait_seconds == 3
    assert config.release_history_size == 9
    assert config.promotion_batch_size == 4


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("QUEUE_CAPACITY", "250")
    monkeypatch.setenv("QUEUE_ADMIN_RESET_ENABLED", "true")

    settings = Settings()

    assert settings.queue_capacity == 250
    assert settings.queue_admin_reset_enabled is True


@pytest.mark.parametrize(
    "overrides",
    [
        {"capacity": -1},
        {"promotion_tick_seconds": 0},
        {"release_history_size": 1},
        {"max_idle_wait": timedelta(seconds=-1)},
    ],
)
def test_queue_config_rejects_invalid_values(overrides):
    with pytest.raises(ValueError):
        QueueConfig(**overrides)


def test_default_log_format(monkeypatch):
    monkeypatch.delenv("LOG_FORMAT", raising=False)

    settings = Settings(_env_file=None)

    assert settings.log_format == "%(levelname)s %(name)s %(message)s"
    assert settings.log_level == "INFO"
