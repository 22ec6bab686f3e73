"""
Unit tests for settings, logging and helper utilities.
"""

import logging
from datetime import datetime, timedelta, timezone

import pytest

from bim4d.config.settings import Settings, settings
from bim4d.schemas.tasks import Task
from bim4d.utils import add_days, clamp, days_between, parse_moment, task_list_fingerprint, to_naive_utc
from bim4d.utils.logger import configure_logging


class TestHelpers:

    def test_days_between(self):
        assert days_between(datetime(2024, 1, 1), datetime(2024, 1, 2, 12)) == 1.5
        assert days_between(datetime(2024, 1, 2), datetime(2024, 1, 1)) == -1

    def test_add_days(self):
        assert add_days(datetime(2024, 1, 1), 0.5) == datetime(2024, 1, 1, 12)

    @pytest.mark.parametrize("value,expected", [(-1, 0), (0.5, 0.5), (7, 1)])
    def test_clamp(self, value, expected):
        assert clamp(value, 0, 1) == expected

    def test_fingerprint_is_stable_and_order_sensitive(self):
        a = Task(id=1, name='a')
        b = Task(id=2, name='b', depends_on=[1])
        assert task_list_fingerprint([a, b]) == task_list_fingerprint([Task(id=1, name='a'), b])
        assert task_list_fingerprint([a, b]) != task_list_fingerprint([b, a])
        assert task_list_fingerprint([a]).startswith('sha256:')


class TestDateParsing:

    @pytest.mark.parametrize("text,expected", [
        ('2024-01-04', datetime(2024, 1, 4)),
        ('2024-01-04T12:30:00', datetime(2024, 1, 4, 12, 30)),
        ('2024-01-04T00:00:00.000Z', datetime(2024, 1, 4)),
        ('2024-01-04T03:00:00+03:00', datetime(2024, 1, 4)),
    ])
    def test_parse_moment(self, text, expected):
        parsed = parse_moment(text)
        assert parsed == expected
        assert parsed.tzinfo is None

    def test_to_naive_utc(self):
        assert to_naive_utc(None) is None
        assert to_naive_utc(datetime(2024, 1, 1)) == datetime(2024, 1, 1)
        assert to_naive_utc(datetime(2024, 1, 1, 1, tzinfo=timezone(timedelta(hours=1)))) == datetime(2024, 1, 1)


class TestSettings:

    def test_defaults_are_consistent(self):
        assert Settings.validate_required_settings() == []

    def test_inverted_speed_bounds_reported(self, monkeypatch):
        monkeypatch.setattr(Settings, 'MIN_SPEED', 20.0)
        problems = Settings.validate_required_settings()
        assert any('BIM4D_MIN_SPEED' in p for p in problems)


class TestLogging:

    def test_console_only_by_default(self, monkeypatch):
        monkeypatch.setattr(settings, 'LOG_DIR', '')
        logger = configure_logging('bim4d.test.console', 'DEBUG')
        assert logger.level == logging.DEBUG
        assert [type(h) for h in logger.handlers] == [logging.StreamHandler]

    def test_file_handler_when_log_dir_set(self, monkeypatch, tmp_path):
        monkeypatch.setattr(settings, 'LOG_DIR', str(tmp_path / 'logs'))
        logger = configure_logging('bim4d.test.file')
        assert any(isinstance(h, logging.handlers.RotatingFileHandler) for h in logger.handlers)
        assert (tmp_path / 'logs').is_dir()

    def test_handlers_attached_once(self, monkeypatch):
        monkeypatch.setattr(settings, 'LOG_DIR', '')
        configure_logging('bim4d.test.once')
        logger = configure_logging('bim4d.test.once', 'WARNING')
        assert len(logger.handlers) == 1
        assert logger.level == logging.WARNING
