"""
Tests for wellness_coach/utils: time helpers and logging setup.
"""

from __future__ import annotations

import json
import logging
from datetime import date, datetime, timedelta, timezone

import pytest

from wellness_coach.config import LoggingConfig
from wellness_coach.utils.logging import JsonLineFormatter, configure_logging
from wellness_coach.utils.time_utils import ensure_utc, parse_timestamp, to_iso, utcnow


class TestTimeUtils:
    def test_utcnow_is_aware(self):
        assert utcnow().tzinfo == timezone.utc

    def test_ensure_utc_converts(self):
        plus_two = timezone(timedelta(hours=2))
        value = ensure_utc(datetime(2024, 6, 1, 10, tzinfo=plus_two))
        assert value == datetime(2024, 6, 1, 8, tzinfo=timezone.utc)
        assert value.tzinfo == timezone.utc

    @pytest.mark.parametrize(
        "raw",
        ["2024-06-01T08:00:00Z", "2024-06-01T08:00:00+00:00", "2024-06-01T10:00:00+02:00"],
    )
    def test_parse_timestamp(self, raw):
        assert parse_timestamp(raw) == datetime(2024, 6, 1, 8, tzinfo=timezone.utc)

    def test_parse_date_and_empty(self):
        assert parse_timestamp(date(2024, 6, 1)) == datetime(2024, 6, 1, tzinfo=timezone.utc)
        assert parse_timestamp("") is None
        assert parse_timestamp(None) is None

    def test_parse_invalid(self):
        with pytest.raises(ValueError):
            parse_timestamp("yesterday")

    def test_to_iso(self):
        assert to_iso(datetime(2024, 6, 1, 8, tzinfo=timezone.utc)) == "2024-06-01T08:00:00Z"


class TestLogging:
    def test_json_formatter_includes_extra(self):
        record = logging.LogRecord("wellness_coach.x", logging.INFO, __file__, 1, "hi %s", ("there",), None)
        record.client_id = 3
        payload = json.loads(JsonLineFormatter().format(record))
        assert payload["msg"] == "hi there"
        assert payload["level"] == "INFO"
        assert payload["client_id"] == 3

    def test_configure_logging_file_handler(self, tmp_path):
        log_file = tmp_path / "logs" / "coach.log"
        root = logging.getLogger()
        try:
            configure_logging(LoggingConfig(level="DEBUG", log_file=str(log_file)))
            logging.getLogger("wellness_coach.test").debug("written")
            for handler in root.handlers:
                handler.flush()
            assert "written" in log_file.read_text(encoding="utf-8")
            assert logging.getLogger("httpx").level == logging.WARNING
        finally:
            for handler in list(root.handlers):
                root.removeHandler(handler)
                handler.close()
