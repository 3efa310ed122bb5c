import logging

import pytest
from dateutil.relativedelta import relativedelta

from confluence_markdown_converter.utils.measure_time import format_duration
from confluence_markdown_converter.utils.measure_time import measure


class TestMeasure:
    def test_format_duration(self):
        assert format_duration(relativedelta(seconds=2, microseconds=500000)) == "2.50s"
        assert format_duration(relativedelta(hours=1, minutes=2, seconds=3)) == "1h 2m 3.00s"

    def test_logs_start_and_end(self, caplog):
        with caplog.at_level(logging.INFO), measure("Fetch tree"):
            pass
        messages = [record.getMessage() for record in caplog.records]
        assert messages[0].startswith("Fetch tree started at")
        assert messages[1].startswith("Fetch tree ended at")
        assert messages[2].startswith("Fetch tree took")

    def test_failure_is_logged_and_reraised(self, caplog):
        with caplog.at_level(logging.INFO), pytest.raises(ValueError), measure("Convert"):
            raise ValueError
        assert any("Convert failed at" in record.getMessage() for record in caplog.records)
