"""
Report Parsing Tests
====================
"""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from routetrack.Schemas.ping import RawReport


class TestRawReport:

    def test_epoch_milliseconds(self):
        raw = RawReport.model_validate({"latitude": 1, "longitude": 2, "timestamp": 1735689600000})
        assert raw.observed_at == datetime(2025, 1, 1, tzinfo=timezone.utc)

    def test_iso_string_with_offset_normalized_to_utc(self):
        raw = RawReport.model_validate({"latitude": 1, "longitude": 2, "timestamp": "2025-01-01T05:00:00-05:00"})
        assert raw.observed_at == datetime(2025, 1, 1, 10, 0, tzinfo=timezone.utc)
        assert raw.observed_at.utcoffset().total_seconds() == 0

    def test_naive_string_is_utc(self):
        raw = RawReport.model_validate({"latitude": 1, "longitude": 2, "timestamp": "2025-01-01T10:00:00"})
        assert raw.observed_at.tzinfo is not None
        assert raw.observed_at.hour == 10

    def test_wire_aliases(self):
        raw = RawReport.model_validate({
            "latitude": 1, "longitude": 2, "timestamp": 0,
            "speed": 4.5, "deviceId": "ESP32_001", "unknown": "ignored",
        })
        assert raw.speed_over_ground == 4.5
        assert raw.device_id == "ESP32_001"

    @pytest.mark.parametrize("lat,lon", [(-90.0, -180.0), (90.0, 180.0), (0.0, 0.0)])
    def test_boundaries_accepted(self, lat, lon):
        RawReport.model_validate({"latitude": lat, "longitude": lon, "timestamp": 0})

    @pytest.mark.parametrize("lat,lon", [(-90.0001, 0.0), (0.0, 180.5), (95.0, 0.0)])
    def test_out_of_range_rejected(self, lat, lon):
        with pytest.raises(ValidationError):
            RawReport.model_validate({"latitude": lat, "longitude": lon, "timestamp": 0})
