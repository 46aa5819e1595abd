import datetime as dt
import unittest

from pydantic import ValidationError

from commute_timely.domain import (
    TIER_STATES,
    AlarmState,
    AlarmTierKind,
    CommuteResult,
    Coordinates,
    DelayConfig,
    Destination,
    RecalculationRecord,
    SweepStatus,
    TaskInfo,
    WeatherSnapshot,
    alarm_id_for,
)


class TestDomainModels(unittest.TestCase):
    def test_destination_defaults_active(self):
        d = Destination(
            id="work",
            name="Office",
            arrival_time="09:00",
            coordinates=Coordinates(latitude=37.79, longitude=-122.40),
        )
        self.assertTrue(d.is_active)

    def test_destination_rejects_bad_arrival_time(self):
        for bad in ("9:00", "25:00", "09:60", "09-00"):
            with self.subTest(value=bad):
                with self.assertRaises(ValidationError):
                    Destination(
                        id="work",
                        name="Office",
                        arrival_time=bad,
                        coordinates=Coordinates(latitude=0, longitude=0),
                    )

    def test_coordinates_range(self):
        with self.assertRaises(ValidationError):
            Coordinates(latitude=91, longitude=0)
        with self.assertRaises(ValidationError):
            Coordinates(latitude=0, longitude=-181)

    def test_extra_fields_forbidden(self):
        with self.assertRaises(ValidationError):
            Coordinates(latitude=0, longitude=0, altitude=10)

    def test_weather_probability_bounds(self):
        with self.assertRaises(ValidationError):
            WeatherSnapshot(description="rain", precipitation_probability=120)
        with self.assertRaises(ValidationError):
            WeatherSnapshot(description="rain", precipitation_probability=-1)

    def test_commute_result_validates_times(self):
        with self.assertRaises(ValidationError):
            CommuteResult(
                leave_time="8:25",
                duration_seconds=1500,
                weather_condition="rain",
                weather_delay_seconds=300,
                arrival_time="09:00",
            )

    def test_delay_config_updated_keeps_other_fields(self):
        config = DelayConfig().updated(snow=25)
        self.assertEqual(config.snow, 25)
        self.assertEqual(config.rain, 5)
        with self.assertRaises(ValidationError):
            DelayConfig().updated(rain=-1)

    def test_tier_states(self):
        self.assertEqual(TIER_STATES[AlarmTierKind.EXACT], AlarmState.SCHEDULED_EXACT)
        self.assertEqual(TIER_STATES[AlarmTierKind.BEST_EFFORT], AlarmState.SCHEDULED_INEXACT)

    def test_alarm_id_is_deterministic(self):
        self.assertEqual(alarm_id_for("work"), "commute_work")
        self.assertEqual(alarm_id_for("work"), alarm_id_for("work"))

    def test_record_json_roundtrip(self):
        record = RecalculationRecord(
            last_calculation_date=dt.date(2025, 3, 10),
            last_task_info=TaskInfo(
                timestamp=dt.datetime(2025, 3, 10, 6, 0, tzinfo=dt.timezone.utc),
                destinations_processed=2,
                status=SweepStatus.COMPLETED,
                failures={"gym": "travel fetch timed out"},
            ),
        )
        restored = RecalculationRecord.model_validate_json(record.model_dump_json())
        self.assertEqual(restored, record)


if __name__ == "__main__":
    unittest.main()
