import unittest

from commute_timely.delay_model import estimate_delay, precipitation_delay_minutes
from commute_timely.domain import DelayConfig, WeatherSnapshot


def snap(description, precipitation=0.0, wind=None):
    return WeatherSnapshot(description=description, precipitation_probability=precipitation, wind_speed=wind)


class TestDelayModel(unittest.TestCase):
    def test_clear_weather_has_no_delay(self):
        self.assertEqual(estimate_delay(snap("Clear sky", 0)), 0)

    def test_light_rain_above_threshold(self):
        self.assertEqual(estimate_delay(snap("light rain", 75)), 300)

    def test_threshold_is_strict(self):
        self.assertEqual(estimate_delay(snap("light rain", 70)), 0)

    def test_keywords_are_case_insensitive(self):
        self.assertEqual(estimate_delay(snap("Light RAIN", 80)), 300)

    def test_snow_and_blizzard(self):
        self.assertEqual(estimate_delay(snap("Light snow", 80)), 15 * 60)
        self.assertEqual(estimate_delay(snap("Blizzard", 80)), 15 * 60)

    def test_storm_and_thunder(self):
        self.assertEqual(estimate_delay(snap("Thunderstorm with rain", 80)), 20 * 60)

    def test_largest_category_wins_not_sum(self):
        self.assertEqual(estimate_delay(snap("snow and thunder", 80)), 20 * 60)

    def test_heavy_rain_keyword(self):
        self.assertEqual(estimate_delay(snap("Heavy rain", 75)), 10 * 60)

    def test_very_high_probability_counts_as_heavy(self):
        self.assertEqual(estimate_delay(snap("drizzle", 95)), 10 * 60)

    def test_heavy_rain_keyword_needs_precipitation_threshold(self):
        self.assertEqual(estimate_delay(snap("Heavy rain", 40)), 0)

    def test_fog_applies_without_precipitation(self):
        self.assertEqual(estimate_delay(snap("Fog", 0)), 10 * 60)
        self.assertEqual(estimate_delay(snap("Mist", 10)), 10 * 60)

    def test_fog_takes_max_against_precipitation(self):
        self.assertEqual(estimate_delay(snap("rain and mist", 75)), 10 * 60)
        self.assertEqual(estimate_delay(snap("thunderstorm, fog", 75)), 20 * 60)

    def test_wind_surcharge_adds_on_top(self):
        self.assertEqual(estimate_delay(snap("Clear", 0, wind=16)), 5 * 60)
        self.assertEqual(estimate_delay(snap("light rain", 75, wind=20)), 10 * 60)

    def test_wind_at_threshold_is_ignored(self):
        self.assertEqual(estimate_delay(snap("Clear", 0, wind=15)), 0)

    def test_no_keyword_low_precipitation_is_zero(self):
        for description in ("Clear sky", "Overcast clouds", "Few clouds", "Unknown"):
            for precipitation in (0, 35, 70):
                with self.subTest(description=description, precipitation=precipitation):
                    self.assertEqual(estimate_delay(snap(description, precipitation)), 0)
                    self.assertEqual(estimate_delay(snap(description, precipitation, wind=16)), 300)

    def test_rain_delay_is_monotonic_in_probability(self):
        previous = 0
        for precipitation in range(0, 101):
            delay = estimate_delay(snap("rain", precipitation))
            self.assertGreaterEqual(delay, previous)
            previous = delay

    def test_custom_config(self):
        config = DelayConfig(rain=1, fog=2, wind_surcharge=0, precipitation_threshold=50)
        self.assertEqual(estimate_delay(snap("rain", 55), config), 60)
        self.assertEqual(estimate_delay(snap("fog", 0, wind=30), config), 120)

    def test_precipitation_delay_minutes(self):
        self.assertEqual(precipitation_delay_minutes(snap("drizzle", 80)), 5)
        self.assertEqual(precipitation_delay_minutes(snap("fog", 80)), 0)


if __name__ == "__main__":
    unittest.main()
