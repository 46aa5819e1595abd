import unittest

from commute_timely.domain import CommuteResult, Coordinates, Destination
from commute_timely.formatting import (
    DEFAULT_WEATHER_ICON,
    alarm_message,
    alarm_title,
    weather_icon,
)


class TestFormatting(unittest.TestCase):
    def test_weather_icon(self):
        self.assertEqual(weather_icon("Clear sky"), "☀️")
        self.assertEqual(weather_icon("Light rain"), "🌧️")
        self.assertEqual(weather_icon("Thunderstorm"), "⛈️")
        self.assertEqual(weather_icon("Fog"), "🌫️")
        self.assertEqual(weather_icon("Haze"), DEFAULT_WEATHER_ICON)
        self.assertEqual(weather_icon(""), DEFAULT_WEATHER_ICON)

    def test_alarm_text(self):
        destination = Destination(
            id="work",
            name="Office",
            arrival_time="09:00",
            coordinates=Coordinates(latitude=0, longitude=0),
        )
        result = CommuteResult(
            leave_time="08:25",
            duration_seconds=1500,
            weather_condition="light rain",
            weather_delay_seconds=300,
            arrival_time="09:00",
        )
        self.assertEqual(alarm_title(destination), "Time to leave for Office!")
        self.assertEqual(alarm_message(result), "ETA: 25 mins (🌧️ light rain)")


if __name__ == "__main__":
    unittest.main()
