import asyncio
import datetime as dt
import unittest
from unittest.mock import patch
from zoneinfo import ZoneInfo

from commute_timely.alarms.in_process import InProcessAlarmPlatform

NEW_YORK = ZoneInfo("America/New_York")


def utc_now():
    return dt.datetime.now(dt.timezone.utc)


class TestInProcessAlarmPlatform(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.notified = []
        self.fired = []
        self.platform = InProcessAlarmPlatform(
            utc_now,
            notifier=lambda alarm_id, title, message: self.notified.append((alarm_id, title, message)),
            on_fire=self.fired.append,
        )

    async def test_fires_notifier_then_callback(self):
        ok = self.platform.schedule("commute_work", utc_now() + dt.timedelta(milliseconds=50), "Leave", "ETA")
        self.assertTrue(ok)
        self.assertEqual(self.platform.pending(), ["commute_work"])

        await asyncio.sleep(0.2)
        self.assertEqual(self.notified, [("commute_work", "Leave", "ETA")])
        self.assertEqual(self.fired, ["commute_work"])
        self.assertEqual(self.platform.pending(), [])

    async def test_refuses_past_trigger(self):
        ok = self.platform.schedule("commute_work", utc_now() - dt.timedelta(seconds=1), "Leave", "ETA")
        self.assertFalse(ok)
        self.assertEqual(self.platform.pending(), [])

    async def test_cancel_prevents_firing(self):
        self.platform.schedule("commute_work", utc_now() + dt.timedelta(milliseconds=50), "Leave", "ETA")
        self.platform.cancel("commute_work")
        self.platform.cancel("commute_work")

        await asyncio.sleep(0.2)
        self.assertEqual(self.notified, [])
        self.assertEqual(self.fired, [])

    async def test_reschedule_keeps_single_timer(self):
        self.platform.schedule("commute_work", utc_now() + dt.timedelta(milliseconds=50), "Leave", "first")
        self.platform.schedule("commute_work", utc_now() + dt.timedelta(milliseconds=80), "Leave", "second")
        self.assertEqual(self.platform.pending(), ["commute_work"])

        await asyncio.sleep(0.3)
        self.assertEqual(self.notified, [("commute_work", "Leave", "second")])

    async def test_notifier_error_still_reports_fire(self):
        def broken(alarm_id, title, message):
            raise RuntimeError("display unavailable")

        platform = InProcessAlarmPlatform(utc_now, notifier=broken, on_fire=self.fired.append)
        platform.schedule("commute_work", utc_now() + dt.timedelta(milliseconds=20), "Leave", "ETA")
        await asyncio.sleep(0.15)
        self.assertEqual(self.fired, ["commute_work"])


class TestInProcessAlarmPlatformAcrossDst(unittest.IsolatedAsyncioTestCase):
    async def _armed_delay(self, now, trigger_time):
        platform = InProcessAlarmPlatform(lambda: now)
        with patch.object(asyncio.get_running_loop(), "call_later") as call_later:
            self.assertTrue(platform.schedule("commute_work", trigger_time, "Leave", "ETA"))
        return call_later.call_args.args[0]

    async def test_spring_forward_night(self):
        # 2025-03-09 02:00 EST -> 03:00 EDT; only 9h25m pass between the two wall times.
        delay = await self._armed_delay(
            dt.datetime(2025, 3, 8, 22, 0, tzinfo=NEW_YORK),
            dt.datetime(2025, 3, 9, 8, 25, tzinfo=NEW_YORK),
        )
        self.assertEqual(delay, 9 * 3600 + 25 * 60)

    async def test_fall_back_night(self):
        # 2025-11-02 02:00 EDT -> 01:00 EST; 11h25m pass.
        delay = await self._armed_delay(
            dt.datetime(2025, 11, 1, 22, 0, tzinfo=NEW_YORK),
            dt.datetime(2025, 11, 2, 8, 25, tzinfo=NEW_YORK),
        )
        self.assertEqual(delay, 11 * 3600 + 25 * 60)

    async def test_repeated_hour_is_still_in_the_future(self):
        now = dt.datetime(2025, 11, 2, 1, 45, tzinfo=NEW_YORK)
        trigger_time = dt.datetime(2025, 11, 2, 1, 30, fold=1, tzinfo=NEW_YORK)
        delay = await self._armed_delay(now, trigger_time)
        self.assertEqual(delay, 45 * 60)


if __name__ == "__main__":
    unittest.main()
