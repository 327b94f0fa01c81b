import threading
import unittest

from game import CancelToken, CueQueue, FeedbackScheduler, ManualTimers, SoundManager


class TestManualTimers(unittest.TestCase):
    def test_given_timers_when_advancing_then_fire_in_due_order(self):
        timers = ManualTimers()
        fired = []
        timers.call_later(0.3, lambda: fired.append("c"))
        timers.call_later(0.1, lambda: fired.append("a"))
        timers.call_later(0.2, lambda: fired.append("b"))
        self.assertEqual(timers.pending, 3)
        self.assertEqual(timers.advance(0.15), 1)
        self.assertEqual(fired, ["a"])
        self.assertEqual(timers.advance(1.0), 2)
        self.assertEqual(fired, ["a", "b", "c"])
        self.assertAlmostEqual(timers.now, 1.15)

    def test_given_cancelled_timer_when_advancing_then_skipped(self):
        timers = ManualTimers()
        fired = []
        t = timers.call_later(0.1, lambda: fired.append(1))
        t.cancel()
        self.assertEqual(timers.pending, 0)
        self.assertEqual(timers.run_all(), 0)
        self.assertEqual(fired, [])

    def test_given_chained_timers_when_run_all_then_all_fire(self):
        timers = ManualTimers()
        fired = []

        def first():
            fired.append(timers.now)
            timers.call_later(0.5, lambda: fired.append(timers.now))

        timers.call_later(0.25, first)
        self.assertEqual(timers.run_all(), 2)
        self.assertEqual(fired, [0.25, 0.75])


class TestFeedbackScheduler(unittest.TestCase):
    def setUp(self):
        self.timers = ManualTimers()
        self.cues = CueQueue()
        self.scheduler = FeedbackScheduler(
            SoundManager(backend=self.cues),
            timers=self.timers,
            lock=threading.RLock(),
            card_cue_delay=0.4,
            commit_delay=0.6,
        )

    def test_given_loss_sequence_when_time_passes_then_cues_and_commit_in_order(self):
        token = self.scheduler.new_token(1)
        committed = []
        self.scheduler.play_loss_sequence(token, "Pikachu", lambda: committed.append(self.timers.now))
        self.assertEqual([e["cue"] for e in self.cues.drain()], ["error"])

        self.timers.advance(0.4)
        events = self.cues.drain()
        self.assertEqual([e["cue"] for e in events], ["error", "card"])
        self.assertEqual(events[1]["rate"], 0.7)
        self.assertTrue(events[1]["url"].endswith("/pikachu.mp3"))
        self.assertEqual(committed, [])

        self.timers.advance(0.6)
        self.assertEqual(len(committed), 1)
        self.assertAlmostEqual(committed[0], 1.0)
        self.assertEqual([e["cue"] for e in self.cues.drain()], ["lose"])
        self.assertEqual(token.outstanding, 0)

    def test_given_cancel_mid_sequence_when_time_passes_then_nothing_else_happens(self):
        token = self.scheduler.new_token(2)
        committed = []
        self.scheduler.play_loss_sequence(token, "ekans", lambda: committed.append(True))
        self.timers.advance(0.4)
        self.assertEqual(self.scheduler.cancel(token), 1)
        self.cues.drain()
        self.timers.run_all()
        self.assertEqual(committed, [])
        self.assertEqual(self.cues.drain(), [])

    def test_given_cancelled_token_when_scheduling_then_refused(self):
        token = CancelToken(3)
        token.cancel()
        self.assertIsNone(self.scheduler.schedule(token, 0.1, lambda: None))
        self.assertEqual(self.timers.pending, 0)
        self.scheduler.play_win(token)
        self.assertEqual(self.cues.drain(), [])

    def test_given_in_flight_callback_when_token_cancelled_then_dropped_with_log(self):
        token = self.scheduler.new_token(4)
        ran = []
        handle = self.scheduler.schedule(token, 0.5, lambda: ran.append(True))
        token.cancel()
        with self.assertLogs("memory_core.scheduler", level="DEBUG") as logs:
            handle.fn()
        self.assertEqual(ran, [])
        self.assertIn("Dropped stale callback", logs.output[0])


if __name__ == "__main__":
    unittest.main(verbosity=2)
