"""
Tests for the rate-limited progress reporter and size formatting.
"""
import unittest

from sshmirror.core.progress import ProgressThrottler
from sshmirror.utils.file_utils import size_str, percent_str
from fakes import StepClock


class TestProgressThrottler(unittest.TestCase):

    def _run(self, total, chunks, step):
        reports = []
        t = ProgressThrottler(total, lambda done, tot: reports.append((done, tot)),
                              clock=StepClock(step))
        for n in chunks:
            t.update(n)
        t.finish()
        return t, reports

    def test_no_interval_report_inside_window(self):
        _, reports = self._run(300, [100, 100, 100], step=0.1)
        self.assertEqual(reports, [(300, 300)])

    def test_reports_at_most_once_per_interval(self):
        # clock: 0 at construction, then 0.6, 1.2, 1.8, 2.4 for the updates
        _, reports = self._run(400, [100] * 4, step=0.6)
        self.assertEqual(reports, [(200, 400), (400, 400), (400, 400)])

    def test_values_non_decreasing_and_final_is_total(self):
        _, reports = self._run(10_000, [1000] * 10, step=0.35)
        done = [r[0] for r in reports]
        self.assertEqual(done, sorted(done))
        self.assertEqual(reports[-1][0], reports[-1][1])
        for transferred, total in reports:
            self.assertLessEqual(transferred, total)

    def test_file_grew_raises_total(self):
        t, reports = self._run(100, [80, 80], step=2.0)
        self.assertEqual(t.total, 160)
        for transferred, total in reports:
            self.assertLessEqual(transferred, total)

    def test_file_shrank_final_report_is_complete(self):
        _, reports = self._run(1000, [10], step=0.0)
        self.assertEqual(reports, [(10, 10)])

    def test_empty_file_reports_once(self):
        _, reports = self._run(0, [], step=0.0)
        self.assertEqual(reports, [(0, 0)])

    def test_no_callback(self):
        t = ProgressThrottler(5, None, clock=StepClock(5))
        t.update(5)
        t.finish()
        self.assertEqual(t.transferred, 5)


class TestSizeStr(unittest.TestCase):

    def test_table(self):
        self.assertEqual(size_str(0), "0b")
        self.assertEqual(size_str(1023), "1023b")
        self.assertEqual(size_str(1024), "1.0kB")
        self.assertEqual(size_str(1536), "1.5kB")
        self.assertEqual(size_str(1048576), "1.0MB")
        self.assertEqual(size_str(3 * 1024 ** 3), "3.0GB")

    def test_terabytes_do_not_escalate_further(self):
        self.assertEqual(size_str(2048 * 1024 ** 4), "2048.0TB")

    def test_percent(self):
        self.assertEqual(percent_str(50, 200), "25")
        self.assertEqual(percent_str(0, 0), "100")


if __name__ == "__main__":
    unittest.main()
