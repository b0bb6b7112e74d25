# pylint: disable=E0401

"""
tests for the progress callbacks
"""

from masc.utils.generic import ProgressCallback, VerboseProgress


def test_silent_progress():
    progress = ProgressCallback()
    progress.set_info("anything")
    assert all(progress.step() for _ in range(100))


def test_verbose_progress():
    progress = VerboseProgress(interval=10)
    progress.set_info("Computing field: a\n(core points: 25)")
    assert all(progress.step() for _ in range(25))
    assert progress.steps == 25

    progress.cancel()
    assert not progress.step()

    # a new task restarts the count, not the cancellation
    progress.set_info("Computing field: b")
    assert progress.steps == 0
    assert not progress.step()
