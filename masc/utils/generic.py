"""
useful things: progress reporting and cooperative cancellation for long loops
"""

from masc.config import VERBOSITY_INTERVAL
from masc.utils.logging import get_logger

log = get_logger(__name__)


class ProgressCallback(object):
    """
    polled once per processed item. set_info describes the task about to run, step() returns
    False when the caller wants the task stopped. this one never stops anything.
    """

    def set_info(self, text):
        pass

    def step(self):
        return True


class VerboseProgress(ProgressCallback):
    """
    how often do you want to be notified? logs the step count every `interval` steps, and stops
    the running task once cancel() has been called.
    """

    def __init__(self, interval=VERBOSITY_INTERVAL):
        self.interval = interval
        self.info = ""
        self.steps = 0
        self.cancelled = False

    def set_info(self, text):
        self.info = text
        self.steps = 0
        log.info("starting", task=text.replace("\n", " "))

    def step(self):
        self.steps += 1
        if self.steps % self.interval == 0:
            log.info("progress", task=self.info.split("\n")[0], steps=self.steps)
        return not self.cancelled

    def cancel(self):
        self.cancelled = True
