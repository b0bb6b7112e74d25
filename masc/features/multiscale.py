"""
multiscale feature preparation.
features are prepared one after the other for the same core points; each one leaves a named field
on the core cloud. some features won't work every time-- for instance, a dip angle needs normals.
with stop_on_error=False those failures are collected and the remaining features still run.
"""

import time

import numpy as np

from masc.errors import MascError, ProcessCancelledError
from masc.utils.logging import get_logger, log_context

log = get_logger(__name__)


def prepare_features(features, core_points, progress=None, stop_on_error=True):
    """
    validate and prepare every feature. returns (prepared, failures): the features that now have
    an output field, and (feature, error) pairs for those that don't. cancellation always stops
    the whole run.
    """
    prepared = []
    failures = []

    outer_start = time.perf_counter()
    for this_feature in features:
        description = this_feature.to_string()
        inner_start = time.perf_counter()

        with log_context(feature=description):
            try:
                this_feature.check_validity()
                this_feature.prepare(core_points, progress)
            except MascError as err:
                if stop_on_error or not _recoverable(err):
                    raise
                log.warning("feature skipped", error=str(err))
                failures.append((this_feature, err))
                continue

            inner = time.perf_counter() - inner_start
            log.info(
                "feature prepared",
                field=this_feature.output_name,
                seconds=np.around(inner, 3),
                points_per_second=np.around(core_points.size() / max(inner, 1e-9), 3))

        prepared.append(this_feature)

    outer = time.perf_counter() - outer_start
    log.info(
        "all features prepared",
        prepared=len(prepared),
        failed=len(failures),
        seconds=np.around(outer, 3))

    return prepared, failures


def _recoverable(err):
    # a cancelled run stays cancelled
    return not isinstance(err, ProcessCancelledError)
