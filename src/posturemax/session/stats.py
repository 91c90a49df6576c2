"""Session statistics over an ordered sequence of status samples.

Everything here is a pure function of its inputs. The only cached value
in the system is ``StatusSample.percentage_at_time``, which is written
once by :func:`stamp_sample` when a sample is appended.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Sequence

from posturemax.domain.models import Session, SessionReport, StatusSample


def good_percentage(samples: Sequence[StatusSample]) -> int:
    """Share of good samples as a whole percentage.

    An empty sequence reports 100: an unstarted session has perfect
    posture, not an error.
    """
    if not samples:
        return 100
    good = sum(1 for s in samples if s.is_good)
    return _percent(good, len(samples))


def correction_count(samples: Sequence[StatusSample]) -> int:
    """Number of adjacent pairs whose ``is_good`` differs.

    The first sample never counts as a correction.
    """
    return sum(
        1 for i in range(1, len(samples))
        if samples[i].is_good != samples[i - 1].is_good
    )


def elapsed_duration(session: Session, now: datetime | None = None) -> timedelta:
    """Elapsed session time.

    While running this is ``now - started_at``; after a stop it is the
    delta frozen at stop time. A session that never ran reports zero.
    """
    if session.is_running and session.started_at is not None:
        return (now or datetime.now()) - session.started_at
    if session.frozen_elapsed is not None:
        return session.frozen_elapsed
    return timedelta(0)


def stamp_sample(
    sample: StatusSample,
    previous: Sequence[StatusSample],
) -> StatusSample:
    """Return ``sample`` with its running percentage filled in.

    The percentage covers ``previous`` plus the new sample itself.
    """
    good = sum(1 for s in previous if s.is_good) + (1 if sample.is_good else 0)
    pct = _percent(good, len(previous) + 1)
    return sample.model_copy(update={"percentage_at_time": pct})


def build_report(session: Session, now: datetime | None = None) -> SessionReport:
    """Compute the report for the current or last completed session."""
    samples = session.samples
    return SessionReport(
        elapsed=elapsed_duration(session, now),
        good_percentage=good_percentage(samples),
        corrections=correction_count(samples),
        good_samples=sum(1 for s in samples if s.is_good),
        total_samples=len(samples),
        timeline=[
            s.percentage_at_time if s.percentage_at_time is not None else 100
            for s in samples
        ],
    )


def _percent(part: int, whole: int) -> int:
    # Half-up rounding; Python's round() would send 0.5 to the even neighbour.
    return int(100 * part / whole + 0.5)
