"""Termination signals unwind a run instead of killing it mid-cleanup."""

from __future__ import annotations

import os
import signal

import pytest

from git_publish.errors import Interrupted
from git_publish.publish import interrupt_on_signals

pytestmark = pytest.mark.skipif(not hasattr(signal, "SIGHUP"), reason="POSIX signals only")


@pytest.mark.parametrize("signum", [signal.SIGTERM, getattr(signal, "SIGHUP", signal.SIGTERM)])
def test_signal_raises_interrupted(signum: int) -> None:
    with pytest.raises(Interrupted) as excinfo, interrupt_on_signals():
        os.kill(os.getpid(), signum)
    assert excinfo.value.signal_name == signal.Signals(signum).name
    assert str(excinfo.value) == f"Interrupted by {signal.Signals(signum).name}"


def test_previous_handlers_restored() -> None:
    before = signal.getsignal(signal.SIGTERM)
    with interrupt_on_signals():
        assert signal.getsignal(signal.SIGTERM) is not before
    assert signal.getsignal(signal.SIGTERM) is before
