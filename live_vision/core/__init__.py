"""
Capture-dispatch-respond control loop.

Headless core: the scheduler ticks, the request manager keeps one request in
flight, the sink applies results, and the mode controller switches between
live and file capture. A presentation layer only observes ApplicationState.
"""

from .controller import ModeController
from .request_manager import CancellationToken, ProcessingRequest, RequestManager
from .scheduler import CaptureScheduler, TickOutcome
from .sink import ResultSink
from .state import ApplicationState, Mode

__all__ = [
    "ApplicationState",
    "CancellationToken",
    "CaptureScheduler",
    "Mode",
    "ModeController",
    "ProcessingRequest",
    "RequestManager",
    "ResultSink",
    "TickOutcome",
]
