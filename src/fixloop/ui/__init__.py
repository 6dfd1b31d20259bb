"""Terminal display and confirmation prompt."""

from fixloop.ui.confirm import ConfirmationGate
from fixloop.ui.display import DisplaySink
from fixloop.ui.log_store import LogStore

__all__ = ["ConfirmationGate", "DisplaySink", "LogStore"]
