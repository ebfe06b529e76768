"""Carrying a tab's fullscreen presentation across a window move.

Moving a tab to another window drops it out of fullscreen. Before the move
the relocator captures a ``FullscreenSnapshot``; afterwards
``FullscreenRestorer.restore`` schedules three independent attempts to put
the page back into fullscreen. Each attempt sends a plan to the
``restoreFullscreen`` page script (extensions/chromebased-browser/page_scripts.js),
which:

1. skips the request when the document is already fullscreen,
2. picks the first element matching ``selectors``, else the document root,
3. requests fullscreen on it and reports the rejection reason on failure,
4. resumes playback of a ``video`` element when ``resumePlayback`` is set,
5. runs the ``corrective`` action, if any.

The page answers ``{fullscreen, skippedRequest, element, error, played,
corrective}``.
"""

import logging
import threading
from typing import Any, Dict, List, NamedTuple, Optional

from .host.base import HostError

# Offsets from the move, in milliseconds. Attempts are not chained.
FULLSCREEN_RETRY_DELAYS_MS = (180, 420, 820)

# Fullscreen target priority inside the page; the document root comes last.
PLAYER_SELECTORS = (".html5-video-player", "video")

FULLSCREEN_INFO_SCRIPT = "fullscreenInfo"
RESTORE_FULLSCREEN_SCRIPT = "restoreFullscreen"

# Restoration states
IDLE = "idle"
SCHEDULED = "scheduled"
ATTEMPTING = "attempting"
SUCCEEDED = "succeeded"
EXHAUSTED = "exhausted"


class SiteWorkaround(NamedTuple):
    """A corrective action for one site on one attempt."""

    host_pattern: str
    attempt: int
    action: str
    pause_ms: int = 120

    def matches(self, host: str, attempt: int) -> bool:
        return attempt == self.attempt and self.host_pattern in (host or "")


# Twitch's player ignores the first programmatic fullscreen request;
# leaving and re-entering fullscreen on the second attempt fixes it.
SITE_WORKAROUNDS = [
    SiteWorkaround(host_pattern="twitch.tv", attempt=1, action="toggle", pause_ms=120),
]


class FullscreenSnapshot:
    """Fullscreen state of a tab captured before it is moved."""

    def __init__(self, is_fullscreen: bool = False, host: str = ""):
        self.is_fullscreen = is_fullscreen
        self.host = host

    @classmethod
    def from_result(cls, result: Any) -> "FullscreenSnapshot":
        """Build a snapshot from the ``fullscreenInfo`` page script answer."""
        if not isinstance(result, dict):
            return cls()
        return cls(bool(result.get("isFs")), str(result.get("host") or ""))

    def __repr__(self):
        return f"FullscreenSnapshot(is_fullscreen={self.is_fullscreen}, host={self.host!r})"


class RestorationRun:
    """The attempts scheduled for one move, and where they got to."""

    def __init__(self, tab_id, snapshot: FullscreenSnapshot, restorer: "FullscreenRestorer"):
        self.logger = logging.getLogger("TabMover.Fullscreen")
        self.tab_id = tab_id
        self.snapshot = snapshot
        self.restorer = restorer
        self.total_attempts = len(restorer.delays_ms)
        self.state = IDLE
        self.current_attempt = 0
        self.results: List[Dict[str, Any]] = []
        self._lock = threading.Lock()

    def attempt(self, index: int) -> None:
        """Run attempt ``index`` (0-based). Failures are recorded, never raised."""
        with self._lock:
            if self.state != SUCCEEDED:
                self.state = ATTEMPTING
            self.current_attempt = index + 1

        plan = self.restorer.build_plan(self.snapshot, index)
        outcome = {"attempt": index + 1, "fullscreen": False, "error": None}
        try:
            result = self.restorer.script_executor.execute_script(
                self.tab_id, RESTORE_FULLSCREEN_SCRIPT, plan
            )
            if isinstance(result, dict):
                outcome.update(result)
                outcome["fullscreen"] = bool(result.get("fullscreen"))
            else:
                outcome["error"] = "no result from page"
        except HostError as e:
            outcome["error"] = str(e)
        finally:
            self._record(outcome)

    def _record(self, outcome: Dict[str, Any]) -> None:
        with self._lock:
            self.results.append(outcome)
            if outcome["fullscreen"]:
                self.state = SUCCEEDED
            elif len(self.results) == self.total_attempts and self.state != SUCCEEDED:
                self.state = EXHAUSTED

        if outcome["fullscreen"]:
            self.logger.info(
                f"Tab {self.tab_id} fullscreen on attempt {outcome['attempt']}"
                + (" (after toggle)" if outcome.get("corrective") else "")
            )
        else:
            self.logger.warning(
                f"Fullscreen attempt {outcome['attempt']}/{self.total_attempts} "
                f"for tab {self.tab_id} failed: {outcome.get('error')}"
            )
        if self.state == EXHAUSTED:
            self.logger.debug(f"Fullscreen restoration for tab {self.tab_id} exhausted")


class FullscreenRestorer:
    """Captures fullscreen state and replays it after a move."""

    def __init__(
        self,
        script_executor,
        scheduler,
        workarounds: Optional[List[SiteWorkaround]] = None,
        delays_ms=FULLSCREEN_RETRY_DELAYS_MS,
    ):
        """Initialize the restorer.

        Args:
            script_executor (ScriptExecutor): Runs page scripts in a tab
            scheduler (Scheduler): Runs the delayed attempts
            workarounds (list, optional): Site table; defaults to SITE_WORKAROUNDS
            delays_ms (tuple): Attempt offsets in milliseconds
        """
        self.logger = logging.getLogger("TabMover.Fullscreen")
        self.script_executor = script_executor
        self.scheduler = scheduler
        self.workarounds = SITE_WORKAROUNDS if workarounds is None else workarounds
        self.delays_ms = tuple(delays_ms)

    def capture(self, tab_id) -> FullscreenSnapshot:
        """Read the tab's fullscreen state. Unreadable pages count as not fullscreen."""
        try:
            result = self.script_executor.execute_script(tab_id, FULLSCREEN_INFO_SCRIPT)
        except HostError as e:
            self.logger.debug(f"Could not read fullscreen state of tab {tab_id}: {e}")
            return FullscreenSnapshot()

        snapshot = FullscreenSnapshot.from_result(result)
        self.logger.debug(f"Captured {snapshot} for tab {tab_id}")
        return snapshot

    def corrective_for(self, host: str, attempt: int) -> Optional[SiteWorkaround]:
        for workaround in self.workarounds:
            if workaround.matches(host, attempt):
                return workaround
        return None

    def build_plan(self, snapshot: FullscreenSnapshot, attempt: int) -> Dict[str, Any]:
        """Get the ``restoreFullscreen`` arguments for one attempt."""
        workaround = self.corrective_for(snapshot.host, attempt)
        corrective = None
        if workaround is not None:
            corrective = {"action": workaround.action, "pauseMs": workaround.pause_ms}
        return {
            "attempt": attempt,
            "host": snapshot.host,
            "selectors": list(PLAYER_SELECTORS),
            "resumePlayback": True,
            "corrective": corrective,
        }

    def restore(self, tab_id, snapshot: FullscreenSnapshot) -> Optional[RestorationRun]:
        """Schedule the fullscreen attempts for a moved tab.

        Returns:
            RestorationRun, or None when the tab was not fullscreen
        """
        if not snapshot.is_fullscreen:
            return None

        run = RestorationRun(tab_id, snapshot, self)
        run.state = SCHEDULED
        for index, delay_ms in enumerate(self.delays_ms):
            self.scheduler.schedule(delay_ms / 1000.0, run.attempt, index)

        self.logger.debug(
            f"Scheduled {len(self.delays_ms)} fullscreen attempts for tab {tab_id} "
            f"at {list(self.delays_ms)} ms"
        )
        return run
