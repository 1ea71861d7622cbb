import logging
import threading
from enum import Enum
from typing import Callable, List, Optional, Tuple

from .automaton_model import Automaton, State, Transition, create_empty_automaton
from .conf import get_setting
from .exceptions import EditLockedError
from .execution import ExecutionController, ExecutionState, ExecutionStatus

logger = logging.getLogger(__name__)


class EditorMode(str, Enum):
    SELECT = 'select'
    ADD_STATE = 'addState'
    ADD_TRANSITION = 'addTransition'
    TEST = 'test'


class EditorSession:
    """
    One user's editing session: an automaton, its execution controller, the
    editor mode and the current selection.

    Structural edits are refused while a run is in progress or finished but
    not yet reset, since the execution history refers to the automaton's ids.
    """

    def __init__(self, automaton: Optional[Automaton] = None):
        if automaton is None:
            automaton = create_empty_automaton(get_setting('DEFAULT_AUTOMATON_NAME'))
        self.automaton = automaton
        self.controller = ExecutionController(automaton)
        self.mode = EditorMode.SELECT
        # ('state' | 'transition', id) or None
        self.selected: Optional[Tuple[str, str]] = None
        # Set by AutoPlayer when one is attached to this session
        self.auto_player: Optional['AutoPlayer'] = None

    @property
    def execution(self) -> ExecutionState:
        return self.controller.state

    @property
    def is_editable(self) -> bool:
        return self.controller.status == ExecutionStatus.IDLE

    def _check_editable(self):
        if not self.is_editable:
            raise EditLockedError(
                f"Cannot edit the automaton while a run is {self.controller.status.value}; reset it first"
            )

    # Editing

    def rename(self, name: str) -> None:
        self.automaton.name = name

    def add_state(self, x: float = 0.0, y: float = 0.0) -> State:
        self._check_editable()
        state = self.automaton.add_state(x, y)
        self.selected = ('state', state.id)
        self.mode = EditorMode.SELECT
        return state

    def update_state(self, state_id: str, **updates) -> State:
        self._check_editable()
        return self.automaton.update_state(state_id, **updates)

    def delete_state(self, state_id: str) -> None:
        self._check_editable()
        self.automaton.delete_state(state_id)
        self.selected = None

    def set_start_state(self, state_id: str) -> None:
        self._check_editable()
        self.automaton.set_start_state(state_id)

    def toggle_accept_state(self, state_id: str) -> State:
        self._check_editable()
        return self.automaton.toggle_accept_state(state_id)

    def add_transition(self, from_state_id: str, to_state_id: str,
                       symbols: Optional[List[str]] = None) -> Transition:
        self._check_editable()
        transition = self.automaton.add_transition(from_state_id, to_state_id, symbols)
        self.selected = ('transition', transition.id)
        self.mode = EditorMode.SELECT
        return transition

    def update_transition(self, transition_id: str, symbols: List[str]) -> bool:
        self._check_editable()
        return self.automaton.update_transition(transition_id, symbols)

    def delete_transition(self, transition_id: str) -> None:
        self._check_editable()
        self.automaton.delete_transition(transition_id)
        self.selected = None

    def clear_canvas(self) -> None:
        self.reset_execution()
        self.automaton.clear()
        self.selected = None

    def new_automaton(self) -> Automaton:
        self.load_automaton(create_empty_automaton(get_setting('DEFAULT_AUTOMATON_NAME')))
        return self.automaton

    def load_automaton(self, automaton: Automaton) -> None:
        self.reset_execution()
        self.automaton = automaton
        self.controller = ExecutionController(automaton)
        self.selected = None

    # Execution

    def _stop_auto_play(self):
        if self.auto_player is not None:
            self.auto_player.stop()

    def _run_stepped(self):
        if self.auto_player is not None:
            self.auto_player.restart_pending()

    def test_string(self, input_string: str) -> ExecutionState:
        self._stop_auto_play()
        state = self.controller.start(input_string)
        if self.automaton.start_state() is not None:
            self.mode = EditorMode.TEST
        return state

    def step_forward(self) -> ExecutionState:
        state = self.controller.step_forward()
        self._run_stepped()
        return state

    def step_backward(self) -> ExecutionState:
        state = self.controller.step_backward()
        self._run_stepped()
        return state

    def reset_execution(self) -> ExecutionState:
        self._stop_auto_play()
        self.mode = EditorMode.SELECT
        return self.controller.reset()


class AutoPlayer:
    """
    Timer-driven auto-play for a session's run.

    At most one step timer is pending at any time. The pending timer is
    cancelled by stop(), by the session starting or resetting a run, and once
    the run can no longer step forward; a manual step restarts it. A timer
    that already fired but lost the race with any of these does nothing,
    and one scheduled for a run that has since changed switches auto-play off.

    Args:
        session: The session whose run is stepped
        delay_ms: Delay before each step; defaults to the AUTOPLAY_DELAY_MS setting
        timer_factory: Callable(seconds, callback) returning an object with
            start() and cancel(), threading.Timer by default
    """

    def __init__(self, session: EditorSession, delay_ms: Optional[int] = None,
                 timer_factory: Callable = threading.Timer):
        self.session = session
        self.delay_ms = delay_ms if delay_ms is not None else get_setting('AUTOPLAY_DELAY_MS')
        self.timer_factory = timer_factory
        self.enabled = False
        self._timer = None
        self._generation = 0
        self._lock = threading.RLock()
        session.auto_player = self

    @property
    def has_pending_step(self) -> bool:
        return self._timer is not None

    def set_delay(self, delay_ms: int) -> None:
        """Change the delay; applies from the next scheduled step."""
        if delay_ms < 0:
            raise ValueError('delay_ms must be non-negative')
        self.delay_ms = delay_ms

    def start(self) -> None:
        with self._lock:
            if not self.session.controller.can_step_forward:
                return
            self.enabled = True
            self._schedule()

    def stop(self) -> None:
        with self._lock:
            self.enabled = False
            self._cancel_pending()

    def toggle(self) -> None:
        if self.enabled:
            self.stop()
        else:
            self.start()

    def restart_pending(self) -> None:
        """Reschedule after the run moved outside auto-play, or stop if it cannot step."""
        with self._lock:
            if not self.enabled:
                return
            if self.session.controller.can_step_forward:
                self._schedule()
            else:
                self.stop()

    def _cancel_pending(self):
        self._generation += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _schedule(self):
        self._cancel_pending()
        generation = self._generation
        run_state = self.session.controller.state
        timer = self.timer_factory(self.delay_ms / 1000.0,
                                   lambda: self._tick(generation, run_state))
        if hasattr(timer, 'daemon'):
            timer.daemon = True
        self._timer = timer
        timer.start()

    def _tick(self, generation: int, run_state: ExecutionState):
        with self._lock:
            if not self.enabled or generation != self._generation:
                return
            self._timer = None
            controller = self.session.controller
            if controller.state is not run_state:
                # The run was stepped, restarted or replaced behind our back
                logger.debug('Auto-play cancelled: run changed since the step was scheduled')
                self.enabled = False
                return
            controller.step_forward()
            if controller.can_step_forward:
                self._schedule()
            else:
                logger.debug('Auto-play finished with status %s', controller.status.value)
                self.enabled = False
