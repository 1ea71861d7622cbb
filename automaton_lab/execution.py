import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterable, List

from .automaton_model import Automaton
from .epsilon_closure import epsilon_closure
from .step_engine import next_states

logger = logging.getLogger(__name__)


class ExecutionStatus(str, Enum):
    IDLE = 'idle'
    RUNNING = 'running'
    ACCEPTED = 'accepted'
    REJECTED = 'rejected'

    @property
    def is_terminal(self) -> bool:
        return self in (ExecutionStatus.ACCEPTED, ExecutionStatus.REJECTED)


@dataclass(frozen=True)
class HistoryEntry:
    """One forward step: the active states before it, the symbol read and the transitions fired"""
    state_ids: List[str]
    symbol: str
    transition_ids: List[str]


@dataclass(frozen=True)
class ExecutionState:
    current_state_ids: List[str] = field(default_factory=list)
    remaining_input: str = ''
    processed_input: str = ''
    step: int = 0
    status: ExecutionStatus = ExecutionStatus.IDLE
    history: List[HistoryEntry] = field(default_factory=list)

    @property
    def last_transition_ids(self) -> List[str]:
        """Transitions used by the most recent forward step, for highlighting."""
        if not self.history:
            return []
        return list(self.history[-1].transition_ids)


class ExecutionController:
    """
    Step-by-step simulation of an automaton over one input string.

    The controller owns a single ExecutionState which every call replaces with
    a value derived from the previous one. Calls that make no sense in the
    current status are no-ops, so a UI can invoke them freely.

    The automaton must not change shape between start() and reset(); the
    history refers to its state and transition ids.
    """

    def __init__(self, automaton: Automaton):
        self.automaton = automaton
        self.state = ExecutionState()

    # Status helpers

    @property
    def status(self) -> ExecutionStatus:
        return self.state.status

    @property
    def is_terminal(self) -> bool:
        return self.state.status.is_terminal

    @property
    def can_step_forward(self) -> bool:
        return self.state.status == ExecutionStatus.RUNNING and bool(self.state.remaining_input)

    @property
    def can_step_backward(self) -> bool:
        return self.state.step > 0 and bool(self.state.history)

    def has_start_state(self) -> bool:
        return self.automaton.start_state() is not None

    def is_accepting(self, state_ids: Iterable[str]) -> bool:
        accepting = self.automaton.accepting_state_ids()
        return any(state_id in accepting for state_id in state_ids)

    # Transitions of the execution state machine

    def start(self, input_string: str) -> ExecutionState:
        """
        Begin a run over input_string.

        Without a start state the run is rejected immediately, keeping the
        whole input as remaining. The empty string is decided at once against
        the epsilon closure of the start state.
        """
        start_state = self.automaton.start_state()
        if start_state is None:
            logger.info("Cannot run automaton '%s': no start state", self.automaton.id)
            self.state = ExecutionState(
                remaining_input=input_string,
                status=ExecutionStatus.REJECTED,
            )
            return self.state

        initial = epsilon_closure(self.automaton, [start_state.id])

        if not input_string:
            accepted = self.is_accepting(initial.state_ids)
            self.state = ExecutionState(
                current_state_ids=initial.state_ids,
                status=ExecutionStatus.ACCEPTED if accepted else ExecutionStatus.REJECTED,
            )
            logger.info("Empty input %s", self.state.status.value)
            return self.state

        self.state = ExecutionState(
            current_state_ids=initial.state_ids,
            remaining_input=input_string,
            status=ExecutionStatus.RUNNING,
        )
        return self.state

    test_string = start

    def step_forward(self) -> ExecutionState:
        """
        Consume one symbol of the remaining input.

        When the run cannot step (already terminal, or input exhausted) the
        status is re-derived from the current active states instead. An idle
        controller is left untouched.
        """
        prev = self.state

        if prev.status == ExecutionStatus.IDLE:
            return prev

        if prev.status != ExecutionStatus.RUNNING or not prev.remaining_input:
            accepted = self.is_accepting(prev.current_state_ids)
            self.state = replace(
                prev,
                status=ExecutionStatus.ACCEPTED if accepted else ExecutionStatus.REJECTED,
            )
            return self.state

        symbol = prev.remaining_input[0]
        result = next_states(self.automaton, prev.current_state_ids, symbol)

        history = prev.history + [HistoryEntry(
            state_ids=list(prev.current_state_ids),
            symbol=symbol,
            transition_ids=result.transition_ids,
        )]
        remaining = prev.remaining_input[1:]

        if not result.state_ids:
            # Dead configuration; the rest of the input is never examined
            status = ExecutionStatus.REJECTED
        elif not remaining:
            accepted = self.is_accepting(result.state_ids)
            status = ExecutionStatus.ACCEPTED if accepted else ExecutionStatus.REJECTED
        else:
            status = ExecutionStatus.RUNNING

        self.state = ExecutionState(
            current_state_ids=result.state_ids,
            remaining_input=remaining,
            processed_input=prev.processed_input + symbol,
            step=prev.step + 1,
            status=status,
            history=history,
        )

        logger.debug("Step %d on %r: %s -> %s", self.state.step, symbol,
                     prev.current_state_ids, result.state_ids)
        if status.is_terminal:
            logger.info("Run %s after %d step(s)", status.value, self.state.step)
        return self.state

    def step_backward(self) -> ExecutionState:
        """
        Undo the last forward step.

        The status always returns to running, even from a terminal status.
        """
        prev = self.state
        if prev.step == 0 or not prev.history:
            return prev

        last = prev.history[-1]
        self.state = ExecutionState(
            current_state_ids=list(last.state_ids),
            remaining_input=last.symbol + prev.remaining_input,
            processed_input=prev.processed_input[:-1],
            step=prev.step - 1,
            status=ExecutionStatus.RUNNING,
            history=prev.history[:-1],
        )
        logger.debug("Stepped back to step %d", self.state.step)
        return self.state

    def reset(self) -> ExecutionState:
        self.state = ExecutionState()
        return self.state

    def run_to_completion(self) -> ExecutionState:
        """Step forward until the run reaches a terminal status."""
        while self.state.status == ExecutionStatus.RUNNING:
            self.step_forward()
        return self.state
