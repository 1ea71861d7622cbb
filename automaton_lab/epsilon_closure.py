from typing import Iterable, List, NamedTuple

from .automaton_model import Automaton, EPSILON


class StepResult(NamedTuple):
    """State ids reached and transition ids exercised by a closure or a step"""
    state_ids: List[str]
    transition_ids: List[str]


def epsilon_closure(automaton: Automaton, state_ids: Iterable[str]) -> StepResult:
    """
    Compute the epsilon closure of a set of states.

    Args:
        automaton: The automaton whose transitions are followed
        state_ids: Ids of the states to compute the closure for

    Returns:
        StepResult with the original states plus every state reachable through
        epsilon transitions, and the ids of the epsilon transitions followed.
        Each transition id appears at most once.
    """
    closure = []
    for state_id in state_ids:
        if state_id not in closure:
            closure.append(state_id)

    transition_ids = []
    stack = list(closure)
    seen = set(closure)

    while stack:
        current = stack.pop()

        for transition in automaton.transitions_from(current, EPSILON):
            if transition.to_state_id not in seen:
                seen.add(transition.to_state_id)
                closure.append(transition.to_state_id)
                stack.append(transition.to_state_id)
            if transition.id not in transition_ids:
                transition_ids.append(transition.id)

    return StepResult(closure, transition_ids)
