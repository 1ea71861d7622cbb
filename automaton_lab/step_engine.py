from typing import Iterable

from .automaton_model import Automaton
from .epsilon_closure import StepResult, epsilon_closure


def next_states(automaton: Automaton, state_ids: Iterable[str], symbol: str) -> StepResult:
    """
    Advance a set of active states over a single input symbol.

    Every transition leaving an active state whose symbols contain `symbol`
    fires. Destinations are deduplicated; the ids of the fired transitions are
    recorded in firing order. The epsilon closure of the destinations is then
    merged into the result.

    Args:
        automaton: The automaton being simulated
        state_ids: Currently active state ids
        symbol: The input symbol to consume (matched literally)

    Returns:
        StepResult with the next active state ids and the transition ids used.
        An empty state list means no transition fired (dead configuration).
    """
    destinations = []
    used_transition_ids = []

    for state_id in state_ids:
        for transition in automaton.transitions_from(state_id, symbol):
            if transition.to_state_id not in destinations:
                destinations.append(transition.to_state_id)
            used_transition_ids.append(transition.id)

    closure = epsilon_closure(automaton, destinations)

    all_state_ids = list(destinations)
    for state_id in closure.state_ids:
        if state_id not in all_state_ids:
            all_state_ids.append(state_id)

    return StepResult(all_state_ids, used_transition_ids + closure.transition_ids)
