from typing import Dict, List
from collections import deque

from .automaton_model import Automaton, EPSILON


def alphabet(automaton: Automaton) -> List[str]:
    """
    Collects the input alphabet of the automaton.

    Returns:
        List of every non-epsilon symbol used by a transition, sorted
    """
    symbols = set()
    for transition in automaton.transitions:
        symbols.update(s for s in transition.symbols if s != EPSILON)
    return sorted(symbols)


def is_deterministic(automaton: Automaton) -> bool:
    """
    Checks if the automaton is deterministic.

    An automaton is deterministic if:
    1. It has no epsilon transitions
    2. For each state and each symbol, there is at most one transition

    Args:
        automaton: The automaton to check

    Returns:
        bool: True if the automaton is deterministic, False otherwise
    """
    seen = set()
    for transition in automaton.transitions:
        if EPSILON in transition.symbols:
            return False

        for symbol in transition.symbols:
            key = (transition.from_state_id, symbol)
            # A second transition on the same symbol from the same state
            if key in seen:
                return False
            seen.add(key)

    return True


def is_complete(automaton: Automaton) -> bool:
    """
    Checks if the automaton is complete.

    An automaton is complete if for each state and each symbol of its alphabet
    there is at least one transition. Epsilon transitions are ignored.
    """
    # Trivially complete if no states
    if not automaton.states:
        return True

    covered = set()
    for transition in automaton.transitions:
        for symbol in transition.symbols:
            covered.add((transition.from_state_id, symbol))

    for state in automaton.states:
        for symbol in alphabet(automaton):
            if (state.id, symbol) not in covered:
                return False

    return True


def is_connected(automaton: Automaton) -> bool:
    """
    Checks if every state is reachable from the start state, following
    transitions on any symbol including epsilon.

    An automaton without states is trivially connected. Without a start state
    nothing is reachable, so any non-empty automaton is not connected.
    """
    if not automaton.states:
        return True

    start = automaton.start_state()
    if start is None:
        return False

    reachable = {start.id}
    queue = deque([start.id])

    while queue:
        current = queue.popleft()
        for transition in automaton.transitions:
            if transition.from_state_id == current and transition.to_state_id not in reachable:
                reachable.add(transition.to_state_id)
                queue.append(transition.to_state_id)

    return len(reachable) == len(automaton.states)


def check_all_properties(automaton: Automaton) -> Dict:
    """
    Check all automaton properties at once.

    Returns:
        Dict: {'deterministic': bool, 'complete': bool, 'connected': bool,
               'hasStartState': bool, 'alphabet': List[str]}
    """
    return {
        'deterministic': is_deterministic(automaton),
        'complete': is_complete(automaton),
        'connected': is_connected(automaton),
        'hasStartState': automaton.start_state() is not None,
        'alphabet': alphabet(automaton),
    }
