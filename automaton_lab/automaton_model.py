import random
import string
from dataclasses import dataclass, field
from typing import List, Optional, Set

from .exceptions import AutomatonValidationError, UnknownElementError

EPSILON = 'ε'

DEFAULT_AUTOMATON_NAME = 'Untitled Automaton'

_ID_ALPHABET = string.digits + string.ascii_lowercase

_EDITABLE_STATE_FIELDS = {'name', 'x', 'y', 'is_start', 'is_accept'}


def generate_id() -> str:
    """Short random id used for automata, states and transitions created in the editor."""
    return ''.join(random.choice(_ID_ALPHABET) for _ in range(7))


def parse_symbols(text: str) -> List[str]:
    """
    Parse the comma-separated symbol field of the transition editor.

    Args:
        text: Raw editor input, e.g. "a, b, ε"

    Returns:
        List of non-blank symbols in input order
    """
    return [symbol.strip() for symbol in text.split(',') if symbol.strip()]


def _merge_symbols(existing: List[str], extra: List[str]) -> List[str]:
    merged = []
    for symbol in existing + extra:
        if symbol not in merged:
            merged.append(symbol)
    return merged


@dataclass
class State:
    id: str
    name: str
    x: float = 0.0
    y: float = 0.0
    is_start: bool = False
    is_accept: bool = False


@dataclass
class Transition:
    id: str
    from_state_id: str
    to_state_id: str
    symbols: List[str] = field(default_factory=list)

    @property
    def is_epsilon(self) -> bool:
        return EPSILON in self.symbols

    @property
    def is_self_loop(self) -> bool:
        return self.from_state_id == self.to_state_id


@dataclass
class Automaton:
    """
    A finite automaton as built in the editor.

    States and transitions are kept as lists in insertion order; ids are unique
    within each list. Transition endpoints always reference existing states,
    and at most one state carries the start flag.
    """
    id: str
    name: str = DEFAULT_AUTOMATON_NAME
    states: List[State] = field(default_factory=list)
    transitions: List[Transition] = field(default_factory=list)

    # Lookups

    def get_state(self, state_id: str) -> State:
        for state in self.states:
            if state.id == state_id:
                return state
        raise UnknownElementError(f"Unknown state '{state_id}'")

    def get_transition(self, transition_id: str) -> Transition:
        for transition in self.transitions:
            if transition.id == transition_id:
                return transition
        raise UnknownElementError(f"Unknown transition '{transition_id}'")

    def has_state(self, state_id: str) -> bool:
        return any(state.id == state_id for state in self.states)

    def start_state(self) -> Optional[State]:
        for state in self.states:
            if state.is_start:
                return state
        return None

    def accepting_state_ids(self) -> Set[str]:
        return {state.id for state in self.states if state.is_accept}

    def transitions_from(self, state_id: str, symbol: str) -> List[Transition]:
        """All transitions leaving state_id whose symbol set contains symbol."""
        return [
            t for t in self.transitions
            if t.from_state_id == state_id and symbol in t.symbols
        ]

    # State mutators

    def add_state(self, x: float = 0.0, y: float = 0.0) -> State:
        state = State(
            id=generate_id(),
            name=f'q{len(self.states)}',
            x=x,
            y=y,
            is_start=len(self.states) == 0,
            is_accept=False,
        )
        self.states.append(state)
        return state

    def update_state(self, state_id: str, **updates) -> State:
        """
        Apply editor changes to a state.

        Every key is checked before anything changes. is_start=True moves the
        start flag here from any other state; is_start=False clears it.

        Raises:
            AutomatonValidationError: If a key is not an editable state attribute
        """
        state = self.get_state(state_id)
        unknown = sorted(set(updates) - _EDITABLE_STATE_FIELDS)
        if unknown:
            raise AutomatonValidationError(
                f"State has no editable attribute '{unknown[0]}'",
                {'error': f"Unknown state fields: {', '.join(unknown)}"},
            )

        if 'is_start' in updates:
            if updates.pop('is_start'):
                self.set_start_state(state_id)
            else:
                state.is_start = False
        for key, value in updates.items():
            setattr(state, key, value)
        return state

    def delete_state(self, state_id: str) -> None:
        self.get_state(state_id)
        self.states = [s for s in self.states if s.id != state_id]
        # Cascade to every transition touching the removed state
        self.transitions = [
            t for t in self.transitions
            if t.from_state_id != state_id and t.to_state_id != state_id
        ]

    def set_start_state(self, state_id: str) -> None:
        self.get_state(state_id)
        for state in self.states:
            state.is_start = state.id == state_id

    def toggle_accept_state(self, state_id: str) -> State:
        state = self.get_state(state_id)
        state.is_accept = not state.is_accept
        return state

    # Transition mutators

    def add_transition(self, from_state_id: str, to_state_id: str,
                       symbols: Optional[List[str]] = None) -> Transition:
        """
        Add a transition, merging into an existing one for the same ordered pair.

        Args:
            from_state_id: Source state id
            to_state_id: Destination state id (may equal the source)
            symbols: Symbols the transition fires on; defaults to ['a'] for a new transition

        Returns:
            The new or merged transition
        """
        self.get_state(from_state_id)
        self.get_state(to_state_id)
        symbols = list(symbols or [])

        for transition in self.transitions:
            if transition.from_state_id == from_state_id and transition.to_state_id == to_state_id:
                transition.symbols = _merge_symbols(transition.symbols, symbols)
                return transition

        transition = Transition(
            id=generate_id(),
            from_state_id=from_state_id,
            to_state_id=to_state_id,
            symbols=_merge_symbols([], symbols) if symbols else ['a'],
        )
        self.transitions.append(transition)
        return transition

    def update_transition(self, transition_id: str, symbols: List[str]) -> bool:
        """
        Replace the symbols of a transition.

        An edit that would leave the transition without symbols is ignored.

        Returns:
            True if the edit was applied, False if it was rejected
        """
        transition = self.get_transition(transition_id)
        cleaned = _merge_symbols([], [s for s in symbols if s])
        if not cleaned:
            return False
        transition.symbols = cleaned
        return True

    def delete_transition(self, transition_id: str) -> None:
        self.get_transition(transition_id)
        self.transitions = [t for t in self.transitions if t.id != transition_id]

    def clear(self) -> None:
        self.states = []
        self.transitions = []


def create_empty_automaton(name: str = DEFAULT_AUTOMATON_NAME) -> Automaton:
    return Automaton(id=generate_id(), name=name)
