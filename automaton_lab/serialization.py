import json
import re
from typing import Dict

from .automaton_model import Automaton, State, Transition
from .exceptions import AutomatonValidationError
from .execution import ExecutionState


def validate_automaton_structure(data, require_id: bool = True) -> Dict:
    """
    Validates that an automaton payload has the required structure.

    Checks required keys and their types, unique state and transition ids,
    that every transition endpoint refers to a declared state, that no
    transition has an empty symbol list and that at most one state is marked
    as the start state.

    Args:
        data: The decoded payload to validate
        require_id: Whether the automaton itself must carry an id (False for create requests)

    Returns:
        Dict: Validation result with 'valid' boolean and optional 'error' message
    """
    if not isinstance(data, dict):
        return {'valid': False, 'error': 'Automaton must be a dictionary'}

    required_keys = ['name', 'states', 'transitions']
    if require_id:
        required_keys.insert(0, 'id')

    for key in required_keys:
        if key not in data:
            return {'valid': False, 'error': f'Missing required key: {key}'}

    if require_id and not isinstance(data['id'], str):
        return {'valid': False, 'error': 'id must be a string'}

    if not isinstance(data['name'], str):
        return {'valid': False, 'error': 'name must be a string'}

    if not isinstance(data['states'], list):
        return {'valid': False, 'error': 'states must be a list'}

    if not isinstance(data['transitions'], list):
        return {'valid': False, 'error': 'transitions must be a list'}

    state_ids = set()
    start_count = 0
    for index, state in enumerate(data['states']):
        if not isinstance(state, dict):
            return {'valid': False, 'error': f'State {index} must be a dictionary'}
        for key, expected in (('id', str), ('name', str), ('isStart', bool), ('isAccept', bool)):
            if key not in state:
                return {'valid': False, 'error': f'State {index} is missing required key: {key}'}
            if not isinstance(state[key], expected):
                return {'valid': False, 'error': f'State {index}: {key} must be a {expected.__name__}'}
        for key in ('x', 'y'):
            if key not in state:
                return {'valid': False, 'error': f'State {index} is missing required key: {key}'}
            # bool is an int subclass but never a valid coordinate
            if isinstance(state[key], bool) or not isinstance(state[key], (int, float)):
                return {'valid': False, 'error': f'State {index}: {key} must be a number'}
        if state['id'] in state_ids:
            return {'valid': False, 'error': f"Duplicate state id: {state['id']}"}
        state_ids.add(state['id'])
        if state['isStart']:
            start_count += 1

    if start_count > 1:
        return {'valid': False, 'error': 'At most one state may be the start state'}

    transition_ids = set()
    for index, transition in enumerate(data['transitions']):
        if not isinstance(transition, dict):
            return {'valid': False, 'error': f'Transition {index} must be a dictionary'}
        for key in ('id', 'fromStateId', 'toStateId'):
            if key not in transition:
                return {'valid': False, 'error': f'Transition {index} is missing required key: {key}'}
            if not isinstance(transition[key], str):
                return {'valid': False, 'error': f'Transition {index}: {key} must be a str'}
        if 'symbols' not in transition:
            return {'valid': False, 'error': f'Transition {index} is missing required key: symbols'}
        symbols = transition['symbols']
        if not isinstance(symbols, list) or not all(isinstance(s, str) for s in symbols):
            return {'valid': False, 'error': f'Transition {index}: symbols must be a list of strings'}
        if not symbols:
            return {'valid': False, 'error': f'Transition {index}: symbols must not be empty'}
        if transition['id'] in transition_ids:
            return {'valid': False, 'error': f"Duplicate transition id: {transition['id']}"}
        transition_ids.add(transition['id'])
        for key in ('fromStateId', 'toStateId'):
            if transition[key] not in state_ids:
                return {
                    'valid': False,
                    'error': f"Transition {transition['id']} references unknown state {transition[key]}"
                }

    return {'valid': True}


def automaton_from_dict(data, automaton_id: str = None) -> Automaton:
    """
    Build an Automaton from its wire representation.

    Nothing is constructed unless the whole payload validates.

    Args:
        data: Decoded payload using the camelCase wire keys
        automaton_id: Id to assign instead of the payload's own (which may then be absent)

    Raises:
        AutomatonValidationError: If the payload is structurally invalid
    """
    validation = validate_automaton_structure(data, require_id=automaton_id is None)
    if not validation['valid']:
        raise AutomatonValidationError('Invalid automaton data', {'error': validation['error']})

    states = [
        State(
            id=s['id'],
            name=s['name'],
            x=s['x'],
            y=s['y'],
            is_start=s['isStart'],
            is_accept=s['isAccept'],
        )
        for s in data['states']
    ]
    transitions = [
        Transition(
            id=t['id'],
            from_state_id=t['fromStateId'],
            to_state_id=t['toStateId'],
            symbols=list(t['symbols']),
        )
        for t in data['transitions']
    ]
    return Automaton(
        id=automaton_id if automaton_id is not None else data['id'],
        name=data['name'],
        states=states,
        transitions=transitions,
    )


def automaton_to_dict(automaton: Automaton) -> Dict:
    return {
        'id': automaton.id,
        'name': automaton.name,
        'states': [
            {
                'id': s.id,
                'name': s.name,
                'x': s.x,
                'y': s.y,
                'isStart': s.is_start,
                'isAccept': s.is_accept,
            }
            for s in automaton.states
        ],
        'transitions': [
            {
                'id': t.id,
                'fromStateId': t.from_state_id,
                'toStateId': t.to_state_id,
                'symbols': list(t.symbols),
            }
            for t in automaton.transitions
        ],
    }


def execution_to_dict(state: ExecutionState) -> Dict:
    return {
        'currentStateIds': list(state.current_state_ids),
        'remainingInput': state.remaining_input,
        'processedInput': state.processed_input,
        'step': state.step,
        'status': state.status.value,
        'history': [
            {
                'stateIds': list(entry.state_ids),
                'symbol': entry.symbol,
                'transitionIds': list(entry.transition_ids),
            }
            for entry in state.history
        ],
        'lastTransitionIds': state.last_transition_ids,
    }


def export_automaton(automaton: Automaton) -> str:
    """Serialise an automaton to the indented JSON used for file export."""
    return json.dumps(automaton_to_dict(automaton), indent=2, ensure_ascii=False)


def import_automaton(text: str) -> Automaton:
    """
    Load an automaton from exported JSON text.

    Raises:
        AutomatonValidationError: If the text is not JSON or not a valid automaton
    """
    try:
        data = json.loads(text)
    except (TypeError, ValueError) as e:
        raise AutomatonValidationError('Invalid JSON file', {'error': str(e)})
    return automaton_from_dict(data)


def export_filename(automaton: Automaton) -> str:
    """
    File name for an exported automaton: the name with whitespace runs
    replaced by underscores. Quotes, slashes, backslashes and control
    characters are dropped so the name is safe in a Content-Disposition header.
    """
    name = re.sub(r'["/\\\x00-\x1f\x7f]', '', automaton.name)
    name = re.sub(r'\s+', '_', name).strip('_') or 'automaton'
    return name + '.json'
