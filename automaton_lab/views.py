import json
import logging

from django.http import HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from .conf import get_setting
from .exceptions import AutomatonValidationError
from .execution import ExecutionController, ExecutionStatus
from .fsa_properties import check_all_properties
from .serialization import (
    automaton_from_dict,
    automaton_to_dict,
    execution_to_dict,
    export_automaton,
    export_filename,
    import_automaton,
)
from .storage import storage

logger = logging.getLogger(__name__)

NOT_FOUND = {'error': 'Automaton not found'}


def _bad_request(e: ValueError) -> JsonResponse:
    if isinstance(e, AutomatonValidationError):
        logger.warning("Rejected automaton payload: %s", e.details.get('error', e.message))
        return JsonResponse({'error': e.message, 'details': e.details}, status=400)
    logger.warning("Rejected request: %s", e)
    return JsonResponse({'error': str(e)}, status=400)


def _server_error(e: Exception) -> JsonResponse:
    logger.exception("Unhandled error in automaton lab view")
    return JsonResponse({'error': f'Server error: {str(e)}'}, status=500)


def _read_input(data) -> str:
    input_string = data.get('input', '')
    if not isinstance(input_string, str):
        raise ValueError('input must be a string')
    if len(input_string) > get_setting('MAX_INPUT_LENGTH'):
        raise ValueError(f"input is longer than {get_setting('MAX_INPUT_LENGTH')} symbols")
    return input_string


def _simulate(automaton, input_string: str) -> JsonResponse:
    controller = ExecutionController(automaton)
    controller.start(input_string)
    final = controller.run_to_completion()
    return JsonResponse({
        'automatonId': automaton.id,
        'input': input_string,
        'hasStartState': controller.has_start_state(),
        'accepted': final.status == ExecutionStatus.ACCEPTED,
        'execution': execution_to_dict(final),
    })


@csrf_exempt
@require_http_methods(['GET', 'POST'])
def automata_collection(request):
    """
    GET lists every stored automaton; POST creates one from a JSON body
    (the automaton without its id) and returns it with status 201.
    """
    try:
        if request.method == 'GET':
            return JsonResponse([automaton_to_dict(a) for a in storage.get_all_automata()], safe=False)

        data = json.loads(request.body)
        automaton = storage.create_automaton(data)
        return JsonResponse(automaton_to_dict(automaton), status=201)

    except ValueError as e:
        return _bad_request(e)
    except Exception as e:
        return _server_error(e)


@csrf_exempt
@require_http_methods(['GET', 'PUT', 'DELETE'])
def automaton_detail(request, automaton_id):
    """
    GET, PUT (replace) or DELETE a stored automaton. Unknown ids give 404.
    """
    try:
        if request.method == 'GET':
            automaton = storage.get_automaton(automaton_id)
            if automaton is None:
                return JsonResponse(NOT_FOUND, status=404)
            return JsonResponse(automaton_to_dict(automaton))

        if request.method == 'PUT':
            data = json.loads(request.body)
            automaton = storage.update_automaton(automaton_id, data)
            if automaton is None:
                return JsonResponse(NOT_FOUND, status=404)
            return JsonResponse(automaton_to_dict(automaton))

        if not storage.delete_automaton(automaton_id):
            return JsonResponse(NOT_FOUND, status=404)
        return HttpResponse(status=204)

    except ValueError as e:
        return _bad_request(e)
    except Exception as e:
        return _server_error(e)


@csrf_exempt
@require_POST
def simulate_stored(request, automaton_id):
    """
    Run a stored automaton over the 'input' string of the JSON body.

    Returns the final execution state including the full step history.
    """
    try:
        automaton = storage.get_automaton(automaton_id)
        if automaton is None:
            return JsonResponse(NOT_FOUND, status=404)

        data = json.loads(request.body) if request.body else {}
        if not isinstance(data, dict):
            raise ValueError('Request body must be a JSON object')
        return _simulate(automaton, _read_input(data))

    except ValueError as e:
        return _bad_request(e)
    except Exception as e:
        return _server_error(e)


@csrf_exempt
@require_POST
def simulate(request):
    """
    Run the automaton given in the request body over its 'input' string.

    Expects a JSON body containing:
    - automaton: The automaton in wire format
    - input: The input string to simulate
    """
    try:
        data = json.loads(request.body)
        if not isinstance(data, dict):
            raise ValueError('Request body must be a JSON object')

        if not data.get('automaton'):
            return JsonResponse({'error': 'Missing automaton definition'}, status=400)

        automaton = automaton_from_dict(data['automaton'])
        return _simulate(automaton, _read_input(data))

    except ValueError as e:
        return _bad_request(e)
    except Exception as e:
        return _server_error(e)


@csrf_exempt
@require_POST
def import_view(request):
    """
    Store an automaton uploaded as exported JSON text. The stored copy gets a fresh id.
    """
    try:
        automaton = import_automaton(request.body.decode('utf-8'))
        data = automaton_to_dict(automaton)
        del data['id']
        stored = storage.create_automaton(data)
        return JsonResponse(automaton_to_dict(stored), status=201)

    except ValueError as e:
        return _bad_request(e)
    except Exception as e:
        return _server_error(e)


@require_GET
def export_view(request, automaton_id):
    automaton = storage.get_automaton(automaton_id)
    if automaton is None:
        return JsonResponse(NOT_FOUND, status=404)

    response = HttpResponse(export_automaton(automaton), content_type='application/json')
    response['Content-Disposition'] = f'attachment; filename="{export_filename(automaton)}"'
    return response


@csrf_exempt
@require_POST
def check_properties(request):
    """
    Django view to check the structural properties of an automaton.
    """
    try:
        data = json.loads(request.body)
        if not isinstance(data, dict) or not data.get('automaton'):
            return JsonResponse({'error': 'Missing automaton definition'}, status=400)

        automaton = automaton_from_dict(data['automaton'])
        return JsonResponse(check_all_properties(automaton))

    except ValueError as e:
        return _bad_request(e)
    except Exception as e:
        return _server_error(e)
