import json
from django.test import TestCase, Client
from automaton_lab.automaton_model import EPSILON
from automaton_lab.storage import storage


class AutomatonViewTestCase(TestCase):
    """Base test case with common automaton definitions and utilities"""

    def setUp(self):
        self.client = Client()
        storage.clear()

        # q0 -a-> q1 (accept)
        self.sample_automaton = {
            'name': 'Single a',
            'states': [
                {'id': 'q0', 'name': 'q0', 'x': 100, 'y': 100, 'isStart': True, 'isAccept': False},
                {'id': 'q1', 'name': 'q1', 'x': 250, 'y': 100, 'isStart': False, 'isAccept': True},
            ],
            'transitions': [
                {'id': 't0', 'fromStateId': 'q0', 'toStateId': 'q1', 'symbols': ['a']},
            ],
        }

        # Transition pointing at a state that does not exist
        self.invalid_automaton = {
            'name': 'Broken',
            'states': [
                {'id': 'q0', 'name': 'q0', 'x': 0, 'y': 0, 'isStart': True, 'isAccept': False},
            ],
            'transitions': [
                {'id': 't0', 'fromStateId': 'q0', 'toStateId': 'q9', 'symbols': ['a']},
            ],
        }

    def tearDown(self):
        storage.clear()

    def post_json(self, url, data):
        """Helper method to send JSON POST requests"""
        return self.client.post(
            url,
            data=json.dumps(data),
            content_type='application/json'
        )

    def put_json(self, url, data):
        return self.client.put(
            url,
            data=json.dumps(data),
            content_type='application/json'
        )

    def create(self, data=None):
        response = self.post_json('/api/automata/', data or self.sample_automaton)
        self.assertEqual(response.status_code, 201)
        return response.json()


class AutomataCrudViewTests(AutomatonViewTestCase):
    """Tests for the automaton store endpoints"""

    def test_list_empty(self):
        response = self.client.get('/api/automata/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), [])

    def test_create_and_get(self):
        created = self.create()
        self.assertIn('id', created)
        self.assertEqual(created['name'], 'Single a')

        response = self.client.get(f"/api/automata/{created['id']}/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), created)

        response = self.client.get('/api/automata/')
        self.assertEqual(len(response.json()), 1)

    def test_create_invalid(self):
        response = self.post_json('/api/automata/', self.invalid_automaton)
        self.assertEqual(response.status_code, 400)
        data = response.json()
        self.assertEqual(data['error'], 'Invalid automaton data')
        self.assertIn('q9', data['details']['error'])
        self.assertEqual(self.client.get('/api/automata/').json(), [])

    def test_create_malformed_json(self):
        response = self.client.post('/api/automata/', data='{not json', content_type='application/json')
        self.assertEqual(response.status_code, 400)
        self.assertIn('error', response.json())

    def test_get_unknown(self):
        response = self.client.get('/api/automata/unknown/')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {'error': 'Automaton not found'})

    def test_update(self):
        created = self.create()
        changed = dict(self.sample_automaton, name='Renamed')
        response = self.put_json(f"/api/automata/{created['id']}/", changed)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['name'], 'Renamed')
        self.assertEqual(response.json()['id'], created['id'])

    def test_update_unknown(self):
        response = self.put_json('/api/automata/unknown/', self.sample_automaton)
        self.assertEqual(response.status_code, 404)

    def test_update_invalid(self):
        created = self.create()
        response = self.put_json(f"/api/automata/{created['id']}/", self.invalid_automaton)
        self.assertEqual(response.status_code, 400)
        # The stored automaton is left untouched
        stored = self.client.get(f"/api/automata/{created['id']}/").json()
        self.assertEqual(stored['name'], 'Single a')

    def test_delete(self):
        created = self.create()
        response = self.client.delete(f"/api/automata/{created['id']}/")
        self.assertEqual(response.status_code, 204)
        response = self.client.delete(f"/api/automata/{created['id']}/")
        self.assertEqual(response.status_code, 404)

    def test_method_not_allowed(self):
        response = self.client.patch('/api/automata/')
        self.assertEqual(response.status_code, 405)


class SimulateViewTests(AutomatonViewTestCase):
    """Tests for the simulation endpoints"""

    def test_simulate_stored_accepted(self):
        created = self.create()
        response = self.post_json(f"/api/automata/{created['id']}/simulate/", {'input': 'a'})

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertTrue(data['accepted'])
        self.assertTrue(data['hasStartState'])
        self.assertEqual(data['execution']['status'], 'accepted')
        self.assertEqual(data['execution']['currentStateIds'], ['q1'])
        self.assertEqual(len(data['execution']['history']), 1)
        self.assertEqual(data['execution']['history'][0]['transitionIds'], ['t0'])

    def test_simulate_stored_unknown(self):
        response = self.post_json('/api/automata/unknown/simulate/', {'input': 'a'})
        self.assertEqual(response.status_code, 404)

    def test_simulate_dead_configuration(self):
        response = self.post_json('/api/simulate/', {
            'automaton': dict(self.sample_automaton, id='inline'),
            'input': 'ba'
        })

        self.assertEqual(response.status_code, 200)
        execution = response.json()['execution']
        self.assertEqual(execution['status'], 'rejected')
        self.assertEqual(execution['currentStateIds'], [])
        self.assertEqual(execution['processedInput'], 'b')
        self.assertEqual(execution['remainingInput'], 'a')

    def test_simulate_empty_string_with_epsilon(self):
        automaton = dict(self.sample_automaton, id='inline')
        automaton['transitions'] = [
            {'id': 't0', 'fromStateId': 'q0', 'toStateId': 'q1', 'symbols': ['a', EPSILON]},
        ]
        response = self.post_json('/api/simulate/', {'automaton': automaton, 'input': ''})

        data = response.json()
        self.assertTrue(data['accepted'])
        self.assertEqual(data['execution']['step'], 0)
        self.assertEqual(data['execution']['history'], [])

    def test_simulate_without_start_state(self):
        automaton = dict(self.sample_automaton, id='inline')
        automaton['states'] = [dict(s, isStart=False) for s in automaton['states']]
        response = self.post_json('/api/simulate/', {'automaton': automaton, 'input': 'a'})

        data = response.json()
        self.assertFalse(data['accepted'])
        self.assertFalse(data['hasStartState'])
        self.assertEqual(data['execution']['remainingInput'], 'a')

    def test_missing_automaton(self):
        response = self.post_json('/api/simulate/', {'input': 'a'})
        self.assertEqual(response.status_code, 400)
        self.assertIn('Missing automaton definition', response.json()['error'])

    def test_invalid_automaton(self):
        response = self.post_json('/api/simulate/', {
            'automaton': dict(self.invalid_automaton, id='inline'),
            'input': 'a'
        })
        self.assertEqual(response.status_code, 400)

    def test_non_string_input(self):
        created = self.create()
        response = self.post_json(f"/api/automata/{created['id']}/simulate/", {'input': 5})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'input must be a string')

    def test_simulate_requires_post(self):
        response = self.client.get('/api/simulate/')
        self.assertEqual(response.status_code, 405)


class ImportExportViewTests(AutomatonViewTestCase):
    """Tests for file import and export"""

    def test_export(self):
        created = self.create()
        response = self.client.get(f"/api/automata/{created['id']}/export/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response['Content-Type'], 'application/json')
        self.assertIn('filename="Single_a.json"', response['Content-Disposition'])
        self.assertEqual(json.loads(response.content), created)

    def test_export_quoted_name(self):
        created = self.create(dict(self.sample_automaton, name='Say "hi"'))
        response = self.client.get(f"/api/automata/{created['id']}/export/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response['Content-Disposition'], 'attachment; filename="Say_hi.json"')

    def test_export_unknown(self):
        response = self.client.get('/api/automata/unknown/export/')
        self.assertEqual(response.status_code, 404)

    def test_import(self):
        exported = dict(self.sample_automaton, id='from-file')
        response = self.client.post(
            '/api/automata/import/',
            data=json.dumps(exported),
            content_type='application/json'
        )

        self.assertEqual(response.status_code, 201)
        data = response.json()
        self.assertNotEqual(data['id'], 'from-file')
        self.assertEqual(data['states'], self.sample_automaton['states'])

    def test_import_malformed(self):
        response = self.client.post('/api/automata/import/', data='{"id":', content_type='application/json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'Invalid JSON file')

    def test_import_invalid_structure(self):
        response = self.client.post(
            '/api/automata/import/',
            data=json.dumps(dict(self.invalid_automaton, id='x')),
            content_type='application/json'
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(self.client.get('/api/automata/').json(), [])


class PropertyViewTests(AutomatonViewTestCase):
    def test_check_properties(self):
        response = self.post_json('/api/check-properties/', {
            'automaton': dict(self.sample_automaton, id='inline')
        })
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertTrue(data['deterministic'])
        self.assertTrue(data['connected'])
        self.assertFalse(data['complete'])
        self.assertEqual(data['alphabet'], ['a'])

    def test_check_properties_missing(self):
        response = self.post_json('/api/check-properties/', {})
        self.assertEqual(response.status_code, 400)
