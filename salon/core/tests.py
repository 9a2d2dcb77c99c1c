"""
Tests for the shared error taxonomy and JSON helpers
"""
import json

from django.core.exceptions import ObjectDoesNotExist
from django.core.exceptions import ValidationError as DjangoValidationError
from django.test import RequestFactory, SimpleTestCase

from .exceptions import NotFoundError, NotifyError, PersistenceError, ValidationError
from .http import error_response, parse_json_body


class ExceptionsTest(SimpleTestCase):
    def test_django_compatibility(self):
        self.assertIsInstance(ValidationError('bad'), DjangoValidationError)
        self.assertIsInstance(NotFoundError('gone'), ObjectDoesNotExist)

    def test_status_codes(self):
        self.assertEqual(ValidationError('x').status_code, 400)
        self.assertEqual(NotFoundError('x').status_code, 404)
        self.assertEqual(PersistenceError('x').status_code, 500)
        self.assertEqual(NotifyError('x').status_code, 502)

    def test_message(self):
        self.assertEqual(str(ValidationError('Name is required')), 'Name is required')


class HttpHelpersTest(SimpleTestCase):
    def setUp(self):
        self.factory = RequestFactory()

    def test_json_body(self):
        request = self.factory.post('/', data=json.dumps({'a': 1}), content_type='application/json')
        self.assertEqual(parse_json_body(request), {'a': 1})

    def test_form_body(self):
        request = self.factory.post('/', data={'a': '1'})
        self.assertEqual(parse_json_body(request), {'a': '1'})

    def test_json_must_be_an_object(self):
        request = self.factory.post('/', data='[1, 2]', content_type='application/json')
        with self.assertRaises(ValidationError):
            parse_json_body(request)

    def test_error_response(self):
        response = error_response(NotFoundError('Appointment 9 not found'))
        self.assertEqual(response.status_code, 404)
        self.assertEqual(json.loads(response.content), {'success': False, 'message': 'Appointment 9 not found'})
