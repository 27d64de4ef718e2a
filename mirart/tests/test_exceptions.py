from unittest.mock import MagicMock

from django.db import InterfaceError, OperationalError
from django.test import TestCase
from rest_framework import status
from rest_framework.exceptions import ValidationError

from mirart.exceptions import (
    EmptyMessage,
    NotFound,
    NotParticipant,
    TransientIOFailure,
    api_exception_handler,
    transient_on_db_error,
)
from mirart.permissions import IsSupportOperator


class ApiExceptionHandlerTest(TestCase):
    def test_chat_errors_render_code(self):
        cases = [
            (EmptyMessage(), status.HTTP_400_BAD_REQUEST, 'empty_message'),
            (NotParticipant(), status.HTTP_403_FORBIDDEN, 'not_participant'),
            (NotFound('Listing 3 not found'), status.HTTP_404_NOT_FOUND, 'not_found'),
            (TransientIOFailure(), status.HTTP_503_SERVICE_UNAVAILABLE, 'transient_io_failure'),
        ]
        for exc, status_code, code in cases:
            response = api_exception_handler(exc, {})

            self.assertEqual(response.status_code, status_code)
            self.assertEqual(response.data['code'], code)
            self.assertEqual(response.data['error'], str(exc.detail))

    def test_validation_errors_keep_details(self):
        response = api_exception_handler(ValidationError({'body': ['Too long.']}), {})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'invalid')
        self.assertEqual(response.data['details'], {'body': ['Too long.']})

    def test_unhandled_exceptions_pass_through(self):
        self.assertIsNone(api_exception_handler(ValueError('boom'), {}))


class TransientOnDbErrorTest(TestCase):
    def test_operational_error_becomes_transient(self):
        @transient_on_db_error
        def query():
            raise OperationalError('server closed the connection')

        with self.assertRaises(TransientIOFailure):
            query()

    def test_interface_error_becomes_transient(self):
        @transient_on_db_error
        def query():
            raise InterfaceError('connection already closed')

        with self.assertRaises(TransientIOFailure) as ctx:
            query()
        self.assertEqual(ctx.exception.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)

    def test_other_errors_propagate(self):
        @transient_on_db_error
        def query():
            raise EmptyMessage()

        with self.assertRaises(EmptyMessage):
            query()


class IsSupportOperatorTest(TestCase):
    def _request(self, **attrs):
        request = MagicMock(spec=['is_authenticated', 'user_roles'])
        for name, value in attrs.items():
            setattr(request, name, value)
        return request

    def test_operator_role_is_allowed(self):
        request = self._request(is_authenticated=True, user_roles=['admin'])
        self.assertTrue(IsSupportOperator().has_permission(request, None))

    def test_other_roles_are_refused(self):
        request = self._request(is_authenticated=True, user_roles=['buyer'])
        self.assertFalse(IsSupportOperator().has_permission(request, None))

    def test_anonymous_is_refused(self):
        request = self._request(is_authenticated=False, user_roles=['admin'])
        self.assertFalse(IsSupportOperator().has_permission(request, None))
