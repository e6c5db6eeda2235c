from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError
from django.http import Http404
from rest_framework import exceptions, serializers

from authentication.exceptions import (
    InvalidInput, NotFound, Unauthorized, Unavailable, custom_exception_handler, first_error_message,
)


class TestFirstErrorMessage:
    def test_plain_string(self):
        assert first_error_message('Bad thing') == 'Bad thing'

    def test_field_path(self):
        assert first_error_message({'name': ['Required']}) == 'name: Required'

    def test_nested_list_path(self):
        detail = {'items': [{}, {'quantity': ['Too many']}]}
        assert first_error_message(detail) == 'items[1].quantity: Too many'

    def test_non_field_errors_have_no_path(self):
        assert first_error_message({'non_field_errors': ['Mismatch']}) == 'Mismatch'


class TestExceptionHandler:
    def test_envelope_for_api_exceptions(self):
        for exc, status_code in [(InvalidInput('x'), 400), (NotFound('x'), 404),
                                 (Unauthorized(), 401), (Unavailable('x'), 400)]:
            response = custom_exception_handler(exc, {})
            assert response.status_code == status_code
            assert response.data['success'] is False

    def test_unauthorized_message(self):
        response = custom_exception_handler(Unauthorized(), {})
        assert response.data == {'success': False, 'error': 'Unauthorized. Admin access required.'}

    def test_serializer_validation_error(self):
        exc = serializers.ValidationError({'price': ['Out of range']})
        response = custom_exception_handler(exc, {})
        assert response.status_code == 400
        assert response.data['error'] == 'price: Out of range'

    def test_http404(self):
        response = custom_exception_handler(Http404(), {})
        assert response.status_code == 404

    def test_django_errors(self):
        assert custom_exception_handler(DjangoValidationError('nope'), {}).status_code == 400
        response = custom_exception_handler(IntegrityError('dup'), {})
        assert response.status_code == 400
        assert response.data['error'] == 'This operation violates database constraints'

    def test_unexpected_error_is_generic(self, settings):
        settings.DEBUG = False
        response = custom_exception_handler(RuntimeError('db password is hunter2'), {})
        assert response.status_code == 500
        assert response.data == {'success': False, 'error': 'Internal server error.'}

    def test_unexpected_error_detail_in_debug(self, settings):
        settings.DEBUG = True
        response = custom_exception_handler(RuntimeError('boom'), {})
        assert response.data['error'] == 'boom'

    def test_drf_headers_survive(self):
        response = custom_exception_handler(exceptions.Throttled(wait=30), {})
        assert response.status_code == 429
        assert response['Retry-After'] == '30'

        exc = exceptions.NotAuthenticated()
        exc.auth_header = 'Bearer realm="api"'
        response = custom_exception_handler(exc, {})
        assert response['WWW-Authenticate'] == 'Bearer realm="api"'
        assert response.data['success'] is False
