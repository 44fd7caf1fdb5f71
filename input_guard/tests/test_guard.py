"""
Tests for the request field guard.
"""

import json

from django.http import QueryDict
from django.test import RequestFactory, SimpleTestCase

from input_guard.guard import (
    sanitize_body_fields,
    sanitize_fields,
    sanitize_param_fields,
    sanitize_query_fields,
)
from input_guard.sanitizers import SanitizationPolicy, TextSanitizer


class SanitizeFieldsTests(SimpleTestCase):
    """Tests for sanitize_fields."""

    def test_string_values_rewritten_in_place(self):
        tags = ['<b>x</b>']
        nested = {'q': 'SELECT'}
        data = {
            'name': '<img src=x onerror=alert(1)>',
            'age': 30,
            'tags': tags,
            'nested': nested,
            'missing': None,
        }
        original = data

        sanitize_fields(data)

        self.assertIs(data, original)
        self.assertEqual(data['name'], '')
        self.assertEqual(data['age'], 30)
        self.assertIs(data['tags'], tags)
        self.assertEqual(tags, ['<b>x</b>'])
        self.assertEqual(nested, {'q': 'SELECT'})
        self.assertIsNone(data['missing'])

    def test_non_mapping_containers_ignored(self):
        values = ['<b>x</b>']

        sanitize_fields(None)
        sanitize_fields(values)
        sanitize_fields('<b>x</b>')

        self.assertEqual(values, ['<b>x</b>'])

    def test_query_dict_all_values_and_mutability_restored(self):
        query = QueryDict('q=SELECT+1&q=%24ne&page=2')
        self.assertFalse(query._mutable)

        sanitize_fields(query)

        self.assertEqual(query.getlist('q'), ['[FILTERED] 1', '[FILTERED]'])
        self.assertEqual(query['page'], '2')
        self.assertFalse(query._mutable)

    def test_policy_and_sanitizer_passed_through(self):
        class ReverseSanitizer(TextSanitizer):
            def clean(self, value, policy):
                return value[::-1][:policy.max_length]

        data = {'a': 'abcdef'}

        sanitize_fields(data, SanitizationPolicy(max_length=3), ReverseSanitizer())

        self.assertEqual(data['a'], 'fed')


class SanitizeRequestSurfaceTests(SimpleTestCase):
    """Tests for the body, query and path parameter surfaces."""

    def setUp(self):
        self.factory = RequestFactory()

    def test_query_fields(self):
        request = self.factory.get('/echo/', {'search': 'javascript:alert(1)', 'page': '2'})

        sanitize_query_fields(request)

        self.assertEqual(request.GET['search'], 'alert(1)')
        self.assertEqual(request.GET['page'], '2')

    def test_form_body_fields(self):
        request = self.factory.post('/echo/', {'comment': '<script>x</script>hi', 'count': '3'})

        sanitize_body_fields(request)

        self.assertEqual(request.POST['comment'], 'hi')
        self.assertEqual(request.POST['count'], '3')

    def test_json_body_fields(self):
        payload = {
            'name': '<img src=x onerror=alert(1)>',
            'age': 30,
            'filter': {'$where': 'sleep(1000)'},
        }
        request = self.factory.post(
            '/echo/', data=json.dumps(payload), content_type='application/json'
        )

        sanitize_body_fields(request)

        expected = {'name': '', 'age': 30, 'filter': {'$where': 'sleep(1000)'}}
        self.assertEqual(request.sanitized_json, expected)
        self.assertEqual(json.loads(request.body), expected)
        self.assertEqual(request.META['CONTENT_LENGTH'], str(len(request.body)))

    def test_json_body_stream_rewritten(self):
        request = self.factory.post(
            '/echo/', data=json.dumps({'n': '<b>x</b>'}), content_type='application/json'
        )

        sanitize_body_fields(request)

        self.assertEqual(json.loads(request.read()), {'n': 'x'})

    def test_json_content_type_with_charset(self):
        request = self.factory.post(
            '/echo/',
            data=json.dumps({'n': 'SELECT 1'}),
            content_type='application/json; charset=utf-8',
        )

        sanitize_body_fields(request)

        self.assertEqual(request.sanitized_json, {'n': '[FILTERED] 1'})

    def test_invalid_json_left_alone(self):
        request = self.factory.post('/echo/', data='not json', content_type='application/json')

        sanitize_body_fields(request)

        self.assertFalse(hasattr(request, 'sanitized_json'))
        self.assertEqual(request.body, b'not json')

    def test_json_array_left_alone(self):
        request = self.factory.post('/echo/', data='["<b>x</b>"]', content_type='application/json')

        sanitize_body_fields(request)

        self.assertFalse(hasattr(request, 'sanitized_json'))
        self.assertEqual(json.loads(request.body), ['<b>x</b>'])

    def test_param_fields(self):
        view_kwargs = {'slug': '$where', 'pk': 5}

        sanitize_param_fields(view_kwargs)

        self.assertEqual(view_kwargs, {'slug': '[FILTERED]', 'pk': 5})

    def test_policy_applied(self):
        request = self.factory.get('/echo/', {'q': 'abcdefgh'})

        sanitize_query_fields(request, SanitizationPolicy(max_length=4))

        self.assertEqual(request.GET['q'], 'abcd')
