"""
Unit tests for request execution and result normalization.
"""

import json
from unittest.mock import Mock

import pytest

from freemius_client import (
    ApiError,
    ApiRequestError,
    ApiResult,
    ConfigurationError,
    RequestExecutor,
    ScopeContext,
    Signer,
    TransportError
)
from freemius_client.constants import HEADER_AUTHORIZATION


class TestApiResult:
    """Test decoded-or-raw result handling."""

    def test_from_raw_object(self):
        """Test JSON object is decoded."""
        result = ApiResult.from_raw('{"id": 99}')

        assert result.decoded is True
        assert result.value == {'id': 99}
        assert result.get('id') == 99
        assert result.ok is True
        assert result.error is None

    def test_from_raw_invalid(self):
        """Test undecodable payload stays raw."""
        result = ApiResult.from_raw('<html>oops</html>')

        assert result.decoded is False
        assert result.value == '<html>oops</html>'
        assert result.get('id') is None

    def test_from_raw_null(self):
        """Test a JSON null never replaces the raw string."""
        result = ApiResult.from_raw('null')

        assert result.decoded is False
        assert result.value == 'null'

    def test_from_raw_empty_containers(self):
        """Test empty objects and lists are valid decoded values."""
        assert ApiResult.from_raw('{}').value == {}
        assert ApiResult.from_raw('[]').value == []

    def test_error_envelope(self):
        """Test error member is exposed as a typed ApiError."""
        result = ApiResult.from_raw(json.dumps({'error': {
            'type': 'InvalidArgument',
            'message': 'Invalid plugin id.',
            'code': 'invalid_plugin_id',
            'http': 400,
        }}))

        assert result.ok is False
        assert result.error == ApiError('InvalidArgument', 'Invalid plugin id.', 'invalid_plugin_id', 400)

    def test_unwrap(self):
        """Test unwrap returns value or raises for errors."""
        assert ApiResult.from_raw('{"id": 1}').unwrap() == {'id': 1}

        error = ApiResult.from_error(ApiError.unknown('boom'))
        with pytest.raises(ApiRequestError) as exc_info:
            error.unwrap()
        assert exc_info.value.type == 'Unknown'
        assert exc_info.value.http_status == 402

    def test_from_error(self):
        """Test error results are built without a decode step."""
        result = ApiResult.from_error(ApiError('T', 'm', 'c', 500))

        assert result.decoded is True
        assert result.value == {'error': {'type': 'T', 'message': 'm', 'code': 'c', 'http': 500}}
        assert json.loads(result.raw) == result.value

    def test_api_error_from_partial_dict(self):
        """Test missing or malformed fields get defaults."""
        error = ApiError.from_dict({'message': 'x', 'http': 'nope'})

        assert error == ApiError('Unknown', 'x', 'unknown', 402)


class TestRequestExecutor:
    """Test execution pipeline and error normalization."""

    @pytest.fixture
    def scope(self):
        """Create developer scope."""
        return ScopeContext.create('developer', 42, 'pk_public', 'sk_secret')

    @pytest.fixture
    def transport(self):
        """Create transport stub."""
        transport = Mock()
        transport.invoke.return_value = '{"id": 99, "plugin_id": 7}'
        return transport

    @pytest.fixture
    def executor(self, scope, transport):
        """Create executor around the stub."""
        return RequestExecutor(scope, Signer(scope), transport)

    def test_execute_canonicalizes(self, executor, transport):
        """Test scoped path and uppercase method reach the transport."""
        result = executor.execute('plugins/7/tags', 'post', {'add_contributor': True}, {'file': 'x.zip'})

        path, method, params, file_params, headers = transport.invoke.call_args[0]
        assert path == '/v1/developers/42/plugins/7/tags.json'
        assert method == 'POST'
        assert params == {'add_contributor': True}
        assert file_params == {'file': 'x.zip'}
        assert headers[HEADER_AUTHORIZATION].startswith('FS 42:pk_public:')
        assert result.get('id') == 99

    def test_execute_canonical_bypasses_scope(self, executor, transport):
        """Test pre-canonicalized paths are sent as given."""
        executor.execute_canonical('/v1/ping.json')

        assert transport.invoke.call_args[0][0] == '/v1/ping.json'
        assert transport.invoke.call_args[0][1] == 'GET'

    def test_execute_keeps_query_string(self, executor, transport):
        """Test query string is forwarded to the transport."""
        executor.execute('plugins.json?count=5')

        assert transport.invoke.call_args[0][0] == '/v1/developers/42/plugins.json?count=5'

    @pytest.mark.parametrize('exc', [
        RuntimeError('socket exploded'),
        ValueError('bad value'),
        KeyError('missing'),
        OSError('disk'),
    ])
    def test_unexpected_exception_normalized(self, executor, transport, exc):
        """Test any exception becomes an Unknown error result."""
        transport.invoke.side_effect = exc

        result = executor.execute('plugins')

        assert result.value['error']['type'] == 'Unknown'
        assert result.value['error']['http'] == 402
        assert result.value['error']['code'] == 'unknown'
        assert result.error.http_status == 402

    def test_unknown_error_message_has_origin(self, executor, transport):
        """Test message carries description and origin location."""
        transport.invoke.side_effect = RuntimeError('socket exploded')

        message = executor.execute('plugins').error.message

        assert message.startswith('socket exploded (')
        assert message.endswith(')')
        assert ': ' in message

    def test_api_request_error_mapped(self, executor, transport):
        """Test domain failures keep their own error fields."""
        transport.invoke.side_effect = ApiRequestError(result={'error': {
            'type': 'InvalidArgument',
            'message': 'Invalid plugin id.',
            'code': 'invalid_plugin_id',
            'http': 400,
        }})

        result = executor.execute('plugins/0')

        assert result.error == ApiError('InvalidArgument', 'Invalid plugin id.', 'invalid_plugin_id', 400)

    def test_transport_error_mapped(self, executor, transport):
        """Test transport failures are captured as results."""
        transport.invoke.side_effect = TransportError("HTTP request failed: refused")

        result = executor.execute('plugins')

        assert result.error.type == 'Unknown'
        assert result.error.message == 'HTTP request failed: refused'
        assert result.error.code == 'unknown'
        assert result.error.http_status == 402

    def test_invalid_json_returns_raw(self, executor, transport):
        """Test undecodable responses come back as the raw string."""
        transport.invoke.return_value = 'Service Unavailable'

        result = executor.execute('plugins')

        assert result.value == 'Service Unavailable'
        assert result.decoded is False

    def test_bytes_response_decoded(self, executor, transport):
        """Test bytes from a transport are accepted."""
        transport.invoke.return_value = b'{"api": "pong"}'

        assert executor.execute_canonical('/v1/ping.json').get('api') == 'pong'

    def test_business_error_passthrough(self, executor, transport):
        """Test error bodies returned by the API decode to an error result."""
        transport.invoke.return_value = json.dumps({'error': {
            'type': 'NotFound', 'message': 'Plugin not found.', 'code': 'not_found', 'http': 404
        }})

        result = executor.execute('plugins/1')

        assert result.error.code == 'not_found'
        assert result.error.http_status == 404

    def test_result_less_error_is_unknown(self, executor, transport):
        """Test domain errors without a body get the Unknown shape."""
        transport.invoke.side_effect = ApiRequestError("refused")

        result = executor.execute('plugins')

        assert result.error == ApiError('Unknown', 'refused', 'unknown', 402)

    @pytest.mark.parametrize('method,path', [
        (None, 'plugins'),
        (7, 'plugins'),
        ('GET', 42),
        ('GET', ['plugins']),
    ])
    def test_malformed_arguments_normalized(self, executor, transport, method, path):
        """Test bad argument types come back as Unknown results."""
        result = executor.execute(path, method)

        assert result.error.type == 'Unknown'
        assert result.error.http_status == 402
        transport.invoke.assert_not_called()

    def test_malformed_canonical_path_normalized(self, executor, transport):
        """Test a non-string canonical path is captured too."""
        result = executor.execute_canonical(None)

        assert result.error.type == 'Unknown'
        transport.invoke.assert_not_called()

    @pytest.mark.parametrize('method', ['PATCH', 'head', 'OPTIONS'])
    def test_unsupported_method(self, executor, transport, method):
        """Test methods outside GET/POST/PUT/DELETE are rejected."""
        result = executor.execute('plugins', method)

        assert result.error.code == 'invalid_method'
        assert result.error.type == 'InvalidArgument'
        assert result.error.http_status == 400
        assert method.upper() in result.error.message
        transport.invoke.assert_not_called()

    @pytest.mark.parametrize('method', ['get', 'Post', 'put', 'DELETE'])
    def test_supported_methods_any_case(self, executor, transport, method):
        """Test supported methods are accepted in any case."""
        assert executor.execute('plugins', method).ok is True
        assert transport.invoke.call_args[0][1] == method.upper()

    def test_configuration_error_raised(self, executor, transport):
        """Test configuration errors are not folded into results."""
        transport.invoke.side_effect = ConfigurationError("bad config")

        with pytest.raises(ConfigurationError):
            executor.execute('plugins')
