"""
Tests for the SSM-backed variable store.
"""

import json
import pytest
from unittest.mock import patch
from botocore.exceptions import ClientError
import sys
import os

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../src'))

from services import variables


def _client_error(code, operation):
    return ClientError({'Error': {'Code': code, 'Message': code}}, operation)


class TestGet:
    """Test reading variables."""

    @patch('services.variables.VARIABLES_PATH_PREFIX', '/signatures-queue/')
    @patch('services.variables.ssm_client')
    def test_get_decodes_json(self, mock_ssm):
        mock_ssm.get_parameter.return_value = {'Parameter': {'Value': '1700000000'}}

        result = variables.get('signatures_queue_validations_queue_empty_since', 0)

        assert result == 1700000000
        mock_ssm.get_parameter.assert_called_once_with(
            Name='/signatures-queue/signatures_queue_validations_queue_empty_since'
        )

    @patch('services.variables.ssm_client')
    def test_get_returns_raw_string_when_not_json(self, mock_ssm):
        mock_ssm.get_parameter.return_value = {'Parameter': {'Value': 'admin@example.com'}}

        assert variables.get('signatures_queue_notify_email') == 'admin@example.com'

    @patch('services.variables.ssm_client')
    def test_get_missing_returns_default(self, mock_ssm):
        mock_ssm.get_parameter.side_effect = _client_error('ParameterNotFound', 'GetParameter')

        assert variables.get('missing', 'fallback') == 'fallback'
        assert variables.get('missing') is None

    @patch('services.variables.ssm_client')
    def test_get_other_error_propagates(self, mock_ssm):
        mock_ssm.get_parameter.side_effect = _client_error('AccessDeniedException', 'GetParameter')

        with pytest.raises(ClientError):
            variables.get('signatures_queue_notify_email')

    def test_get_empty_name(self):
        with pytest.raises(ValueError, match='Variable name cannot be empty'):
            variables.get('')


class TestSet:
    """Test writing variables."""

    @patch('services.variables.VARIABLES_PATH_PREFIX', '/signatures-queue/')
    @patch('services.variables.ssm_client')
    def test_set_encodes_json(self, mock_ssm):
        variables.set('signatures_queue_validations_queue_empty_since', 1700000000)

        mock_ssm.put_parameter.assert_called_once_with(
            Name='/signatures-queue/signatures_queue_validations_queue_empty_since',
            Value='1700000000',
            Type='String',
            Overwrite=True
        )

    @patch('services.variables.ssm_client')
    def test_set_string_value(self, mock_ssm):
        variables.set('signatures_queue_notify_email', 'admin@example.com')

        kwargs = mock_ssm.put_parameter.call_args[1]
        assert json.loads(kwargs['Value']) == 'admin@example.com'

    @patch('services.variables.ssm_client')
    def test_set_error_propagates(self, mock_ssm):
        mock_ssm.put_parameter.side_effect = _client_error('ThrottlingException', 'PutParameter')

        with pytest.raises(ClientError):
            variables.set('name', 1)


class TestDelete:
    """Test deleting variables."""

    @patch('services.variables.ssm_client')
    def test_delete(self, mock_ssm):
        variables.delete('name')

        mock_ssm.delete_parameter.assert_called_once()

    @patch('services.variables.ssm_client')
    def test_delete_missing_is_noop(self, mock_ssm):
        mock_ssm.delete_parameter.side_effect = _client_error('ParameterNotFound', 'DeleteParameter')

        variables.delete('missing')

    @patch('services.variables.ssm_client')
    def test_delete_other_error_propagates(self, mock_ssm):
        mock_ssm.delete_parameter.side_effect = _client_error('AccessDeniedException', 'DeleteParameter')

        with pytest.raises(ClientError):
            variables.delete('name')


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
