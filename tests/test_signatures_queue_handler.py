"""
Tests for the signatures queue Lambda handler.
"""

import json
import re
import pytest
from unittest.mock import Mock, patch, MagicMock
import sys
import os

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../src'))

import signatures_queue_handler
from domain.models import QueueStatus


@pytest.fixture
def sqs_event():
    """Load sample SQS event from test data."""
    with open(os.path.join(os.path.dirname(__file__), 'events', 'sqs-event.json')) as f:
        return json.load(f)


@pytest.fixture
def mock_context():
    """Mock Lambda context."""
    context = Mock()
    context.request_id = "test-request-id"
    context.invoked_function_arn = "arn:aws:lambda:us-west-2:123456789012:function:test"
    context.function_name = "signatures-queue-test"
    return context


@pytest.fixture
def scheduled_event():
    return {
        "version": "0",
        "id": "53dc4d37-cffa-4f76-80c9-8b7d4a4d2eaa",
        "detail-type": "Scheduled Event",
        "source": "aws.events",
        "time": "2023-11-14T22:13:20Z",
        "region": "us-west-2",
        "resources": ["arn:aws:events:us-west-2:123456789012:rule/check-empty-queues"],
        "detail": {}
    }


class TestSqsBatch:
    """Test SQS batch processing."""

    @patch('services.validation_link.WEBSITE_URL', 'https://petitions.example.com')
    @patch('integrations.signatures_queue.sqs_client')
    @patch('services.mail.ses_client')
    @patch('services.variables.get', return_value=None)
    @patch('services.mail_text.TEMPLATE_BUCKET', None)
    def test_lambda_handler_success(self, mock_get, mock_ses, mock_sqs, sqs_event, mock_context):
        """Test a signature is mailed and moved to the pending queue."""
        mock_ses.send_email.return_value = {'MessageId': 'ses-1'}
        mock_sqs.get_queue_url.return_value = {'QueueUrl': 'https://sqs/pending'}
        mock_sqs.send_message.return_value = {'MessageId': 'pending-1'}

        result = signatures_queue_handler.lambda_handler(sqs_event, mock_context)

        assert result == {"batchItemFailures": []}
        mock_ses.send_email.assert_called_once()
        assert mock_ses.send_email.call_args[1]['Destination'] == {'ToAddresses': ['signer@example.com']}
        mock_sqs.send_message.assert_called_once()

    @patch('domain.validation_mailer.ValidationMailer.process_record')
    def test_one_job_id_per_batch(self, mock_process, mock_context):
        mock_process.return_value = MagicMock(success=True, message_id='m')
        event = {"Records": [{"messageId": f"msg-{i}", "body": "{}"} for i in range(3)]}

        signatures_queue_handler.lambda_handler(event, mock_context)

        job_ids = {c[0][1] for c in mock_process.call_args_list}
        assert len(job_ids) == 1
        assert re.match(r'^[0-9a-f]{32}$', job_ids.pop())

    @patch('services.admin_alert.notify_admin')
    def test_lambda_handler_always_consumes_messages(self, mock_notify, mock_context):
        """
        Failed records are alerted to the admin and consumed, never replayed.
        """
        event = {
            "Records": [
                {"messageId": "msg-invalid-json", "body": "not valid json"},
                {"messageId": "msg-missing-fields", "body": json.dumps({"invalid": "structure"})},
                {"messageId": "msg-no-body"},
            ]
        }

        result = signatures_queue_handler.lambda_handler(event, mock_context)

        assert result == {"batchItemFailures": []}
        assert mock_notify.call_count == 3

    def test_empty_batch(self, mock_context):
        assert signatures_queue_handler.lambda_handler({"Records": []}, mock_context) == {
            "batchItemFailures": []
        }

    @patch('domain.validation_mailer.ValidationMailer.process_record')
    def test_summary_reports_job_id(self, mock_process, mock_context, caplog):
        mock_process.side_effect = [
            MagicMock(success=True, message_id='msg-0'),
            MagicMock(success=False, message_id='msg-1', error_message='boom'),
        ]
        event = {"Records": [{"messageId": "msg-0"}, {"messageId": "msg-1"}]}

        with caplog.at_level('INFO'):
            signatures_queue_handler.lambda_handler(event, mock_context)

        job_id = mock_process.call_args[0][1]
        summary = [r.getMessage() for r in caplog.records if 'done:' in r.getMessage()]
        assert summary == [
            f"[{job_id}] initiate_signature_validation done: processed=2, mailed=1, failed=1"
        ]


class TestScheduledEvent:
    """Test empty-queue bookkeeping trigger."""

    @patch('domain.queue_monitor.update_empty_queue_status')
    def test_checks_all_queues_by_default(self, mock_update, scheduled_event, mock_context):
        mock_update.return_value = {
            'validations_queue': QueueStatus('validations_queue', 0, 1700000000)
        }

        result = signatures_queue_handler.lambda_handler(scheduled_event, mock_context)

        mock_update.assert_called_once_with(None)
        assert result['statusCode'] == 200
        assert re.match(r'^[0-9a-f]{32}$', result['jobId'])
        assert result['queues'] == {
            'validations_queue': {
                'name': 'validations_queue',
                'number_of_items': 0,
                'empty_since': 1700000000,
            }
        }

    @patch('domain.queue_monitor.update_empty_queue_status', return_value={})
    def test_checks_requested_queues(self, mock_update, scheduled_event, mock_context):
        scheduled_event['detail'] = {'queues': ['validations_queue', 'bogus']}

        signatures_queue_handler.lambda_handler(scheduled_event, mock_context)

        mock_update.assert_called_once_with(['validations_queue', 'bogus'])

    @patch('services.variables.set')
    @patch('services.variables.get', return_value=0)
    @patch('domain.queue_monitor.SignaturesQueue')
    def test_single_queue_name_in_detail(self, mock_queue_cls, mock_get, mock_set,
                                         scheduled_event, mock_context):
        mock_queue_cls.return_value.number_of_items.return_value = 3
        scheduled_event['detail'] = {'queues': 'validations_queue'}

        result = signatures_queue_handler.lambda_handler(scheduled_event, mock_context)

        mock_queue_cls.assert_called_once_with('validations_queue')
        assert list(result['queues']) == ['validations_queue']
        assert result['queues']['validations_queue']['number_of_items'] == 3


class TestUnsupportedEvent:

    def test_unknown_event(self, mock_context):
        result = signatures_queue_handler.lambda_handler({'foo': 'bar'}, mock_context)

        assert result['statusCode'] == 400


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
