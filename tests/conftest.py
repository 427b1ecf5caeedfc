"""
Pytest configuration and fixtures for all tests.
"""

import os
import sys
import pytest

# Add src to Python path before any imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../src'))

# Set up test environment variables before importing any modules
os.environ.setdefault('AWS_DEFAULT_REGION', 'us-west-2')
os.environ.setdefault('ENVIRONMENT', 'test')
os.environ.setdefault('LOG_LEVEL', 'INFO')
os.environ.setdefault('WEBSITE_URL', 'https://petitions.example.com')
os.environ.setdefault('MAIL_FROM_ADDRESS', 'no-reply@petitions.example.com')
os.environ.setdefault('SECRET_VALIDATION_SALT', 'test-salt')


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment():
    """Set up test environment variables for all tests."""
    # Environment variables are already set above
    yield


@pytest.fixture
def signature_record():
    """Loosely-typed signature record as it arrives on the queue."""
    return {
        'petition_id': '42',
        'email': 'Signer@Example.com ',
        'first_name': 'Ada',
        'last_name': 'Lovelace',
        'zip': '20500',
        'petition_title': 'Plant more trees',
        'petition_url': 'https://petitions.example.com/petition/plant-more-trees',
        'signature_source_api_key': 'api-key-123',
        'timestamp_submitted': 1700000000,
        'language': 'en',
    }
