"""
Shared pytest fixtures and configuration for Kettle tests.

This module provides mocked boto3 clients, an in-memory fake DynamoDB client
and the record kinds used across the test suite.
"""

from typing import Any
from unittest.mock import MagicMock

import pytest

from kettle import KettleConfig, Record, clear_query_log
from tests.helpers.fake_dynamodb import FakeDynamoDBClient


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests with mocked dependencies")
    config.addinivalue_line("markers", "lifecycle: Tests against the in-memory fake store")


@pytest.fixture
def mock_client():
    """
    Creates a fully mocked boto3 DynamoDB client.

    Used by tests that only inspect the shape of the requests sent.
    """
    client = MagicMock()
    client.get_item.return_value = {}
    client.put_item.return_value = {}
    client.update_item.return_value = {}
    client.delete_item.return_value = {}
    client.query.return_value = {"Items": [], "Count": 0}
    client.get_paginator.return_value = MagicMock()
    return client


@pytest.fixture
def fake_client() -> FakeDynamoDBClient:
    """In-memory client with the 'users' and 'messages' tables created."""
    client = FakeDynamoDBClient(page_size=2)
    client.create_table("users", hash_key="id")
    client.create_table("messages", hash_key="room_id", range_key="posted_at")
    return client


@pytest.fixture
def user_record():
    """
    Returns a User record kind.

    Hash key only (id), with number and set typed fields.
    """

    class User(Record):
        class Meta:
            table_name = "users"
            hash_key = "id"
            schema = {
                "id": "S",
                "name": "S",
                "age": "N",
                "tags": "SS",
                "scores": "NS",
            }

    return User


@pytest.fixture
def message_record():
    """
    Returns a Message record kind.

    Hash key (room_id) and numeric range key (posted_at).
    """

    class Message(Record):
        class Meta:
            table_name = "messages"
            hash_key = "room_id"
            range_key = "posted_at"
            schema = {
                "room_id": "S",
                "posted_at": "N",
                "body": "S",
                "author": "S",
            }

    return Message


@pytest.fixture
def logging_config() -> KettleConfig:
    return KettleConfig(region_name="eu-south-1", logging=True, log_responses=True)


@pytest.fixture(autouse=True)
def _clean_query_log():
    clear_query_log()
    yield
    clear_query_log()


@pytest.fixture
def sample_messages_data() -> list[dict[str, Any]]:
    """Five messages in one room plus one in another."""
    return [
        {"room_id": "general", "posted_at": 1, "body": "Good morning!", "author": "alice"},
        {"room_id": "general", "posted_at": 2, "body": "Hello, world!", "author": "bob"},
        {"room_id": "general", "posted_at": 3, "body": "How is everyone?", "author": "carol"},
        {"room_id": "general", "posted_at": 4, "body": "Lunch?", "author": "dave"},
        {"room_id": "general", "posted_at": 5, "body": "See you", "author": "erin"},
        {"room_id": "python", "posted_at": 1, "body": "Check this out", "author": "frank"},
    ]


@pytest.fixture
def seeded_messages(fake_client, message_record, sample_messages_data):
    """Saves the sample messages through the fake client."""
    for data in sample_messages_data:
        message_record.factory(client=fake_client).create(data).save()
    return fake_client
