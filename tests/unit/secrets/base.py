"""Base test class for secrets unit tests."""

import unittest

from okms_secrets.okms.in_memory_client import InMemoryOkmsClient
from okms_secrets.secrets.client import OkmsSecretsClient


# Leaf secrets of the fake store every suite starts from
FAKE_SECRETS = {
    'pattern1/path1': {'projects': {'project1': 'Name', 'project2': 'Name'}},
    'pattern1/path2': {'key': 'value'},
    'pattern1/path3': {
        'root': {'sub1': {'value': 'string'}, 'sub2': 'Name'},
        'test': 'value',
        'test1': 'value1',
    },
    'pattern2/test/test-secret': {'test4': 'value4'},
    'pattern2/test/test.secret': {'test5': 'value5'},
    'pattern2/secret': {'test6': 'value6'},
    '1secret': {'test7': 'value7'},
    'pattern2/test/test;secret': {'test8': 'value8'},
}


class BaseOkmsTest(unittest.TestCase):
    """Base test class with a fresh in-memory store per test."""

    cas = False

    def setUp(self):
        """Set up test environment."""
        self.store = InMemoryOkmsClient(FAKE_SECRETS)
        self.client = OkmsSecretsClient(self.store, cas=self.cas, provider_name='in-memory')

    def tearDown(self):
        """Clean up test environment."""
        self.client.close()

    def seed(self, path, value):
        """Add one secret to the store."""
        self.store.create(path, value)
        self.store.operations.clear()
