from unittest import mock

import pytest

from okms_secrets.exceptions import NoSecretError, RemoteStoreError, SecretValidationError
from okms_secrets.okms.base_client import OkmsClient
from okms_secrets.okms.response import SecretRecord
from okms_secrets.secrets.models import PushDescriptor
from okms_secrets.secrets.properties import canonical_json
from okms_secrets.secrets.push import (
    build_secret_to_push, compare_secrets_data, parse_local_value, push_secret
)
from .base import BaseOkmsTest

PATH3_SECRET = {
    'root': b'{"sub1":{"value":"string"},"sub2":"Name"}',
    'test': b'value',
    'test1': b'value1',
}
PATH3_VALUE = {
    'root': {'sub1': {'value': 'string'}, 'sub2': 'Name'},
    'test': 'value',
    'test1': 'value1',
}


class TestPushSecret(BaseOkmsTest):
    """Test push reconciliation against the fake store."""

    def _remote_value(self, path):
        return self.store.read(path).value

    def test_equal_data_is_not_written(self):
        written = self.client.push_secret({'test4': b'value4'}, {'remote_key': 'pattern2/test/test-secret'})
        self.assertFalse(written)
        self.assertEqual(self.store.writes(), [])

    def test_existing_secret_with_property(self):
        written = self.client.push_secret(
            {'test4': b'value4'},
            {'remote_key': 'pattern2/test/test-secret', 'property': 'property'}
        )
        self.assertTrue(written)
        self.assertEqual(self.store.writes(), [('update', 'pattern2/test/test-secret')])
        self.assertEqual(self._remote_value('pattern2/test/test-secret'), {'property': {'test4': 'value4'}})

    def test_different_data_is_updated(self):
        written = self.client.push_secret({'new-test4': b'new-value4'}, {'remoteKey': 'pattern2/test/test-secret'})
        self.assertTrue(written)
        self.assertEqual(self.store.writes(), [('update', 'pattern2/test/test-secret')])
        self.assertEqual(self._remote_value('pattern2/test/test-secret'), {'new-test4': 'new-value4'})

    def test_missing_secret_is_created(self):
        written = self.client.push_secret(PATH3_SECRET, {'remote_key': 'non-existent'})
        self.assertTrue(written)
        self.assertEqual(self.store.writes(), [('create', 'non-existent')])
        self.assertEqual(self._remote_value('non-existent'), PATH3_VALUE)

    def test_missing_secret_is_created_under_property(self):
        self.client.push_secret(PATH3_SECRET, {'remote_key': 'non-existent', 'property': 'property'})
        self.assertEqual(self._remote_value('non-existent'), {'property': PATH3_VALUE})

    def test_push_is_idempotent(self):
        descriptor = PushDescriptor(remote_key='app/db', property='credentials')
        secret = {'user': b'admin', 'password': b'p@ss'}

        self.assertTrue(self.client.push_secret(secret, descriptor))
        self.assertFalse(self.client.push_secret(secret, descriptor))
        self.assertEqual(self.store.writes(), [('create', 'app/db')])

    def test_key_order_does_not_matter(self):
        self.seed('app/ordered', {'b': 'y', 'a': 'x'})
        self.assertFalse(self.client.push_secret({'a': b'x', 'b': b'y'}, {'remote_key': 'app/ordered'}))

    def test_secret_key_selects_one_entry(self):
        self.client.push_secret({'a': b'1', 'b': b'x'}, {'remote_key': 'app/one', 'secret_key': 'b'})
        self.assertEqual(self._remote_value('app/one'), {'b': 'x'})

    def test_missing_secret_key_pushes_empty_string(self):
        self.client.push_secret({'a': b'1'}, {'remote_key': 'app/one', 'secretKey': 'missing'})
        self.assertEqual(self._remote_value('app/one'), {'missing': ''})

    def test_json_values_keep_their_structure(self):
        self.client.push_secret(
            {'config': b'{"port":5432}', 'count': b'3', 'flag': b'true', 'text': b'plain'},
            {'remote_key': 'app/typed'}
        )
        self.assertEqual(
            self._remote_value('app/typed'),
            {'config': {'port': 5432}, 'count': 3, 'flag': True, 'text': 'plain'}
        )

    def test_pushed_secret_reads_back_as_candidate(self):
        secret = {'a': b'{"x": [1, 2.50, "\xc3\xa9"]}', 'b': b'1e2', 'c': b'plain'}
        descriptor = PushDescriptor(remote_key='app/round', property='p')

        self.assertTrue(self.client.push_secret(secret, descriptor))

        expected = canonical_json(build_secret_to_push(secret, descriptor))
        self.assertEqual(self.client.get_secret({'key': 'app/round'}), expected)
        self.assertEqual(
            expected, '{"p":{"a":{"x":[1,2.5,"é"]},"b":100.0,"c":"plain"}}'.encode('utf-8')
        )
        self.assertFalse(self.client.push_secret(secret, descriptor))

    def test_nil_secret(self):
        with self.assertRaises(SecretValidationError) as ctx:
            self.client.push_secret(None, {'remote_key': 'app/db'})
        self.assertEqual(str(ctx.exception), 'nil secret')

    def test_empty_secret(self):
        with self.assertRaises(SecretValidationError) as ctx:
            self.client.push_secret({}, {'remote_key': 'app/db'})
        self.assertEqual(str(ctx.exception), 'cannot push empty secret')
        self.assertEqual(self.store.writes(), [])

    def test_empty_remote_key(self):
        with self.assertRaises(SecretValidationError):
            self.client.push_secret({'a': b'b'}, {'remote_key': ''})
        self.assertEqual(self.store.writes(), [])

    def test_probe_error_aborts_push(self):
        self.store.inject_error('read', 'pattern1/path2', RemoteStoreError('forbidden', status_code=403))
        with self.assertRaises(RemoteStoreError):
            self.client.push_secret({'key': b'other'}, {'remote_key': 'pattern1/path2'})
        self.assertEqual(self.store.writes(), [])

    def test_write_error_is_returned(self):
        self.store.inject_error('create', 'app/new', RemoteStoreError('quota exceeded', status_code=429))
        with self.assertRaises(RemoteStoreError):
            self.client.push_secret({'a': b'b'}, {'remote_key': 'app/new'})

    def test_update_without_cas(self):
        with mock.patch.object(self.store, 'update', wraps=self.store.update) as update:
            self.client.push_secret({'key': b'changed'}, {'remote_key': 'pattern1/path2'})
        update.assert_called_once_with('pattern1/path2', {'key': 'changed'}, expected_version=None)


class TestPushSecretWithCas(BaseOkmsTest):
    """Updates carry the probed version when the store requires CAS."""

    cas = True

    def test_update_carries_probed_version(self):
        self.store.update('pattern1/path2', {'key': 'value2'})
        with mock.patch.object(self.store, 'update', wraps=self.store.update) as update:
            self.assertTrue(self.client.push_secret({'key': b'value3'}, {'remote_key': 'pattern1/path2'}))
        update.assert_called_once_with('pattern1/path2', {'key': 'value3'}, expected_version=2)
        self.assertEqual(self.store.read('pattern1/path2').current_version, 3)

    def test_create_has_no_version(self):
        self.assertTrue(self.client.push_secret({'a': b'b'}, {'remote_key': 'app/new'}))
        self.assertEqual(self.store.writes(), [('create', 'app/new')])

    def test_concurrent_update_is_rejected(self):
        """A write between probe and update fails the CAS check."""
        remote = mock.Mock(spec=OkmsClient)
        remote.read.return_value = SecretRecord(path='app/db', value={'a': 'old'}, current_version=4)
        remote.update.side_effect = RemoteStoreError('cas mismatch', status_code=409)

        with self.assertRaises(RemoteStoreError):
            push_secret(remote, {'a': b'new'}, PushDescriptor(remote_key='app/db'), cas=True)
        remote.update.assert_called_once_with('app/db', {'a': 'new'}, expected_version=4)
        remote.create.assert_not_called()


def test_probe_not_found_creates():
    remote = mock.Mock(spec=OkmsClient)
    remote.read.side_effect = NoSecretError(secret_name='app/db')

    assert push_secret(remote, {'a': b'b'}, PushDescriptor(remote_key='app/db'), cas=True)
    remote.create.assert_called_once_with('app/db', {'a': 'b'})
    remote.update.assert_not_called()


@pytest.mark.parametrize('raw, expected', [
    (b'plain', 'plain'),
    (b'"quoted"', 'quoted'),
    (b'42', 42),
    (b'null', None),
    (b'[1, 2]', [1, 2]),
    (b'NaN', 'NaN'),
    ('text', 'text'),
    (b'\xff\xfe', '\ufffd\ufffd'),
])
def test_parse_local_value(raw, expected):
    assert parse_local_value(raw) == expected


def test_build_secret_to_push_nests_under_property():
    descriptor = PushDescriptor(remote_key='app/db', property='creds')
    assert build_secret_to_push({'user': b'admin'}, descriptor) == {'creds': {'user': 'admin'}}


def test_compare_secrets_data():
    assert compare_secrets_data({'b': 1, 'a': 'x'}, b'{"a":"x","b":1}')
    assert not compare_secrets_data({'a': 'x'}, b'{"a": "x"}')
    assert not compare_secrets_data({}, b'')
