"""Pytest configuration and fixtures for user directory tests.

This module provides in-memory stand-ins for the Cognito and DynamoDB
APIs, settings, and event factories for the resolvers.
"""

from __future__ import annotations

import sys
import uuid
from pathlib import Path
from typing import Any
from typing import Optional

import pytest
from botocore.exceptions import ClientError

# Add backend source to path for imports
sys.path.insert(0, str(Path(__file__).resolve().parents[1] / 'backend' / 'src'))


def make_client_error(code: str, operation: str, message: str = '') -> ClientError:
    """Build a botocore ClientError like the AWS SDK raises."""
    return ClientError(
        {'Error': {'Code': code, 'Message': message or f'{code} raised'}},
        operation,
    )


# --- Fake AWS services ---


class FakeCognitoClient:
    """In-memory Cognito admin API.

    Accounts are keyed by the username given at creation; each gets a
    generated provider username, as pools with an email alias do.
    """

    def __init__(self) -> None:
        self.users: dict[str, dict[str, Any]] = {}
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.failures: dict[str, tuple[str, int]] = {}

    def fail(
        self,
        operation: str,
        code: str = 'InternalErrorException',
        after: int = 0,
    ) -> None:
        """Make calls to *operation* raise ClientError(code).

        The first *after* calls still succeed.
        """
        self.failures[operation] = (code, after)

    def calls_to(self, operation: str) -> list[dict[str, Any]]:
        return [kwargs for name, kwargs in self.calls if name == operation]

    def groups_of(self, username: str) -> set[str]:
        return self.users[username]['groups']

    def _record(self, operation: str, kwargs: dict[str, Any]) -> None:
        self.calls.append((operation, kwargs))
        if operation not in self.failures:
            return
        code, after = self.failures[operation]
        if after > 0:
            self.failures[operation] = (code, after - 1)
            return
        raise make_client_error(code, operation)

    def _user(self, operation: str, username: str) -> dict[str, Any]:
        if username not in self.users:
            raise make_client_error(
                'UserNotFoundException', operation, 'User does not exist.'
            )
        return self.users[username]

    def admin_create_user(self, **kwargs: Any) -> dict[str, Any]:
        self._record('admin_create_user', kwargs)
        username = kwargs['Username']
        if username in self.users:
            raise make_client_error(
                'UsernameExistsException',
                'AdminCreateUser',
                'An account with the given email already exists.',
            )
        self.users[username] = {
            'Username': str(uuid.uuid4()),
            'Attributes': {a['Name']: a['Value'] for a in kwargs['UserAttributes']},
            'TemporaryPassword': kwargs['TemporaryPassword'],
            'groups': set(),
        }
        return {'User': {'Username': self.users[username]['Username']}}

    def admin_add_user_to_group(self, **kwargs: Any) -> dict[str, Any]:
        self._record('admin_add_user_to_group', kwargs)
        self._user('AdminAddUserToGroup', kwargs['Username'])['groups'].add(
            kwargs['GroupName']
        )
        return {}

    def admin_remove_user_from_group(self, **kwargs: Any) -> dict[str, Any]:
        self._record('admin_remove_user_from_group', kwargs)
        self._user('AdminRemoveUserFromGroup', kwargs['Username'])['groups'].discard(
            kwargs['GroupName']
        )
        return {}

    def admin_get_user(self, **kwargs: Any) -> dict[str, Any]:
        self._record('admin_get_user', kwargs)
        user = self._user('AdminGetUser', kwargs['Username'])
        return {
            'Username': user['Username'],
            'UserAttributes': [
                {'Name': name, 'Value': value}
                for name, value in user['Attributes'].items()
            ],
        }

    def admin_list_groups_for_user(self, **kwargs: Any) -> dict[str, Any]:
        self._record('admin_list_groups_for_user', kwargs)
        groups = sorted(self._user('AdminListGroupsForUser', kwargs['Username'])['groups'])
        # One group per page so callers must follow NextToken
        start = int(kwargs.get('NextToken') or 0)
        response: dict[str, Any] = {
            'Groups': [{'GroupName': name} for name in groups[start:start + 1]]
        }
        if start + 1 < len(groups):
            response['NextToken'] = str(start + 1)
        return response

    def admin_delete_user(self, **kwargs: Any) -> dict[str, Any]:
        self._record('admin_delete_user', kwargs)
        self._user('AdminDeleteUser', kwargs['Username'])
        del self.users[kwargs['Username']]
        return {}


class FakeTable:
    """In-memory DynamoDB Table resource keyed by ``id``."""

    def __init__(self, page_size: Optional[int] = None) -> None:
        self.items: dict[str, dict[str, Any]] = {}
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.failures: dict[str, str] = {}
        self.page_size = page_size

    def fail(self, operation: str, code: str = 'InternalServerError') -> None:
        self.failures[operation] = code

    def calls_to(self, operation: str) -> list[dict[str, Any]]:
        return [kwargs for name, kwargs in self.calls if name == operation]

    def _record(self, operation: str, kwargs: dict[str, Any]) -> None:
        self.calls.append((operation, kwargs))
        if operation in self.failures:
            raise make_client_error(self.failures[operation], operation)

    def put_item(self, **kwargs: Any) -> dict[str, Any]:
        self._record('put_item', kwargs)
        item = dict(kwargs['Item'])
        self.items[item['id']] = item
        return {}

    def get_item(self, **kwargs: Any) -> dict[str, Any]:
        self._record('get_item', kwargs)
        item = self.items.get(kwargs['Key']['id'])
        return {'Item': dict(item)} if item else {}

    def update_item(self, **kwargs: Any) -> dict[str, Any]:
        self._record('update_item', kwargs)
        assert kwargs['UpdateExpression'] == 'SET #r = :r'
        attribute = kwargs['ExpressionAttributeNames']['#r']
        key = kwargs['Key']['id']
        self.items.setdefault(key, {'id': key})[attribute] = (
            kwargs['ExpressionAttributeValues'][':r']
        )
        return {}

    def scan(self, **kwargs: Any) -> dict[str, Any]:
        self._record('scan', kwargs)
        items = sorted(self.items.values(), key=lambda item: item['id'])
        start = kwargs.get('ExclusiveStartKey')
        if start:
            items = [item for item in items if item['id'] > start['id']]
        if self.page_size is None or len(items) <= self.page_size:
            return {'Items': [dict(item) for item in items]}
        page = items[: self.page_size]
        return {
            'Items': [dict(item) for item in page],
            'LastEvaluatedKey': {'id': page[-1]['id']},
        }


# --- Service Fixtures ---


@pytest.fixture
def settings():
    from user_directory.config import Settings

    return Settings(user_pool_id='us-east-1_TestPool', table_name='users-test')


@pytest.fixture
def cognito() -> FakeCognitoClient:
    return FakeCognitoClient()


@pytest.fixture
def table() -> FakeTable:
    return FakeTable()


@pytest.fixture
def user_pool(cognito, settings):
    from user_directory.services.user_pool import UserPool

    return UserPool(cognito, settings.user_pool_id)


@pytest.fixture
def user_store(table):
    from user_directory.db.user_store import UserStore

    return UserStore(table)


# --- Identity Fixtures ---


def make_identity(
    sub: str = 'caller-sub',
    groups: Any = None,
    name: Optional[str] = 'Caller',
    email: Optional[str] = 'caller@example.com',
) -> dict[str, Any]:
    """Create an AppSync Cognito identity bag."""
    claims: dict[str, Any] = {'sub': sub}
    if name is not None:
        claims['name'] = name
    if email is not None:
        claims['email'] = email
    if groups is not None:
        claims['cognito:groups'] = groups
    return {'sub': sub, 'username': sub, 'claims': claims}


@pytest.fixture
def admin_identity() -> dict[str, Any]:
    return make_identity(sub='admin-sub', groups=['admin'], name='Admin')


@pytest.fixture
def member_identity() -> dict[str, Any]:
    return make_identity(sub='member-sub', groups=['editor'], name='Member')


def make_event(
    field_name: Optional[str],
    arguments: Optional[dict[str, Any]] = None,
    identity: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    """Create an AppSync direct Lambda resolver event."""
    event: dict[str, Any] = {
        'arguments': arguments or {},
        'identity': identity,
    }
    if field_name is not None:
        event['info'] = {'fieldName': field_name, 'parentTypeName': 'Mutation'}
    return event
