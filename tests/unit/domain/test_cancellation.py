"""Tests for genrepo/domain/cancellation.py."""

import pytest

from genrepo.domain.cancellation import CancellationToken, raise_if_cancelled
from genrepo.domain.errors import OperationCancelledError, RepositoryError


def test_new_token_is_not_cancelled():
    token = CancellationToken()
    assert not token.cancelled
    token.raise_if_cancelled()


def test_cancel_sets_flag_and_raises():
    token = CancellationToken()
    token.cancel("stop")
    assert token.cancelled
    with pytest.raises(OperationCancelledError, match="stop"):
        token.raise_if_cancelled()


def test_none_token_never_raises():
    raise_if_cancelled(None)


def test_cancellation_is_not_a_repository_error():
    assert not issubclass(OperationCancelledError, RepositoryError)
