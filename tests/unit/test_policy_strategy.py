"""RetryPolicy / ExecutionStrategy 단위 테스트."""

from __future__ import annotations

import json

import pytest

from catalog_client.engine.policy import RetryPolicy
from catalog_client.engine.result import AttemptOutcome
from catalog_client.engine.strategy import ExecutionStrategy
from tests.fixtures import API_PAYLOADS


def test_policy_linear_backoff():
    policy = RetryPolicy(timeout_s=1.0, max_attempts=3, backoff_s=0.5)
    assert policy.delay_for(1) == 0.5
    assert policy.delay_for(2) == 1.0
    # 마지막 시도 후에는 대기하지 않고 다음 후보로
    assert policy.delay_for(3) == 0.0


def test_policy_max_total_attempts():
    assert RetryPolicy(max_attempts=3).max_total_attempts(4) == 12
    assert RetryPolicy(max_attempts=2).max_total_attempts(0) == 0


@pytest.mark.parametrize(
    "kwargs",
    [{"timeout_s": 0}, {"max_attempts": 0}, {"backoff_s": -1}],
)
def test_policy_rejects_invalid_values(kwargs):
    with pytest.raises(ValueError):
        RetryPolicy(**kwargs)


def test_policy_delay_for_rejects_zero():
    with pytest.raises(ValueError):
        RetryPolicy().delay_for(0)


def test_classify_success_envelope():
    c = ExecutionStrategy.classify_response(200, json.dumps(API_PAYLOADS["categories_ok"]))
    assert c.outcome == AttemptOutcome.SUCCESS
    assert c.envelope["data"][0]["name"] == "tables"


@pytest.mark.parametrize("key", ["success_false", "success_string", "missing_success"])
def test_classify_2xx_without_valid_envelope(key):
    c = ExecutionStrategy.classify_response(200, json.dumps(API_PAYLOADS[key]))
    assert c.outcome == AttemptOutcome.SERVER_ERROR
    assert c.envelope is None


def test_classify_success_false_keeps_message():
    c = ExecutionStrategy.classify_response(200, json.dumps(API_PAYLOADS["success_false"]))
    assert c.message == "Category not found"


def test_classify_success_with_structured_message():
    body = json.dumps({"success": True, "data": [], "message": {"k": 1}})
    c = ExecutionStrategy.classify_response(200, body)
    assert c.outcome == AttemptOutcome.SUCCESS


def test_classify_success_false_with_structured_message():
    body = json.dumps({"success": False, "message": ["name taken"]})
    c = ExecutionStrategy.classify_response(200, body)
    assert c.outcome == AttemptOutcome.SERVER_ERROR
    assert c.message == '["name taken"]'


@pytest.mark.parametrize("body", ["", "<html>ok</html>", "[1, 2]"])
def test_classify_2xx_non_object_body(body):
    assert ExecutionStrategy.classify_response(201, body).outcome == AttemptOutcome.SERVER_ERROR


@pytest.mark.parametrize("status", [401, 403])
def test_classify_auth(status):
    c = ExecutionStrategy.classify_response(status, json.dumps(API_PAYLOADS["unauthorized"]))
    assert c.outcome == AttemptOutcome.AUTH_ERROR
    assert ExecutionStrategy.should_abort(c.outcome)


def test_classify_non_2xx_plain_text():
    c = ExecutionStrategy.classify_response(502, "Bad Gateway")
    assert c.outcome == AttemptOutcome.SERVER_ERROR
    assert c.message == "Bad Gateway"


def test_classify_non_2xx_empty_body():
    c = ExecutionStrategy.classify_response(404, "")
    assert c.outcome == AttemptOutcome.SERVER_ERROR
    assert c.message == "HTTP 404"


def test_only_network_errors_retry_same_candidate():
    assert ExecutionStrategy.should_retry_same_candidate(AttemptOutcome.NETWORK_ERROR)
    assert not ExecutionStrategy.should_retry_same_candidate(AttemptOutcome.SERVER_ERROR)
    assert not ExecutionStrategy.should_retry_same_candidate(AttemptOutcome.AUTH_ERROR)
