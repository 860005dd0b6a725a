"""fetch_with_retry: exact attempt bound, linear backoff, no retry on 4xx or transport errors."""

import httpx
import pytest

from services.fetch import fetch_with_retry

URL = "https://api.eigenwallet.org/api/list"
PATH = "/api/list"


async def test_always_503_makes_exactly_n_attempts(api, http_client, fake_sleep, sleeps):
    api.add(PATH, status_code=503)

    response = await fetch_with_retry(http_client, URL, retries=3, backoff_seconds=1.0, sleep=fake_sleep)

    assert response.status_code == 503
    assert api.count(PATH) == 3
    assert sleeps == [1.0, 2.0]


@pytest.mark.parametrize("retries", [1, 2, 5])
async def test_attempt_bound_matches_retries(api, http_client, fake_sleep, retries):
    api.add(PATH, status_code=500)

    await fetch_with_retry(http_client, URL, retries=retries, sleep=fake_sleep)

    assert api.count(PATH) == retries


async def test_zero_retries_still_makes_one_attempt(api, http_client, fake_sleep):
    api.add(PATH, status_code=502)

    response = await fetch_with_retry(http_client, URL, retries=0, sleep=fake_sleep)

    assert response.status_code == 502
    assert api.count(PATH) == 1


async def test_404_is_not_retried(api, http_client, fake_sleep, sleeps):
    api.add(PATH, status_code=404)

    response = await fetch_with_retry(http_client, URL, retries=3, sleep=fake_sleep)

    assert response.status_code == 404
    assert api.count(PATH) == 1
    assert sleeps == []


async def test_recovers_after_transient_failure(api, http_client, fake_sleep, sleeps):
    api.add(PATH, status_code=500)
    api.add(PATH, json=[{"peerId": "a"}])

    response = await fetch_with_retry(http_client, URL, retries=3, backoff_seconds=1.0, sleep=fake_sleep)

    assert response.status_code == 200
    assert response.json() == [{"peerId": "a"}]
    assert api.count(PATH) == 2
    assert sleeps == [1.0]


async def test_success_returns_immediately(api, http_client, fake_sleep, sleeps):
    api.add(PATH, json=[])

    response = await fetch_with_retry(http_client, URL, retries=3, sleep=fake_sleep)

    assert response.is_success
    assert api.count(PATH) == 1
    assert sleeps == []


async def test_transport_error_propagates_without_retry(api, http_client, fake_sleep):
    api.fail(PATH)

    with pytest.raises(httpx.ConnectError):
        await fetch_with_retry(http_client, URL, retries=3, sleep=fake_sleep)

    assert api.count(PATH) == 1


async def test_headers_are_sent(api, http_client, fake_sleep):
    api.add(PATH, json=[])

    await fetch_with_retry(http_client, URL, headers={"Accept": "application/json"}, sleep=fake_sleep)

    assert api.calls[0].headers["Accept"] == "application/json"
