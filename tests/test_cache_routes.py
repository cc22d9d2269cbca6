USER = "64b000000000000000000001"


def test_requires_authentication(client):
    assert client.get("/cache/stats").status_code == 401


def test_stats_and_reset(client, auth_headers, cache_store):
    headers = auth_headers(USER)
    client.get("/habits/", headers=headers)
    client.get("/habits/", headers=headers)

    stats = client.get("/cache/stats", headers=headers).json()
    assert stats["connected"] is True
    assert (stats["hits"], stats["misses"]) == (1, 1)
    assert stats["hit_rate"] == 0.5

    assert client.post("/cache/stats/reset", headers=headers).status_code == 200
    stats = client.get("/cache/stats", headers=headers).json()
    assert (stats["hits"], stats["misses"]) == (0, 0)


def test_clear(client, auth_headers, fake_redis):
    fake_redis.store["anything"] = "1"
    response = client.post("/cache/clear", headers=auth_headers(USER))
    assert response.json()["cleared"] is True
    assert fake_redis.store == {}


def test_clear_own_user_cache(client, auth_headers, fake_redis):
    fake_redis.store[f"user:{USER}:habits"] = "[]"
    fake_redis.store["user:someone-else:habits"] = "[]"

    response = client.delete(f"/cache/user/{USER}", headers=auth_headers(USER))

    assert response.status_code == 200
    assert response.json()["keys_deleted"] == 1
    assert set(fake_redis.store) == {"user:someone-else:habits"}


def test_cannot_clear_another_users_cache(client, auth_headers):
    response = client.delete("/cache/user/someone-else", headers=auth_headers(USER))
    assert response.status_code == 403
