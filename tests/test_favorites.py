from conftest import auth, register


def _add(client, token, name, lat=37.57, lon=126.98):
    return client.post(
        "/favorites",
        headers=auth(token),
        json={"name": name, "latitude": lat, "longitude": lon},
    )


def test_favorites_require_login(client):
    assert client.get("/favorites").status_code == 401


def test_add_list_and_remove(client):
    token = register(client)["tokens"]["accessToken"]

    assert client.get("/favorites", headers=auth(token)).json() == {"locations": []}

    first = _add(client, token, "Seoul")
    assert first.status_code == 200, first.text
    assert first.json()["success"] is True

    second = _add(client, token, "London", 51.51, -0.13)
    names = [loc["name"] for loc in second.json()["locations"]]
    assert names == ["London", "Seoul"]
    assert "savedAt" in second.json()["locations"][0]

    assert client.get("/favorites/Seoul", headers=auth(token)).json() == {"favorite": True}

    removed = client.delete("/favorites/Seoul", headers=auth(token))
    assert removed.status_code == 200
    assert [loc["name"] for loc in removed.json()["locations"]] == ["London"]
    assert client.get("/favorites/Seoul", headers=auth(token)).json() == {"favorite": False}


def test_add_existing_location_is_idempotent(client):
    token = register(client)["tokens"]["accessToken"]
    _add(client, token, "Seoul")
    again = _add(client, token, "Seoul")

    assert again.status_code == 200
    assert again.json()["success"] is True
    assert len(again.json()["locations"]) == 1


def test_remove_missing_location_is_not_found(client):
    token = register(client)["tokens"]["accessToken"]
    resp = client.delete("/favorites/Atlantis", headers=auth(token))
    assert resp.status_code == 404


def test_invalid_coordinates_rejected(client):
    token = register(client)["tokens"]["accessToken"]
    assert _add(client, token, "Nowhere", lat=120.0).status_code == 400


def test_favorites_are_per_user(client):
    alice = register(client)["tokens"]["accessToken"]
    bob = register(client, email="b@x.com", username="bob")["tokens"]["accessToken"]

    _add(client, alice, "Seoul")
    assert client.get("/favorites", headers=auth(bob)).json() == {"locations": []}


def test_add_racing_duplicate_stays_idempotent(client, monkeypatch):
    from services.user.favorites import favorites_service

    token = register(client)["tokens"]["accessToken"]
    _add(client, token, "Seoul")

    # 중복 확인을 통과한 뒤 unique 제약에 걸리는 경우
    async def _not_found(db, user_id, name):
        return None

    monkeypatch.setattr(favorites_service, "_find", _not_found)
    again = _add(client, token, "Seoul")

    assert again.status_code == 200, again.text
    assert again.json()["success"] is True
    assert [loc["name"] for loc in again.json()["locations"]] == ["Seoul"]
