API = "/api/v1"

ADDRESS = {
    "full_name": "Asha Das",
    "phone": "9876543210",
    "address_line1": "12 Park Street",
    "city": "Kolkata",
    "state": "West Bengal",
    "pincode": "700016",
}


def test_update_name(client, make_user, auth_headers):
    user = make_user()

    resp = client.patch(f"{API}/users/me", json={"name": "  Asha D  "}, headers=auth_headers(user))

    assert resp.json()["name"] == "Asha D"


def test_pincode_is_saved_and_cleared(client, make_user, auth_headers):
    user = make_user()
    headers = auth_headers(user)

    saved = client.put(f"{API}/users/me/pincode", json={"pincode": "700001"}, headers=headers)
    invalid = client.put(f"{API}/users/me/pincode", json={"pincode": "7000"}, headers=headers)
    cleared = client.put(f"{API}/users/me/pincode", json={"pincode": ""}, headers=headers)

    assert saved.json() == {"pincode": "700001"}
    assert invalid.status_code == 422
    assert cleared.json() == {"pincode": None}


def test_first_address_becomes_default(client, make_user, auth_headers):
    user = make_user()
    headers = auth_headers(user)

    first = client.post(f"{API}/users/me/addresses", json=ADDRESS, headers=headers)
    second = client.post(
        f"{API}/users/me/addresses",
        json={**ADDRESS, "city": "Howrah", "pincode": "711101"},
        headers=headers,
    )
    listed = client.get(f"{API}/users/me/addresses", headers=headers).json()

    assert first.status_code == second.status_code == 201
    assert first.json()["is_default"] is True
    assert second.json()["is_default"] is False
    assert listed[0]["id"] == first.json()["id"]


def test_address_validation(client, make_user, auth_headers):
    user = make_user()

    resp = client.post(
        f"{API}/users/me/addresses",
        json={**ADDRESS, "phone": "12345"},
        headers=auth_headers(user),
    )

    assert resp.status_code == 422


def test_admin_changes_role(client, make_user, auth_headers):
    admin, user = make_user(role="admin"), make_user()

    resp = client.patch(
        f"{API}/users/{user.id}/role", json={"role": "seller"}, headers=auth_headers(admin)
    )
    sellers = client.get(f"{API}/users", params={"role": "seller"}, headers=auth_headers(admin))

    assert resp.json()["role"] == "seller"
    assert [u["id"] for u in sellers.json()] == [str(user.id)]
