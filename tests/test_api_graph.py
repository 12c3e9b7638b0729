"""Tests for the graph, orphan and delete API endpoints."""
from relnet import crud


class TestAuth:
    def test_requires_session(self, client, star):
        resp = client.get(f"/api/people/{star['pat']['id']}/graph")
        assert resp.status_code == 401

    def test_bad_token(self, app_with_db, star):
        from fastapi.testclient import TestClient
        tc = TestClient(app_with_db, cookies={"session": "forged:0:sig"})
        assert tc.get("/api/dashboard/graph").status_code == 401

    def test_health(self, client):
        assert client.get("/health").json() == {"ok": True}


class TestPersonGraphEndpoint:
    def test_star(self, auth_client, star):
        resp = auth_client.get(f"/api/people/{star['pat']['id']}/graph")
        assert resp.status_code == 200
        data = resp.json()
        uid = star["user"]["id"]
        assert len(data["nodes"]) == 3
        center = [n for n in data["nodes"] if n["isCenter"]]
        assert [n["id"] for n in center] == [star["pat"]["id"]]
        assert center[0]["label"] == "Pat Lee"
        you = next(n for n in data["nodes"] if n["id"] == f"user-{uid}")
        assert you == {"id": f"user-{uid}", "label": "You", "groups": [],
                       "colors": [], "isCenter": False}
        assert sorted(e["type"].lower() for e in data["edges"]) == [
            "acquaintance", "colleague", "friend",
        ]

    def test_no_dangling_edges(self, conn, auth_client, star, pair, types):
        crud.create_relationship(conn, star["pat"]["id"], pair["ann"]["id"], types["other"]["id"])
        data = auth_client.get(f"/api/people/{star['pat']['id']}/graph").json()
        ids = {n["id"] for n in data["nodes"]}
        for e in data["edges"]:
            assert e["source"] in ids and e["target"] in ids

    def test_other_users_person_is_404(self, bob_client, star):
        resp = bob_client.get(f"/api/people/{star['pat']['id']}/graph")
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Person not found"

    def test_missing_person_is_404(self, auth_client, user_alice):
        assert auth_client.get("/api/people/nope/graph").status_code == 404

    def test_group_filter(self, conn, auth_client, user_alice, star):
        work = crud.create_group(conn, user_alice["id"], "Work")
        resp = auth_client.get(f"/api/people/{star['pat']['id']}/graph",
                               params={"groupId": work["id"]})
        data = resp.json()
        assert {n["label"] for n in data["nodes"]} == {"Pat Lee", "You"}
        assert len(data["edges"]) == 1


class TestDashboardGraphEndpoint:
    def test_network(self, auth_client, star, pair):
        data = auth_client.get("/api/dashboard/graph").json()
        centers = [n for n in data["nodes"] if n["isCenter"]]
        assert [n["label"] for n in centers] == ["You"]
        assert len(data["nodes"]) == 5
        assert len(data["edges"]) == 5

    def test_group_colors(self, conn, auth_client, user_alice, pair):
        club = crud.create_group(conn, user_alice["id"], "Club")
        crud.add_person_to_group(conn, club["id"], pair["ann"]["id"])
        data = auth_client.get("/api/dashboard/graph", params={"groupId": club["id"]}).json()
        ann = next(n for n in data["nodes"] if n["label"] == "Ann")
        assert ann["groups"] == ["Club"]
        assert ann["colors"] == ["#3B82F6"]

    def test_empty_for_new_user(self, bob_client):
        data = bob_client.get("/api/dashboard/graph").json()
        assert [n["label"] for n in data["nodes"]] == ["You"]
        assert data["edges"] == []


class TestOrphansEndpoint:
    def test_orphans(self, auth_client, pair):
        resp = auth_client.get(f"/api/people/{pair['ann']['id']}/orphans")
        assert resp.status_code == 200
        assert resp.json() == {"orphans": [{"id": pair["ben"]["id"], "fullName": "Ben 'Benny'"}]}

    def test_none(self, auth_client, star):
        resp = auth_client.get(f"/api/people/{star['pat']['id']}/orphans")
        assert resp.json() == {"orphans": []}

    def test_not_owned(self, bob_client, pair):
        assert bob_client.get(f"/api/people/{pair['ann']['id']}/orphans").status_code == 404


class TestDeletePerson:
    def test_delete_keeps_orphans_by_default(self, conn, auth_client, user_alice, pair):
        resp = auth_client.delete(f"/api/people/{pair['ann']['id']}")
        assert resp.status_code == 200
        assert resp.json() == {"ok": True, "deleted": [pair["ann"]["id"]]}
        assert crud.get_person(conn, pair["ann"]["id"], user_alice["id"]) is None
        assert crud.get_person(conn, pair["ben"]["id"], user_alice["id"]) is not None

    def test_delete_with_orphans(self, conn, auth_client, user_alice, pair):
        resp = auth_client.delete(f"/api/people/{pair['ann']['id']}",
                                  params={"delete_orphans": "true"})
        assert resp.json()["deleted"] == [pair["ann"]["id"], pair["ben"]["id"]]
        assert crud.get_person(conn, pair["ben"]["id"], user_alice["id"]) is None

    def test_not_owned(self, bob_client, pair):
        assert bob_client.delete(f"/api/people/{pair['ann']['id']}").status_code == 404


class TestFigureEndpoint:
    def test_figure(self, auth_client, star):
        resp = auth_client.get(f"/api/people/{star['pat']['id']}/graph/figure",
                               params={"width": 800, "height": 600})
        assert resp.status_code == 200
        fig = resp.json()
        assert "data" in fig and "layout" in fig
        node_trace = fig["data"][-1]
        assert len(node_trace["x"]) == 3
        assert sorted(node_trace["text"]) == ["Pat Lee", "Quinn", "You"]

    def test_not_owned(self, bob_client, star):
        resp = bob_client.get(f"/api/people/{star['pat']['id']}/graph/figure")
        assert resp.status_code == 404
