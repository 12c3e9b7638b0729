"""Tests for orphan detection ahead of a person deletion."""
import pytest

from relnet import crud, graph
from relnet.repository import KuzuGraphRepository


def _orphans(conn, person_id, owner_id):
    return graph.find_orphans(KuzuGraphRepository(conn), person_id, owner_id)


class TestFindOrphans:
    def test_isolated_partner_is_orphan(self, conn, user_alice, pair):
        orphans = _orphans(conn, pair["ann"]["id"], user_alice["id"])
        assert orphans == [{"id": pair["ben"]["id"], "fullName": "Ben 'Benny'"}]

    def test_other_relationship_keeps_neighbor(self, conn, user_alice, pair, types):
        cy = crud.create_person(conn, user_alice["id"], "Cy",
                                relationship_to_user_id=types["friend"]["id"])
        crud.create_relationship(conn, cy["id"], pair["ben"]["id"], types["colleague"]["id"])
        assert _orphans(conn, pair["ann"]["id"], user_alice["id"]) == []

    def test_direct_user_relationship_keeps_neighbor(self, conn, user_alice, pair, types):
        crud.set_relationship_to_user(conn, pair["ben"]["id"], types["friend"]["id"])
        assert _orphans(conn, pair["ann"]["id"], user_alice["id"]) == []

    def test_dangling_user_relationship_keeps_neighbor(self, conn, user_alice, pair, types):
        crud.set_relationship_to_user(conn, pair["ben"]["id"], types["friend"]["id"])
        crud.delete_relationship_type(conn, types["friend"]["id"])
        assert _orphans(conn, pair["ann"]["id"], user_alice["id"]) == []

    def test_incoming_only_neighbor(self, conn, user_alice, types):
        uid = user_alice["id"]
        hub = crud.create_person(conn, uid, "Hub")
        leaf = crud.create_person(conn, uid, "Leaf")
        crud.create_relationship(conn, leaf["id"], hub["id"], types["friend"]["id"])
        assert [o["id"] for o in _orphans(conn, hub["id"], uid)] == [leaf["id"]]

    def test_star_has_no_orphans(self, conn, star):
        # Quinn still knows you directly
        assert _orphans(conn, star["pat"]["id"], star["user"]["id"]) == []

    def test_no_relationships(self, conn, user_alice):
        loner = crud.create_person(conn, user_alice["id"], "Loner")
        assert _orphans(conn, loner["id"], user_alice["id"]) == []

    def test_neighbor_listed_once(self, conn, user_alice, pair):
        # Ann and Ben are linked in both directions
        orphans = _orphans(conn, pair["ann"]["id"], user_alice["id"])
        assert len(orphans) == 1

    def test_not_owned(self, conn, pair, user_bob):
        with pytest.raises(graph.PersonNotFound):
            _orphans(conn, pair["ann"]["id"], user_bob["id"])

    def test_missing(self, conn, user_alice):
        with pytest.raises(graph.PersonNotFound):
            _orphans(conn, "nope", user_alice["id"])
