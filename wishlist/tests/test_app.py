import os
import tempfile
import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient

from wishlist import dependencies
from wishlist.app import create_app
from wishlist.config import Settings
from wishlist.db import RemoteDbBackend
from wishlist.local_store import GIFTS_KEY, PEOPLE_KEY
from wishlist.storage import StorageService

ADMIN = ("admin", "admin")


class WishlistApiTests(unittest.TestCase):
    def setUp(self):
        patcher = patch(
            "wishlist.dependencies.get_settings",
            return_value=Settings(use_in_memory_backends=True),
        )
        patcher.start()
        self.addCleanup(patcher.stop)
        dependencies.reset_dependencies()
        self.addCleanup(dependencies.reset_dependencies)
        self.client = TestClient(create_app())

    def _new_gift(self, **fields):
        payload = {"title": "Чайник", "personId": "p1", "categoryId": "c2"}
        payload.update(fields)
        response = self.client.post("/api/admin/gifts", json=payload, auth=ADMIN)
        self.assertEqual(response.status_code, 200)
        return response.json()

    def test_public_gifts_show_seed_data(self):
        response = self.client.get("/api/public/gifts")
        self.assertEqual(response.status_code, 200)
        cards = response.json()
        self.assertEqual(len(cards), 1)
        self.assertEqual(cards[0]["gift"]["title"], "Пример подарка (Локально)")
        self.assertEqual(cards[0]["personName"], "Анна")
        self.assertEqual(cards[0]["categoryName"], "Техника")

    def test_private_gift_only_in_admin_view(self):
        self._new_gift(title="Сюрприз", isPrivate=True)
        public = self.client.get("/api/public/gifts").json()
        self.assertNotIn("Сюрприз", [c["gift"]["title"] for c in public])
        admin = self.client.get("/api/admin/gifts", auth=ADMIN).json()
        self.assertIn("Сюрприз", [c["gift"]["title"] for c in admin])

    def test_public_search_and_person_filter(self):
        self._new_gift(title="Плед")
        cards = self.client.get("/api/public/gifts", params={"q": "плед"}).json()
        self.assertEqual([c["gift"]["title"] for c in cards], ["Плед"])
        cards = self.client.get("/api/public/gifts", params={"person_id": "p2"}).json()
        self.assertEqual(cards, [])

    def test_admin_requires_credentials(self):
        self.assertEqual(self.client.get("/api/admin/people").status_code, 401)
        response = self.client.get("/api/admin/people", auth=("admin", "wrong"))
        self.assertEqual(response.status_code, 401)

    def test_login(self):
        ok = self.client.post("/api/login", json={"username": "admin", "password": "admin"})
        self.assertEqual(ok.status_code, 200)
        self.assertEqual(ok.json()["status"], "ok")
        bad = self.client.post("/api/login", json={"username": "admin", "password": "x"})
        self.assertEqual(bad.status_code, 401)

    def test_edit_gift_keeps_created_at(self):
        created = self._new_gift()
        edited = self._new_gift(id=created["id"], title="Новый чайник", status="BOUGHT")
        self.assertEqual(edited["id"], created["id"])
        self.assertEqual(edited["createdAt"], created["createdAt"])
        self.assertEqual(edited["status"], "BOUGHT")

    def test_edit_unknown_gift_is_404(self):
        response = self.client.post(
            "/api/admin/gifts",
            json={"id": "missing", "title": "x", "personId": "p1", "categoryId": "c1"},
            auth=ADMIN,
        )
        self.assertEqual(response.status_code, 404)

    def test_gift_requires_title(self):
        response = self.client.post(
            "/api/admin/gifts",
            json={"title": "", "personId": "p1", "categoryId": "c1"},
            auth=ADMIN,
        )
        self.assertEqual(response.status_code, 422)

    def test_delete_person_cascades(self):
        self._new_gift()
        response = self.client.delete("/api/admin/people/p1", auth=ADMIN)
        self.assertEqual(response.status_code, 204)
        self.assertEqual(self.client.get("/api/admin/gifts", auth=ADMIN).json(), [])
        self.assertEqual(self.client.get("/api/public/people").json(), [])

    def test_person_and_category_crud(self):
        person = self.client.post(
            "/api/admin/people", json={"name": "Борис"}, auth=ADMIN
        ).json()
        self.assertEqual(person["description"], "")
        names = [p["name"] for p in self.client.get("/api/public/people").json()]
        self.assertEqual(names, ["Анна", "Борис"])

        category = self.client.post(
            "/api/admin/categories", json={"name": "Спорт", "color": "red"}, auth=ADMIN
        ).json()
        response = self.client.delete(
            f"/api/admin/categories/{category['id']}", auth=ADMIN
        )
        self.assertEqual(response.status_code, 204)
        ids = [c["id"] for c in self.client.get("/api/admin/categories", auth=ADMIN).json()]
        self.assertEqual(ids, ["c1", "c2", "c3", "c4"])

    def test_corrupt_local_state_is_500(self):
        self.client.get("/api/public/people")
        dependencies.get_kv_store().set_item(PEOPLE_KEY, "[{")
        response = self.client.get("/api/public/people")
        self.assertEqual(response.status_code, 500)
        self.assertIn(PEOPLE_KEY, response.json()["detail"])

    def test_wrong_item_shape_is_500_with_key(self):
        self.client.get("/api/public/gifts")
        dependencies.get_kv_store().set_item(GIFTS_KEY, '[{"id": "g1", "title": "x"}]')
        response = self.client.get("/api/public/gifts")
        self.assertEqual(response.status_code, 500)
        self.assertIn(GIFTS_KEY, response.json()["detail"])

    def test_remote_error_detail_hides_sql(self):
        remote = RemoteDbBackend("sqlite+pysqlite:///:memory:", "k")
        self.addCleanup(remote.dispose)
        # No schema: every query fails inside the database.
        dependencies._storage_service = StorageService(
            remote, dependencies.get_kv_store(), cloud=True
        )
        response = self.client.get("/api/public/gifts")
        self.assertEqual(response.status_code, 502)
        self.assertEqual(response.json(), {"detail": "Remote database error"})

    def test_switch_to_cloud_and_back(self):
        with tempfile.TemporaryDirectory() as tmp:
            url = "sqlite:///" + os.path.join(tmp, "remote.db")
            status = self.client.get("/api/admin/database", auth=ADMIN).json()
            self.assertFalse(status["cloud"])

            ignored = self.client.post(
                "/api/admin/database", json={"url": url, "key": ""}, auth=ADMIN
            ).json()
            self.assertFalse(ignored["restarting"])

            saved = self.client.post(
                "/api/admin/database", json={"url": url, "key": "k"}, auth=ADMIN
            ).json()
            self.assertTrue(saved["restarting"])

            status = self.client.get("/api/admin/database", auth=ADMIN).json()
            self.assertTrue(status["cloud"])
            self.assertEqual(self.client.get("/api/public/people").json(), [])

            self.client.delete("/api/admin/database", auth=ADMIN)
            status = self.client.get("/api/admin/database", auth=ADMIN).json()
            self.assertFalse(status["cloud"])
            names = [p["name"] for p in self.client.get("/api/public/people").json()]
            self.assertEqual(names, ["Анна"])


if __name__ == "__main__":
    unittest.main()
