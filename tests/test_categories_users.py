from conftest import AUTHOR


class TestCategories:
    def _create(self, client, admin, **fields):
        body = {"name": "World", "slug": "World"}
        body.update(fields)
        return client.post("/categories", json=body, headers=admin["headers"])

    def test_crud(self, client, admin):
        resp = self._create(client, admin, description="  Global news ")
        assert resp.status_code == 201
        category = resp.json()
        assert category["slug"] == "world"
        assert category["description"] == "Global news"
        assert category["showInHeader"] is True

        resp = client.get(f"/categories/{category['id']}")
        assert resp.status_code == 200
        assert resp.json()["name"] == "World"

        resp = client.put(
            f"/categories/{category['id']}", json={"name": "World News"}, headers=admin["headers"]
        )
        assert resp.status_code == 200
        assert resp.json()["name"] == "World News"
        assert resp.json()["slug"] == "world"

        resp = client.delete(f"/categories/{category['id']}", headers=admin["headers"])
        assert resp.status_code == 204
        assert client.get(f"/categories/{category['id']}").status_code == 404

    def test_requires_admin(self, client, editor):
        resp = client.post("/categories", json={"name": "X", "slug": "x"}, headers=editor["headers"])
        assert resp.status_code == 403
        assert client.post("/categories", json={"name": "X", "slug": "x"}).status_code == 401

    def test_name_and_slug_required(self, client, admin):
        assert self._create(client, admin, slug="").status_code == 400
        assert self._create(client, admin, name="  ").status_code == 400

    def test_duplicates_conflict(self, client, admin):
        assert self._create(client, admin).status_code == 201
        assert self._create(client, admin, name="Other").status_code == 409
        assert self._create(client, admin, slug="other").status_code == 409

    def test_parent_must_exist(self, client, admin):
        resp = self._create(client, admin, parentCategoryId="c_missing")
        assert resp.status_code == 400

        parent = self._create(client, admin).json()
        resp = self._create(client, admin, name="Europe", slug="europe", parentCategoryId=parent["id"])
        assert resp.status_code == 201
        assert resp.json()["parentCategoryId"] == parent["id"]

        resp = client.put(
            f"/categories/{parent['id']}", json={"parentCategoryId": parent["id"]}, headers=admin["headers"]
        )
        assert resp.status_code == 400

    def test_empty_update_rejected(self, client, admin):
        category = self._create(client, admin).json()
        resp = client.put(f"/categories/{category['id']}", json={}, headers=admin["headers"])
        assert resp.status_code == 400
        assert resp.json()["message"] == "No valid category fields provided for update"

    def test_delete_blocked_by_linked_articles(self, client, admin, make_article):
        category = self._create(client, admin).json()
        make_article(title="Linked", categoryId=category["id"])

        resp = client.delete(f"/categories/{category['id']}", headers=admin["headers"])
        assert resp.status_code == 400
        assert client.get(f"/categories/{category['id']}").status_code == 200

    def test_show_in_header_filter(self, client, admin):
        self._create(client, admin)
        self._create(client, admin, name="Archive", slug="archive", showInHeader=False)

        names = {c["name"] for c in client.get("/categories").json()["items"]}
        assert names == {"World", "Archive"}
        header = client.get("/categories", params={"showInHeader": "true"}).json()["items"]
        assert [c["name"] for c in header] == ["World"]
        hidden = client.get("/categories", params={"showInHeader": "false"}).json()["items"]
        assert [c["name"] for c in hidden] == ["Archive"]


class TestUsers:
    def test_list_hides_secrets(self, client, admin, author):
        resp = client.get("/users", headers=admin["headers"])
        assert resp.status_code == 200
        users = resp.json()["items"]
        assert {u["email"] for u in users} == {"admin@vadali.com", "author@vadali.com"}
        for user in users:
            assert "password" not in user
            assert "refreshToken" not in user

    def test_list_requires_admin(self, client, author):
        assert client.get("/users", headers=author["headers"]).status_code == 403

    def test_create_generates_temporary_password(self, client, admin, login):
        resp = client.post("/users", json={"name": "New Writer", "email": "New@Vadali.com"}, headers=admin["headers"])
        assert resp.status_code == 201
        body = resp.json()
        assert body["email"] == "new@vadali.com"
        assert body["role"] == "AUTHOR"
        assert len(body["temporaryPassword"]) == 8
        assert login("new@vadali.com", body["temporaryPassword"])["user"]["id"] == body["id"]

    def test_create_duplicate_conflicts(self, client, admin, author):
        payload = {k: AUTHOR[k] for k in ("name", "email", "password")}
        assert client.post("/users", json=payload, headers=admin["headers"]).status_code == 409

    def test_create_rejects_unknown_role(self, client, admin):
        resp = client.post(
            "/users", json={"name": "X", "email": "x@vadali.com", "role": "OWNER"}, headers=admin["headers"]
        )
        assert resp.status_code == 400

    def test_get_unknown_user(self, client):
        assert client.get("/users/u_missing").status_code == 404

    def test_self_update(self, client, author, login):
        user_id = author["user"]["id"]
        resp = client.put(
            f"/users/{user_id}", json={"bio": "Covers city hall", "password": "N3w-pass!"}, headers=author["headers"]
        )
        assert resp.status_code == 200
        assert resp.json()["bio"] == "Covers city hall"
        assert login(AUTHOR["email"], "N3w-pass!")["user"]["id"] == user_id

    def test_cannot_update_others(self, client, author, admin):
        resp = client.put(f"/users/{admin['user']['id']}", json={"bio": "hi"}, headers=author["headers"])
        assert resp.status_code == 403

    def test_only_admin_changes_roles(self, client, author, admin):
        user_id = author["user"]["id"]
        resp = client.put(f"/users/{user_id}", json={"role": "ADMIN"}, headers=author["headers"])
        assert resp.status_code == 403

        resp = client.put(f"/users/{user_id}", json={"role": "EDITOR"}, headers=admin["headers"])
        assert resp.status_code == 200
        assert resp.json()["role"] == "EDITOR"

    def test_email_conflict(self, client, author, admin):
        resp = client.put(
            f"/users/{author['user']['id']}", json={"email": "ADMIN@vadali.com"}, headers=author["headers"]
        )
        assert resp.status_code == 409

    def test_last_admin_is_protected(self, client, admin, author):
        admin_id = admin["user"]["id"]
        resp = client.put(f"/users/{admin_id}", json={"role": "AUTHOR"}, headers=admin["headers"])
        assert resp.status_code == 400
        assert client.delete(f"/users/{admin_id}", headers=admin["headers"]).status_code == 400

        client.put(f"/users/{author['user']['id']}", json={"role": "ADMIN"}, headers=admin["headers"])
        assert client.delete(f"/users/{admin_id}", headers=admin["headers"]).status_code == 204

    def test_delete_user(self, client, admin, author):
        user_id = author["user"]["id"]
        assert client.delete(f"/users/{user_id}", headers=admin["headers"]).status_code == 204
        assert client.get(f"/users/{user_id}").status_code == 404
