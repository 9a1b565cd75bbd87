def test_plain_users_only_see_active_clients(client, auth_headers):
    user_view = client.get("/api/clients", headers=auth_headers("user")).json()
    admin_view = client.get("/api/clients", headers=auth_headers("admin")).json()

    assert [c["name"] for c in user_view] == ["Innovatech S.A."]
    assert {c["name"] for c in admin_view} == {"Innovatech S.A.", "Grupo Retail MX"}


def test_any_role_creates_clients(client, auth_headers):
    response = client.post(
        "/api/clients",
        headers=auth_headers("user"),
        json={
            "name": "Logística Norte",
            "email": "contacto@logisticanorte.mx",
            "industry": "logistics",
            "custom_data": {"rfc": "LON010101AAA", "color": "azul"},
        },
    )

    assert response.status_code == 201
    created = next(
        c for c in client.get("/api/clients", headers=auth_headers("admin")).json()
        if c["id"] == response.json()["id"]
    )
    assert created["active"] is True
    assert created["custom_data"] == {"rfc": "LON010101AAA"}


def test_client_email_is_validated(client, auth_headers):
    response = client.post(
        "/api/clients", headers=auth_headers("admin"), json={"name": "Sin Correo", "email": "no-es-email"}
    )

    assert response.status_code == 400


def test_update_client_requires_staff(client, auth_headers, container):
    client_id = container.repository.list_clients()[0]["id"]

    denied = client.put(f"/api/clients/{client_id}", headers=auth_headers("user"), json={"notes": "x"})
    allowed = client.put(f"/api/clients/{client_id}", headers=auth_headers("manager"), json={"notes": "VIP"})

    assert denied.status_code == 403
    assert allowed.status_code == 200
    assert container.repository.find_client(client_id)["notes"] == "VIP"


def test_update_unknown_client(client, auth_headers):
    response = client.put("/api/clients/999", headers=auth_headers("admin"), json={"notes": "x"})

    assert response.status_code == 404
    assert response.json() == {"message": "Cliente no encontrado"}


def test_client_fields_are_managed_by_admin(client, auth_headers):
    payload = {"name": "segmento", "label": "Segmento", "type": "select", "options": ["A", "B"]}

    denied = client.post("/api/clients/fields", headers=auth_headers("manager"), json=payload)
    created = client.post("/api/clients/fields", headers=auth_headers("admin"), json=payload)

    assert denied.status_code == 403
    assert created.status_code == 201
    assert created.json() == {"message": "Campo agregado exitosamente"}
    names = [f["name"] for f in client.get("/api/clients/fields", headers=auth_headers("user")).json()]
    assert "segmento" in names


def test_client_field_can_be_deactivated(client, auth_headers, container):
    field = container.repository.find_field_definition_by_name("client", "rfc")

    response = client.put(
        f"/api/clients/fields/{field['id']}", headers=auth_headers("admin"), json={"active": False}
    )

    assert response.status_code == 200
    fields = client.get("/api/clients/fields", headers=auth_headers("admin")).json()
    assert next(f for f in fields if f["name"] == "rfc")["active"] is False
