import pytest


@pytest.fixture
def project_payload(container):
    client_id = container.repository.list_clients(active_only=True)[0]["id"]
    responsible = container.repository.find_user_by_username("manager")["id"]
    return {
        "client_id": int(client_id),
        "name": "Portal de Clientes",
        "description": "Autoservicio para clientes",
        "status": "cotizado",
        "start_date": "2024-01-15",
        "end_date": "2024-06-30",
        "responsible_id": responsible,
        "budget": 50000,
        "priority": "high",
        "custom_data": {"repo_url": "https://git.example.com/portal", "unknown_key": "x"},
    }


def test_list_projects_embeds_tasks_and_names(client, auth_headers):
    response = client.get("/api/projects", headers=auth_headers("user"))

    assert response.status_code == 200
    projects = response.json()
    assert len(projects) == 1
    project = projects[0]
    assert project["client_name"] == "Innovatech S.A."
    assert project["responsible_name"] == "admin"
    assert [t["status"] for t in project["tasks"]] == ["completada", "en_progreso"]


def test_get_unknown_project(client, auth_headers):
    response = client.get("/api/projects/999", headers=auth_headers("admin"))

    assert response.status_code == 404
    assert response.json() == {"message": "Proyecto no encontrado"}


def test_manager_creates_project_and_unknown_custom_fields_are_dropped(
    client, auth_headers, project_payload
):
    response = client.post("/api/projects", headers=auth_headers("manager"), json=project_payload)

    assert response.status_code == 201
    project_id = response.json()["id"]
    project = client.get(f"/api/projects/{project_id}", headers=auth_headers("manager")).json()
    assert project["name"] == "Portal de Clientes"
    assert project["responsible_name"] == "manager"
    assert project["custom_data"] == {"repo_url": "https://git.example.com/portal"}
    assert project["tasks"] == []


def test_user_cannot_create_projects(client, auth_headers, project_payload):
    response = client.post("/api/projects", headers=auth_headers("user"), json=project_payload)

    assert response.status_code == 403


def test_project_dates_must_be_ordered(client, auth_headers, project_payload):
    project_payload["end_date"] = "2023-12-31"

    response = client.post("/api/projects", headers=auth_headers("admin"), json=project_payload)

    assert response.status_code == 400


def test_project_requires_existing_client(client, auth_headers, project_payload):
    project_payload["client_id"] = 999

    response = client.post("/api/projects", headers=auth_headers("admin"), json=project_payload)

    assert response.status_code == 400
    assert response.json()["message"] == "El cliente no existe"


def test_update_project_is_partial(client, auth_headers, container):
    project = container.repository.list_projects()[0]

    response = client.put(
        f"/api/projects/{project['id']}",
        headers=auth_headers("manager"),
        json={"progress_percentage": 80, "status": "pausado"},
    )

    assert response.status_code == 200
    stored = container.repository.find_project(project["id"])
    assert stored["progress_percentage"] == 80
    assert stored["status"] == "pausado"
    assert stored["name"] == project["name"]
    assert stored["budget"] == project["budget"]


def test_update_project_rejects_inverted_dates(client, auth_headers, container):
    project = container.repository.list_projects()[0]

    response = client.put(
        f"/api/projects/{project['id']}",
        headers=auth_headers("admin"),
        json={"end_date": "2020-01-01"},
    )

    assert response.status_code == 400


def test_project_field_definitions_lifecycle(client, auth_headers):
    manager = auth_headers("manager")

    created = client.post(
        "/api/projects/meta/fields",
        headers=manager,
        json={"name": "Cliente Final", "label": "Cliente final", "type": "text", "sort_order": 9},
    )
    assert created.status_code == 201
    assert created.json() == {"message": "Campo de proyecto creado exitosamente"}
    listed = client.get("/api/projects/meta/fields/all", headers=manager).json()
    field = next(f for f in listed if f["name"] == "cliente_final")
    assert field["label"] == "Cliente final"

    duplicate = client.post(
        "/api/projects/meta/fields",
        headers=manager,
        json={"name": "cliente_final", "label": "Otro", "type": "text"},
    )
    assert duplicate.status_code == 400
    assert duplicate.json()["message"] == "El campo ya existe"

    removed = client.delete(f"/api/projects/meta/fields/{field['id']}", headers=manager)
    assert removed.status_code == 200

    active = client.get("/api/projects/meta/fields", headers=auth_headers("user")).json()
    everything = client.get("/api/projects/meta/fields/all", headers=manager).json()
    assert "cliente_final" not in {f["name"] for f in active}
    assert "cliente_final" in {f["name"] for f in everything}


def test_project_field_type_and_access_checks(client, auth_headers):
    bad_type = client.post(
        "/api/projects/meta/fields",
        headers=auth_headers("admin"),
        json={"name": "notas", "label": "Notas", "type": "longtext"},
    )
    assert bad_type.status_code == 400

    assert client.get("/api/projects/meta/fields/all", headers=auth_headers("user")).status_code == 403
    assert client.delete("/api/projects/meta/fields/999", headers=auth_headers("admin")).status_code == 404


def test_dashboard_stats(client, auth_headers):
    response = client.get("/api/dashboard/stats", headers=auth_headers("user"))

    assert response.status_code == 200
    assert response.json() == {
        "total_cl": 1,
        "total_projects": 1,
        "total_tasks": 2,
        "tasks_by_status": {"pendiente": 0, "en_progreso": 1, "completada": 1, "aprobada": 0},
        "pending_approval": 1,
        "active_users": 3,
    }
