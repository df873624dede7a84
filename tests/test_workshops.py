from conftest import auth_headers
from app.models.user import ROLE_PROFESSOR


def test_create_workshop_as_professor(client, professor):
    response = client.post(
        "/workshops",
        json={"name": "  Robótica  ", "description": "Arduino básico"},
        headers=auth_headers(professor),
    )
    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Workshop criado com sucesso!"
    workshop = body["workshop"]
    assert workshop["name"] == "Robótica"
    assert workshop["status"] == "ativo"
    assert workshop["dataFinalizacao"] is None
    assert workshop["professorId"] == professor.id
    assert workshop["professor"]["name"] == "Maria Prof"
    assert workshop["students"] == []


def test_create_workshop_forbidden_for_students(client, student):
    response = client.post("/workshops", json={"name": "W1"}, headers=auth_headers(student))
    assert response.status_code == 403


def test_admin_assigns_professor(client, admin, professor, create_workshop):
    workshop = create_workshop(admin, professorId=professor.id)
    assert workshop["professorId"] == professor.id


def test_professor_cannot_assign_other_professor(client, make_user, professor):
    other = make_user(ROLE_PROFESSOR, ra="999", curso="ADS")
    response = client.post(
        "/workshops",
        json={"name": "W1", "professorId": other.id},
        headers=auth_headers(professor),
    )
    assert response.status_code == 403


def test_admin_assign_requires_professor(client, admin, student):
    response = client.post(
        "/workshops",
        json={"name": "W1", "professorId": student.id},
        headers=auth_headers(admin),
    )
    assert response.status_code == 400

    response = client.post(
        "/workshops",
        json={"name": "W1", "professorId": 4242},
        headers=auth_headers(admin),
    )
    assert response.status_code == 404


def test_list_and_get_workshops(client, professor, student, create_workshop):
    first = create_workshop(professor, name="W1")
    create_workshop(professor, name="W2")

    listed = client.get("/workshops", headers=auth_headers(student))
    assert listed.status_code == 200
    assert [w["name"] for w in listed.json()] == ["W1", "W2"]

    fetched = client.get(f"/workshops/{first['id']}", headers=auth_headers(student))
    assert fetched.status_code == 200
    assert fetched.json()["name"] == "W1"

    missing = client.get("/workshops/999", headers=auth_headers(student))
    assert missing.status_code == 404
    assert missing.json()["message"] == "Workshop não encontrado"


def test_workshops_require_token(client):
    assert client.get("/workshops").status_code == 403


def test_add_student_twice(client, professor, student, create_workshop, enroll):
    workshop = create_workshop(professor)

    first = enroll(professor, workshop["id"], student.id)
    assert first.status_code == 200
    assert first.json()["message"] == "Aluno adicionado ao workshop com sucesso."

    second = enroll(professor, workshop["id"], student.id)
    assert second.status_code == 400
    assert second.json()["message"] == "Estudante já vinculado ao workshop"

    roster = client.get(f"/workshops/{workshop['id']}", headers=auth_headers(professor)).json()["students"]
    assert [s["id"] for s in roster] == [student.id]


def test_add_student_accepts_selected_student_id(client, professor, student, create_workshop):
    workshop = create_workshop(professor)
    response = client.post(
        "/workshops/students",
        json={"workshopId": workshop["id"], "selectedStudentId": student.id},
        headers=auth_headers(professor),
    )
    assert response.status_code == 200


def test_add_student_errors(client, professor, student, create_workshop, enroll):
    workshop = create_workshop(professor)

    assert enroll(professor, 999, student.id).status_code == 404

    missing = enroll(professor, workshop["id"], 999)
    assert missing.status_code == 404
    assert missing.json()["message"] == "Estudante não encontrado"

    assert enroll(professor, workshop["id"], professor.id).status_code == 400
    assert enroll(student, workshop["id"], student.id).status_code == 403


def test_remove_student(client, professor, student, create_workshop, enroll):
    workshop = create_workshop(professor)
    enroll(professor, workshop["id"], student.id)

    body = {"workshopId": workshop["id"], "studentId": student.id}
    response = client.request("DELETE", "/workshops/students", json=body, headers=auth_headers(professor))
    assert response.status_code == 200
    assert response.json()["message"] == "Estudante removido do workshop com sucesso."

    again = client.request("DELETE", "/workshops/students", json=body, headers=auth_headers(professor))
    assert again.status_code == 404


def test_remove_student_forbidden_for_students(client, professor, student, create_workshop, enroll):
    workshop = create_workshop(professor)
    enroll(professor, workshop["id"], student.id)

    response = client.request(
        "DELETE",
        "/workshops/students",
        json={"workshopId": workshop["id"], "studentId": student.id},
        headers=auth_headers(student),
    )
    assert response.status_code == 403
