import pytest
from sqlalchemy import update

from conftest import auth_headers
from app.db.session import SessionLocal
from app.models.user import ROLE_STUDENT
from app.models.workshop import STATUS_FINALIZADO, Workshop
from app.services import finalization
from app.services.certificates import CertificateRenderError, certificates_root, workshop_dir


@pytest.fixture()
def workshop(professor, student, create_workshop, enroll):
    created = create_workshop(professor, name="W1")
    assert enroll(professor, created["id"], student.id).status_code == 200
    return created


def _finalize(client, user, workshop_id):
    return client.post(f"/workshops/{workshop_id}/finalize", headers=auth_headers(user))


def test_finalize_twice(client, professor, workshop):
    first = _finalize(client, professor, workshop["id"])
    assert first.status_code == 200
    assert first.json() == {
        "message": "Workshop finalizado com sucesso! Certificados gerados.",
        "certificates": 1,
    }

    second = _finalize(client, professor, workshop["id"])
    assert second.status_code == 400
    assert second.json()["message"] == "O workshop já está finalizado."

    fetched = client.get(f"/workshops/{workshop['id']}", headers=auth_headers(professor)).json()
    assert fetched["status"] == "finalizado"
    assert fetched["dataFinalizacao"] is not None


def test_finalize_writes_one_pdf_per_student(client, professor, make_user, workshop, enroll):
    for name in ("Bruno Lima", "Carla Dias"):
        other = make_user(ROLE_STUDENT, name=name)
        enroll(professor, workshop["id"], other.id)

    response = _finalize(client, professor, workshop["id"])
    assert response.json()["certificates"] == 3

    files = sorted(p.name for p in workshop_dir(workshop["id"]).iterdir())
    assert files == [
        "Ana Souza_certificate.pdf",
        "Bruno Lima_certificate.pdf",
        "Carla Dias_certificate.pdf",
    ]
    # nenhum diretório de staging sobra
    assert [p.name for p in certificates_root().iterdir()] == [f"workshop_{workshop['id']}"]


def test_finalize_without_students(client, professor, create_workshop):
    empty = create_workshop(professor, name="Vazio")
    response = _finalize(client, professor, empty["id"])
    assert response.status_code == 200
    assert response.json()["certificates"] == 0


def test_finalize_requires_staff(client, student, workshop):
    assert _finalize(client, student, workshop["id"]).status_code == 403
    assert client.post(f"/workshops/{workshop['id']}/finalize").status_code == 403


def test_finalize_unknown_workshop(client, professor):
    assert _finalize(client, professor, 999).status_code == 404


def test_render_failure_leaves_workshop_active(client, professor, workshop, monkeypatch):
    def failing_render(jobs, output_dir, executor=None):
        raise CertificateRenderError({"Ana Souza_certificate.pdf": RuntimeError("boom")})

    monkeypatch.setattr(finalization, "render_batch", failing_render)

    response = _finalize(client, professor, workshop["id"])
    assert response.status_code == 500
    assert response.json()["message"] == "Erro ao finalizar workshop"

    fetched = client.get(f"/workshops/{workshop['id']}", headers=auth_headers(professor)).json()
    assert fetched["status"] == "ativo"
    assert fetched["dataFinalizacao"] is None
    assert not workshop_dir(workshop["id"]).exists()
    assert list(certificates_root().iterdir()) == []


def test_concurrent_finalize_loses_race(client, professor, workshop, monkeypatch):
    real_render = finalization.render_batch

    def render_then_finalize_elsewhere(jobs, output_dir, executor=None):
        paths = real_render(jobs, output_dir, executor)
        db = SessionLocal()
        try:
            db.execute(
                update(Workshop)
                .where(Workshop.id == workshop["id"])
                .values(status=STATUS_FINALIZADO)
            )
            db.commit()
        finally:
            db.close()
        return paths

    monkeypatch.setattr(finalization, "render_batch", render_then_finalize_elsewhere)

    response = _finalize(client, professor, workshop["id"])
    assert response.status_code == 400
    assert response.json()["message"] == "O workshop já está finalizado."
    assert not workshop_dir(workshop["id"]).exists()


def test_roster_frozen_after_finalize(client, professor, make_user, student, workshop, enroll):
    _finalize(client, professor, workshop["id"])

    late = make_user(ROLE_STUDENT, name="Atrasado")
    assert enroll(professor, workshop["id"], late.id).status_code == 400

    response = client.request(
        "DELETE",
        "/workshops/students",
        json={"workshopId": workshop["id"], "studentId": student.id},
        headers=auth_headers(professor),
    )
    assert response.status_code == 400
