#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
import_students_csv.py

Cadastra alunos a partir de um CSV (colunas: nome,email,senha) via API e,
opcionalmente, matricula todos eles numa oficina.

Requisitos (no .venv):
  pip install requests python-dotenv

ENV obrigatórias:
  API_BASE_URL=http://127.0.0.1:8000

ENV opcionais:
  CSV_PATH=alunos.csv
  WORKSHOP_ID=3                  (matricula os alunos nessa oficina)
  LOGIN_EMAIL=admin@example.com  (professor/admin, necessário com WORKSHOP_ID)
  LOGIN_PASSWORD=...
  ACCESS_TOKEN=...               (se definido, evita login automático)
  REQUEST_TIMEOUT=30             (segundos)
"""

from __future__ import annotations

import csv
import os
from typing import Any, Dict, List, Optional

import requests
from dotenv import load_dotenv


# ----------------------------
# Helpers
# ----------------------------

def die(msg: str, code: int = 1) -> None:
    print(f"[ERRO] {msg}")
    raise SystemExit(code)


def env_required(name: str) -> str:
    v = os.getenv(name)
    if not v:
        die(f"Variável de ambiente obrigatória não definida: {name}")
    return v


def read_students(csv_path: str) -> List[Dict[str, str]]:
    if not os.path.exists(csv_path):
        die(f"CSV não encontrado: {csv_path}")

    with open(csv_path, newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        headers = [h.strip().lower() for h in (reader.fieldnames or [])]
        missing = [h for h in ("nome", "email", "senha") if h not in headers]
        if missing:
            die(f"Cabeçalho inválido. Faltando: {missing}. Encontrado: {headers}")

        rows = []
        for row in reader:
            row = {(k or "").strip().lower(): (v or "").strip() for k, v in row.items()}
            if not row["nome"] or not row["email"] or not row["senha"]:
                print(f"Linha ignorada (campos vazios): {row.get('email') or row.get('nome')}")
                continue
            rows.append({"name": row["nome"], "email": row["email"].lower(), "password": row["senha"]})

    print(f"Alunos lidos: {len(rows)}")
    return rows


def message_of(resp: requests.Response) -> str:
    try:
        return resp.json().get("message") or resp.text
    except ValueError:
        return resp.text


def api_login_and_get_token(api_base_url: str, email: str, password: str, timeout: int) -> str:
    url = api_base_url.rstrip("/") + "/login"
    resp = requests.post(url, json={"email": email, "password": password}, timeout=timeout)

    if resp.status_code != 200:
        die(f"Falha no login em {url}. Status {resp.status_code}. {message_of(resp)}")

    token = resp.json().get("token")
    if not token:
        die(f"Login retornou sucesso mas sem token. Body: {resp.text}")
    return token


def register_student(api_base_url: str, student: Dict[str, str], timeout: int) -> Optional[int]:
    """Return the new user id, or None when the API refused it."""
    url = api_base_url.rstrip("/") + "/register"
    resp = requests.post(url, json={**student, "role": "user"}, timeout=timeout)
    if resp.status_code != 201:
        print(f"  ! {student['email']}: {resp.status_code} {message_of(resp)}")
        return None
    return resp.json()["user"]["id"]


def find_student_ids(api_base_url: str, token: str, emails: List[str], timeout: int) -> Dict[str, int]:
    url = api_base_url.rstrip("/") + "/students"
    resp = requests.get(url, headers={"Authorization": f"Bearer {token}"}, timeout=timeout)
    if resp.status_code != 200:
        die(f"Falha ao listar alunos. Status {resp.status_code}. {message_of(resp)}")
    wanted = set(emails)
    return {u["email"]: u["id"] for u in resp.json() if u["email"] in wanted}


def enroll(api_base_url: str, token: str, workshop_id: int, student_id: int, timeout: int) -> Any:
    url = api_base_url.rstrip("/") + "/workshops/students"
    headers = {"Authorization": f"Bearer {token}", "accept": "application/json"}
    resp = requests.post(
        url, json={"workshopId": workshop_id, "studentId": student_id}, headers=headers, timeout=timeout
    )
    return resp.status_code, message_of(resp)


# ----------------------------
# Main
# ----------------------------

def main() -> None:
    load_dotenv()

    request_timeout = int(os.getenv("REQUEST_TIMEOUT", "30"))
    api_base_url = env_required("API_BASE_URL")
    csv_path = os.getenv("CSV_PATH") or "alunos.csv"

    students = read_students(csv_path)

    # 1) Cadastro
    created = 0
    for student in students:
        if register_student(api_base_url, student, timeout=request_timeout) is not None:
            created += 1
            print(f"  + {student['email']}")
    print(f"Cadastrados: {created}/{len(students)}")

    # 2) Matrícula (opcional)
    workshop_id = os.getenv("WORKSHOP_ID")
    if not workshop_id:
        return
    try:
        workshop_id = int(workshop_id)
    except ValueError:
        die("WORKSHOP_ID deve ser um inteiro")

    token = os.getenv("ACCESS_TOKEN")
    if not token:
        token = api_login_and_get_token(
            api_base_url,
            env_required("LOGIN_EMAIL"),
            env_required("LOGIN_PASSWORD"),
            timeout=request_timeout,
        )
        print("OK login automático. Token recebido.")

    # alunos já cadastrados antes também entram na matrícula
    ids = find_student_ids(api_base_url, token, [s["email"] for s in students], timeout=request_timeout)
    failures = 0
    for email, student_id in sorted(ids.items()):
        status_code, msg = enroll(api_base_url, token, workshop_id, student_id, timeout=request_timeout)
        print(f"  {email}: {status_code} {msg}")
        if status_code != 200:
            failures += 1

    if failures:
        die(f"{failures} matrícula(s) falharam. Veja o output acima.", 2)
    print(f"✅ {len(ids)} aluno(s) matriculados na oficina {workshop_id}.")


if __name__ == "__main__":
    main()
