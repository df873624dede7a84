#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
sync_certificates_to_r2.py

Envia os certificados gerados (CERTIFICATES_DIR/workshop_<id>/*.pdf) para um
bucket do Cloudflare R2 (S3), pulando os que já estão lá com o mesmo tamanho.

Requisitos (no .venv):
  pip install boto3 python-dotenv

ENV obrigatórias (R2):
  R2_ENDPOINT=https://<accountid>.r2.cloudflarestorage.com
  R2_BUCKET=...
  R2_ACCESS_KEY_ID=...
  R2_SECRET_ACCESS_KEY=...

ENV opcionais:
  CERTIFICATES_DIR=certificates
  R2_PREFIX=certificados/
  WORKSHOP_ID=3                  (envia só essa oficina)
  DRY_RUN=1                      (só lista o que seria enviado)
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List

import boto3
from botocore.exceptions import ClientError
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


def r2_client() -> Any:
    return boto3.client(
        "s3",
        endpoint_url=env_required("R2_ENDPOINT"),
        aws_access_key_id=env_required("R2_ACCESS_KEY_ID"),
        aws_secret_access_key=env_required("R2_SECRET_ACCESS_KEY"),
        region_name="auto",
    )


def workshop_dirs(root: Path, only_id: str | None) -> List[Path]:
    if not root.is_dir():
        die(f"Diretório de certificados não encontrado: {root}")
    if only_id:
        d = root / f"workshop_{int(only_id)}"
        if not d.is_dir():
            die(f"Oficina sem certificados: {d}")
        return [d]
    return sorted(d for d in root.iterdir() if d.is_dir() and d.name.startswith("workshop_"))


def remote_sizes(s3: Any, bucket: str, prefix: str) -> Dict[str, int]:
    sizes: Dict[str, int] = {}
    paginator = s3.get_paginator("list_objects_v2")
    for page in paginator.paginate(Bucket=bucket, Prefix=prefix):
        for obj in page.get("Contents", []):
            sizes[obj["Key"]] = obj["Size"]
    return sizes


# ----------------------------
# Main
# ----------------------------

def main() -> None:
    load_dotenv()

    bucket = env_required("R2_BUCKET")
    root = Path(os.getenv("CERTIFICATES_DIR") or "certificates")
    prefix = os.getenv("R2_PREFIX") or "certificados/"
    if prefix and not prefix.endswith("/"):
        prefix += "/"
    dry_run = (os.getenv("DRY_RUN") or "").strip().lower() in {"1", "true", "sim", "yes"}

    s3 = r2_client()
    existing = remote_sizes(s3, bucket, prefix)
    print(f"Objetos já no bucket ({prefix}): {len(existing)}")

    sent, skipped = 0, 0
    for directory in workshop_dirs(root, os.getenv("WORKSHOP_ID")):
        for pdf in sorted(directory.glob("*.pdf")):
            key = f"{prefix}{directory.name}/{pdf.name}"
            if existing.get(key) == pdf.stat().st_size:
                skipped += 1
                continue

            if dry_run:
                print(f"[dry-run] {pdf} -> {key}")
                sent += 1
                continue

            try:
                s3.upload_file(str(pdf), bucket, key, ExtraArgs={"ContentType": "application/pdf"})
            except ClientError as e:
                die(f"Falha ao enviar {pdf}: {e}", 2)
            print(f"OK upload: {pdf} -> {key}")
            sent += 1

    print(f"✅ Enviados: {sent}. Já sincronizados: {skipped}.")


if __name__ == "__main__":
    main()
