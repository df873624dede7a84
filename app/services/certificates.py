"""Certificate files: naming, rendering and on-disk layout.

Certificates live under ``<CERTIFICATES_DIR>/workshop_<id>/`` and are plain
PDFs; nothing about them is stored in the database.

PyMuPDF documents must not be shared between threads, so batches are rendered
on a process pool (``CERTIFICATE_WORKERS > 0``) or inline.
"""

from __future__ import annotations

import logging
import multiprocessing
import re
import unicodedata
from concurrent.futures import Executor, Future, ProcessPoolExecutor, wait
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterable, Sequence

import pymupdf

from app.core.config import settings

logger = logging.getLogger(__name__)

CERTIFICATE_SUFFIX = ".pdf"
CERTIFICATE_TAG = "_certificate"

# menor corpo aceito ao encolher texto longo
MIN_FONTSIZE = 8

_UNSAFE_CHARS = re.compile(r"[^\w \-]", flags=re.UNICODE)
_SPACES = re.compile(r"\s+")
_VALID_FILENAME = re.compile(r"[\w \-]+\.pdf", flags=re.UNICODE)

_executor: Executor | None = None


@dataclass(frozen=True)
class CertificateData:
    student_name: str
    workshop_name: str
    professor_name: str
    completed_at: datetime


@dataclass(frozen=True)
class RenderJob:
    student_id: int
    filename: str
    data: CertificateData


class CertificateLayoutError(ValueError):
    """Text too long for its box even at MIN_FONTSIZE."""


class CertificateRenderError(Exception):
    def __init__(self, failures: dict[str, BaseException]):
        self.failures = failures
        names = ", ".join(sorted(failures))
        super().__init__(f"Falha ao gerar {len(failures)} certificado(s): {names}")


# ----------------------------
# Paths & names
# ----------------------------
def certificates_root() -> Path:
    return Path(settings.CERTIFICATES_DIR)


def workshop_dir(workshop_id: int) -> Path:
    return certificates_root() / f"workshop_{int(workshop_id)}"


def safe_name(name: str) -> str:
    s = unicodedata.normalize("NFC", name or "")
    s = _UNSAFE_CHARS.sub("", s)
    s = _SPACES.sub(" ", s).strip(" -")
    return s or "aluno"


def certificate_filenames(students: Iterable) -> dict[int, str]:
    """Map student id -> file name, deterministic for a given roster.

    Students whose cleaned names collide get their id appended so no
    certificate overwrites another.
    """
    students = sorted(students, key=lambda s: s.id)
    counts: dict[str, int] = {}
    for s in students:
        key = safe_name(s.name).casefold()
        counts[key] = counts.get(key, 0) + 1

    names: dict[int, str] = {}
    for s in students:
        base = safe_name(s.name)
        if counts[base.casefold()] > 1:
            base = f"{base}_{s.id}"
        names[s.id] = f"{base}{CERTIFICATE_TAG}{CERTIFICATE_SUFFIX}"
    return names


def is_valid_filename(filename: str) -> bool:
    if not filename or filename.startswith((".", "-")) or ".." in filename:
        return False
    if "/" in filename or "\\" in filename or "\x00" in filename:
        return False
    return _VALID_FILENAME.fullmatch(filename) is not None


def resolve_certificate(workshop_id: int, filename: str) -> Path | None:
    """Path of a certificate inside its workshop directory, or None if unsafe."""
    if not is_valid_filename(filename):
        return None
    base = workshop_dir(workshop_id).resolve()
    path = (base / filename).resolve()
    if path.parent != base:
        return None
    return path


def list_certificate_files(workshop_id: int) -> list[str] | None:
    """Names of the PDFs in the workshop directory; None if it does not exist."""
    directory = workshop_dir(workshop_id)
    if not directory.is_dir():
        return None
    return sorted(
        p.name for p in directory.iterdir()
        if p.is_file() and p.suffix.lower() == CERTIFICATE_SUFFIX
    )


# ----------------------------
# Rendering
# ----------------------------
def _fit_textbox(page, rect, text: str, fontsize: float, fontname: str) -> float:
    """Insert centered text into ``rect``, shrinking the font until it fits.

    ``insert_textbox`` writes nothing and returns a negative value when the
    text overflows, so every size is checked before giving up.
    """
    size = fontsize
    while size >= MIN_FONTSIZE:
        rc = page.insert_textbox(
            rect, text, fontsize=size, fontname=fontname, align=pymupdf.TEXT_ALIGN_CENTER,
        )
        if rc >= 0:
            return size
        size -= 2
    raise CertificateLayoutError(f"Texto não cabe no certificado: {text[:40]!r}")


def render_certificate(data: CertificateData, output_path: Path) -> Path:
    """Write a one-page landscape A4 certificate to ``output_path``."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    completed = data.completed_at.strftime("%d/%m/%Y")
    body = (
        f"Certificamos que {data.student_name} participou da oficina "
        f"\"{data.workshop_name}\", ministrada por {data.professor_name}, "
        f"concluída em {completed}."
    )

    with pymupdf.open() as document:
        page = document.new_page(width=842, height=595)
        frame = page.rect + (24, 24, -24, -24)
        page.draw_rect(frame, color=(0.05, 0.2, 0.45), width=3)

        _fit_textbox(page, pymupdf.Rect(60, 70, 782, 150), "CERTIFICADO", 40, "hebo")
        _fit_textbox(page, pymupdf.Rect(60, 165, 782, 265), data.student_name, 26, "hebo")
        _fit_textbox(page, pymupdf.Rect(90, 280, 752, 430), body, 16, "helv")
        page.draw_line(pymupdf.Point(296, 470), pymupdf.Point(546, 470), width=1)
        _fit_textbox(page, pymupdf.Rect(60, 476, 782, 530), data.professor_name, 12, "helv")

        document.set_metadata({
            "title": f"Certificado - {data.workshop_name}",
            "author": data.professor_name,
            "subject": data.student_name,
        })
        document.save(str(output_path))

    return output_path


def render_batch(jobs: Sequence[RenderJob], output_dir: Path, executor: Executor | None = None) -> list[Path]:
    """Render every job into ``output_dir`` and wait for all of them.

    Raises CertificateRenderError listing every file that failed; files that
    did render are left in place for the caller to clean up.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    if executor is None:
        executor = get_executor()

    failures: dict[str, BaseException] = {}
    paths: list[Path] = []

    if executor is None:
        for job in jobs:
            try:
                paths.append(render_certificate(job.data, output_dir / job.filename))
            except Exception as exc:
                failures[job.filename] = exc
    else:
        futures: dict[Future, RenderJob] = {
            executor.submit(render_certificate, job.data, output_dir / job.filename): job
            for job in jobs
        }
        wait(futures)
        for future, job in futures.items():
            exc = future.exception()
            if exc is not None:
                failures[job.filename] = exc
            else:
                paths.append(future.result())

    if failures:
        for filename, exc in failures.items():
            logger.error("Falha ao gerar certificado %s: %s", filename, exc)
        raise CertificateRenderError(failures)

    return sorted(paths)


# ----------------------------
# Pool lifecycle
# ----------------------------
def start_executor(workers: int | None = None) -> Executor | None:
    global _executor
    workers = settings.CERTIFICATE_WORKERS if workers is None else workers
    if workers <= 0:
        return None
    if _executor is None:
        _executor = ProcessPoolExecutor(
            max_workers=workers,
            mp_context=multiprocessing.get_context("spawn"),
        )
        logger.info("Pool de certificados iniciado com %s processo(s)", workers)
    return _executor


def get_executor() -> Executor | None:
    return _executor


def shutdown_executor() -> None:
    global _executor
    if _executor is not None:
        _executor.shutdown(wait=True)
        _executor = None
        logger.info("Pool de certificados encerrado")
