"""
Report files: Excel and PDF listings, and the printable application form.

Listings go through pandas; Excel is written with XlsxWriter and PDF is
rendered from the DataFrame's HTML by xhtml2pdf. Files land in
``EXPORT_FOLDER`` and are served back under ``/exports/<file_name>``.
"""

import logging
import os
import time
import uuid
from io import BytesIO

import pandas as pd
from docx import Document as DocxDocument
from docx.enum.text import WD_ALIGN_PARAGRAPH
from flask import current_app
from xhtml2pdf import pisa

from exceptions import ExportFailed, ValidationFailed
from schemas import ApplicationFilters, PopulationFilters
from services import applications as application_service
from services import population as population_service

logger = logging.getLogger(__name__)

FORMATS = {"excel": "xlsx", "pdf": "pdf"}

STATUS_LABELS = {
    "DRAFT": "Draft",
    "SUBMITTED": "Diajukan",
    "PROCESSING": "Diproses",
    "APPROVED": "Disetujui",
    "REJECTED": "Ditolak",
}

PDF_TEMPLATE = """
<html>
<head>
<meta charset="utf-8">
<style>
  body {{ font-family: Helvetica; font-size: 9pt; }}
  h1 {{ font-size: 14pt; }}
  table {{ border-collapse: collapse; width: 100%; }}
  th {{ background-color: #CCE5FF; font-weight: bold; }}
  th, td {{ border: 1px solid #333333; padding: 3px; }}
</style>
</head>
<body>
<h1>{title}</h1>
<p>Dicetak: {printed_at} &middot; Jumlah data: {total}</p>
{table}
</body>
</html>
"""


def _fmt_date(value, pattern="%d/%m/%Y"):
    return value.strftime(pattern) if value else ""


#-------------------------------------------------------
# Data laporan
def applications_frame(filters=None):
    rows = application_service.filtered(filters or ApplicationFilters()).all()
    return pd.DataFrame([{
        "No. Permohonan": a.application_number,
        "Jenis": a.application_type,
        "Status": STATUS_LABELS.get(a.status, a.status),
        "Pemohon": a.applicant.username if a.applicant else "",
        "NIK": a.population.nik if a.population else "",
        "Nama Penduduk": a.population.nama_lengkap if a.population else "",
        "Catatan": a.notes or "",
        "Tanggal Dibuat": _fmt_date(a.created_at),
        "Tanggal Diproses": _fmt_date(a.processed_at),
    } for a in rows], columns=[
        "No. Permohonan", "Jenis", "Status", "Pemohon", "NIK", "Nama Penduduk",
        "Catatan", "Tanggal Dibuat", "Tanggal Diproses",
    ])


def population_frame(filters=None):
    rows = population_service.filtered(filters or PopulationFilters()).all()
    return pd.DataFrame([{
        "NIK": p.nik,
        "Nama Lengkap": p.nama_lengkap,
        "Tempat Lahir": p.tempat_lahir,
        "Tanggal Lahir": _fmt_date(p.tanggal_lahir),
        "Jenis Kelamin": p.jenis_kelamin,
        "Alamat": f"{p.alamat} RT {p.rt}/RW {p.rw}",
        "Kelurahan": p.kelurahan,
        "Kecamatan": p.kecamatan,
        "Kabupaten": p.kabupaten,
        "Provinsi": p.provinsi,
    } for p in rows], columns=[
        "NIK", "Nama Lengkap", "Tempat Lahir", "Tanggal Lahir", "Jenis Kelamin",
        "Alamat", "Kelurahan", "Kecamatan", "Kabupaten", "Provinsi",
    ])


#-------------------------------------------------------
# Penulis file
def write_excel(df, path, sheet_name):
    with pd.ExcelWriter(path, engine="xlsxwriter") as writer:
        df.to_excel(writer, index=False, sheet_name=sheet_name)

        workbook = writer.book
        worksheet = writer.sheets[sheet_name]
        header_format = workbook.add_format({"bold": True, "bg_color": "#CCE5FF", "border": 1})
        for col_num, value in enumerate(df.columns.values):
            worksheet.write(0, col_num, value, header_format)
            worksheet.set_column(col_num, col_num, max(12, len(str(value)) + 2))


def write_pdf(df, path, title):
    html = PDF_TEMPLATE.format(
        title=title,
        printed_at=time.strftime("%d/%m/%Y %H:%M"),
        total=len(df),
        table=df.to_html(index=False, border=0),
    )
    try:
        with open(path, "wb") as fh:
            status = pisa.CreatePDF(html, dest=fh, encoding="utf-8")
    except Exception as e:
        # file setengah jadi tidak boleh tertinggal di folder ekspor
        if os.path.exists(path):
            os.remove(path)
        raise ExportFailed(f"PDF rendering failed for {os.path.basename(path)}") from e
    if status.err:
        os.remove(path)
        raise ExportFailed(f"PDF rendering failed for {os.path.basename(path)}")


def _export(kind, fmt, df, title):
    if fmt not in FORMATS:
        raise ValidationFailed(f"Unsupported report format: {fmt}")

    folder = current_app.config["EXPORT_FOLDER"]
    os.makedirs(folder, exist_ok=True)
    file_name = f"{kind}_report_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}.{FORMATS[fmt]}"
    path = os.path.join(folder, file_name)

    if fmt == "excel":
        write_excel(df, path, title[:31])
    else:
        write_pdf(df, path, title)

    logger.info("Exported %s report %s (%s rows)", kind, file_name, len(df))
    return {"file_path": f"/exports/{file_name}", "file_name": file_name}


def export_applications(fmt, filters=None):
    return _export("applications", fmt, applications_frame(filters), "Laporan Permohonan")


def export_population(fmt, filters=None):
    return _export("population", fmt, population_frame(filters), "Laporan Penduduk")


#-------------------------------------------------------
# Formulir permohonan (docx)
def application_form_docx(application):
    doc = DocxDocument()
    doc.add_heading("DINAS KEPENDUDUKAN DAN PENCATATAN SIPIL", 0)
    doc.add_paragraph("Formulir Permohonan Layanan Administrasi Kependudukan", style="Intense Quote")
    doc.add_heading(f"PERMOHONAN {application.application_type.replace('_', ' ')}", level=1)

    doc.add_heading("1. Data permohonan", level=2)
    info = [
        ("Nomor permohonan", application.application_number),
        ("Status", STATUS_LABELS.get(application.status, application.status)),
        ("Tanggal dibuat", _fmt_date(application.created_at, "%d/%m/%Y %H:%M")),
        ("Pemohon", application.applicant.username if application.applicant else ""),
    ]
    for label, value in info:
        doc.add_paragraph(f"{label}: {value or ''}")

    doc.add_heading("2. Data penduduk", level=2)
    population = application.population
    if population:
        doc.add_paragraph(f"NIK: {population.nik}")
        doc.add_paragraph(f"Nama lengkap: {population.nama_lengkap}")
        doc.add_paragraph(f"Tempat/tgl lahir: {population.tempat_lahir}, {_fmt_date(population.tanggal_lahir)}")
        doc.add_paragraph(
            f"Alamat: {population.alamat} RT {population.rt}/RW {population.rw}, "
            f"{population.kelurahan}, {population.kecamatan}, {population.kabupaten}"
        )
    else:
        doc.add_paragraph("Tidak ada")

    doc.add_heading("3. Isian permohonan", level=2)
    for key, value in (application.application_data or {}).items():
        doc.add_paragraph(f"{key.replace('_', ' ').capitalize()}: {value}")

    if application.notes:
        doc.add_heading("4. Catatan", level=2)
        doc.add_paragraph(application.notes)

    # Tanda tangan
    doc.add_paragraph("\n\n")
    doc.add_paragraph("Pemohon", style="Normal").alignment = WD_ALIGN_PARAGRAPH.RIGHT
    doc.add_paragraph(application.applicant.username if application.applicant else "",
                      style="Normal").alignment = WD_ALIGN_PARAGRAPH.RIGHT

    buffer = BytesIO()
    doc.save(buffer)
    buffer.seek(0)
    return buffer
