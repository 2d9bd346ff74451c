# Copyright 2025 Ivo Mateev
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Command-line interface for cvconvert.

Subcommands:
  ingest     extract a PDF or image CV and store it
  show       print a stored CV and its structured records
  list       list stored CVs, newest first
  delete     delete a stored CV
  generate   render a DOCX document from a stored CV, form data or template data
  templates  list available DOCX templates
"""

from __future__ import annotations

import argparse
import json
import mimetypes
import traceback
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import AppConfig, load_config
from .cv_service import CVService
from .document_service import DocumentService, GeneratedDocument
from .errors import CVConvertError
from .extractors import get_extractor
from .logging_utils import LOG, VERBOSITY_NORMAL, VERBOSITY_QUIET, setup_logging
from .renderers import get_renderer
from .storage import CVRepository, CVRow, create_engine_for, init_db, make_session_factory

DEFAULT_OWNER = "local"


@dataclass
class Services:
    cvs: CVService
    documents: DocumentService


def build_services(config: AppConfig) -> Services:
    """Wire storage, extractor and renderer from configuration."""
    engine = create_engine_for(config.database_url)
    init_db(engine)
    repository = CVRepository(make_session_factory(engine))

    extractor = get_extractor(config.extractor, model=config.openai_model)
    if extractor is None:
        raise ValueError(f"Unknown extractor: {config.extractor}")
    renderer = get_renderer(config.renderer, strict=config.strict_templates)
    if renderer is None:
        raise ValueError(f"Unknown renderer: {config.renderer}")

    return Services(
        cvs=CVService(repository, extractor, config),
        documents=DocumentService(repository, renderer, config),
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cvconvert",
        description="Extract CVs into structured records and generate DOCX documents from them.",
        epilog="""
Examples:
  Ingest a PDF CV:
    cvconvert ingest resume.pdf --title "Jane Doe"

  Generate a document from a stored CV:
    cvconvert generate --cv-id <id> --template cv-template.docx --target out/

  Generate a document from edited form data:
    cvconvert generate --form form.json --template cv-template.docx --target out/
""",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--database-url", help="SQLAlchemy database URL (overrides CVCONVERT_DATABASE_URL).")
    parser.add_argument("--templates-dir", help="Directory holding DOCX templates (overrides CVCONVERT_TEMPLATES_DIR).")
    parser.add_argument("--owner", default=DEFAULT_OWNER, help="Owner id the CVs belong to.")
    parser.add_argument("--debug", action="store_true", help="Verbose logs + stack traces on failure.")
    parser.add_argument("--verbose", "-v", action="store_true", help="Show informational log messages.")
    parser.add_argument("--log-file", help="Optional path to a log file.")

    sub = parser.add_subparsers(dest="command", required=True)

    ingest = sub.add_parser("ingest", help="Extract a CV file and store it.")
    ingest.add_argument("file", type=Path, help="PDF or image file.")
    ingest.add_argument("--title", help="CV title (default: file name without extension).")
    ingest.add_argument("--mime-type", help="MIME type (default: guessed from the file name).")

    show = sub.add_parser("show", help="Print a stored CV as JSON.")
    show.add_argument("cv_id")

    sub.add_parser("list", help="List stored CVs, newest first.")

    delete = sub.add_parser("delete", help="Delete a stored CV.")
    delete.add_argument("cv_id")

    generate = sub.add_parser("generate", help="Render a DOCX document.")
    source = generate.add_mutually_exclusive_group(required=True)
    source.add_argument("--cv-id", help="Stored CV to render.")
    source.add_argument("--form", type=Path, help="JSON file with form data.")
    source.add_argument("--data", type=Path, help="JSON file with ready-made template data.")
    generate.add_argument("--template", required=True, help="Template file name inside the templates directory.")
    generate.add_argument("--from-records", action="store_true",
                          help="With --cv-id: render from the structured records instead of the raw extraction.")
    generate.add_argument("--output-name", help="Output file name (default: CV_<title>_<timestamp>.docx).")
    generate.add_argument("--target", type=Path, default=Path("."), help="Output directory.")

    sub.add_parser("templates", help="List available templates.")
    return parser


def _resolve_config(args: argparse.Namespace) -> AppConfig:
    config = load_config()
    overrides: Dict[str, Any] = {}
    if args.database_url:
        overrides["database_url"] = args.database_url
    if args.templates_dir:
        overrides["templates_dir"] = Path(args.templates_dir)
    if args.debug:
        overrides["debug"] = True
    if args.log_file:
        overrides["log_file"] = args.log_file
    return replace(config, **overrides)


def _cv_summary(cv: CVRow) -> Dict[str, Any]:
    return {
        "id": cv.id,
        "title": cv.title,
        "file_name": cv.file_name,
        "status": cv.status.value,
        "schema_type": cv.schema_type,
        "confidence": cv.confidence,
        "created_at": cv.created_at.isoformat() if cv.created_at else None,
    }


def _cv_detail(cv: CVRow) -> Dict[str, Any]:
    def columns(row: Any, *exclude: str) -> Dict[str, Any]:
        return {
            c.name: getattr(row, c.name)
            for c in row.__table__.columns
            if c.name not in ("id", "cv_id") + exclude
        }

    detail = _cv_summary(cv)
    detail.update({
        "processing_notes": cv.processing_notes,
        "personal_info": columns(cv.personal_info) if cv.personal_info else None,
        "profile": columns(cv.profile) if cv.profile else None,
        "experiences": [columns(r) for r in cv.experiences],
        "educations": [columns(r) for r in cv.educations],
        "skills": [columns(r) for r in cv.skills],
        "languages": [columns(r) for r in cv.languages],
    })
    return detail


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False), flush=True)


def _read_json(path: Path) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a JSON object")
    return data


def _write_document(doc: GeneratedDocument, target: Path) -> Path:
    target.mkdir(parents=True, exist_ok=True)
    out = target / doc.filename
    out.write_bytes(doc.content)
    return out


def _execute(args: argparse.Namespace, services: Services) -> int:
    owner = args.owner

    if args.command == "ingest":
        mime_type = args.mime_type or mimetypes.guess_type(args.file.name)[0] or ""
        result = services.cvs.upload_and_process_cv(
            args.file.read_bytes(),
            file_name=args.file.name,
            mime_type=mime_type,
            title=args.title or args.file.stem,
            owner_id=owner,
        )
        _print_json(_cv_summary(result.cv))
        return 0

    if args.command == "show":
        _print_json(_cv_detail(services.cvs.find_cv_by_id(args.cv_id, owner)))
        return 0

    if args.command == "list":
        _print_json([_cv_summary(cv) for cv in services.cvs.find_all_user_cvs(owner)])
        return 0

    if args.command == "delete":
        services.cvs.delete_cv_by_id(args.cv_id, owner)
        print(f"CV {args.cv_id} deleted", flush=True)
        return 0

    if args.command == "templates":
        for name in services.documents.list_templates():
            print(name, flush=True)
        return 0

    # generate
    documents = services.documents
    if args.cv_id and args.from_records:
        doc = documents.generate_from_records(args.cv_id, owner, args.template, args.output_name)
    elif args.cv_id:
        doc = documents.generate_from_cv(args.cv_id, owner, args.template, args.output_name)
    elif args.form:
        doc = documents.generate_from_form(args.template, _read_json(args.form), args.output_name)
    else:
        doc = documents.generate_custom(args.template, _read_json(args.data), args.output_name)
    print(str(_write_document(doc, args.target)), flush=True)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    CLI entry point.

    Returns 0 on success, 1 on any failure (the message is logged).
    """
    args = _build_parser().parse_args(argv)
    config = _resolve_config(args)

    if config.log_file:
        Path(config.log_file).expanduser().resolve().parent.mkdir(parents=True, exist_ok=True)
    setup_logging(
        config.debug,
        log_file=config.log_file,
        verbosity=VERBOSITY_NORMAL if args.verbose else VERBOSITY_QUIET,
    )

    try:
        return _execute(args, build_services(config))
    except CVConvertError as e:
        LOG.error(str(e))
        return 1
    except Exception as e:
        LOG.error(str(e))
        if config.debug:
            LOG.error(traceback.format_exc())
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
