"""Helper functions for CLI commands."""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

import click

from docsgpt.client.backend import BackendClient
from docsgpt.client.config import ClientConfig, get_state_backend, get_state_dir
from docsgpt.constants import (
    MAX_UPLOAD_SIZE_BYTES,
    SUPPORTED_EXTENSIONS,
    SUPPORTED_MIME_TYPES,
)
from docsgpt.state import (
    ChatMessage,
    Document,
    DocumentState,
    FileSubstrate,
    KeyValueSubstrate,
    PersistenceCodec,
    Session,
    StateLayer,
    UploadedFile,
)

STATE_LABELS = {
    DocumentState.UPLOADED: "uploaded, not parsed",
    DocumentState.PARSING: "parsing…",
    DocumentState.PARSE_FAILED: "parse failed",
    DocumentState.PARSED: "parsed",
    DocumentState.REQUIRES_REUPLOAD: "re-upload required",
}


@dataclass
class AppContext:
    """Everything a command needs: restored stores, backend client and settings."""

    layer: StateLayer
    backend: BackendClient
    config: ClientConfig


def ensure_database_exists(create_if_missing: bool = False) -> bool:
    """Check that the RavenDB state database exists, optionally creating it.

    Raises:
        click.Abort: If database doesn't exist and can't be created
    """
    from docsgpt.service.database import create_database, database_exists

    if database_exists():
        return True

    if create_if_missing:
        click.echo("Database does not exist. Creating database...")
        try:
            create_database()
            click.echo("✓ Database created successfully!")
            return True
        except Exception as e:
            click.echo(f"✗ Failed to create database: {e}", err=True)
            click.echo("\nPlease ensure RavenDB is running and accessible.", err=True)
            raise click.Abort()

    click.echo("✗ Error: State database does not exist!", err=True)
    click.echo("\nRun again with --create-database to create it.", err=True)
    raise click.Abort()


def create_substrate(create_database: bool = False) -> KeyValueSubstrate:
    """Build the substrate selected by DOCSGPT_STATE_BACKEND."""
    backend = get_state_backend()
    if backend == "file":
        return FileSubstrate(get_state_dir())
    if backend == "ravendb":
        from docsgpt.service.database import RavenDBSubstrate

        ensure_database_exists(create_if_missing=create_database)
        return RavenDBSubstrate()
    click.echo(f"✗ Unknown state backend: {backend}", err=True)
    raise click.Abort()


def open_app(create_database: bool = False) -> AppContext:
    """Restore the state layer and load client settings for one command."""
    substrate = create_substrate(create_database)
    config = ClientConfig.load(PersistenceCodec(substrate))
    backend = BackendClient(config.backend_url)
    layer = StateLayer.create(substrate, backend).restore()
    return AppContext(layer=layer, backend=backend, config=config)


def read_upload(path: Path) -> UploadedFile:
    """Read and validate a file for upload.

    Raises:
        click.BadParameter: If the file type, size or content is not acceptable
    """
    file = UploadedFile.from_path(path)
    error = check_upload(file)
    if error:
        raise click.BadParameter(error, param_hint="FILE")
    return file


def check_upload(file: UploadedFile) -> str | None:
    """Return a user-facing reason the file cannot be uploaded, or None."""
    extension = Path(file.name).suffix.lower().lstrip(".")
    if file.content_type not in SUPPORTED_MIME_TYPES and extension not in SUPPORTED_EXTENSIONS:
        return "Upload a PDF, DOCX, or TXT"
    if file.size > MAX_UPLOAD_SIZE_BYTES:
        return "File too large. Use files under 10MB"
    if file.size == 0:
        return "File is empty. Choose another file"
    return None


def format_timestamp(ms: int) -> str:
    return datetime.fromtimestamp(ms / 1000).strftime("%Y-%m-%d %H:%M")


def format_document(document: Document, queryable: bool, active: bool = False) -> str:
    """Format one document line for display."""
    marker = "*" if active else " "
    label = STATE_LABELS[document.state]
    if queryable:
        label += ", ready for questions"
    line = f"{marker} {document.id}  {document.metadata.name}  [{label}]"
    if document.parse_error:
        line += f"\n    error: {document.parse_error}"
    return line


def format_session(session: Session, active: bool = False) -> str:
    marker = "*" if active else " "
    count = len(session.document_ids)
    return (
        f"{marker} {session.id}  {session.name}  "
        f"({count} document(s), created {format_timestamp(session.created_at)})"
    )


def format_message(message: ChatMessage, max_length: int | None = None) -> str:
    """Format a chat message, optionally truncating its content."""
    content = message.content
    if max_length is not None and len(content) > max_length:
        content = content[:max_length] + "..."
    return f"[{format_timestamp(message.created_at)}] {message.role.value}:\n{content}\n"

