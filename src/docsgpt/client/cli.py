"""Command-line interface for docsgpt using Click.

Each invocation restores the stores from storage, performs one action and
exits, so every command starts from a reload. File contents are never
persisted: a document uploaded by one command has to be parsed in the same
command (--parse) or re-uploaded before a later parse.
"""

import asyncio
import logging
import os
from pathlib import Path

import click
from dotenv import load_dotenv

from docsgpt.client.actions import (
    Intent,
    ask,
    can_ask_questions,
    suggested_questions_for,
)
from docsgpt.client.cli_helpers import (
    AppContext,
    format_document,
    format_message,
    format_session,
    open_app,
    read_upload,
)
from docsgpt.constants import CONTENT_PREVIEW_LENGTH, get_default_model
from docsgpt.llm import SUPPORTED_SERVICES
from docsgpt.state import DocumentState

# Load environment variables
load_dotenv()

logging.basicConfig(
    level=getattr(logging, os.getenv("LOG_LEVEL", "WARNING")),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

FILE_ARGUMENT = click.Path(exists=True, file_okay=True, dir_okay=False, path_type=Path)


def _app(ctx: click.Context) -> AppContext:
    if ctx.obj is None:
        ctx.obj = open_app(create_database=ctx.find_root().params.get("create_database", False))
    return ctx.obj


def _report_parse(app: AppContext, doc_id: str, success: bool) -> None:
    document = app.layer.documents.get_document(doc_id)
    if success:
        click.echo(f"✓ Parsed {document.metadata.name}. Ready for questions.")
        return
    if document.state is DocumentState.REQUIRES_REUPLOAD:
        click.echo(f"✗ The file for {document.metadata.name} is no longer available.", err=True)
        click.echo(f"  Run: docsgpt reupload {doc_id} <file> --parse", err=True)
    elif document.state is DocumentState.PARSE_FAILED:
        click.echo(f"✗ Parsing failed: {document.parse_error}", err=True)
        click.echo(f"  Retry with: docsgpt parse {doc_id}", err=True)
    else:
        click.echo(f"✗ Cannot parse a document that is {document.state.value}", err=True)
    raise click.Abort()


@click.group()
@click.option(
    "--create-database",
    is_flag=True,
    default=False,
    help="Create the RavenDB state database if it doesn't exist (ravendb backend only)",
)
@click.pass_context
def main(ctx: click.Context, create_database: bool) -> None:
    """Upload documents, parse them, and ask questions about them.

    Example:
        docsgpt upload report.pdf --parse
        docsgpt ask "Summarize for executive review"
    """


@main.command()
@click.argument("file", type=FILE_ARGUMENT)
@click.option("--parse/--no-parse", "parse_now", default=True, help="Parse right after upload")
@click.pass_context
def upload(ctx: click.Context, file: Path, parse_now: bool) -> None:
    """Upload FILE into the active session (created if there is none)."""
    uploaded = read_upload(file)
    app = _app(ctx)

    session = app.layer.sessions.get_active_session()
    if session is None:
        app.layer.sessions.create_session()
        session = app.layer.sessions.get_active_session()

    doc_id = app.layer.documents.add_document(uploaded)
    app.layer.sessions.add_document_to_session(session.id, doc_id)
    click.echo(f"📄 Uploaded {uploaded.name} as {doc_id} (session: {session.name})")

    if parse_now:
        success = asyncio.run(app.layer.documents.parse_document(doc_id))
        _report_parse(app, doc_id, success)


@main.command()
@click.argument("doc_id")
@click.argument("file", type=FILE_ARGUMENT)
@click.option("--parse/--no-parse", "parse_now", default=True, help="Parse right after re-upload")
@click.pass_context
def reupload(ctx: click.Context, doc_id: str, file: Path, parse_now: bool) -> None:
    """Attach FILE again to document DOC_ID."""
    uploaded = read_upload(file)
    app = _app(ctx)

    if not app.layer.documents.reupload_document(doc_id, uploaded):
        click.echo(f"✗ Unknown document: {doc_id}", err=True)
        raise click.Abort()

    session = app.layer.sessions.get_active_session()
    if session is not None:
        app.layer.sessions.set_active_document(session.id, doc_id)
    click.echo(f"📄 Re-uploaded {uploaded.name} for {doc_id}")

    if parse_now:
        success = asyncio.run(app.layer.documents.parse_document(doc_id))
        _report_parse(app, doc_id, success)


@main.command()
@click.argument("doc_id")
@click.pass_context
def parse(ctx: click.Context, doc_id: str) -> None:
    """Parse document DOC_ID."""
    app = _app(ctx)
    if app.layer.documents.get_document(doc_id) is None:
        click.echo(f"✗ Unknown document: {doc_id}", err=True)
        raise click.Abort()

    success = asyncio.run(app.layer.documents.parse_document(doc_id))
    _report_parse(app, doc_id, success)


@main.command()
@click.option("--all", "show_all", is_flag=True, default=False, help="List every known document")
@click.pass_context
def docs(ctx: click.Context, show_all: bool) -> None:
    """List the documents of the active session."""
    app = _app(ctx)
    session = app.layer.sessions.get_active_session()

    if show_all:
        documents = app.layer.documents.list_documents()
    elif session is not None:
        documents = [app.layer.documents.get_document(i) for i in session.document_ids]
        documents = [d for d in documents if d is not None]
    else:
        documents = []

    if not documents:
        click.echo("No documents. Upload one with: docsgpt upload <file>")
        return

    active_id = session.active_document_id if session else None
    for document in documents:
        queryable = app.layer.documents.is_queryable(document.id)
        click.echo(format_document(document, queryable, active=document.id == active_id))


@main.command()
@click.argument("doc_id")
@click.pass_context
def select(ctx: click.Context, doc_id: str) -> None:
    """Make DOC_ID the active document of the active session."""
    app = _app(ctx)
    session = app.layer.sessions.get_active_session()
    if session is None or not app.layer.sessions.set_active_document(session.id, doc_id):
        click.echo(f"✗ Document {doc_id} is not part of the active session", err=True)
        raise click.Abort()
    click.echo(f"✓ Active document: {doc_id}")


@main.command()
@click.argument("doc_id", required=False)
@click.pass_context
def metrics(ctx: click.Context, doc_id: str | None) -> None:
    """Show word, character and paragraph counts for a parsed document."""
    app = _app(ctx)
    if doc_id is None:
        document = app.layer.active_document()
        doc_id = document.id if document else None

    if not app.layer.documents.is_queryable(doc_id):
        click.echo("✗ Metrics are only available for parsed documents", err=True)
        raise click.Abort()

    content_metrics = asyncio.run(app.layer.documents.get_content_metrics(doc_id))
    if content_metrics is None:
        click.echo("✗ Could not fetch metrics from the backend", err=True)
        raise click.Abort()

    click.echo(f"📊 Words: {content_metrics.get('wordCount', 0)}")
    click.echo(f"   Characters: {content_metrics.get('characterCount', 0)}")
    click.echo(f"   Paragraphs: {content_metrics.get('paragraphCount', 0)}")


# =============================================================================
# Sessions
# =============================================================================


@main.group()
def session() -> None:
    """Create, list, switch and rename sessions."""


@session.command("new")
@click.argument("name", required=False)
@click.pass_context
def session_new(ctx: click.Context, name: str | None) -> None:
    """Create a session and make it active."""
    app = _app(ctx)
    session_id = app.layer.sessions.create_session(name)
    click.echo(f"✓ Created session {session_id}")


@session.command("list")
@click.pass_context
def session_list(ctx: click.Context) -> None:
    """List sessions; the active one is marked with *."""
    app = _app(ctx)
    sessions = app.layer.sessions.list_sessions()
    if not sessions:
        click.echo("No sessions yet. Create one with: docsgpt session new")
        return
    for s in sessions:
        click.echo(format_session(s, active=s.id == app.layer.sessions.active_session_id))


@session.command("use")
@click.argument("session_id")
@click.pass_context
def session_use(ctx: click.Context, session_id: str) -> None:
    """Switch the active session."""
    app = _app(ctx)
    if not app.layer.sessions.set_active_session(session_id):
        click.echo(f"✗ Unknown session: {session_id}", err=True)
        raise click.Abort()
    click.echo(f"✓ Active session: {session_id}")


@session.command("rename")
@click.argument("session_id")
@click.argument("name")
@click.pass_context
def session_rename(ctx: click.Context, session_id: str, name: str) -> None:
    """Rename a session."""
    app = _app(ctx)
    if not app.layer.sessions.rename_session(session_id, name):
        click.echo(f"✗ Could not rename session {session_id}", err=True)
        raise click.Abort()
    click.echo(f"✓ Renamed session to '{name.strip()}'")


# =============================================================================
# Questions
# =============================================================================


@main.command("ask")
@click.argument("question")
@click.option(
    "--intent",
    type=click.Choice([i.value for i in Intent]),
    default=None,
    help="Answer format (default: from the suggested question, else chat)",
)
@click.pass_context
def ask_command(ctx: click.Context, question: str, intent: str | None) -> None:
    """Ask QUESTION about the active document."""
    app = _app(ctx)
    if not can_ask_questions(app.layer):
        click.echo("✗ The active document is not parsed yet.", err=True)
        click.echo("  Run: docsgpt docs   to see its state", err=True)
        raise click.Abort()

    click.echo("🤖 Thinking...")
    reply = asyncio.run(
        ask(app.layer, app.backend, app.config, question, Intent(intent) if intent else None)
    )
    if reply is None:
        click.echo("✗ Nothing was sent.", err=True)
        raise click.Abort()
    click.echo(reply.content)


@main.command()
@click.pass_context
def suggest(ctx: click.Context) -> None:
    """Show suggested questions for the active document."""
    app = _app(ctx)
    suggestions = suggested_questions_for(app.layer)
    if not suggestions:
        click.echo("No suggestions right now.")
        return
    for suggestion in suggestions:
        click.echo(f'  docsgpt ask "{suggestion.text}"   ({suggestion.intent.value})')


@main.command()
@click.option("--full", is_flag=True, default=False, help="Do not truncate long messages")
@click.pass_context
def history(ctx: click.Context, full: bool) -> None:
    """Show the conversation of the active session."""
    app = _app(ctx)
    session = app.layer.sessions.get_active_session()
    messages = app.layer.chat.get_messages(session.id if session else None)
    if not messages:
        click.echo("No messages yet.")
        return
    for message in messages:
        click.echo(format_message(message, None if full else CONTENT_PREVIEW_LENGTH))


# =============================================================================
# Configuration and storage
# =============================================================================


@main.group()
def config() -> None:
    """Show or change backend and model settings."""


@config.command("show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    app = _app(ctx)
    for key, value in app.config.describe().items():
        click.echo(f"{key}: {value}")


@config.command("set")
@click.option("--backend-url", default=None, help="Backend root URL")
@click.option("--service", type=click.Choice(SUPPORTED_SERVICES), default=None)
@click.option("--model", default=None, help="Model name")
@click.option("--api-key", default=None, help="API key (gemini)")
@click.pass_context
def config_set(
    ctx: click.Context,
    backend_url: str | None,
    service: str | None,
    model: str | None,
    api_key: str | None,
) -> None:
    """Persist backend and model settings."""
    app = _app(ctx)
    if service is not None and model is None and service != app.config.service:
        model = get_default_model(service)
    updates = {"backend_url": backend_url, "service": service, "model": model, "api_key": api_key}
    for key, value in updates.items():
        if value is not None:
            setattr(app.config, key, value)

    if not app.config.save(app.layer.codec):
        click.echo("✗ Failed to save configuration", err=True)
        raise click.Abort()
    click.echo("✓ Configuration saved")


@main.command()
@click.option("--all", "clear_everything", is_flag=True, default=False, help="Also clear settings")
@click.option("--yes", "-y", is_flag=True, default=False, help="Skip confirmation prompt")
@click.pass_context
def clear(ctx: click.Context, clear_everything: bool, yes: bool) -> None:
    """Delete stored sessions, documents and messages.

    Settings are kept unless --all is given.
    """
    app = _app(ctx)
    if not yes:
        what = "all stored data including settings" if clear_everything else "sessions, documents and messages"
        if not click.confirm(f"Delete {what}?", default=False):
            click.echo("Cancelled.")
            return

    codec = app.layer.codec
    if clear_everything:
        codec.clear_all()
    else:
        codec.clear_sessions()
        codec.clear_documents()
        codec.clear_messages()
    click.echo("✓ Storage cleared")


@main.command()
@click.pass_context
def health(ctx: click.Context) -> None:
    """Check that the backend is reachable."""
    app = _app(ctx)
    if app.backend.health():
        click.echo(f"✓ Backend reachable at {app.backend.base_url}")
    else:
        click.echo(f"✗ Backend not reachable at {app.backend.base_url}", err=True)
        raise click.Abort()


if __name__ == "__main__":
    main()
