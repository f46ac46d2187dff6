import json
import logging

from typer import Typer, Option, Argument, Exit, echo
from typing import Annotated
from rich.console import Console
from rich.logging import RichHandler
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from .config import resolve_corpus_path, resolve_embeddings_path
from .corpus import (
    Corpus,
    CorpusNotFoundError,
    EmptyCorpusError,
    FetchError,
    open_corpus,
)
from .embeddings import EmbeddingFailure
from .indexing import SnapshotBuilder
from .service import build_context, default_embedder, to_search_item

app = Typer(help="Hybrid lexical and semantic search over versioned code samples.")

EXIT_FOLDER_MISSING = 2
EXIT_NO_FILES = 3


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[
            RichHandler(
                console=Console(stderr=True), rich_tracebacks=True, show_path=False
            )
        ],
        force=True,
    )


@app.callback()
def main(
    verbose: Annotated[
        bool, Option("--verbose", "-v", help="Enable debug logging.")
    ] = False,
) -> None:
    configure_logging(verbose)


def _open_corpus(folder: str | None, console: Console) -> Corpus:
    """Validate the corpus folder the way the server requires it."""
    try:
        return open_corpus(resolve_corpus_path(folder))
    except CorpusNotFoundError as exc:
        console.print(f"[bold red]Error:[/] {exc}")
        raise Exit(code=EXIT_FOLDER_MISSING)
    except EmptyCorpusError as exc:
        console.print(f"[bold red]Error:[/] {exc}")
        raise Exit(code=EXIT_NO_FILES)


@app.command()
def serve(
    folder: Annotated[
        str | None,
        Option("--folder", "-f", help="Corpus folder with code samples and docs."),
    ] = None,
    embeddings: Annotated[
        str | None,
        Option("--embeddings", "-e", help="Path to the embeddings snapshot (JSON)."),
    ] = None,
    host: Annotated[str, Option("--host", help="Interface to bind.")] = "127.0.0.1",
    port: Annotated[int, Option("--port", help="Port to listen on.")] = 8000,
    probe: Annotated[
        bool,
        Option("--probe/--no-probe", help="Test embedding provider connectivity at startup."),
    ] = True,
) -> None:
    """Serve search and fetch over HTTP."""
    from .server import configure, run_server

    console = Console(stderr=True)
    corpus = _open_corpus(folder, console)
    context = build_context(str(corpus.root), embeddings, probe=probe)
    configure(context)
    run_server(host=host, port=port)


@app.command()
def search(
    query: Annotated[str, Option("--query", "-q", help="Natural-language query.")],
    version: Annotated[
        int | None, Option("--version", help="Version to search; defaults to the newest.")
    ] = None,
    limit: Annotated[
        int | None, Option("--limit", "-n", help="Maximum number of results.")
    ] = None,
    folder: Annotated[
        str | None, Option("--folder", "-f", help="Corpus folder.")
    ] = None,
    embeddings: Annotated[
        str | None, Option("--embeddings", "-e", help="Embeddings snapshot path.")
    ] = None,
    as_json: Annotated[bool, Option("--json", help="Print results as JSON.")] = False,
) -> None:
    """Rank corpus files for a query."""
    console = Console()
    corpus = _open_corpus(folder, Console(stderr=True))
    context = build_context(str(corpus.root), embeddings)
    results = context.engine.search(query, version, limit=limit)
    items = [to_search_item(result) for result in results]

    if as_json:
        echo(json.dumps([item.model_dump(by_alias=True) for item in items], indent=2))
        return

    if not items:
        console.print("[bold yellow]No matching files.[/]")
        return

    table = Table(title=f"Results for: {query}", title_justify="left")
    table.add_column("#", justify="right")
    table.add_column("Path", style="bold")
    table.add_column("Score", justify="right")
    table.add_column("Lexical", justify="right")
    table.add_column("Semantic", justify="right")
    table.add_column("Match")
    for rank, item in enumerate(items, start=1):
        table.add_row(
            str(rank),
            item.path,
            f"{item.combined_score:.3f}",
            "-" if item.lexical_score is None else f"{item.lexical_score:.3f}",
            "-" if item.semantic_score is None else f"{item.semantic_score:.3f}",
            item.match_kind,
        )
    console.print(table)


@app.command()
def fetch(
    file_name: Annotated[str, Argument(help="Path of the file relative to the corpus.")],
    folder: Annotated[
        str | None, Option("--folder", "-f", help="Corpus folder.")
    ] = None,
) -> None:
    """Print one corpus file."""
    corpus = _open_corpus(folder, Console(stderr=True))
    try:
        content = corpus.fetch(file_name)
    except FetchError as exc:
        echo(exc.to_result().model_dump_json(indent=2))
        raise Exit(code=1)
    echo(content)


@app.command()
def index(
    folder: Annotated[str, Argument(help="Corpus folder to embed.")],
    output: Annotated[
        str | None,
        Option("--output", "-o", help="Where to write the embeddings snapshot."),
    ] = None,
) -> None:
    """Generate the embeddings snapshot for a corpus."""
    console = Console()
    corpus = _open_corpus(folder, Console(stderr=True))
    provider = default_embedder()
    if provider is None:
        console.print("[bold red]Error:[/] GOOGLE_API_KEY is required to build embeddings.")
        raise Exit(code=1)

    output_path = resolve_embeddings_path(output)
    try:
        with console.status(status="Generating embeddings..."):
            result = SnapshotBuilder(corpus, provider).build(output_path)
    except EmbeddingFailure as exc:
        console.print(f"[bold red]Embedding failed ({exc.kind.value}):[/] {exc.message}")
        raise Exit(code=4)

    versions = ", ".join(f"v{v}" for v in result.versions) or "common only"
    content = (
        f"Snapshot: `{result.output_path}`\n\n"
        f"- files found: {result.files_found}\n"
        f"- embeddings written: {result.embeddings_written}\n"
        f"- skipped files: {result.skipped_files}\n"
        f"- versions: {versions}"
    )
    console.print(
        Panel(
            Markdown(content),
            title_align="left",
            title="Snapshot Complete",
            border_style="bold green",
        )
    )
