import argparse
import asyncio
import sys

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table
from rich.text import Text

from profile_rag.config import get_settings
from profile_rag.exceptions import InputValidationError, ProfileRagError
from profile_rag.ingestion.chunker import flatten
from profile_rag.ingestion.loader import load_knowledge_base
from profile_rag.logger import get_logger
from profile_rag.models import ArticleRequest, AssistantResponse
from profile_rag.pipeline.assistant import ProfileAssistant

console = Console()
log = get_logger()

CONFIDENCE_STYLE = {"high": "green", "medium": "yellow", "low": "red"}


def print_response(resp: AssistantResponse, title: str = "Answer"):
    style = CONFIDENCE_STYLE[resp.confidence.value]
    console.print(Panel.fit(Text(resp.answer), title=title, border_style=style))
    console.print(f"[bold]confidence:[/bold] [{style}]{resp.confidence.value}[/{style}]")

    if resp.degraded:
        console.print("[bold red]Search was unavailable; answer has no supporting evidence.[/bold red]")

    if resp.evidence:
        console.print("[bold]evidence:[/bold] " + ", ".join(resp.evidence), markup=False)

    if not resp.matches:
        console.print("[bold red]No matching profile entries.[/bold red]")
        return

    table = Table(title="Matches", show_lines=False)
    table.add_column("#", justify="right")
    table.add_column("score")
    table.add_column("path")
    table.add_column("text")
    for idx, m in enumerate(resp.matches, start=1):
        table.add_row(str(idx), f"{m.score:.3f}", Text(m.path), Text(m.text[:120]))
    console.print(table)


async def interactive_loop(assistant: ProfileAssistant, limit: int | None):
    console.print("[bold]Interactive mode. Type 'exit' or 'quit' to stop.[/bold]")

    while True:
        question = Prompt.ask("\n[bold cyan]Question[/bold cyan]").strip()
        if question.lower() in ("exit", "quit"):
            console.print("[bold red]Bye.[/bold red]")
            log.info("Session ended by user.")
            break
        if not question:
            continue

        print_response(await assistant.ask(question, limit=limit))


async def run(args) -> int:
    settings = get_settings()
    if args.kb:
        settings.knowledge_base_path = args.kb

    if args.command == "chunks":
        chunks = flatten(load_knowledge_base(settings.knowledge_base_path))
        table = Table(title=f"{len(chunks)} chunks")
        table.add_column("path")
        table.add_column("text")
        table.add_column("id")
        for ch in chunks:
            table.add_row(Text(ch.path), Text(ch.text), Text(ch.id))
        console.print(table)
        return 0

    assistant = ProfileAssistant.from_settings(settings)
    try:
        if args.command == "ingest":
            count = await assistant.ensure_index()
            console.print(f"[green]Upserted {count} chunks.[/green]")
        elif args.command == "article":
            request = ArticleRequest(
                project_title=args.title,
                project_date=args.date,
                club=args.club,
                narrative=args.narrative,
            )
            print_response(await assistant.write_article(request, limit=args.limit), title="Article")
        elif args.question:
            print_response(await assistant.ask(args.question, limit=args.limit))
        else:
            await interactive_loop(assistant, limit=args.limit)
    finally:
        await assistant.close()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Profile assistant CLI (JSON profile -> vector index -> grounded answers / articles)"
    )
    parser.add_argument("--kb", help="Path to the knowledge-base JSON (default: settings.knowledge_base_path)")
    sub = parser.add_subparsers(dest="command", required=True)

    ask = sub.add_parser("ask", help="Answer one question, or start an interactive loop")
    ask.add_argument("question", nargs="?", help="Question to ask; omit for interactive mode")
    ask.add_argument("--limit", type=int, default=None, help="How many chunks to retrieve")

    article = sub.add_parser("article", help="Write a narrative article about a project")
    article.add_argument("--title", default="")
    article.add_argument("--date", default="")
    article.add_argument("--club", default="")
    article.add_argument("--narrative", default="")
    article.add_argument("--limit", type=int, default=None, help="How many chunks to retrieve")

    sub.add_parser("ingest", help="Flatten the knowledge base and upsert it into the index")
    sub.add_parser("chunks", help="Print the flattened chunks without touching any provider")

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    log.info("Starting profile assistant CLI. command=%s", args.command)

    try:
        return asyncio.run(run(args))
    except InputValidationError as e:
        console.print(f"[bold red]{e.message}[/bold red]")
        return 2
    except ProfileRagError as e:
        log.error("Profile assistant error: %s", e)
        console.print(f"[bold red]{e.message}[/bold red]")
        return 1
    finally:
        log.info("Profile assistant CLI shutdown complete.")


if __name__ == "__main__":
    sys.exit(main())
