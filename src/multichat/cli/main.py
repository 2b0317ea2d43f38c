"""Main entry point for the multichat CLI."""

from __future__ import annotations

import time
from typing import Annotated

import typer

from multichat import __version__
from multichat.cli.output import (
    console,
    print_bench_table,
    print_check_table,
    print_error,
    print_json,
    print_result,
    print_stream_label,
    print_streaming_done,
    print_streaming_token,
)
from multichat.client import DEFAULT_URL, ClientError, MultiChatClient
from multichat.schemas import ProviderId
from multichat.services.framing import StreamDecoder

DEFAULT_CHECK_PROMPT = "Hello, please introduce yourself briefly."

app = typer.Typer(
    name="multichat",
    help="multichat CLI - send one prompt to several AI services.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

UrlOption = Annotated[
    str,
    typer.Option("--url", "-u", envvar="MULTICHAT_URL", help="multichat service URL."),
]
ServiceOption = Annotated[
    list[ProviderId] | None,
    typer.Option(
        "--service",
        "-s",
        help="Service to query. Can be specified multiple times (default: all).",
    ),
]
JsonOption = Annotated[
    bool,
    typer.Option("--json", help="Output results as JSON."),
]


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        typer.echo(f"multichat version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """multichat CLI - send one prompt to several AI services."""


def _fail(message: str, json_output: bool) -> typer.Exit:
    if json_output:
        print_json({"status": "error", "message": message})
    else:
        print_error(message)
    return typer.Exit(1)


@app.command()
def ask(
    prompt: Annotated[str, typer.Argument(help="Prompt to send.")],
    service: ServiceOption = None,
    url: UrlOption = DEFAULT_URL,
    json_output: JsonOption = False,
) -> None:
    """Ask the selected services and wait for all answers.

    Examples:

        multichat ask "What is recursion?"

        multichat ask -s chatgpt -s deepseek "Explain closures"
    """
    try:
        with MultiChatClient(url) as client:
            response = client.complete(prompt, service)
    except ClientError as e:
        raise _fail(str(e), json_output) from None

    if json_output:
        print_json(response)
        return

    for result in response.results:
        print_result(result)


@app.command()
def stream(
    prompt: Annotated[str, typer.Argument(help="Prompt to send.")],
    service: ServiceOption = None,
    url: UrlOption = DEFAULT_URL,
    json_output: JsonOption = False,
) -> None:
    """Stream the selected services' answers as they arrive.

    With --json every event is printed as one JSON line.
    """
    current: str | None = None
    failures: list[str] = []

    try:
        with MultiChatClient(url) as client:
            for event in client.stream(prompt, service):
                if json_output:
                    print_json(event.to_wire(), indent=None)
                    continue

                if event.error:
                    failures.append(f"{event.service}: {event.error}")
                    continue
                if not event.content:
                    continue
                if event.service != current:
                    print_stream_label(event.service)
                    current = event.service
                print_streaming_token(event.content)
    except ClientError as e:
        raise _fail(str(e), json_output) from None

    if not json_output:
        print_streaming_done()
        for failure in failures:
            print_error(failure)


@app.command()
def check(
    prompt: Annotated[
        str, typer.Argument(help="Prompt to send to each service.")
    ] = DEFAULT_CHECK_PROMPT,
    service: ServiceOption = None,
    url: UrlOption = DEFAULT_URL,
    json_output: JsonOption = False,
) -> None:
    """Query each service on its own and report whether it answered."""
    rows = []
    try:
        with MultiChatClient(url) as client:
            for provider in service or list(ProviderId):
                start_time = time.perf_counter()
                result = client.complete(prompt, [provider]).results[0]
                rows.append(
                    {
                        "service": result.service,
                        "ok": result.error is None,
                        "error_type": result.error_type,
                        "duration_ms": int((time.perf_counter() - start_time) * 1000),
                        "detail": result.error or f"{len(result.response)} chars",
                    }
                )
    except ClientError as e:
        raise _fail(str(e), json_output) from None

    if json_output:
        print_json(rows)
    else:
        print_check_table(rows)


@app.command()
def bench(
    prompt: Annotated[str, typer.Argument(help="Prompt to stream.")],
    service: ServiceOption = None,
    runs: Annotated[int, typer.Option("--runs", "-n", min=1, help="Number of runs.")] = 1,
    url: UrlOption = DEFAULT_URL,
    json_output: JsonOption = False,
) -> None:
    """Measure streaming latency: time to first chunk, total time, volume."""
    results = []
    try:
        with MultiChatClient(url) as client:
            for run in range(1, runs + 1):
                results.append(_bench_once(client, prompt, service, run))
    except ClientError as e:
        raise _fail(str(e), json_output) from None

    if json_output:
        print_json(results)
    else:
        print_bench_table(results)
        console.print(f"[dim]{runs} run(s) against {url}[/dim]")


def _bench_once(
    client: MultiChatClient,
    prompt: str,
    service: list[ProviderId] | None,
    run: int,
) -> dict:
    decoder = StreamDecoder()
    start_time = time.perf_counter()
    first_chunk_ms: int | None = None
    chunks = events = size = 0

    for chunk in client.stream_raw(prompt, service):
        if first_chunk_ms is None:
            first_chunk_ms = int((time.perf_counter() - start_time) * 1000)
        chunks += 1
        size += len(chunk)
        events += sum(1 for record in decoder.feed(chunk) if record.event is not None)
    events += sum(1 for record in decoder.flush() if record.event is not None)

    return {
        "run": run,
        "first_chunk_ms": first_chunk_ms or 0,
        "total_ms": int((time.perf_counter() - start_time) * 1000),
        "chunks": chunks,
        "events": events,
        "bytes": size,
    }
