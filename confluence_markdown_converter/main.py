import json
import logging
from enum import Enum
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from tqdm import tqdm

from confluence_markdown_converter.api_clients import ConfluenceClient
from confluence_markdown_converter.config import ConfluenceSettings
from confluence_markdown_converter.converter import ConfluenceConverter
from confluence_markdown_converter.errors import ConfluenceError
from confluence_markdown_converter.models import ConversionOptions
from confluence_markdown_converter.models import ConversionResult
from confluence_markdown_converter.utils.export import page_filename
from confluence_markdown_converter.utils.export import save_file
from confluence_markdown_converter.utils.measure_time import measure

app = typer.Typer(help="Convert Confluence pages to clean Markdown.")
err_console = Console(stderr=True, soft_wrap=True)


class DeploymentType(str, Enum):
    cloud = "cloud"
    datacenter = "datacenter"


BaseUrlOption = Annotated[
    str | None, typer.Option("--base-url", "-u", help="Confluence base URL.", show_default=False)
]
UsernameOption = Annotated[
    str | None, typer.Option("--username", help="Confluence username.", show_default=False)
]
TokenOption = Annotated[
    str | None, typer.Option("--token", help="API token or password.", show_default=False)
]
TypeOption = Annotated[
    DeploymentType | None,
    typer.Option("--type", "-t", help="Confluence deployment type.", show_default=False),
]


@app.callback()
def main(
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", envvar="DEBUG", help="Enable debug logging.")
    ] = False,
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )
    logging.getLogger("atlassian").setLevel(logging.DEBUG if verbose else logging.WARNING)


def load_settings(
    base_url: str | None,
    username: str | None,
    token: str | None,
    confluence_type: DeploymentType | None,
) -> ConfluenceSettings:
    overrides = {
        "base_url": base_url,
        "username": username,
        "api_token": token,
        "type": confluence_type.value if confluence_type else None,
    }
    return ConfluenceSettings(**{key: value for key, value in overrides.items() if value})


def create_client(
    base_url: str | None,
    username: str | None,
    token: str | None,
    confluence_type: DeploymentType | None,
) -> ConfluenceClient:
    return ConfluenceClient.from_settings(
        load_settings(base_url, username, token, confluence_type)
    )


def fail(error: Exception) -> typer.Exit:
    err_console.print(f"Error: {error}", style="red", markup=False, highlight=False)
    return typer.Exit(code=1)


def print_warnings(result: ConversionResult, indent: str = "  ") -> None:
    for warning in result.warnings:
        err_console.print(f"{indent}Warning: {warning}", style="yellow", markup=False)


@app.command(help="Convert a Confluence page to Markdown.")
def convert(
    page_id: Annotated[str, typer.Argument(help="Confluence page ID.")],
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Output file path. Defaults to stdout."),
    ] = None,
    front_matter: Annotated[bool, typer.Option(help="Include YAML front matter.")] = True,
    children: Annotated[bool, typer.Option(help="Include the child page index.")] = True,
    macros: Annotated[bool, typer.Option(help="Convert Confluence macros.")] = True,
    as_json: Annotated[
        bool, typer.Option("--json", help="Print the conversion result as JSON.")
    ] = False,
    base_url: BaseUrlOption = None,
    username: UsernameOption = None,
    token: TokenOption = None,
    confluence_type: TypeOption = None,
) -> None:
    converter = ConfluenceConverter(
        ConversionOptions(
            front_matter=front_matter, include_children=children, convert_macros=macros
        )
    )

    try:
        client = create_client(base_url, username, token, confluence_type)
        err_console.print(f"Fetching page {page_id}...", markup=False)
        page = client.get_page(page_id)
    except ConfluenceError as e:
        raise fail(e) from e

    err_console.print(f'Converting "{page.title}"...', markup=False)
    result = converter.convert(page)
    if result.warnings:
        err_console.print("Warnings:", style="yellow")
        print_warnings(result)

    if as_json:
        content = json.dumps({"success": True, **result.model_dump(by_alias=True)}, indent=2)
        content += "\n"
    else:
        content = result.markdown

    if output:
        save_file(output.resolve(), content)
        err_console.print(f"Written to {output.resolve()}", markup=False)
    else:
        typer.echo(content, nl=False)


@app.command(help="Convert a Confluence page and all its descendants.")
def tree(
    page_id: Annotated[str, typer.Argument(help="Root page ID.")],
    output_dir: Annotated[
        Path, typer.Option("--output-dir", "-o", help="Output directory.")
    ] = Path("./output"),
    depth: Annotated[int, typer.Option("--depth", "-d", min=0, help="Max tree depth.")] = 5,
    front_matter: Annotated[bool, typer.Option(help="Include YAML front matter.")] = True,
    base_url: BaseUrlOption = None,
    username: UsernameOption = None,
    token: TokenOption = None,
    confluence_type: TypeOption = None,
) -> None:
    converter = ConfluenceConverter(ConversionOptions(front_matter=front_matter))

    try:
        client = create_client(base_url, username, token, confluence_type)
        with measure(f"Fetch page tree {page_id}"):
            err_console.print(
                f"Fetching page tree from {page_id} (depth: {depth})...", markup=False
            )
            pages = client.get_page_tree(page_id, depth)
    except ConfluenceError as e:
        raise fail(e) from e

    err_console.print(f"Found {len(pages)} page(s).")

    out_dir = output_dir.resolve()
    out_dir.mkdir(parents=True, exist_ok=True)
    used_names: set[str] = set()

    for page in (pbar := tqdm(pages, smoothing=0.05, disable=len(pages) < 2)):
        pbar.set_postfix_str(f"Converting page {page.id}")
        result = converter.convert(page)

        filename = page_filename(page.title)
        if filename in used_names:
            filename = f"{filename.removesuffix('.md')}-{page.id}.md"
        used_names.add(filename)

        file_path = out_dir / filename
        save_file(file_path, result.markdown)
        err_console.print(f"  {page.title} -> {file_path}", markup=False)
        print_warnings(result, indent="    ")

    err_console.print(f"Done. {len(pages)} file(s) written to {out_dir}", markup=False)


@app.command(help="Test the Confluence connection.")
def test_connection(
    base_url: BaseUrlOption = None,
    username: UsernameOption = None,
    token: TokenOption = None,
    confluence_type: TypeOption = None,
) -> None:
    try:
        client = create_client(base_url, username, token, confluence_type)
    except ConfluenceError as e:
        raise fail(e) from e

    err_console.print("Testing connection...")
    if not client.test_connection():
        err_console.print("Connection failed. Check your credentials and URL.", style="red")
        raise typer.Exit(code=1)
    err_console.print("Connection successful!", style="green")


if __name__ == "__main__":
    app()
