"""CLI interface using Typer."""

import logging
import os
import traceback
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from reviewgate import __version__
from reviewgate.clients.detection import ProviderDetector
from reviewgate.config import load_config
from reviewgate.context import AppContext, build_context
from reviewgate.errors import ReviewGateError, ValidationError
from reviewgate.models import CodeFile, ProviderKind, ProviderListItem
from reviewgate.output import get_formatter
from reviewgate.review import run_review
from reviewgate.vault import generate_key

app = typer.Typer(
  name="reviewgate",
  help="Credential-vaulted AI code review",
  no_args_is_help=True,
)
provider_app = typer.Typer(help="Manage registered AI providers", no_args_is_help=True)
app.add_typer(provider_app, name="provider")

console = Console()

LANGUAGES = {
  ".c": "c",
  ".cpp": "cpp",
  ".cs": "csharp",
  ".go": "go",
  ".h": "c",
  ".java": "java",
  ".js": "javascript",
  ".jsx": "javascript",
  ".kt": "kotlin",
  ".php": "php",
  ".py": "python",
  ".rb": "ruby",
  ".rs": "rust",
  ".sql": "sql",
  ".swift": "swift",
  ".ts": "typescript",
  ".tsx": "typescript",
}


@dataclass
class _State:
  config: Path | None = None
  debug: bool = False


_state = _State()


def _is_debug() -> bool:
  return os.environ.get("REVIEWGATE_DEBUG", "").lower() in ("1", "true", "yes")


def version_callback(value: bool) -> None:
  if value:
    console.print(f"reviewgate {__version__}")
    raise typer.Exit()


@app.callback()
def main(
  config: Path = typer.Option(None, "--config", "-c", help="Config file path"),
  debug: bool = typer.Option(False, "--debug", "-d", help="Debug logging and full tracebacks"),
  version: bool = typer.Option(None, "--version", "-v", callback=version_callback, is_eager=True),
) -> None:
  """Register AI providers with encrypted keys and review code with them."""
  _state.config = config
  _state.debug = debug or _is_debug()

  level = "DEBUG" if _state.debug else None
  if level is None:
    try:
      level = load_config(config).log_level
    except Exception:
      # Reported by the command itself when it loads the config.
      level = "WARNING"
  logging.basicConfig(
    level=getattr(logging, level, logging.WARNING),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
  )


@contextmanager
def _errors() -> Iterator[None]:
  """Report failures as ``Error: ...`` and exit 1."""
  try:
    yield
  except typer.Exit:
    raise
  except ReviewGateError as e:
    console.print(f"[red]Error:[/red] {e.message} ({e.code})")
    raise typer.Exit(1) from None
  except Exception as e:
    console.print(f"[red]Error:[/red] {e}")
    if _state.debug:
      console.print("\n[dim]Traceback:[/dim]")
      console.print(traceback.format_exc())
    raise typer.Exit(1) from None


@contextmanager
def _context() -> Iterator[AppContext]:
  context = build_context(_state.config)
  try:
    yield context
  finally:
    context.close()


@app.command()
def keygen() -> None:
  """Print a new encryption key for ENCRYPTION_KEY."""
  console.print(generate_key(), highlight=False)


@app.command()
def init() -> None:
  """Create the database tables."""
  with _errors(), _context() as context:
    console.print(f"[green]Database ready:[/green] {context.settings.database_url}")


@app.command()
def prompts() -> None:
  """List prompts from the configured prompt library."""
  with _errors(), _context() as context:
    items = context.prompts.list_prompts()
    if not items:
      console.print(f"[yellow]No prompts found in {context.settings.prompts_file}[/yellow]")
      return
    table = Table(show_header=True, header_style="bold")
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Default", justify="center")
    for prompt in items:
      table.add_row(prompt.id, prompt.name, "*" if prompt.is_default else "")
    console.print(table)


@app.command()
def review(
  files: list[Path] = typer.Argument(..., help="Source files to review"),
  prompt: str = typer.Option(None, "--prompt", help="Prompt id (default: the default prompt)"),
  provider: str = typer.Option(None, "--provider", "-p", help="Provider id (default: active)"),
  password: str = typer.Option(None, "--password", help="Password for a gated provider"),
  format_type: str = typer.Option(
    "terminal", "--format", help="Output format: terminal, json, markdown"
  ),
  output_dir: Path = typer.Option(None, "--output-dir", "-o", help="Write reviewed files here"),
) -> None:
  """Review source files with the active (or given) provider."""
  with _errors():
    formatter = get_formatter(format_type)
    code_files = [_read_code_file(path) for path in files]
    if output_dir:
      _check_unique_names(code_files)
    result = run_review(
      code_files,
      prompt_id=prompt,
      provider_id=provider,
      password=password,
      config_path=_state.config,
    )

    output = formatter.format(result)
    if output:
      console.print(output, highlight=False, markup=False, soft_wrap=True)

    if output_dir:
      output_dir.mkdir(parents=True, exist_ok=True)
      for reviewed in result.reviewed_files:
        target = output_dir / Path(reviewed.name).name
        target.write_text(reviewed.content + "\n")
      console.print(f"[dim]Wrote {len(result.reviewed_files)} file(s) to {output_dir}[/dim]")


def _check_unique_names(code_files: list[CodeFile]) -> None:
  seen: set[str] = set()
  for code_file in code_files:
    if code_file.name in seen:
      raise ValidationError(f"Duplicate file name for --output-dir: {code_file.name}")
    seen.add(code_file.name)


def _read_code_file(path: Path) -> CodeFile:
  if not path.is_file():
    raise ValidationError(f"File not found: {path}")
  try:
    content = path.read_text()
  except UnicodeDecodeError:
    raise ValidationError(f"File is not valid text: {path}") from None
  return CodeFile(name=path.name, content=content, language=LANGUAGES.get(path.suffix.lower(), ""))


@provider_app.command("add")
def provider_add(
  name: str = typer.Argument(..., help="Display name"),
  kind: ProviderKind = typer.Option(..., "--kind", "-k", help="Provider kind"),
  api_key: str = typer.Option(None, "--api-key", help="API key (stored encrypted)"),
  from_env: bool = typer.Option(False, "--from-env", help="Read credentials from the environment"),
  endpoint: str = typer.Option(None, "--endpoint"),
  deployment: str = typer.Option(None, "--deployment"),
  model: str = typer.Option(None, "--model", "-m"),
  password: str = typer.Option(None, "--password", help="Require this password to use it"),
  activate: bool = typer.Option(False, "--activate", help="Make it the active provider"),
) -> None:
  """Register a provider."""
  with _errors():
    data = {
      "name": name,
      "kind": kind,
      "api_key": api_key,
      "endpoint": endpoint,
      "deployment": deployment,
      "model": model,
      "password": password,
    }
    if from_env:
      detector = ProviderDetector()
      credentials = detector.credentials_for(kind)
      if credentials is None:
        console.print(f"[red]Error:[/red] {detector.format_error(kind)}")
        raise typer.Exit(1)
      data["api_key"] = api_key or credentials.api_key
      data["endpoint"] = endpoint or credentials.endpoint
      data["deployment"] = deployment or credentials.deployment
      data["model"] = model or credentials.model
    if not data["api_key"]:
      raise ValidationError("api_key: provide --api-key or --from-env")

    with _context() as context:
      item = context.providers.create(data)
      if activate:
        item = context.providers.set_active(item.id)
    console.print(f"[green]Registered[/green] {item.name} ({item.kind.value}) id={item.id}")


@provider_app.command("list")
def provider_list() -> None:
  """List registered providers, active first."""
  with _errors(), _context() as context:
    items = context.providers.get_all()
    if not items:
      console.print("[yellow]No providers registered.[/yellow]")
      return
    table = Table(show_header=True, header_style="bold")
    table.add_column("Active", justify="center", width=6)
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Kind")
    table.add_column("Model")
    table.add_column("Password", justify="center")
    for item in items:
      table.add_row(
        "*" if item.is_active else "",
        item.id,
        item.name,
        item.kind.value,
        item.model or item.deployment or "-",
        "yes" if item.is_password_gated else "",
      )
    console.print(table)


@provider_app.command("show")
def provider_show(provider_id: str = typer.Argument(...)) -> None:
  """Show one provider."""
  with _errors(), _context() as context:
    _print_item(context.providers.get_by_id(provider_id))


@provider_app.command("update")
def provider_update(
  provider_id: str = typer.Argument(...),
  name: str = typer.Option(None, "--name"),
  kind: ProviderKind = typer.Option(None, "--kind", "-k"),
  api_key: str = typer.Option(None, "--api-key"),
  endpoint: str = typer.Option(None, "--endpoint"),
  deployment: str = typer.Option(None, "--deployment"),
  model: str = typer.Option(None, "--model", "-m"),
  password: str = typer.Option(None, "--password"),
  clear_endpoint: bool = typer.Option(False, "--clear-endpoint"),
  clear_deployment: bool = typer.Option(False, "--clear-deployment"),
  clear_model: bool = typer.Option(False, "--clear-model"),
  clear_password: bool = typer.Option(False, "--clear-password", help="Remove the password gate"),
) -> None:
  """Update a provider. Omitted options are left unchanged."""
  with _errors():
    changes = {
      key: value
      for key, value in (
        ("name", name),
        ("kind", kind),
        ("api_key", api_key),
        ("endpoint", endpoint),
        ("deployment", deployment),
        ("model", model),
        ("password", password),
      )
      if value is not None
    }
    for key, clear in (
      ("endpoint", clear_endpoint),
      ("deployment", clear_deployment),
      ("model", clear_model),
      ("password", clear_password),
    ):
      if clear:
        changes[key] = None
    if not changes:
      raise ValidationError("Nothing to update")

    with _context() as context:
      item = context.providers.update(provider_id, changes)
    console.print(f"[green]Updated[/green] {item.name}")


@provider_app.command("remove")
def provider_remove(provider_id: str = typer.Argument(...)) -> None:
  """Delete a provider. The active provider cannot be deleted."""
  with _errors(), _context() as context:
    context.providers.delete(provider_id)
    console.print(f"[green]Removed[/green] {provider_id}")


@provider_app.command("activate")
def provider_activate(provider_id: str = typer.Argument(...)) -> None:
  """Make a provider the single active one."""
  with _errors(), _context() as context:
    item = context.providers.set_active(provider_id)
    console.print(f"[green]Active provider:[/green] {item.name} ({item.kind.value})")


@provider_app.command("verify")
def provider_verify(
  provider_id: str = typer.Argument(...),
  password: str = typer.Option(..., "--password", prompt=True, hide_input=True),
) -> None:
  """Check a password against a provider."""
  with _errors(), _context() as context:
    if context.providers.verify_password(provider_id, password):
      console.print("[green]Password OK[/green]")
      return
  console.print("[red]Password does not match[/red]")
  raise typer.Exit(1)


@provider_app.command("status")
def provider_status() -> None:
  """Show which provider kinds have credentials in the environment."""
  detector = ProviderDetector()
  for status in detector.get_status():
    mark = "[green]ok[/green]" if status.available else "[dim]--[/dim]"
    console.print(f"  {mark} {status.kind.value}: {status.reason}")


def _print_item(item: ProviderListItem) -> None:
  table = Table(show_header=False, box=None)
  table.add_column(style="bold")
  table.add_column()
  for key, value in item.to_dict().items():
    table.add_row(key, "-" if value is None else str(value))
  console.print(table)


if __name__ == "__main__":
  app()
