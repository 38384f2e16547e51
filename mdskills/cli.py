"""CLI entry point for the mdskills marketplace"""

import json
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.text import Text

from mdskills import __version__
from mdskills.api_client import DEFAULT_LIMIT, SORT_CHOICES, MarketplaceClient, MarketplaceError, slug_from_input
from mdskills.config import Settings, get_settings
from mdskills.format import SITE_URL, banner, format_type, listing_detail, listings_table
from mdskills.installer import InstallError, install_content, skill_template, target_path
from mdskills.models import ARTIFACT_TYPES

ALIASES = {
    "s": "search",
    "i": "install",
    "ls": "list",
    "show": "info",
    "cats": "categories",
}


class AliasedGroup(click.Group):
    """Group that resolves the short command aliases."""

    def get_command(self, ctx, cmd_name):
        return super().get_command(ctx, ALIASES.get(cmd_name, cmd_name))

    def resolve_command(self, ctx, args):
        _, cmd, args = super().resolve_command(ctx, args)
        return cmd.name, cmd, args


def make_client(settings: Settings) -> MarketplaceClient:
    return MarketplaceClient(settings.api_url, timeout=settings.request_timeout)


def _console() -> Console:
    return Console(highlight=False)


def _fail(message: str, as_json: bool = False):
    """Report an error the way the command was asked to, then exit 1."""
    if as_json:
        click.echo(json.dumps({"error": message}))
        sys.exit(1)
    click.echo(f"❌ Error: {message}", err=True)
    raise click.Abort()


def _hints(console: Console) -> None:
    console.print()
    console.print("  [dim]Run[/dim] [cyan]mdskills info <slug>[/cyan] [dim]for details[/dim]")
    console.print("  [dim]Run[/dim] [cyan]mdskills install <owner>/<slug>[/cyan] [dim]to install[/dim]")


@click.group(cls=AliasedGroup, invoke_without_command=True, context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, "-v", "--version", prog_name="mdskills", message="%(prog)s v%(version)s")
@click.option("--api-url", envvar="MDSKILLS_API_URL", help="Marketplace base URL")
@click.option("--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, api_url, verbose):
    """mdskills - search and install AI agent skills"""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    ctx.ensure_object(dict)
    ctx.obj["settings"] = get_settings(api_url=api_url)
    if ctx.invoked_subcommand is None:
        ctx.invoke(browse)


@cli.command()
@click.argument("query", nargs=-1)
@click.option("--limit", default=DEFAULT_LIMIT, show_default=True, help="Max results")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.pass_context
def search(ctx, query, limit, output_json):
    """Search the marketplace by keyword"""
    query = " ".join(query).strip()
    if not query:
        if output_json:
            _fail("Missing search query", as_json=True)
        click.echo("❌ Usage: mdskills search <query>", err=True)
        click.echo("   Example: mdskills search pdf", err=True)
        sys.exit(1)

    try:
        with make_client(ctx.obj["settings"]) as client:
            skills = client.fetch_skills(query=query, limit=limit)
    except MarketplaceError as e:
        _fail(str(e), output_json)

    if output_json:
        click.echo(json.dumps({"query": query, "skills": skills, "count": len(skills)}))
        return

    console = _console()
    if not skills:
        console.print(f'\n🔍 No results for "{escape(query)}"\n')
        console.print("  [dim]Try a broader search or browse all skills:[/dim]")
        console.print("  [dim]  mdskills list[/dim]\n")
        return

    plural = "" if len(skills) == 1 else "s"
    console.print(f'\n🔍 [bold]{len(skills)} result{plural} for "{escape(query)}"[/bold]\n')
    console.print(listings_table(skills))
    _hints(console)


@cli.command(name="list")
@click.option("--category", help="Filter by category slug")
@click.option("--sort", type=click.Choice(SORT_CHOICES), default="popular", show_default=True)
@click.option("--type", "artifact_type", type=click.Choice(ARTIFACT_TYPES), help="Filter by artifact type")
@click.option("--featured", is_flag=True, help="Show featured only")
@click.option("--limit", default=DEFAULT_LIMIT, show_default=True, help="Max results")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.pass_context
def list_skills(ctx, category, sort, artifact_type, featured, limit, output_json):
    """List skills from the marketplace"""
    try:
        with make_client(ctx.obj["settings"]) as client:
            skills = client.fetch_skills(
                category=category, artifact_type=artifact_type, sort=sort, limit=limit, featured=featured
            )
    except MarketplaceError as e:
        _fail(str(e), output_json)

    if output_json:
        click.echo(json.dumps({"skills": skills, "count": len(skills)}))
        return

    console = _console()
    if not skills:
        console.print("\n📋 No skills found\n")
        return

    if featured:
        label = "Featured skills"
    elif category:
        label = f'Skills in "{escape(category)}"'
    else:
        label = "Popular skills"
    console.print(f"\n📋 [bold]{label}[/bold]\n")
    console.print(listings_table(skills))
    _hints(console)


@cli.command()
@click.argument("slug")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.pass_context
def info(ctx, slug, output_json):
    """Show details for a skill (slug or owner/slug)"""
    slug = slug_from_input(slug)
    try:
        with make_client(ctx.obj["settings"]) as client:
            skill = client.fetch_skill_detail(slug)
    except MarketplaceError as e:
        _fail(str(e), output_json)

    if skill is None:
        if output_json:
            _fail(f'Skill "{slug}" not found', as_json=True)
        click.echo(f'\n⚠️  Skill "{slug}" not found\n')
        click.echo("   Try searching: mdskills search <query>\n")
        return

    if output_json:
        click.echo(json.dumps({"skill": skill}))
        return
    _console().print(listing_detail(skill))


@cli.command()
@click.argument("slug")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation and overwrite existing files")
@click.option(
    "--dir",
    "root",
    type=click.Path(file_okay=False, path_type=Path),
    default=".",
    help="Project directory to install into",
)
@click.pass_context
def install(ctx, slug, yes, root):
    """Install a skill into the current project"""
    slug = slug_from_input(slug)
    try:
        with make_client(ctx.obj["settings"]) as client:
            skill = client.fetch_skill_detail(slug)
            if skill is None:
                click.echo(f'\n⚠️  Skill "{slug}" not found\n')
                click.echo("   Try searching: mdskills search <query>\n")
                sys.exit(1)
            _install(client, skill, slug, yes, root)
    except MarketplaceError as e:
        _fail(str(e))
    except InstallError as e:
        _fail(str(e))


def _install(client: MarketplaceClient, skill: dict, slug: str, yes: bool, root: Path) -> None:
    console = _console()
    console.print(f"\n[bold]{escape(skill.get('name', slug))}[/bold] [dim]({format_type(skill.get('artifact_type'))})[/dim]")
    if skill.get("description"):
        console.print(Text(skill["description"][:100], style="dim"))
    console.print()

    if skill.get("artifact_type") == "mcp_server":
        console.print("[bold]MCP Server install commands:[/bold]\n")
        clients = skill.get("clients") or []
        if not clients:
            console.print("[dim]No install instructions available.[/dim]")
            console.print(f"[dim]Check: {skill.get('github_url', '')}[/dim]\n")
            return
        for entry in clients:
            console.print(Text(f"{entry.get('client_name') or entry.get('client_slug', '')}:", style="dim"))
            for line in (entry.get("install_instructions") or "").splitlines():
                console.print(Text(f"  {line}", style="green"), soft_wrap=True)
            console.print()
        return

    content = skill.get("content")
    if not content:
        console.print("⚠️  No skill content available to install.")
        console.print(f"[dim]Download from: {skill.get('github_url', '')}[/dim]\n")
        return

    relative = target_path(slug, skill.get("format_standard"))
    console.print(f"[dim]File:[/dim] {relative}")
    perms = [k.replace("_", " ") for k, v in (skill.get("permissions") or {}).items() if v]
    if perms:
        console.print(f"[dim]Permissions:[/dim] {', '.join(perms)}")
    console.print()

    if (root / relative).exists() and not yes:
        console.print(f"⚠️  File already exists: {relative}")
        console.print("[dim]Use --yes to overwrite, or manually merge.[/dim]\n")
        return

    if not yes and not click.confirm(f"Install to {relative}?", default=True):
        console.print("[dim]Cancelled.[/dim]\n")
        return

    install_content(root, relative, content, overwrite=True)
    client.track_install(slug)
    console.print(f"\n✅ Installed {skill.get('name', slug)} to {relative}")
    console.print(f"[dim]View: {SITE_URL}/skills/{slug}[/dim]\n")


@cli.command()
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.pass_context
def categories(ctx, output_json):
    """List all skill categories"""
    try:
        with make_client(ctx.obj["settings"]) as client:
            cats = client.fetch_categories()
    except MarketplaceError as e:
        _fail(str(e), output_json)

    if output_json:
        click.echo(json.dumps(cats))
        return
    if not cats:
        click.echo("\n📂 No categories found\n")
        return

    click.echo("\n📂 Categories\n")
    for cat in cats:
        count = f" ({cat['skill_count']})" if cat.get("skill_count") else ""
        click.echo(f"  {cat['slug']:<24} {cat['name']}{count}")
    click.echo("\n   Browse a category:")
    click.echo("     mdskills list --category <slug>\n")


@cli.command()
@click.argument("filename", default="SKILL.md")
@click.option("--name", help="Skill name")
@click.option("--description", help="Short description")
def init(filename, name, description):
    """Scaffold a new SKILL.md"""
    path = Path(filename)
    if path.exists():
        click.echo(f"\n⚠️  {filename} already exists in this directory.")
        click.echo("   Use a different filename or remove the existing file.\n")
        sys.exit(1)

    click.echo("\n📝 Create a new SKILL.md\n")
    name = (name or "").strip() or click.prompt("Skill name").strip()
    description = (description or "").strip() or click.prompt("Short description").strip()

    try:
        install_content(Path("."), filename, skill_template(name, description))
    except InstallError as e:
        _fail(str(e))

    click.echo(f"\n✅ Created {filename}")
    click.echo("   Edit the file to add your skill instructions.\n")
    click.echo("   Learn more about the SKILL.md format:")
    click.echo(f"     {SITE_URL}/specs/skill-md\n")


@cli.command(name="help")
@click.argument("command", required=False)
@click.pass_context
def help_command(ctx, command):
    """Show help for mdskills or one of its commands"""
    group = ctx.parent.command
    if not command:
        click.echo(group.get_help(ctx.parent))
        return
    target = group.get_command(ctx, command)
    if target is None:
        click.echo(f"⚠️  Unknown command: {command}")
        click.echo("   Run mdskills --help to see all commands")
        return
    with click.Context(target, info_name=target.name, parent=ctx.parent) as sub_ctx:
        click.echo(target.get_help(sub_ctx))


@cli.command()
def version():
    """Show the installed version"""
    click.echo(f"mdskills v{__version__}")


@cli.command()
@click.pass_context
def browse(ctx):
    """Launch the interactive browser"""
    try:
        from mdskills.tui import MarketplaceBrowser

        _console().print(banner())
        app = MarketplaceBrowser(client=make_client(ctx.obj["settings"]))
        app.run()

    except ImportError as e:
        click.echo("❌ The browser requires the 'textual' package. Install with: pip install textual", err=True)
        click.echo(f"   Error: {e}", err=True)
        raise click.Abort()


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
