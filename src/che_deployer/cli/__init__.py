"""Main CLI application module.

Command overview:
- deploy: Install or upgrade Che via Helm
- history: Show the Helm release history
"""

import typer

from .deploy_commands import deploy, history

# Create the main CLI application
app = typer.Typer(
    help="☸️  Che Deployer - install and upgrade Eclipse Che with Helm",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.command("deploy")(deploy)
app.command("history")(history)


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
