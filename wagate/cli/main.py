"""
wagate CLI main module.

Runs the gateway under uvicorn for development (auto-reload) or production.
"""

import subprocess
import sys

import typer

from wagate.core.config.settings import settings

app = typer.Typer(help="wagate - single-session WhatsApp gateway")

APP_FACTORY = "wagate.core.gateway_app:create_app"


def _uvicorn_command(host: str, port: int, reload: bool) -> list[str]:
    cmd = [
        sys.executable,
        "-m",
        "uvicorn",
        APP_FACTORY,
        "--factory",
        "--host",
        host,
        "--port",
        str(port),
        "--log-level",
        settings.log_level.lower(),
    ]
    if reload:
        cmd.append("--reload")
    return cmd


def _serve(host: str, port: int, reload: bool, mode: str) -> None:
    typer.echo(f"Starting wagate {mode} server...")
    typer.echo(f"Server: http://{host}:{port}")
    typer.echo(f"QR page: http://{host}:{port}/qr")
    typer.echo(f"Bridge: {settings.bridge_url}")
    if reload:
        typer.echo(f"Docs: http://{host}:{port}/docs")
    typer.echo("Press CTRL+C to stop")
    typer.echo()

    try:
        subprocess.run(_uvicorn_command(host, port, reload), check=True)
    except subprocess.CalledProcessError as e:
        typer.echo(
            f"wagate {mode} server failed to start (exit code: {e.returncode})",
            err=True,
        )
        typer.echo("", err=True)
        typer.echo("Common issues:", err=True)
        typer.echo(f"• Port {port} already in use (try --port)", err=True)
        typer.echo("• Invalid value in .env (LOG_LEVEL, RECONNECT_DELAY, ...)", err=True)
        raise typer.Exit(1)
    except KeyboardInterrupt:
        typer.echo(f"wagate {mode} server stopped")


@app.command()
def dev(
    host: str = typer.Option("0.0.0.0", "--host", "-h", help="Host to bind to"),
    port: int = typer.Option(
        None, "--port", "-p", help="Port to bind to (default: PORT or 3001)"
    ),
):
    """
    Run the development server with auto-reload.

    Examples:
        wagate dev
        wagate dev --port 8080
    """
    _serve(host, port or settings.port, reload=True, mode="development")


@app.command()
def run(
    host: str = typer.Option("0.0.0.0", "--host", "-h", help="Host to bind to"),
    port: int = typer.Option(
        None, "--port", "-p", help="Port to bind to (default: PORT or 3001)"
    ),
):
    """
    Run the production server (no auto-reload, one worker).

    A single process owns the WhatsApp session; do not put several workers in
    front of the same AUTH_FOLDER.
    """
    _serve(host, port or settings.port, reload=False, mode="production")


if __name__ == "__main__":
    app()
