from __future__ import annotations

import ipaddress
from pathlib import Path

import typer

from .debug import debug_enabled, set_debug_enabled
from .debug_log import init_debug_log
from .levels import last_level_index, level_by_index
from .net.protocol import DEFAULT_PORT
from .paths import default_runtime_dir


app = typer.Typer(add_completion=False)


def _is_loopback_host(host: str) -> bool:
    normalized = str(host).strip().strip("[]").lower()
    if not normalized:
        return False
    if normalized == "localhost":
        return True
    try:
        return bool(ipaddress.ip_address(normalized).is_loopback)
    except ValueError:
        return False


def _maybe_init_debug_log(*, debug: bool, base_dir: Path, role: str, **fields: object) -> Path | None:
    if debug:
        set_debug_enabled(True)
    if not debug_enabled():
        return None
    return init_debug_log(base_dir=base_dir, role=role, **fields)


def _check_level(level: int) -> None:
    if level_by_index(int(level)) is None:
        raise typer.BadParameter(
            f"unknown level {level}; expected 1..{last_level_index()}",
            param_hint="--level",
        )


@app.command("serve")
def cmd_serve(
    bind: str = typer.Option("0.0.0.0", "--bind", help="server bind address"),
    port: int = typer.Option(DEFAULT_PORT, "--port", min=1, max=65535, help="server UDP port"),
    debug: bool = typer.Option(False, "--debug", help="write a debug event log under base-dir/logs"),
    base_dir: Path = typer.Option(
        default_runtime_dir(),
        "--base-dir",
        "--runtime-dir",
        help="base path for runtime files (default: ~/.dogchase; override with DOGCHASE_RUNTIME_DIR)",
    ),
) -> None:
    """Run the multiplayer roster server until interrupted."""
    from .net.server import BroadcastServer, ServerConfig

    bind_host = str(bind).strip() or "0.0.0.0"
    log_path = _maybe_init_debug_log(debug=debug, base_dir=base_dir, role="server", bind=bind_host, port=int(port))
    server = BroadcastServer(ServerConfig(bind_host=bind_host, port=int(port)))
    typer.echo(f"serving on {bind_host}:{int(port)} (capacity {server.cfg.capacity})")
    if log_path is not None:
        typer.echo(f"debug log: {log_path}")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        typer.echo("stopped")


@app.command("simulate")
def cmd_simulate(
    frames: int = typer.Option(60, "--frames", min=0, help="number of frames to step"),
    dt: float = typer.Option(1.0 / 60.0, "--dt", min=0.0, help="seconds per frame"),
    move_x: float = typer.Option(0.0, "--move-x", min=-1.0, max=1.0, help="strafe intent"),
    move_z: float = typer.Option(0.0, "--move-z", min=-1.0, max=1.0, help="forward intent (-1 is forward)"),
    run: bool = typer.Option(False, "--run", help="hold the run modifier"),
    level: int = typer.Option(1, "--level", help="starting level"),
    events: bool = typer.Option(False, "--events", help="print frame events as they happen"),
) -> None:
    """Step a headless session with constant input and print the final snapshot as JSON."""
    from .sim.input import FrameInput, MoveIntent
    from .sim.session import GameSession
    from .sim.snapshot import encode_snapshot_json

    _check_level(level)
    session = GameSession.build(level_index=int(level))
    frame = FrameInput(dt=float(dt), move=MoveIntent(float(move_x), float(move_z)), run=bool(run))
    for _ in range(int(frames)):
        result = session.step(frame)
        if not events:
            continue
        if result.collected:
            typer.echo(f"tick={session.tick} collected={','.join(str(idx) for idx in result.collected)}")
        if result.caught_by is not None:
            typer.echo(f"tick={session.tick} caught_by={result.caught_by.value}")
        if result.reward_started:
            typer.echo(f"tick={session.tick} reward")
        if result.level_completed:
            typer.echo(f"tick={session.tick} level_complete")
        if result.level_loaded is not None:
            typer.echo(f"tick={session.tick} level_loaded={result.level_loaded}")
        if result.session_completed:
            typer.echo(f"tick={session.tick} session_complete")
    typer.echo(encode_snapshot_json(session.snapshot()).decode("utf-8"))


@app.command("play")
def cmd_play(
    name: str | None = typer.Option(None, "--name", help="player name (default: use dogchase.cfg)"),
    server: str | None = typer.Option(None, "--server", help="join a roster server at host[:port]"),
    host_game: bool = typer.Option(False, "--host-game", help="run a roster server inside this process"),
    level: int = typer.Option(1, "--level", help="starting level"),
    width: int | None = typer.Option(None, help="window width (default: use dogchase.cfg)"),
    height: int | None = typer.Option(None, help="window height (default: use dogchase.cfg)"),
    fps: int | None = typer.Option(None, help="target fps (default: use dogchase.cfg)"),
    debug: bool = typer.Option(False, "--debug", help="write a debug event log under base-dir/logs"),
    base_dir: Path = typer.Option(
        default_runtime_dir(),
        "--base-dir",
        "--runtime-dir",
        help="base path for runtime files (default: ~/.dogchase; override with DOGCHASE_RUNTIME_DIR)",
    ),
) -> None:
    """Open the game window."""
    from backyard.config import ensure_dogchase_cfg

    from .app import GameConfig, run_game

    _check_level(level)
    if server is not None and host_game:
        raise typer.BadParameter("--server and --host-game are mutually exclusive", param_hint="--server")
    config = ensure_dogchase_cfg(base_dir)
    server_host: str | None = None
    server_port = int(config.server_port)
    if server is not None:
        server_host, server_port = _parse_server(server, default_port=server_port)
    elif host_game:
        server_host, server_port = "127.0.0.1", server_port
    _maybe_init_debug_log(debug=debug, base_dir=base_dir, role="client", server=str(server_host))
    player_name = str(name).strip() if name is not None else config.player_name
    if not player_name:
        raise typer.BadParameter("player name must not be empty", param_hint="--name")
    run_game(
        GameConfig(
            player_name=player_name,
            level=int(level),
            width=int(width) if width is not None else config.screen_width,
            height=int(height) if height is not None else config.screen_height,
            fps=int(fps) if fps is not None else config.fps,
            mouse_sensitivity=config.mouse_sensitivity,
            touch_look_sensitivity=config.touch_look_sensitivity,
            invert_pitch=config.invert_pitch,
            server_host=server_host,
            server_port=server_port,
            host_server=bool(host_game),
        )
    )


def _parse_server(text: str, *, default_port: int) -> tuple[str, int]:
    raw = str(text).strip()
    host, sep, port_text = raw.rpartition(":")
    if not sep or not host:
        host, port_text = raw, ""
    host = host.strip().strip("[]")
    if not host:
        raise typer.BadParameter("server host must not be empty", param_hint="--server")
    if not port_text:
        return host, int(default_port)
    try:
        port = int(port_text)
    except ValueError as exc:
        raise typer.BadParameter(f"invalid port {port_text!r}", param_hint="--server") from exc
    if port < 1 or port > 65535:
        raise typer.BadParameter(f"port out of range: {port}", param_hint="--server")
    return host, port


@app.command("config")
def cmd_config(
    name: str | None = typer.Option(None, "--name", help="store a new player name"),
    server_host: str | None = typer.Option(None, "--server-host", help="store a default server host"),
    server_port: int | None = typer.Option(None, "--server-port", min=1, max=65535, help="store a default server port"),
    base_dir: Path = typer.Option(
        default_runtime_dir(),
        "--base-dir",
        "--runtime-dir",
        help="base path for runtime files (default: ~/.dogchase; override with DOGCHASE_RUNTIME_DIR)",
    ),
) -> None:
    """Inspect or update dogchase.cfg."""
    from backyard.config import (
        DOGCHASE_CFG_STRUCT,
        PLAYER_NAME_MAX_CHARS,
        SERVER_HOST_MAX_BYTES,
        ensure_dogchase_cfg,
    )

    config = ensure_dogchase_cfg(base_dir)
    changed = False
    if name is not None:
        trimmed = str(name).strip()
        if not trimmed or len(trimmed) > PLAYER_NAME_MAX_CHARS:
            raise typer.BadParameter(f"name must be 1..{PLAYER_NAME_MAX_CHARS} characters", param_hint="--name")
        config.set_player_name(trimmed)
        changed = True
    if server_host is not None:
        host = str(server_host).strip()
        if not host:
            raise typer.BadParameter("server host must not be empty", param_hint="--server-host")
        if len(host.encode("latin-1", errors="ignore")) > SERVER_HOST_MAX_BYTES:
            raise typer.BadParameter(
                f"server host must fit in {SERVER_HOST_MAX_BYTES} bytes", param_hint="--server-host"
            )
        config.server_host = host
        changed = True
    if server_port is not None:
        config.server_port = int(server_port)
        changed = True
    if changed:
        config.save()

    typer.echo(f"path: {config.path}")
    typer.echo(f"player: {config.player_name}")
    host = config.server_host
    scope = "loopback" if _is_loopback_host(host) else "remote"
    typer.echo(f"server: {host}:{config.server_port} ({scope})")
    typer.echo(f"screen: {config.screen_width}x{config.screen_height}@{config.fps}")
    typer.echo("fields:")
    for sub in DOGCHASE_CFG_STRUCT.subcons:
        field_name = sub.name
        if not field_name:
            continue
        typer.echo(f"{field_name}: {_format_cfg_value(config.data[field_name])}")


def _format_cfg_value(value: object) -> str:
    if isinstance(value, (bytes, bytearray)):
        head = bytes(value).split(b"\x00", 1)[0]
        if head and all(32 <= byte < 127 for byte in head):
            return repr(head.decode("ascii"))
        return f"<{len(value)} bytes>"
    if isinstance(value, float):
        return f"{value:.6g}"
    return str(value)


def main(argv: list[str] | None = None) -> None:
    app(prog_name="dogchase", args=argv)


if __name__ == "__main__":
    main()
