from __future__ import annotations

from dataclasses import dataclass, field
import math
import threading

import pyray as rl

from backyard.color import RGBA
from backyard.geom import Vec3

from .actors import CollectibleKind, DogName
from .debug_log import debug_log
from .input_intent import InputSample, IntentAggregator, TouchStick
from .net.client import NetClient
from .net.protocol import DEFAULT_PORT
from .net.server import BroadcastServer, ServerConfig, start_server_thread
from .sim.clock import FrameClock
from .sim.session import GameSession
from .sim.snapshot import WorldSnapshot
from .tuning import WORLD_SIZE

CAMERA_DISTANCE = 6.0
CAMERA_HEIGHT = 3.0
CAMERA_LOOK_AHEAD = 4.0

GRASS = RGBA.from_hex(0x4E9A3A)
PLAYER_COLOR = RGBA.from_hex(0x8B5A2B)
REMOTE_COLOR = RGBA.from_hex(0x3F6FD8)
DOG_COLORS: dict[DogName, RGBA] = {
    DogName.GOLDEN: RGBA.from_hex(0xE0B050),
    DogName.BULLDOG: RGBA.from_hex(0x9C7A5B),
    DogName.GHOST: RGBA(0.9, 0.95, 1.0, 0.55),
}
COLLECTIBLE_COLORS: dict[CollectibleKind, RGBA] = {
    CollectibleKind.SAUSAGE: RGBA.from_hex(0xB5452C),
    CollectibleKind.TOY: RGBA.from_hex(0xF2E14C),
}
WHITE = RGBA(1.0, 1.0, 1.0, 1.0)

_KEY_NAMES: tuple[tuple[int, str], ...] = (
    (rl.KeyboardKey.KEY_W, "w"),
    (rl.KeyboardKey.KEY_A, "a"),
    (rl.KeyboardKey.KEY_S, "s"),
    (rl.KeyboardKey.KEY_D, "d"),
    (rl.KeyboardKey.KEY_UP, "up"),
    (rl.KeyboardKey.KEY_DOWN, "down"),
    (rl.KeyboardKey.KEY_LEFT, "left"),
    (rl.KeyboardKey.KEY_RIGHT, "right"),
    (rl.KeyboardKey.KEY_LEFT_SHIFT, "shift"),
    (rl.KeyboardKey.KEY_RIGHT_SHIFT, "shift"),
)


@dataclass(slots=True)
class GameConfig:
    player_name: str = "player"
    level: int = 1
    width: int = 1280
    height: int = 720
    fps: int = 60
    mouse_sensitivity: float = 0.002
    touch_look_sensitivity: float = 0.0022
    invert_pitch: bool = False
    server_host: str | None = None
    server_port: int = DEFAULT_PORT
    host_server: bool = False


def _forward(yaw: float) -> Vec3:
    # Matches the movement rotation: intent z = -1 walks along this vector.
    return Vec3(math.sin(yaw), 0.0, -math.cos(yaw))


@dataclass(slots=True)
class GameView:
    """Window loop glue: raylib input in, session step, snapshot drawn out."""

    config: GameConfig
    session: GameSession = field(init=False)
    aggregator: IntentAggregator = field(init=False)
    stick: TouchStick = field(default_factory=TouchStick)
    client: NetClient | None = field(init=False, default=None)
    server: BroadcastServer | None = field(init=False, default=None)
    _server_stop: threading.Event | None = field(init=False, default=None)
    _server_thread: threading.Thread | None = field(init=False, default=None)
    _look_touch: tuple[float, float] | None = field(init=False, default=None)
    _snapshot: WorldSnapshot | None = field(init=False, default=None)

    def __post_init__(self) -> None:
        self.session = GameSession.build(level_index=int(self.config.level))
        self.aggregator = IntentAggregator(
            mouse_sensitivity=float(self.config.mouse_sensitivity),
            touch_look_sensitivity=float(self.config.touch_look_sensitivity),
            invert_pitch=bool(self.config.invert_pitch),
        )

    def open(self) -> None:
        rl.disable_cursor()
        cfg = self.config
        if cfg.host_server:
            self.server = BroadcastServer(ServerConfig(bind_host="0.0.0.0", port=int(cfg.server_port)))
            self._server_thread, self._server_stop = start_server_thread(self.server)
        if cfg.server_host:
            self.client = NetClient(name=str(cfg.player_name), host=str(cfg.server_host), port=int(cfg.server_port))
            try:
                self.client.open()
            except OSError as exc:
                debug_log("net_open_failed", role="client", error=str(exc))
                self.client = None

    def close(self) -> None:
        if self.client is not None:
            self.client.close()
            self.client = None
        stop = self._server_stop
        if stop is not None:
            stop.set()
            if self._server_thread is not None:
                self._server_thread.join(timeout=1.0)
        self.server = None
        self._server_stop = None
        self._server_thread = None

    def _sample(self) -> InputSample:
        keys = frozenset(name for key, name in _KEY_NAMES if rl.is_key_down(key))
        mouse = rl.get_mouse_delta()

        half_width = float(rl.get_screen_width()) * 0.5
        stick_touch: tuple[float, float] | None = None
        look_touch: tuple[float, float] | None = None
        for idx in range(int(rl.get_touch_point_count())):
            pos = rl.get_touch_position(idx)
            if float(pos.x) < half_width:
                stick_touch = stick_touch or (float(pos.x), float(pos.y))
            else:
                look_touch = look_touch or (float(pos.x), float(pos.y))

        if stick_touch is None:
            self.stick.release()
        elif self.stick.origin is None:
            self.stick.press(*stick_touch)
        else:
            self.stick.drag(*stick_touch)

        look_dx = 0.0
        look_dy = 0.0
        prev = self._look_touch
        if look_touch is not None and prev is not None:
            look_dx = look_touch[0] - prev[0]
            look_dy = look_touch[1] - prev[1]
        self._look_touch = look_touch

        return InputSample(
            keys=keys,
            stick=self.stick.vector,
            run_touch=len(keys) == 0 and self.stick.vector.length() > 0.95,
            mouse_dx=float(mouse.x),
            mouse_dy=float(mouse.y),
            touch_look_dx=look_dx,
            touch_look_dy=look_dy,
        )

    def update(self, dt: float) -> None:
        session = self.session
        if rl.is_key_pressed(rl.KeyboardKey.KEY_R) or rl.is_key_pressed(rl.KeyboardKey.KEY_ENTER):
            if session.session_complete:
                session.new_game()
            elif session.caught:
                session.restart()

        frame = self.aggregator.poll(dt, self._sample)
        session.step(frame)
        self._snapshot = session.snapshot()

        client = self.client
        if client is not None:
            client.set_pose(session.player.pos, float(session.player.facing_yaw))
            client.update()

    def _camera(self, snapshot: WorldSnapshot) -> rl.Camera3D:
        player = snapshot.player
        forward = _forward(player.yaw)
        eye = player.pos - forward * CAMERA_DISTANCE + Vec3(0.0, CAMERA_HEIGHT, 0.0)
        target = player.pos + forward * CAMERA_LOOK_AHEAD + Vec3(0.0, 1.0 + math.sin(player.pitch) * CAMERA_LOOK_AHEAD, 0.0)
        return rl.Camera3D(
            eye.to_rl(),
            target.to_rl(),
            rl.Vector3(0.0, 1.0, 0.0),
            60.0,
            rl.CameraProjection.CAMERA_PERSPECTIVE,
        )

    def draw(self) -> None:
        snapshot = self._snapshot
        if snapshot is None:
            snapshot = self._snapshot = self.session.snapshot()
        lighting = snapshot.lighting
        ambient = float(lighting.ambient_intensity)
        rl.clear_background(lighting.sky.to_rl())

        camera = self._camera(snapshot)
        rl.begin_mode_3d(camera)
        rl.draw_plane(rl.Vector3(0.0, 0.0, 0.0), rl.Vector2(WORLD_SIZE, WORLD_SIZE), GRASS.shaded(ambient).to_rl())
        if lighting.sun_visible:
            sun = RGBA.from_hex(0xFFE9A8).shaded(max(0.4, float(lighting.sun_intensity)))
            rl.draw_sphere(lighting.sun_pos.to_rl(), 2.0, sun.to_rl())
        for item in snapshot.collectibles:
            rl.draw_cube(item.pos.offset(dy=0.3).to_rl(), 0.5, 0.5, 0.5, COLLECTIBLE_COLORS[item.kind].shaded(ambient).to_rl())
        for dog in snapshot.dogs:
            color = DOG_COLORS[dog.name].shaded(ambient)
            rl.draw_cube(dog.pos.offset(dy=0.5).to_rl(), 0.9, 1.0, 1.4, color.to_rl())
        rl.draw_cube(snapshot.player.pos.offset(dy=0.4).to_rl(), 0.6, 0.8, 1.0, PLAYER_COLOR.shaded(ambient).to_rl())
        if lighting.flashlight_on:
            beam = snapshot.player.pos + _forward(snapshot.player.yaw) * 3.0
            rl.draw_sphere(beam.offset(dy=0.05).to_rl(), 1.5, RGBA(1.0, 1.0, 0.8, 0.25).to_rl())
        remote = self.client.remote_players() if self.client is not None else []
        for pose in remote:
            rl.draw_cube(rl.Vector3(pose.x, pose.y + 0.4, pose.z), 0.6, 0.8, 1.0, REMOTE_COLOR.shaded(ambient).to_rl())
        rl.end_mode_3d()

        for pose in remote:
            label = rl.get_world_to_screen(rl.Vector3(pose.x, pose.y + 1.4, pose.z), camera)
            text_w = rl.measure_text(pose.name, 16)
            rl.draw_text(pose.name, int(label.x) - text_w // 2, int(label.y), 16, WHITE.to_rl())

        self._draw_hud(snapshot)

    def _draw_hud(self, snapshot: WorldSnapshot) -> None:
        hud = snapshot.hud
        white = WHITE.to_rl()
        rl.draw_text(f"Level {hud.level_index}", 16, 16, 20, white)
        rl.draw_text(f"{hud.objective}: {hud.collected}/{hud.total}", 16, 40, 20, white)
        rl.draw_text(hud.status, 16, 64, 20, white)
        client = self.client
        if client is not None:
            if client.error:
                net_text = f"net: {client.error}"
            elif client.joined:
                net_text = f"net: {len(client.players)}/{client.capacity} players"
            else:
                net_text = "net: joining"
            rl.draw_text(net_text, 16, 88, 16, white)

        overlay = snapshot.overlay
        if overlay is None:
            return
        width = rl.get_screen_width()
        height = rl.get_screen_height()
        rl.draw_rectangle(0, 0, width, height, RGBA(0.0, 0.0, 0.0, 0.5).to_rl())
        title_w = rl.measure_text(overlay.title, 40)
        body_w = rl.measure_text(overlay.body, 20)
        rl.draw_text(overlay.title, (width - title_w) // 2, height // 2 - 40, 40, white)
        rl.draw_text(overlay.body, (width - body_w) // 2, height // 2 + 10, 20, white)


def run_view(
    view: GameView,
    *,
    width: int = 1280,
    height: int = 720,
    title: str = "Dog Chase",
    fps: int = 60,
) -> None:
    """Run a Raylib window around a game view."""
    rl.init_window(width, height, title)
    rl.set_target_fps(fps)
    clock = FrameClock()
    view.open()
    try:
        while not rl.window_should_close():
            view.update(clock.tick())
            rl.begin_drawing()
            view.draw()
            rl.end_drawing()
    finally:
        view.close()
        rl.close_window()


def run_game(config: GameConfig) -> None:
    debug_log("game_start", level=int(config.level), server=str(config.server_host), host=bool(config.host_server))
    run_view(
        GameView(config),
        width=int(config.width),
        height=int(config.height),
        fps=int(config.fps),
    )


if __name__ == "__main__":
    run_game(GameConfig())
