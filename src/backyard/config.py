from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from construct import Byte, Bytes, Float32l, Int32ul, Struct

DOGCHASE_CFG_NAME = "dogchase.cfg"
DOGCHASE_CFG_SIZE = 0x80
PLAYER_NAME_SIZE = 0x20
PLAYER_NAME_MAX_CHARS = 16
SERVER_HOST_SIZE = 0x40
SERVER_HOST_MAX_BYTES = SERVER_HOST_SIZE - 1

DEFAULT_PLAYER_NAME = "player"
DEFAULT_SERVER_HOST = "127.0.0.1"
DEFAULT_SERVER_PORT = 31994
DEFAULT_MOUSE_SENSITIVITY = 0.002
DEFAULT_TOUCH_LOOK_SENSITIVITY = 0.0022

DOGCHASE_CFG_STRUCT = Struct(
    "player_name" / Bytes(PLAYER_NAME_SIZE),
    "player_name_len" / Int32ul,
    "mouse_sensitivity" / Float32l,
    "touch_look_sensitivity" / Float32l,
    "server_host" / Bytes(SERVER_HOST_SIZE),
    "server_port" / Int32ul,
    "screen_width" / Int32ul,
    "screen_height" / Int32ul,
    "fps" / Int32ul,
    "invert_pitch" / Byte,
    "reserved_7d" / Bytes(3),
)


def _decode_cstr(raw: bytes) -> str:
    return bytes(raw).split(b"\x00", 1)[0].decode("latin-1", errors="ignore")


def _encode_cstr(text: str, *, size: int) -> bytes:
    encoded = text.encode("latin-1", errors="ignore")[: size - 1]
    buf = bytearray(size)
    buf[: len(encoded)] = encoded
    return bytes(buf)


@dataclass(slots=True)
class DogchaseConfig:
    path: Path
    data: dict

    @property
    def player_name(self) -> str:
        return _decode_cstr(self.data["player_name"])

    @player_name.setter
    def player_name(self, value: str) -> None:
        self.set_player_name(value)

    def set_player_name(self, name: str) -> None:
        # Names share the roster limit; surrounding whitespace is never stored.
        trimmed = str(name).strip()[:PLAYER_NAME_MAX_CHARS]
        self.data["player_name"] = _encode_cstr(trimmed, size=PLAYER_NAME_SIZE)
        self.data["player_name_len"] = len(trimmed)

    @property
    def mouse_sensitivity(self) -> float:
        return float(self.data["mouse_sensitivity"])

    @mouse_sensitivity.setter
    def mouse_sensitivity(self, value: float) -> None:
        self.data["mouse_sensitivity"] = float(value)

    @property
    def touch_look_sensitivity(self) -> float:
        return float(self.data["touch_look_sensitivity"])

    @touch_look_sensitivity.setter
    def touch_look_sensitivity(self, value: float) -> None:
        self.data["touch_look_sensitivity"] = float(value)

    @property
    def server_host(self) -> str:
        return _decode_cstr(self.data["server_host"])

    @server_host.setter
    def server_host(self, value: str) -> None:
        self.data["server_host"] = _encode_cstr(str(value).strip(), size=SERVER_HOST_SIZE)

    @property
    def server_port(self) -> int:
        return int(self.data["server_port"])

    @server_port.setter
    def server_port(self, value: int) -> None:
        port = int(value)
        if port < 1 or port > 65535:
            raise ValueError(f"server port out of range: {port}")
        self.data["server_port"] = port

    @property
    def screen_width(self) -> int:
        return int(self.data["screen_width"])

    @screen_width.setter
    def screen_width(self, value: int) -> None:
        self.data["screen_width"] = int(value)

    @property
    def screen_height(self) -> int:
        return int(self.data["screen_height"])

    @screen_height.setter
    def screen_height(self, value: int) -> None:
        self.data["screen_height"] = int(value)

    @property
    def fps(self) -> int:
        return int(self.data["fps"])

    @fps.setter
    def fps(self, value: int) -> None:
        self.data["fps"] = int(value)

    @property
    def invert_pitch(self) -> bool:
        return bool(self.data["invert_pitch"])

    @invert_pitch.setter
    def invert_pitch(self, value: bool) -> None:
        self.data["invert_pitch"] = 1 if value else 0

    def save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_bytes(DOGCHASE_CFG_STRUCT.build(self.data))


def default_dogchase_cfg_data() -> dict:
    data = DOGCHASE_CFG_STRUCT.parse(bytes(DOGCHASE_CFG_SIZE))
    config = DogchaseConfig(path=Path("<memory>"), data=data)
    config.set_player_name(DEFAULT_PLAYER_NAME)
    config.mouse_sensitivity = DEFAULT_MOUSE_SENSITIVITY
    config.touch_look_sensitivity = DEFAULT_TOUCH_LOOK_SENSITIVITY
    config.server_host = DEFAULT_SERVER_HOST
    config.server_port = DEFAULT_SERVER_PORT
    config.screen_width = 1280
    config.screen_height = 720
    config.fps = 60
    config.invert_pitch = False
    return data


def load_dogchase_cfg(path: Path) -> DogchaseConfig:
    data = path.read_bytes()
    if len(data) != DOGCHASE_CFG_SIZE:
        raise ValueError(f"{path} has unexpected size {len(data)} (expected {DOGCHASE_CFG_SIZE})")
    parsed = DOGCHASE_CFG_STRUCT.parse(data)
    return DogchaseConfig(path=path, data=parsed)


def ensure_dogchase_cfg(base_dir: Path) -> DogchaseConfig:
    path = base_dir / DOGCHASE_CFG_NAME
    if path.exists():
        config = load_dogchase_cfg(path)
        # Zeroed sensitivities come from hand-edited files; restore usable defaults.
        patched = False
        if not (config.mouse_sensitivity > 0.0):
            config.mouse_sensitivity = DEFAULT_MOUSE_SENSITIVITY
            patched = True
        if not (config.touch_look_sensitivity > 0.0):
            config.touch_look_sensitivity = DEFAULT_TOUCH_LOOK_SENSITIVITY
            patched = True
        if config.server_port < 1 or config.server_port > 65535:
            config.server_port = DEFAULT_SERVER_PORT
            patched = True
        if patched:
            config.save()
        return config
    config = DogchaseConfig(path=path, data=default_dogchase_cfg_data())
    config.save()
    return config
