"""Product manifest loading and validation."""

import ntpath
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml


class ConfigError(Exception):
    """Raised when the product manifest cannot be loaded or is invalid."""
    pass


@dataclass
class ArchiveConfig:
    """A zip shipped in the assets dir and the executable it must produce."""
    path: str
    executable: str


@dataclass
class ShortcutConfig:
    name: str
    target: str
    folder: bool = False


@dataclass
class StartupConfig:
    name: str
    target: str


@dataclass
class YncConfig:
    assets_dir: str
    installer_glob: str
    executable: str


@dataclass
class LaunchConfig:
    name: str
    target: str
    optional: bool = False


@dataclass
class ProductConfig:
    """Everything the installer, uninstaller and launcher know about the product."""
    product: str
    display_name: str
    install_dir: str
    archives: list[ArchiveConfig] = field(default_factory=list)
    launcher: str | None = None
    shortcuts: list[ShortcutConfig] = field(default_factory=list)
    startup: StartupConfig | None = None
    ync: YncConfig | None = None
    processes_to_stop: list[str] = field(default_factory=list)
    shortcuts_to_remove: list[str] = field(default_factory=list)
    launch: list[LaunchConfig] = field(default_factory=list)

    def __post_init__(self):
        if not self.product or not isinstance(self.product, str):
            raise ValueError("product must be a non-empty string")
        if not self.display_name or not isinstance(self.display_name, str):
            raise ValueError("display_name must be a non-empty string")
        if not self.install_dir or not isinstance(self.install_dir, str):
            raise ValueError("install_dir must be a non-empty string")


def resolve_target(install_dir: str, target: str) -> str:
    """Resolve a manifest target against the install dir unless it is absolute."""
    if ntpath.isabs(target) or os.path.isabs(target):
        return target
    return os.path.join(install_dir, *target.split("/"))


def get_packaged_config_path() -> Path:
    """Return path to the packaged product manifest."""
    return Path(__file__).parent / "product.yaml"


def get_config_path(env: dict[str, str] | None = None) -> Path:
    """Return the manifest path: EARSCOPE_CONFIG if set, else the packaged one."""
    env = os.environ if env is None else env
    if env.get("EARSCOPE_CONFIG"):
        return Path(env["EARSCOPE_CONFIG"])
    return get_packaged_config_path()


def _require_str(data: dict, key: str, where: str) -> str:
    if key not in data:
        raise ConfigError(f"{where}.{key} is required")
    value = data[key]
    if not isinstance(value, str) or not value:
        raise ConfigError(
            f"{where}.{key} must be a non-empty string, got {type(value).__name__}"
        )
    return value


def _optional_str(data: dict, key: str, where: str) -> str | None:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise ConfigError(
            f"{where}.{key} must be a string or null, got {type(value).__name__}"
        )
    return value


def _list_of(data: dict, key: str) -> list:
    value = data.get(key) or []
    if not isinstance(value, list):
        raise ConfigError(f"{key} must be a list, got {type(value).__name__}")
    return value


def _mapping(item: object, where: str) -> dict:
    if not isinstance(item, dict):
        raise ConfigError(f"{where} must be an object, got {type(item).__name__}")
    return item


def validate_config(data: dict) -> ProductConfig:
    """Validate and convert a raw manifest dict to ProductConfig.

    Raises:
        ConfigError: If validation fails, naming the offending field path
    """
    if not isinstance(data, dict):
        raise ConfigError(f"Manifest must be a mapping, got {type(data).__name__}")

    archives = []
    for i, item in enumerate(_list_of(data, "archives")):
        where = f"archives[{i}]"
        item = _mapping(item, where)
        archives.append(
            ArchiveConfig(
                path=_require_str(item, "path", where),
                executable=_require_str(item, "executable", where),
            )
        )

    shortcuts = []
    for i, item in enumerate(_list_of(data, "shortcuts")):
        where = f"shortcuts[{i}]"
        item = _mapping(item, where)
        shortcuts.append(
            ShortcutConfig(
                name=_require_str(item, "name", where),
                target=_require_str(item, "target", where),
                folder=bool(item.get("folder", False)),
            )
        )

    launch = []
    for i, item in enumerate(_list_of(data, "launch")):
        where = f"launch[{i}]"
        item = _mapping(item, where)
        launch.append(
            LaunchConfig(
                name=_require_str(item, "name", where),
                target=_require_str(item, "target", where),
                optional=bool(item.get("optional", False)),
            )
        )

    startup = None
    if data.get("startup") is not None:
        item = _mapping(data["startup"], "startup")
        startup = StartupConfig(
            name=_require_str(item, "name", "startup"),
            target=_require_str(item, "target", "startup"),
        )

    ync = None
    if data.get("ync") is not None:
        item = _mapping(data["ync"], "ync")
        ync = YncConfig(
            assets_dir=_require_str(item, "assets_dir", "ync"),
            installer_glob=_require_str(item, "installer_glob", "ync"),
            executable=_require_str(item, "executable", "ync"),
        )

    for key in ("processes_to_stop", "shortcuts_to_remove"):
        for i, name in enumerate(_list_of(data, key)):
            if not isinstance(name, str) or not name:
                raise ConfigError(f"{key}[{i}] must be a non-empty string")

    try:
        return ProductConfig(
            product=_require_str(data, "product", "manifest"),
            display_name=_require_str(data, "display_name", "manifest"),
            install_dir=_require_str(data, "install_dir", "manifest"),
            archives=archives,
            launcher=_optional_str(data, "launcher", "manifest"),
            shortcuts=shortcuts,
            startup=startup,
            ync=ync,
            processes_to_stop=list(_list_of(data, "processes_to_stop")),
            shortcuts_to_remove=list(_list_of(data, "shortcuts_to_remove")),
            launch=launch,
        )
    except ValueError as e:
        raise ConfigError(f"manifest: {e}") from e


def load_config(path: Path | None = None) -> ProductConfig:
    """Load and validate the product manifest.

    Raises:
        ConfigError: If the file is missing, is not valid YAML, or fails validation
    """
    config_path = path or get_config_path()
    if not config_path.exists():
        raise ConfigError(f"Manifest not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    return validate_config(data)


__all__ = [
    "ConfigError",
    "ArchiveConfig",
    "ShortcutConfig",
    "StartupConfig",
    "YncConfig",
    "LaunchConfig",
    "ProductConfig",
    "resolve_target",
    "get_packaged_config_path",
    "get_config_path",
    "validate_config",
    "load_config",
]
