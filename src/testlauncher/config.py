"""Configuration management for TestLauncher."""

import json
from pathlib import Path
from typing import Optional, Sequence

import click
from click.core import ParameterSource
from pydantic import BaseModel, Field, field_validator


DEFAULT_REMOTE_PORT = 8989
CONFIG_NAMES = ["testlauncher.json", ".testlauncher.json"]


def _validate_port(v: int) -> int:
    if not 1 <= v <= 65535:
        raise ValueError("Port must be between 1 and 65535")
    return v


def _validate_command(v: str) -> str:
    if not v.strip():
        raise ValueError("Test command cannot be empty")
    return v


class CommandConfig(BaseModel):
    """Test command configuration."""

    command: str = Field(default="pytest", description="Test command to execute (e.g., 'pytest', 'python -m unittest')")
    args: list[str] = Field(default_factory=list, description="Extra arguments passed to the test command")
    paths: list[str] = Field(default_factory=list, description="Test paths used when none are given on the command line")
    working_directory: str = Field(default=".", description="Directory to run command in")
    environment: dict[str, str] = Field(default_factory=dict, description="Additional environment variables")
    fail_fast: bool = Field(default=False, description="Stop on the first failure")

    @field_validator("command")
    @classmethod
    def validate_command(cls, v: str) -> str:
        return _validate_command(v)


class RemoteConfig(BaseModel):
    """Remote launcher server configuration."""

    enabled: bool = Field(default=False, description="Delegate runs to a remote launcher server")
    host: str = Field(default="127.0.0.1", description="Remote server host")
    port: int = Field(default=DEFAULT_REMOTE_PORT, description="Remote server port")
    timeout_seconds: Optional[float] = Field(
        default=None, description="Read timeout for remote runs (None waits for the run to finish)"
    )

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        return _validate_port(v)


class OutputConfig(BaseModel):
    """Console output configuration."""

    color: bool = Field(default=False, description="Emit ANSI colour codes")


class LauncherConfig(BaseModel):
    """Settings loaded from testlauncher.json."""

    test: CommandConfig = Field(default_factory=CommandConfig)
    remote: RemoteConfig = Field(default_factory=RemoteConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    @classmethod
    def from_file(cls, path: Path | str) -> "LauncherConfig":
        """Load configuration from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path, "r") as f:
            data = json.load(f)

        return cls.model_validate(data)

    @classmethod
    def find(cls, start_dir: Path | str | None = None) -> Optional[Path]:
        """Find a configuration file, searching up the directory tree."""
        if start_dir is None:
            start_dir = Path.cwd()
        else:
            start_dir = Path(start_dir)

        current = start_dir.resolve()
        while True:
            for name in CONFIG_NAMES:
                config_path = current / name
                if config_path.exists():
                    return config_path
            if current == current.parent:
                return None
            current = current.parent

    @classmethod
    def find_and_load(cls, start_dir: Path | str | None = None) -> "LauncherConfig":
        """Find and load a configuration file, falling back to defaults."""
        config_path = cls.find(start_dir)
        if config_path is None:
            return cls()
        return cls.from_file(config_path)

    def to_file(self, path: Path | str) -> None:
        """Save configuration to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            json.dump(self.model_dump(), f, indent=2)


class RunConfiguration(BaseModel):
    """Options for a single run, derived from the command line."""

    color: bool = False
    remote: bool = False
    remote_host: str = "127.0.0.1"
    remote_port: int = DEFAULT_REMOTE_PORT
    remote_timeout: Optional[float] = None
    command: str = "pytest"
    args: list[str] = Field(default_factory=list)
    paths: list[str] = Field(default_factory=list)
    working_directory: str = "."
    environment: dict[str, str] = Field(default_factory=dict)
    fail_fast: bool = False
    verbose: bool = False
    argv: list[str] = Field(default_factory=list, description="Raw arguments, forwarded to a remote server")

    @field_validator("remote_port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        return _validate_port(v)

    @field_validator("command")
    @classmethod
    def validate_command(cls, v: str) -> str:
        return _validate_command(v)

    @property
    def remote_url(self) -> str:
        return f"http://{self.remote_host}:{self.remote_port}"


_options_command = click.Command(
    "testlauncher",
    params=[
        click.Option(["--color/--no-color"], default=False, help="Enable ANSI colour output"),
        click.Option(
            ["--remote/--no-remote", "--drb/--no-drb", "remote"],
            default=False,
            help="Run on a remote launcher server if one is listening",
        ),
        click.Option(["--remote-host"], default=None, help="Remote server host"),
        click.Option(
            ["--remote-port"],
            type=int,
            default=None,
            envvar="TESTLAUNCHER_REMOTE_PORT",
            help="Remote server port",
        ),
        click.Option(["--command"], default=None, help="Test command to execute"),
        click.Option(["--arg", "extra_args"], multiple=True, help="Extra argument for the test command (repeatable)"),
        click.Option(["--fail-fast", "-x"], is_flag=True, default=False, help="Stop on the first failure"),
        click.Option(["--verbose", "-v"], is_flag=True, default=False, help="Print diagnostic output"),
        click.Option(
            ["--config", "-c"],
            type=click.Path(exists=False),
            default=None,
            help="Path to configuration file (default: testlauncher.json)",
        ),
        click.Argument(["paths"], nargs=-1),
    ],
)


def _pick(ctx: click.Context, name: str, fallback):
    """Return the command-line value of 'name', or 'fallback' if it was not given."""
    source = ctx.get_parameter_source(name)
    if source in (None, ParameterSource.DEFAULT, ParameterSource.DEFAULT_MAP):
        return fallback
    return ctx.params[name]


class ConfigurationOptions:
    """Parses launcher arguments into a RunConfiguration.

    Values from the configuration file are defaults; command-line options
    override them. The file is read every time ``parse_options`` is called.
    """

    def __init__(self, args: Sequence[str], base_dir: Path | str | None = None):
        self.args = list(args)
        self.base_dir = base_dir
        self.options: dict = {}

    def parse_options(self) -> RunConfiguration:
        """Parse the arguments.

        Raises:
            click.UsageError: For unknown options or malformed values
            FileNotFoundError: If an explicit --config file does not exist
            pydantic.ValidationError: If the resulting values are invalid
        """
        ctx = _options_command.make_context("testlauncher", list(self.args))
        self.options = dict(ctx.params)
        file_config = self._load_file_config(self.options.get("config"))

        return RunConfiguration(
            color=_pick(ctx, "color", file_config.output.color),
            remote=_pick(ctx, "remote", file_config.remote.enabled),
            remote_host=_pick(ctx, "remote_host", file_config.remote.host),
            remote_port=_pick(ctx, "remote_port", file_config.remote.port),
            remote_timeout=file_config.remote.timeout_seconds,
            command=_pick(ctx, "command", file_config.test.command),
            args=list(file_config.test.args) + list(self.options["extra_args"]),
            paths=list(self.options["paths"]) or list(file_config.test.paths),
            working_directory=file_config.test.working_directory,
            environment=dict(file_config.test.environment),
            fail_fast=_pick(ctx, "fail_fast", file_config.test.fail_fast),
            verbose=self.options["verbose"],
            argv=self.args,
        )

    def _load_file_config(self, config_path: Optional[str]) -> LauncherConfig:
        if config_path:
            return LauncherConfig.from_file(config_path)
        return LauncherConfig.find_and_load(self.base_dir)


def get_default_config() -> LauncherConfig:
    """Return a default configuration."""
    return LauncherConfig(
        test=CommandConfig(command="pytest", args=["--tb=short"], working_directory="."),
        remote=RemoteConfig(enabled=False),
    )


def create_example_config(output_path: Path | str) -> Path:
    """Create an example configuration file."""
    output_path = Path(output_path)
    config = get_default_config()
    config.test.paths = ["tests/"]
    config.to_file(output_path)
    return output_path
