"""
Setup data model.

Strongly typed contract between the detection stages and the renderers.
Options come from the CLI, facts from the host, and the launch configuration
is assembled from both once per run.
"""

from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


DEFAULT_FORK = "automaticrippingmachine"
DEFAULT_TAG = "latest"
DEFAULT_PORT = 8080
DEFAULT_USER = "arm"
DEFAULT_CONTAINER_NAME = "arm-rippers"
IMAGE_NAME = "automatic-ripping-machine"
CONTAINER_PORT = 8080
LAUNCH_SCRIPT_NAME = "start_arm_container.sh"

# Logical directory -> path inside the container.  Order is the order of the
# -v flags in the launch script.
CONTAINER_PATHS = {
    "music": "/home/arm/music",
    "logs": "/home/arm/logs",
    "media": "/home/arm/media",
    "config": "/etc/arm/config",
}


# --- Options (from the command line) ---


class SetupOptions(BaseModel):
    """Validated command-line options."""

    fork: str = DEFAULT_FORK
    tag: str = DEFAULT_TAG
    host_port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    user: str = DEFAULT_USER
    container_name: str = DEFAULT_CONTAINER_NAME
    enable_gpu: Optional[bool] = None  # None: ask the operator
    interactive: bool = True
    skip_requirements: bool = False
    skip_pull: bool = False

    @field_validator("fork", "tag", "user", "container_name")
    @classmethod
    def _non_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v

    @property
    def image(self) -> str:
        return f"{self.fork}/{IMAGE_NAME}:{self.tag}"


# --- Provisioning results ---


class ServiceAccount(BaseModel):
    name: str
    group: str
    created: bool = False  # True when this run created the user


# --- Detected host facts ---


class HostFacts(BaseModel):
    """Output of the host inspector."""

    uid: int = Field(gt=0)
    gid: int = Field(gt=0)
    home: Path
    timezone: str = "UTC"
    total_cores: int = 1
    cpu_cores: List[int] = Field(default_factory=lambda: [0])
    warnings: List[dict] = Field(default_factory=list)


# --- Launch configuration (consumed by the renderer) ---


class VolumeBinding(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    host_path: str
    container_path: str


class LaunchConfig(BaseModel):
    """Everything the launch script encodes.  Built once, never mutated."""

    model_config = ConfigDict(frozen=True)

    image: str = Field(min_length=1)
    host_port: int = DEFAULT_PORT
    uid: int = Field(gt=0)
    gid: int = Field(gt=0)
    timezone: str = "UTC"
    home: Path
    devices: List[str] = Field(default_factory=list)
    enable_gpu: bool = False
    cpu_cores: List[int] = Field(default_factory=list)
    container_name: str = DEFAULT_CONTAINER_NAME

    @field_validator("devices")
    @classmethod
    def _dedupe_devices(cls, v: List[str]) -> List[str]:
        return list(dict.fromkeys(v))

    @property
    def container_port(self) -> int:
        return CONTAINER_PORT

    @property
    def volumes(self) -> List[VolumeBinding]:
        return [
            VolumeBinding(name=name, host_path=str(self.home / name), container_path=cpath)
            for name, cpath in CONTAINER_PATHS.items()
        ]

    @property
    def cpuset(self) -> str:
        return ",".join(str(c) for c in self.cpu_cores)

    @property
    def script_path(self) -> Path:
        return self.home / LAUNCH_SCRIPT_NAME


def build_launch_config(
    options: SetupOptions,
    facts: HostFacts,
    devices: List[str],
    enable_gpu: bool,
) -> LaunchConfig:
    """Assemble the launch configuration from options and detected facts."""
    return LaunchConfig(
        image=options.image,
        host_port=options.host_port,
        uid=facts.uid,
        gid=facts.gid,
        timezone=facts.timezone or "UTC",
        home=facts.home,
        devices=devices,
        enable_gpu=enable_gpu,
        cpu_cores=facts.cpu_cores,
        container_name=options.container_name,
    )
