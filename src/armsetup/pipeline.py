"""
Pipeline orchestrator: preflight, provisioning, detection, then rendering.

Stages run strictly in order and hand each other explicit values.  A fatal
error raises out of the stage that failed; the launch script is rendered last,
so a failed run never leaves a partial script behind.
"""

import os
from pathlib import Path
from typing import Callable, Optional

from jinja2 import Environment

from . import _util
from . import provision
from .executor import Executor
from .inspectors import _safe_run, report_warnings
from .inspectors import host as host_inspector
from .inspectors import optical as optical_inspector
from .preflight import require_privileges
from .renderers import render_launch_script
from .schema import LaunchConfig, SetupOptions, build_launch_config

Prompt = Callable[[str], bool]

GPU_QUESTION = "Do you have NVIDIA GPU with CUDA/NVENC support?"


def _gpu_enabled(options: SetupOptions, prompt: Prompt) -> bool:
    if options.enable_gpu is not None:
        enabled = options.enable_gpu
    else:
        enabled = prompt(GPU_QUESTION)
    if enabled:
        _util.success("NVIDIA GPU support will be enabled.")
    else:
        _util.warn("NVIDIA GPU support disabled.")
    return enabled


def run_pipeline(
    options: SetupOptions,
    *,
    executor: Executor,
    prompt: Prompt,
    env: Environment,
    dev_root: Path = Path("/dev"),
    mnt_root: Path = Path("/mnt"),
    docker_binary: Path = provision.DOCKER_BINARY,
    check_privileges: Optional[Callable[[], None]] = require_privileges,
    chown: provision.Chown = os.chown,
) -> LaunchConfig:
    """
    Provision the host and write the launch script.

    Returns the launch configuration that was rendered.
    """
    if check_privileges is not None:
        check_privileges()

    if not options.skip_requirements:
        provision.install_requirements(executor)
    account = provision.ensure_service_account(executor, options.user, prompt)
    provision.ensure_container_runtime(executor, account.name, docker_binary)
    if not options.skip_pull:
        provision.pull_image(executor, account.name, options.image)

    _util.status("Detecting system configuration")
    facts = host_inspector.run(executor, account.name)
    provision.prepare_mount_points(dev_root, mnt_root, facts.uid, facts.gid, chown=chown)
    provision.ensure_directories(facts.home, facts.uid, facts.gid, chown=chown)
    enable_gpu = _gpu_enabled(options, prompt)
    _util.success(f"Container will be pinned to CPU cores: {','.join(map(str, facts.cpu_cores))}")

    _util.status("Detecting optical devices")
    warnings = list(facts.warnings)
    devices = _safe_run(
        "optical",
        lambda: optical_inspector.run(executor, dev_root, warnings),
        [],
        warnings,
    )
    if devices:
        _util.success(f"Detected optical drives: {' '.join(devices)}")
    report_warnings(warnings)

    config = build_launch_config(options, facts, devices, enable_gpu)
    render_launch_script(config, env, chown=chown)
    return config
