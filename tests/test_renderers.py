"""
Tests for the launch-script renderer: structure of the generated docker run
command, backup of a previous script, file mode and ownership.
"""

import os
import stat
from pathlib import Path

import pytest

from armsetup.renderers import make_env, render_launch_script, render_summary, shell_dq
from armsetup.renderers.launch_script import render_text
from armsetup.schema import LaunchConfig


def _config(home: Path, **overrides) -> LaunchConfig:
    values = dict(
        image="automaticrippingmachine/automatic-ripping-machine:latest",
        host_port=8080,
        uid=1001,
        gid=1001,
        timezone="America/New_York",
        home=home,
        devices=[],
        enable_gpu=False,
        cpu_cores=[1, 2, 3],
    )
    values.update(overrides)
    return LaunchConfig(**values)


@pytest.fixture
def env():
    return make_env()


def _lines(text: str):
    return [line.strip() for line in text.splitlines()]


def test_script_shape(home, env):
    text = render_text(_config(home), env)
    lines = text.splitlines()
    assert lines[0] == "#!/bin/bash"
    assert lines[1].startswith("# This script was auto-generated")
    assert "docker run -d \\" in lines
    assert lines[-1].strip() == '"automaticrippingmachine/automatic-ripping-machine:latest"'
    # every line of the command but the last continues
    cmd = lines[lines.index("docker run -d \\"):]
    assert all(line.endswith("\\") for line in cmd[:-1])
    assert text.endswith("\n")


def test_identity_and_port(home, env):
    lines = _lines(render_text(_config(home, host_port=9090), env))
    assert '-p "9090:8080" \\' in lines
    assert '-e PUID="1001" \\' in lines
    assert '-e PGID="1001" \\' in lines
    assert '-e TZ="America/New_York" \\' in lines


def test_volume_bindings(home, env):
    lines = _lines(render_text(_config(home), env))
    assert f'-v "{home}/music:/home/arm/music" \\' in lines
    assert f'-v "{home}/logs:/home/arm/logs" \\' in lines
    assert f'-v "{home}/media:/home/arm/media" \\' in lines
    assert f'-v "{home}/config:/etc/arm/config" \\' in lines


@pytest.mark.parametrize("devices", [[], ["/dev/sr0"], ["/dev/sr0", "/dev/sg1", "/dev/sr1", "/dev/sg2"]])
def test_exactly_four_mounts_regardless_of_devices(home, env, devices):
    lines = _lines(render_text(_config(home, devices=devices), env))
    assert sum(1 for line in lines if line.startswith("-v ")) == 4


def test_devices_in_enumeration_order(home, env):
    lines = _lines(render_text(_config(home, devices=["/dev/sr0", "/dev/sr1"]), env))
    device_lines = [line for line in lines if line.startswith("--device=")]
    assert device_lines == [
        '--device="/dev/sr0:/dev/sr0" \\',
        '--device="/dev/sr1:/dev/sr1" \\',
    ]


def test_no_devices_no_device_flags(home, env):
    text = render_text(_config(home, devices=[]), env)
    assert "--device" not in text


def test_duplicate_devices_collapse(home, env):
    text = render_text(_config(home, devices=["/dev/sr0", "/dev/sr0"]), env)
    assert text.count("--device=") == 1


def test_gpu_flags_only_when_enabled(home, env):
    off = render_text(_config(home, enable_gpu=False), env)
    on = render_text(_config(home, enable_gpu=True), env)
    for flag in ("--gpus all", "NVIDIA_VISIBLE_DEVICES=all", "NVIDIA_DRIVER_CAPABILITIES=all"):
        assert flag not in off
        assert flag in on


def test_fixed_flags(home, env):
    lines = _lines(render_text(_config(home), env))
    assert "--privileged \\" in lines
    assert '--restart "always" \\' in lines
    assert '--name "arm-rippers" \\' in lines


def test_cpuset(home, env):
    assert "--cpuset-cpus='1,2,3' \\" in _lines(render_text(_config(home), env))
    assert "--cpuset-cpus='0' \\" in _lines(render_text(_config(home, cpu_cores=[0]), env))
    assert "--cpuset-cpus" not in render_text(_config(home, cpu_cores=[]), env)


def test_values_are_escaped_for_double_quotes():
    assert shell_dq('a"b$c`d\\e') == 'a\\"b\\$c\\`d\\\\e'


def test_render_writes_executable_owned_script(home, env, chown_calls):
    config = _config(home)
    path = render_launch_script(config, env, chown=chown_calls)
    assert path == home / "start_arm_container.sh"
    assert path.read_text() == render_text(config, env)
    assert stat.S_IMODE(path.stat().st_mode) & stat.S_IXUSR
    assert os.access(path, os.X_OK)
    assert chown_calls.calls == [(path, 1001, 1001)]


def test_existing_script_is_backed_up(home, env, chown_calls):
    path = home / "start_arm_container.sh"
    path.write_text("#!/bin/bash\necho old\n")
    render_launch_script(_config(home), env, chown=chown_calls)
    backup = home / "start_arm_container.sh.bak"
    assert backup.read_text() == "#!/bin/bash\necho old\n"
    assert "docker run -d" in path.read_text()


def test_older_backup_is_replaced(home, env, chown_calls):
    (home / "start_arm_container.sh.bak").write_text("oldest\n")
    (home / "start_arm_container.sh").write_text("previous\n")
    render_launch_script(_config(home), env, chown=chown_calls)
    assert (home / "start_arm_container.sh.bak").read_text() == "previous\n"


def test_summary(env, capsys):
    text = render_summary(Path("/home/arm/start_arm_container.sh"), "arm", "arm-rippers", env)
    assert "sudo -u arm /home/arm/start_arm_container.sh" in text
    assert "docker logs -f arm-rippers" in text
    assert "docker stop arm-rippers" in text
    assert "ARM Docker Setup Complete!" in capsys.readouterr().out
