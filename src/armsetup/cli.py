"""
CLI argument parsing. Flags mirror the original setup script (-f, -t) plus
switches for unattended runs.
"""

import argparse
from typing import Optional

from .schema import (
    DEFAULT_CONTAINER_NAME,
    DEFAULT_FORK,
    DEFAULT_PORT,
    DEFAULT_TAG,
    DEFAULT_USER,
    SetupOptions,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="armsetup",
        description="Set up the Automatic Ripping Machine (ARM) Docker environment "
                    "and generate a container start script. Requires root.",
    )
    parser.add_argument(
        "-f",
        "--fork",
        default=DEFAULT_FORK,
        metavar="FORK",
        help=f"Fork (image namespace) to pull from on DockerHub (default: {DEFAULT_FORK})",
    )
    parser.add_argument(
        "-t",
        "--tag",
        default=DEFAULT_TAG,
        metavar="TAG",
        help=f"Image tag to pull from DockerHub (default: {DEFAULT_TAG})",
    )
    parser.add_argument(
        "-p",
        "--port",
        dest="host_port",
        type=int,
        default=DEFAULT_PORT,
        metavar="PORT",
        help=f"Host port mapped to the ARM web UI (default: {DEFAULT_PORT})",
    )
    parser.add_argument(
        "-u",
        "--user",
        default=DEFAULT_USER,
        metavar="NAME",
        help=f"Service account that owns the container (default: {DEFAULT_USER})",
    )
    parser.add_argument(
        "--container-name",
        default=DEFAULT_CONTAINER_NAME,
        metavar="NAME",
        help=f"Name given to the container (default: {DEFAULT_CONTAINER_NAME})",
    )

    gpu = parser.add_mutually_exclusive_group()
    gpu.add_argument(
        "--gpu",
        dest="enable_gpu",
        action="store_const",
        const=True,
        default=None,
        help="Enable NVIDIA GPU passthrough without asking",
    )
    gpu.add_argument(
        "--no-gpu",
        dest="enable_gpu",
        action="store_const",
        const=False,
        help="Disable NVIDIA GPU passthrough without asking",
    )

    parser.add_argument(
        "--non-interactive",
        action="store_true",
        help="Never prompt; unanswered questions default to 'no'",
    )
    parser.add_argument(
        "--skip-requirements",
        action="store_true",
        help="Do not apt-install curl and lsscsi",
    )
    parser.add_argument(
        "--skip-pull",
        action="store_true",
        help="Do not pull the image (e.g. it is already present)",
    )
    return parser


def parse_args(argv: Optional[list[str]] = None) -> SetupOptions:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return SetupOptions(
            fork=args.fork,
            tag=args.tag,
            host_port=args.host_port,
            user=args.user,
            container_name=args.container_name,
            enable_gpu=args.enable_gpu,
            interactive=not args.non_interactive,
            skip_requirements=args.skip_requirements,
            skip_pull=args.skip_pull,
        )
    except ValueError as exc:
        parser.error(str(exc))
