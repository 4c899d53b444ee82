"""
CLI entry point. Parses args and delegates to the pipeline.
"""

import sys
from typing import Optional

from . import _util
from .cli import parse_args
from .errors import SetupError


def main(argv: Optional[list] = None) -> int:
    options = parse_args(argv)

    from .executor import make_executor
    from .pipeline import run_pipeline
    from .prompt import never, prompt_boolean
    from .renderers import make_env, render_summary

    env = make_env()
    try:
        config = run_pipeline(
            options,
            executor=make_executor(),
            prompt=prompt_boolean if options.interactive else never,
            env=env,
        )
    except SetupError as e:
        _util.error(f"Error [{e.stage}]: {e}")
        return 1
    except KeyboardInterrupt:
        _util.error("Interrupted.")
        return 130
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    render_summary(config.script_path, options.user, config.container_name, env)
    return 0


if __name__ == "__main__":
    sys.exit(main())
