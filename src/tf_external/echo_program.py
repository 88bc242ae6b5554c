"""Local demo program that speaks the external program protocol."""

from __future__ import annotations

import argparse
import json
import os
import sys

from tf_external.models import ACTION_ENV_VAR


def main(argv: list[str] | None = None) -> int:
    """Echo the query from stdin back to stdout."""

    parser = argparse.ArgumentParser()
    parser.add_argument("--action-key", default=None, help="Add TF_EXTERNAL_ACTION under this key.")
    parser.add_argument("--fail-with", default=None, help="Write MESSAGE to stderr and exit 1.")
    args = parser.parse_args(argv)

    if args.fail_with is not None:
        sys.stderr.write(args.fail_with)
        return 1

    query = json.loads(sys.stdin.read() or "{}")
    if args.action_key:
        query[args.action_key] = os.getenv(ACTION_ENV_VAR, "")
    sys.stdout.write(json.dumps(query))
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
