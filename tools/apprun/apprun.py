#!/usr/bin/env python3
"""Bundle launcher: locate the bundle root, extend the library path, exec <self>.bin."""

from __future__ import annotations

import json
import os
import sys
from datetime import datetime, timezone
from typing import Dict, List, Mapping, Optional


THIS_DIR = os.path.dirname(os.path.abspath(__file__))
REPO_ROOT_HINT = os.path.normpath(os.path.join(THIS_DIR, "..", ".."))
if REPO_ROOT_HINT not in sys.path:
    sys.path.insert(0, REPO_ROOT_HINT)

from tools.apprun.bundle_lib import LaunchError  # noqa: E402
from tools.apprun.delegate_lib import build_launch_plan, default_exec_mode, exec_delegate, plan_summary  # noqa: E402


DEBUG_ENV_KEY = "APPRUN_DEBUG"
LOG_ROOT_ENV_KEY = "APPRUN_LOG_ROOT"
LOG_FILE_NAME = "apprun.log"


def _timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def append_log(log_root: str, entry: Dict[str, object]) -> None:
    if not log_root:
        return
    try:
        os.makedirs(log_root, exist_ok=True)
        with open(os.path.join(log_root, LOG_FILE_NAME), "a", encoding="utf-8", newline="\n") as handle:
            handle.write(json.dumps(entry, sort_keys=True) + "\n")
    except OSError as exc:
        print("warn.log_unwritable: {} ({})".format(log_root, exc), file=sys.stderr)


def _debug_enabled(env: Mapping[str, str]) -> bool:
    return str(env.get(DEBUG_ENV_KEY, "")).strip().lower() in ("1", "true", "yes", "on")


def main(argv: Optional[List[str]] = None) -> int:
    args = list(sys.argv if argv is None else argv)
    env = dict(os.environ)
    log_root = str(env.get(LOG_ROOT_ENV_KEY, "")).strip()

    try:
        mode = default_exec_mode(env)
        plan = build_launch_plan(args, env)
    except LaunchError as exc:
        append_log(log_root, {"timestamp": _timestamp(), "result": "refused", "code": exc.code, "details": exc.details})
        print(str(exc), file=sys.stderr)
        return 1

    summary = plan_summary(plan)
    summary["mode"] = mode
    if _debug_enabled(env):
        print(json.dumps(summary, indent=2, sort_keys=True), file=sys.stderr)
    append_log(log_root, {"timestamp": _timestamp(), "result": "delegating", "plan": summary})
    sys.stdout.flush()
    sys.stderr.flush()

    try:
        return exec_delegate(plan, mode)
    except LaunchError as exc:
        append_log(log_root, {"timestamp": _timestamp(), "result": "refused", "code": exc.code, "details": exc.details})
        print(str(exc), file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
