"""Launcher self-location and bundle root discovery."""

import os
from typing import Dict, Iterator, Mapping, Optional


BIN_SUBDIR = os.path.join("usr", "bin")
LIB_SUBDIR = os.path.join("usr", "lib")
ROOT_OVERRIDE_ENV_KEY = "APPRUN_ROOT"


class LaunchError(Exception):
    def __init__(self, code: str, message: str, details: Dict[str, object] = None):
        Exception.__init__(self, message)
        self.code = code
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return "{}: {}".format(self.code, self.message)


def _norm(path: str) -> str:
    return os.path.normpath(path)


def resolve_launcher_path(argv0: str) -> str:
    """Return the absolute, symlink-free path of the running launcher.

    A relative argv[0] is the path the interpreter opened, so it resolves
    against the current directory.
    """

    token = str(argv0 or "")
    if not token:
        raise LaunchError("refuse.launcher_path_unresolved", "launcher was started without argv[0]")
    return _norm(os.path.realpath(token))


def ascend_candidates(start: str) -> Iterator[str]:
    """Yield start and each ancestor, closest first, excluding the filesystem root."""

    current = _norm(os.path.abspath(start))
    while True:
        parent = os.path.dirname(current)
        if parent == current:
            break
        yield current
        current = parent


def looks_like_bundle_root(path: str) -> bool:
    return os.path.isdir(os.path.join(path, LIB_SUBDIR)) and os.path.isdir(os.path.join(path, BIN_SUBDIR))


def find_bundle_root(start: str) -> str:
    for candidate in ascend_candidates(start):
        if looks_like_bundle_root(candidate):
            return candidate
    return ""


def require_bundle_root(launcher_path: str, env: Optional[Mapping[str, str]] = None) -> str:
    """Resolve the bundle root for launcher_path or raise a refusal."""

    env_map = env if env is not None else os.environ
    explicit = str(env_map.get(ROOT_OVERRIDE_ENV_KEY, "")).strip()
    if explicit:
        root = _norm(os.path.realpath(explicit))
        if not looks_like_bundle_root(root):
            raise LaunchError(
                "refuse.root_invalid",
                "{}={} has no {} and {} directories".format(ROOT_OVERRIDE_ENV_KEY, explicit, BIN_SUBDIR, LIB_SUBDIR),
                {"root": root},
            )
        return root

    start = os.path.dirname(launcher_path)
    root = find_bundle_root(start)
    if not root:
        raise LaunchError(
            "refuse.root_not_found",
            "bundle root directory not found above {}".format(start),
            {"start": start},
        )
    return root
