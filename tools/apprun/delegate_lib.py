"""Library search path composition and hand-off to the delegate binary."""

import os
import subprocess
from typing import Dict, List, Mapping, Optional, Sequence

from .bundle_lib import LIB_SUBDIR, LaunchError, require_bundle_root, resolve_launcher_path
from .platform_lib import detect_machine, detect_platform, library_arch_dir, library_env_key


DELEGATE_SUFFIX = ".bin"
EXEC_MODE_ENV_KEY = "APPRUN_EXEC_MODE"
EXEC_MODES = ("exec", "spawn")
INTERRUPTED_STATUS = 130


def library_search_entries(bundle_root: str, arch_dir: str) -> List[str]:
    lib_root = os.path.join(bundle_root, LIB_SUBDIR)
    entries = []
    if arch_dir:
        entries.append(os.path.join(lib_root, arch_dir))
    entries.append(lib_root)
    return entries


def compose_library_path(entries: Sequence[str], inherited: Optional[str]) -> str:
    """Prepend entries to the inherited value, which is kept verbatim."""

    items = [item for item in entries if item]
    if inherited:
        items.append(inherited)
    return os.pathsep.join(items)


def delegate_path_for(launcher_path: str) -> str:
    if os.name == "nt":
        stem, ext = os.path.splitext(launcher_path)
        if ext.lower() == ".exe":
            return stem + DELEGATE_SUFFIX + ext
    return launcher_path + DELEGATE_SUFFIX


def check_delegate(path: str) -> None:
    if not os.path.isfile(path):
        raise LaunchError("refuse.delegate_missing", "delegate binary {} not found".format(path), {"delegate": path})
    if not os.access(path, os.X_OK):
        raise LaunchError(
            "refuse.delegate_not_executable",
            "delegate binary {} is not executable".format(path),
            {"delegate": path},
        )


def default_exec_mode(env: Optional[Mapping[str, str]] = None) -> str:
    env_map = env if env is not None else os.environ
    explicit = str(env_map.get(EXEC_MODE_ENV_KEY, "")).strip().lower()
    if explicit:
        if explicit not in EXEC_MODES:
            raise LaunchError(
                "refuse.exec_mode_invalid",
                "{}={} (expected one of {})".format(EXEC_MODE_ENV_KEY, explicit, ",".join(EXEC_MODES)),
                {"mode": explicit},
            )
        return explicit
    if os.name == "nt" or not hasattr(os, "execve"):
        return "spawn"
    return "exec"


def build_launch_plan(
    argv: Sequence[str],
    env: Optional[Mapping[str, str]] = None,
    machine: str = "",
    platform_id: str = "",
) -> Dict[str, object]:
    """Resolve launcher, bundle root and library path for a delegate launch.

    The returned plan holds a fresh environment copy; the env mapping passed
    in is never modified.
    """

    env_map = dict(os.environ if env is None else env)
    argv_list = [str(item) for item in argv]
    launcher_path = resolve_launcher_path(argv_list[0] if argv_list else "")
    bundle_root = require_bundle_root(launcher_path, env_map)

    use_platform = platform_id or detect_platform()
    use_machine = (machine or detect_machine()).lower()
    arch_dir = library_arch_dir(use_machine, use_platform)
    env_key = library_env_key(use_platform)
    entries = library_search_entries(bundle_root, arch_dir)
    library_path = compose_library_path(entries, env_map.get(env_key, ""))
    env_map[env_key] = library_path

    delegate = delegate_path_for(launcher_path)
    check_delegate(delegate)

    return {
        "launcher_path": launcher_path,
        "bundle_root": bundle_root,
        "platform": use_platform,
        "machine": use_machine,
        "arch_dir": arch_dir,
        "library_env_key": env_key,
        "library_entries": entries,
        "library_path": library_path,
        "delegate_path": delegate,
        "argv": argv_list,
        "env": env_map,
    }


def plan_summary(plan: Mapping[str, object]) -> Dict[str, object]:
    return {key: value for key, value in plan.items() if key != "env"}


def _exit_status(returncode: int) -> int:
    if returncode < 0:
        return 128 + abs(returncode)
    return returncode


def exec_delegate(plan: Mapping[str, object], mode: str = "exec") -> int:
    """Hand control to the delegate.

    In exec mode the process image is replaced and this never returns. In
    spawn mode the delegate runs as a child and its exit status is returned;
    an interrupt while waiting on the child yields 130 like a shell.
    """

    delegate = str(plan["delegate_path"])
    argv = list(plan["argv"])
    env = dict(plan["env"])
    try:
        if mode == "exec":
            os.execve(delegate, argv, env)
        proc = subprocess.run(argv, executable=delegate, env=env, check=False)
    except KeyboardInterrupt:
        return INTERRUPTED_STATUS
    except OSError as exc:
        raise LaunchError(
            "refuse.delegate_exec_failed",
            "cannot execute {} ({})".format(delegate, exc),
            {"delegate": delegate, "mode": mode},
        )
    return _exit_status(int(proc.returncode))
