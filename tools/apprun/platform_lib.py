"""Host platform and multi-arch library directory mapping."""

import platform


LINUX_MULTIARCH_DIRS = {
    "x86_64": "x86_64-linux-gnu",
    "amd64": "x86_64-linux-gnu",
    "aarch64": "aarch64-linux-gnu",
    "arm64": "aarch64-linux-gnu",
    "i386": "i386-linux-gnu",
    "i486": "i386-linux-gnu",
    "i586": "i386-linux-gnu",
    "i686": "i386-linux-gnu",
    "armv7l": "arm-linux-gnueabihf",
    "armv7": "arm-linux-gnueabihf",
    "armhf": "arm-linux-gnueabihf",
}


def detect_platform() -> str:
    sys_name = platform.system().lower()
    if sys_name.startswith("win"):
        return "winnt"
    if sys_name == "darwin":
        return "macosx"
    return sys_name or "linux"


def detect_machine() -> str:
    return platform.machine().strip().lower()


def library_arch_dir(machine: str, platform_id: str = "linux") -> str:
    """Return the multi-arch directory name for machine, or "" when unmapped."""

    if platform_id != "linux":
        return ""
    return LINUX_MULTIARCH_DIRS.get(str(machine or "").strip().lower(), "")


def library_env_key(platform_id: str) -> str:
    if platform_id == "winnt":
        return "PATH"
    if platform_id == "macosx":
        return "DYLD_LIBRARY_PATH"
    return "LD_LIBRARY_PATH"
