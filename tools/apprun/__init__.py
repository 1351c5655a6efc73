"""Self-locating launcher that prepares bundle library paths and execs the real binary."""

from .bundle_lib import (  # noqa: F401
    LaunchError,
    find_bundle_root,
    looks_like_bundle_root,
    require_bundle_root,
    resolve_launcher_path,
)
from .delegate_lib import (  # noqa: F401
    build_launch_plan,
    compose_library_path,
    delegate_path_for,
    exec_delegate,
)
from .platform_lib import library_arch_dir, library_env_key  # noqa: F401
