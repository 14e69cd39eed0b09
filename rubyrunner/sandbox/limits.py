"""Subprocess resource limits for Ruby invocations.

Limits are resolved in the parent from the environment the child will run
with, then applied in the child between ``fork()`` and ``exec()`` through
``preexec_fn``. Enabled through ``Settings.resource_limits`` (off by
default).

Profiles (address-space cap, ``RLIMIT_AS``):
  default: 4 GB
  jruby:   12 GB. The JVM reserves heap, metaspace and code cache up
           front, so JRuby maps far more virtual memory than MRI.

Variables read from the child environment:
  RUBYRUNNER_RESOURCE_PROFILE       profile name, "default" when unset
  RUBYRUNNER_RLIMIT_AS_BYTES        cap for every profile
  RUBYRUNNER_RLIMIT_AS_BYTES_JRUBY  cap for the jruby profile only
  RUBYRUNNER_RLIMIT_CPU_SECONDS     CPU seconds, 3600 by default

A cap of 0 or below disables ``RLIMIT_AS``. Windows has no ``resource``
module; applying limits there does nothing.
"""

import logging
import os
import sys
from dataclasses import dataclass
from typing import Callable, Mapping, Optional

logger = logging.getLogger(__name__)

GB = 1024 * 1024 * 1024

PROFILE_ADDRESS_SPACE: dict[str, int] = {
    "default": 4 * GB,
    "jruby": 12 * GB,
}
DEFAULT_CPU_SECONDS = 3600

PROFILE_ENV = "RUBYRUNNER_RESOURCE_PROFILE"
ADDRESS_SPACE_ENV = "RUBYRUNNER_RLIMIT_AS_BYTES"
CPU_SECONDS_ENV = "RUBYRUNNER_RLIMIT_CPU_SECONDS"


@dataclass(frozen=True)
class ResourceLimits:
    profile: str
    address_space_bytes: Optional[int]  # None: unlimited
    cpu_seconds: int

    def describe(self) -> str:
        memory = (
            f"{self.address_space_bytes / GB:.1f}GB"
            if self.address_space_bytes
            else "unlimited"
        )
        return f"profile={self.profile} mem={memory} cpu={self.cpu_seconds}s"


def resolve_limits(environment: Optional[Mapping[str, str]] = None) -> ResourceLimits:
    """Compute the limits for a child running with ``environment``.

    Raises:
        ValueError: an override is not an integer.
    """
    env = environment if environment is not None else os.environ
    profile = env.get(PROFILE_ENV, "default").strip().lower() or "default"
    if profile not in PROFILE_ADDRESS_SPACE:
        logger.warning("Unknown resource profile %r, using default", profile)
        profile = "default"

    address_space: Optional[int] = PROFILE_ADDRESS_SPACE[profile]
    override_names = [ADDRESS_SPACE_ENV]
    if profile != "default":
        override_names.insert(0, f"{ADDRESS_SPACE_ENV}_{profile.upper()}")
    for name in override_names:
        raw = env.get(name, "").strip()
        if raw:
            address_space = int(raw)
            break
    if address_space is not None and address_space <= 0:
        address_space = None

    cpu_seconds = DEFAULT_CPU_SECONDS
    raw_cpu = env.get(CPU_SECONDS_ENV, "").strip()
    if raw_cpu and int(raw_cpu) > 0:
        cpu_seconds = int(raw_cpu)

    return ResourceLimits(profile, address_space, cpu_seconds)


def apply_resource_limits(limits: Optional[ResourceLimits] = None) -> None:
    """Set rlimits on the current process. No-op on Windows.

    Meant to run in the child, see :func:`limits_preexec`. ``None`` resolves
    limits from ``os.environ``. Failures are logged, never raised.
    """
    if sys.platform == "win32":
        return

    try:
        import resource

        if limits is None:
            limits = resolve_limits()
        if limits.address_space_bytes:
            resource.setrlimit(
                resource.RLIMIT_AS, (limits.address_space_bytes, resource.RLIM_INFINITY)
            )
        resource.setrlimit(resource.RLIMIT_CPU, (limits.cpu_seconds, resource.RLIM_INFINITY))
        logger.debug("Resource limits applied: %s", limits.describe())
    except (ImportError, ValueError, OSError) as exc:
        logger.warning("Failed to apply resource limits: %s", exc)


def limits_preexec(environment: Optional[Mapping[str, str]] = None) -> Callable[[], None]:
    """Return a ``preexec_fn`` applying the limits resolved for ``environment``.

    Limits are resolved immediately; a malformed override raises
    ValueError here, before anything is spawned.
    """
    limits = resolve_limits(environment)

    def _preexec() -> None:
        apply_resource_limits(limits)

    return _preexec
