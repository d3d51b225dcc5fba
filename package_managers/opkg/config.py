import sys
from collections.abc import Iterable
from os import getenv

from core.logger import Logger
from core.utils import env_vars, leading_int
from package_managers.opkg.structs import ALL_FIELDS, Field

logger = Logger("opkg.config")

TEST = env_vars("TEST", "false")
FETCH = env_vars("FETCH", "true")
NO_CACHE = env_vars("NO_CACHE", "true")

# name:priority pairs, same as the `arch` lines in opkg.conf
ARCH = getenv("OPKG_ARCH", "all:1,noarch:1")
EXCLUDED_FIELDS = getenv("OPKG_EXCLUDED_FIELDS", "")


def is_interactive() -> bool:
    override = getenv("INTERACTIVE")
    if override is not None:
        return env_vars("INTERACTIVE", override)
    return sys.stdout.isatty()


class ExecConf:
    test: bool
    fetch: bool
    no_cache: bool
    interactive: bool

    def __init__(self) -> None:
        self.test = TEST
        self.fetch = FETCH
        self.no_cache = NO_CACHE
        self.interactive = is_interactive()

    def __str__(self):
        return f"ExecConf(test={self.test},fetch={self.fetch},no_cache={self.no_cache},interactive={self.interactive})"  # noqa


class ArchConf:
    """Architecture name to priority, higher wins when picking a candidate."""

    priorities: dict[str, int]

    def __init__(self, arch: str = ARCH) -> None:
        self.priorities = {}
        self.load_priorities(arch)

    def load_priorities(self, arch: str) -> None:
        for entry in arch.split(","):
            entry = entry.strip()
            if not entry:
                continue

            name, sep, value = entry.partition(":")
            priority = leading_int(value) if sep else None
            if not name or priority is None:
                logger.warn(f"Ignoring malformed architecture entry {entry!r}")
                continue

            self.priorities[name.strip()] = priority

    def priority(self, arch: str) -> int:
        return self.priorities.get(arch, 0)

    def __str__(self) -> str:
        return f"ArchConf(priorities={self.priorities})"


class FieldConf:
    """Fields excluded for every parse in this process."""

    excluded: frozenset[Field]

    def __init__(self, excluded: str = EXCLUDED_FIELDS) -> None:
        self.excluded = frozenset(self.load_excluded(excluded))

    def load_excluded(self, excluded: str) -> list[Field]:
        fields = []
        for keyword in excluded.split(","):
            keyword = keyword.strip()
            if not keyword:
                continue

            field = Field.from_keyword(keyword)
            if field is None:
                logger.warn(f"Ignoring unknown excluded field {keyword!r}")
                continue

            fields.append(field)
        return fields

    def enabled(self, exclude: Iterable[Field] = ()) -> frozenset[Field]:
        return ALL_FIELDS - (self.excluded | frozenset(exclude))

    def __str__(self) -> str:
        names = sorted(field.value for field in self.excluded)
        return f"FieldConf(excluded={names})"


class Config:
    exec_config: ExecConf
    arch_config: ArchConf
    field_config: FieldConf

    def __init__(
        self,
        exec_config: ExecConf | None = None,
        arch_config: ArchConf | None = None,
        field_config: FieldConf | None = None,
    ) -> None:
        self.exec_config = exec_config or ExecConf()
        self.arch_config = arch_config or ArchConf()
        self.field_config = field_config or FieldConf()

    def __str__(self) -> str:
        return f"Config(exec_config={self.exec_config}, arch_config={self.arch_config}, field_config={self.field_config})"  # noqa


def load_config() -> Config:
    logger.debug("Loading config")
    return Config()


def enabled_fields(
    exclude: Iterable[Field] = (), config: Config | None = None
) -> frozenset[Field]:
    """The fields a parse should honor: everything, minus what the caller and the
    process-wide configuration exclude."""
    field_config = config.field_config if config is not None else FieldConf()
    return field_config.enabled(exclude)
