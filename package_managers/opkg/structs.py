from dataclasses import dataclass, field
from enum import Enum, Flag


class Field(Enum):
    """Every control field the parser knows how to read."""

    ARCHITECTURE = "Architecture"
    AUTO_INSTALLED = "Auto-Installed"
    CONFFILES = "Conffiles"
    CONFLICTS = "Conflicts"
    DESCRIPTION = "Description"
    DEPENDS = "Depends"
    ESSENTIAL = "Essential"
    FILENAME = "Filename"
    INSTALLED_SIZE = "Installed-Size"
    INSTALLED_TIME = "Installed-Time"
    MD5SUM = "MD5sum"
    MAINTAINER = "Maintainer"
    PACKAGE = "Package"
    PRIORITY = "Priority"
    PROVIDES = "Provides"
    PRE_DEPENDS = "Pre-Depends"
    RECOMMENDS = "Recommends"
    REPLACES = "Replaces"
    SECTION = "Section"
    SHA256SUM = "SHA256sum"
    SIZE = "Size"
    SOURCE = "Source"
    STATUS = "Status"
    SUGGESTS = "Suggests"
    TAGS = "Tags"
    VERSION = "Version"

    @classmethod
    def from_keyword(cls, keyword: str) -> "Field | None":
        for member in cls:
            if member.value == keyword:
                return member
        # older status files spell it MD5Sum
        if keyword == "MD5Sum":
            return cls.MD5SUM
        return None


ALL_FIELDS: frozenset[Field] = frozenset(Field)


class StateWant(Enum):
    UNKNOWN = "unknown"
    INSTALL = "install"
    DEINSTALL = "deinstall"
    PURGE = "purge"

    @classmethod
    def from_str(cls, value: str) -> "StateWant":
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN

    def __str__(self) -> str:
        return self.value


class StateFlag(Flag):
    OK = 0
    REINSTREQ = 1
    HOLD = 2
    REPLACE = 4
    NOPRUNE = 8
    PREFER = 16
    OBSOLETE = 32
    USER = 64

    @classmethod
    def from_str(cls, value: str) -> "StateFlag":
        """Flags may be combined, as in `hold,user`. Unknown names are dropped.

        Names are matched exactly, so `HOLD` is unknown."""
        literals = {name.lower(): member for name, member in cls.__members__.items()}
        flag = cls.OK
        for name in value.split(","):
            member = literals.get(name.strip())
            if member is not None:
                flag |= member
        return flag

    def __str__(self) -> str:
        if not self:
            return "ok"
        return ",".join(
            name.lower()
            for name, member in type(self).__members__.items()
            if member and member in self
        )


class StateStatus(Enum):
    NOT_INSTALLED = "not-installed"
    UNPACKED = "unpacked"
    HALF_CONFIGURED = "half-configured"
    INSTALLED = "installed"
    HALF_INSTALLED = "half-installed"
    CONFIG_FILES = "config-files"
    POST_INST_FAILED = "post-inst-failed"
    REMOVAL_FAILED = "removal-failed"

    @classmethod
    def from_str(cls, value: str) -> "StateStatus":
        try:
            return cls(value)
        except ValueError:
            return cls.NOT_INSTALLED

    def __str__(self) -> str:
        return self.value


@dataclass
class Conffile:
    path: str
    md5sum: str


# one stanza from a Packages index or a status file
@dataclass
class Package:
    name: str | None = field(default=None)
    architecture: str | None = field(default=None)
    arch_priority: int = field(default_factory=int)

    # Version: [epoch:]version[-revision]
    epoch: int | None = field(default=None)
    version: str | None = field(default=None)
    revision: str | None = field(default=None)

    maintainer: str | None = field(default=None)
    section: str | None = field(default=None)
    source: str | None = field(default=None)
    priority: str | None = field(default=None)
    tags: str | None = field(default=None)
    filename: str | None = field(default=None)
    md5sum: str | None = field(default=None)
    sha256sum: str | None = field(default=None)
    description: str | None = field(default=None)

    installed_size: int = field(default_factory=int)
    installed_time: int = field(default_factory=int)
    size: int = field(default_factory=int)

    auto_installed: bool = field(default=False)
    essential: bool = field(default=False)

    # Status: want flag status
    state_want: StateWant = field(default=StateWant.UNKNOWN)
    state_flag: StateFlag = field(default=StateFlag.OK)
    state_status: StateStatus = field(default=StateStatus.NOT_INSTALLED)

    # relation fields are kept raw, resolution happens elsewhere
    depends: list[str] = field(default_factory=list)
    depends_count: int = field(default_factory=int)
    pre_depends: list[str] = field(default_factory=list)
    pre_depends_count: int = field(default_factory=int)
    recommends: list[str] = field(default_factory=list)
    recommends_count: int = field(default_factory=int)
    suggests: list[str] = field(default_factory=list)
    suggests_count: int = field(default_factory=int)
    conflicts: list[str] = field(default_factory=list)
    conflicts_count: int = field(default_factory=int)
    provides: list[str] = field(default_factory=list)
    provides_count: int = field(default_factory=int)
    replaces: list[str] = field(default_factory=list)
    replaces_count: int = field(default_factory=int)

    conffiles: list[Conffile] = field(default_factory=list)

    def full_version(self) -> str | None:
        if self.version is None:
            return None
        version = self.version
        if self.epoch:
            version = f"{self.epoch}:{version}"
        if self.revision is not None:
            version = f"{version}-{self.revision}"
        return version
