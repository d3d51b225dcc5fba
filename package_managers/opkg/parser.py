from collections.abc import Collection, Iterable, Iterator
from enum import Enum
from io import StringIO
from typing import TextIO

from core.logger import Logger
from core.utils import leading_int, parse_list
from package_managers.opkg.config import Config, enabled_fields, load_config
from package_managers.opkg.structs import (
    Conffile,
    Field,
    Package,
    StateFlag,
    StateStatus,
    StateWant,
)

logger = Logger("opkg.parser")

# longest tokens a status file is expected to carry, longer ones are cut
MAX_STATUS_TOKEN = 63
MAX_CONFFILE_PATH = 1023
MAX_CONFFILE_MD5SUM = 84

# keywords grouped by first character, the first match within a group wins
KEYWORDS: dict[str, tuple[tuple[str, Field], ...]] = {
    "A": (
        ("Architecture", Field.ARCHITECTURE),
        ("Auto-Installed", Field.AUTO_INSTALLED),
    ),
    "C": (
        ("Conffiles", Field.CONFFILES),
        ("Conflicts", Field.CONFLICTS),
    ),
    "D": (
        ("Description", Field.DESCRIPTION),
        ("Depends", Field.DEPENDS),
    ),
    "E": (("Essential", Field.ESSENTIAL),),
    "F": (("Filename", Field.FILENAME),),
    "I": (
        ("Installed-Size", Field.INSTALLED_SIZE),
        ("Installed-Time", Field.INSTALLED_TIME),
    ),
    "M": (
        ("MD5sum", Field.MD5SUM),
        # old opkg wrote status files with this casing
        ("MD5Sum", Field.MD5SUM),
        ("Maintainer", Field.MAINTAINER),
    ),
    "P": (
        ("Package", Field.PACKAGE),
        ("Priority", Field.PRIORITY),
        ("Provides", Field.PROVIDES),
        ("Pre-Depends", Field.PRE_DEPENDS),
    ),
    "R": (
        ("Recommends", Field.RECOMMENDS),
        ("Replaces", Field.REPLACES),
    ),
    "S": (
        ("Section", Field.SECTION),
        ("SHA256sum", Field.SHA256SUM),
        ("Size", Field.SIZE),
        ("Source", Field.SOURCE),
        ("Status", Field.STATUS),
        ("Suggests", Field.SUGGESTS),
    ),
    "T": (("Tags", Field.TAGS),),
    "V": (("Version", Field.VERSION),),
}

STRING_FIELDS: dict[Field, str] = {
    Field.FILENAME: "filename",
    Field.MAINTAINER: "maintainer",
    Field.PRIORITY: "priority",
    Field.SECTION: "section",
    Field.SOURCE: "source",
    Field.TAGS: "tags",
    Field.MD5SUM: "md5sum",
    Field.SHA256SUM: "sha256sum",
}

NUMBER_FIELDS: dict[Field, str] = {
    Field.INSTALLED_SIZE: "installed_size",
    Field.INSTALLED_TIME: "installed_time",
    Field.SIZE: "size",
}

# each of these also has a `<name>_count` attribute on the package
RELATION_FIELDS: dict[Field, str] = {
    Field.DEPENDS: "depends",
    Field.PRE_DEPENDS: "pre_depends",
    Field.RECOMMENDS: "recommends",
    Field.SUGGESTS: "suggests",
    Field.CONFLICTS: "conflicts",
    Field.PROVIDES: "provides",
    Field.REPLACES: "replaces",
}


class Continuation(Enum):
    IDLE = "idle"
    DESCRIPTION = "description"
    CONFFILES = "conffiles"


def match_field(line: str, fields: Collection[Field]) -> tuple[Field, str] | None:
    """Find the field a line belongs to, returning it with the text after the colon.

    Disabled fields are skipped as if they were not in the table."""
    for keyword, field in KEYWORDS.get(line[:1], ()):
        if field not in fields or not line.startswith(keyword):
            continue
        if line[len(keyword) : len(keyword) + 1] == ":":
            return field, line[len(keyword) + 1 :]
    return None


def is_blank(line: str) -> bool:
    return not line.strip()


class ParseSession:
    """Per-stream parsing state.

    Tracks which multi-line field (if any) is open and the description text
    collected so far. One session belongs to one stream; parse independent
    streams with independent sessions."""

    def __init__(
        self,
        config: Config | None = None,
        logger: Logger = logger,
        interactive: bool | None = None,
    ):
        self.config = config or load_config()
        self.logger = logger
        # on a terminal, description lines are kept on separate lines
        if interactive is None:
            interactive = self.config.exec_config.interactive
        self.interactive = interactive
        self.continuation = Continuation.IDLE
        self.description: str | None = None
        # set once the stream has no more lines
        self.exhausted = False

    def parse_line(
        self, pkg: Package, line: str, fields: Collection[Field]
    ) -> bool:
        """Apply one line (without its terminator) to pkg.

        Returns True when the line is blank, i.e. the stanza is over."""
        if line.startswith(" "):
            if self.continuation is Continuation.DESCRIPTION and (
                Field.DESCRIPTION in fields
            ):
                self.append_description(line)
                return False
            if self.continuation is Continuation.CONFFILES and (
                Field.CONFFILES in fields
            ):
                parse_conffile(pkg, line, self.logger)
                return False

        matched = match_field(line, fields)

        # anything that is not a continuation line closes the open field
        self.close(pkg)

        if matched is None:
            return is_blank(line)

        field, value = matched
        match field:
            case Field.DESCRIPTION:
                self.continuation = Continuation.DESCRIPTION
                self.description = value.lstrip()
            case Field.CONFFILES:
                self.continuation = Continuation.CONFFILES
            case _:
                self.apply(pkg, field, value)
        return False

    def apply(self, pkg: Package, field: Field, value: str) -> None:
        """Set a single-line field on pkg."""
        value = value.lstrip()
        match field:
            case Field.PACKAGE:
                if pkg.name is None:
                    pkg.name = value
                else:
                    self.logger.warn(
                        f"Ignoring repeated Package field {value!r} for {pkg.name}"
                    )
            case Field.ARCHITECTURE:
                pkg.architecture = value
                pkg.arch_priority = self.config.arch_config.priority(value)
            case Field.AUTO_INSTALLED:
                pkg.auto_installed = value == "yes"
            case Field.ESSENTIAL:
                pkg.essential = value == "yes"
            case Field.STATUS:
                parse_status(pkg, value, self.logger)
            case Field.VERSION:
                parse_version(pkg, value, self.logger)
            case _ if field in STRING_FIELDS:
                setattr(pkg, STRING_FIELDS[field], value)
            case _ if field in NUMBER_FIELDS:
                number = parse_number(pkg, field, value, self.logger)
                setattr(pkg, NUMBER_FIELDS[field], number)
            case _ if field in RELATION_FIELDS:
                items, count = parse_list(value, ",")
                setattr(pkg, RELATION_FIELDS[field], items)
                setattr(pkg, f"{RELATION_FIELDS[field]}_count", count)
            case _:
                self.logger.debug(f"No handler for {field.value}")

    def append_description(self, line: str) -> None:
        if self.description is None:
            self.description = ""
        if self.interactive:
            self.description += "\n"
        self.description += line

    def close(self, pkg: Package) -> None:
        """Commit whatever the open continuation collected, then go idle."""
        if self.continuation is Continuation.DESCRIPTION and (
            self.description is not None
        ):
            pkg.description = self.description
        self.reset()

    def reset(self) -> None:
        self.continuation = Continuation.IDLE
        self.description = None


# Helpers for the fields with their own grammar
def parse_version(pkg: Package, value: str, logger: Logger = logger) -> None:
    """Split `[epoch:]version[-revision]` into its three parts on pkg.

    An epoch that is not a plain number is logged and taken as 0."""
    value = value.removeprefix("Version:").lstrip()

    epoch_text, colon, version = value.partition(":")
    if colon:
        epoch_text = epoch_text.strip()
        if epoch_text.isdecimal():
            pkg.epoch = int(epoch_text)
        else:
            logger.error(f"{pkg.name}: invalid epoch {epoch_text!r}")
            pkg.epoch = 0
    else:
        version = value
        pkg.epoch = None

    # the revision is whatever follows the last hyphen
    upstream, hyphen, revision = version.rpartition("-")
    if hyphen:
        pkg.version = upstream
        pkg.revision = revision
    else:
        pkg.version = version
        pkg.revision = None


def parse_status(pkg: Package, value: str, logger: Logger = logger) -> None:
    """Read `want flag status` into pkg, leaving pkg untouched if malformed."""
    tokens = value.removeprefix("Status:").split()
    if len(tokens) < 3:
        logger.error(f"Failed to parse Status line for {pkg.name}: {value!r}")
        return

    want, flag, status = (token[:MAX_STATUS_TOKEN] for token in tokens[:3])

    pkg.state_want = StateWant.from_str(want)
    pkg.state_flag = StateFlag.from_str(flag)
    pkg.state_status = StateStatus.from_str(status)

    if str(pkg.state_want) != want or str(pkg.state_status) != status:
        logger.debug(f"Unknown status values in {value!r} for {pkg.name}")


def parse_conffile(pkg: Package, line: str, logger: Logger = logger) -> None:
    """Append one ` path md5sum` continuation line to pkg.conffiles."""
    tokens = line.split()
    if len(tokens) < 2:
        logger.error(f"Failed to parse Conffiles line for {pkg.name}: {line!r}")
        return

    path, md5sum = tokens[0], tokens[1]
    pkg.conffiles.append(
        Conffile(path=path[:MAX_CONFFILE_PATH], md5sum=md5sum[:MAX_CONFFILE_MD5SUM])
    )


def parse_number(pkg: Package, field: Field, value: str, logger: Logger = logger) -> int:
    """Best-effort unsigned integer: the leading digits, or 0 if there are none."""
    number = leading_int(value)
    if not value.strip().isdecimal():
        logger.warn(f"{pkg.name}: non-numeric {field.value} {value!r}")
    return number if number is not None else 0


def parse_from_stream(
    pkg: Package, stream: TextIO, fields: Collection[Field], session: ParseSession
) -> bool:
    """Feed lines from stream into pkg until the stanza ends.

    A blank line and the end of the stream both end a stanza, so this returns
    True; session.exhausted tells the two apart. Check pkg.name to see whether
    there was a package at all."""
    while True:
        line = stream.readline()
        if not line:
            session.close(pkg)
            session.exhausted = True
            return True

        if session.parse_line(pkg, line.removesuffix("\n"), fields):
            return True


class OpkgParser:
    def __init__(
        self,
        stream: TextIO,
        exclude: Iterable[Field] = (),
        config: Config | None = None,
        logger: Logger = logger,
    ):
        # stream is a Packages index or a status file
        self.stream = stream
        self.config = config or load_config()
        self.logger = logger
        self.fields = enabled_fields(exclude, self.config)
        self.session = ParseSession(self.config, self.logger)

    def parse(self) -> Iterator[Package]:
        """Yield every package in the stream, skipping stanzas without a name."""
        while True:
            pkg = Package()
            parse_from_stream(pkg, self.stream, self.fields, self.session)

            if pkg.name is not None:
                if pkg.architecture is None:
                    self.logger.debug(f"{pkg.name} has no Architecture")
                yield pkg
            elif pkg != Package():
                self.logger.warn("Skipping stanza without a Package field")

            if self.session.exhausted:
                return


def parse_text(
    content: str,
    exclude: Iterable[Field] = (),
    config: Config | None = None,
    logger: Logger = logger,
) -> Iterator[Package]:
    return OpkgParser(StringIO(content), exclude, config, logger).parse()
