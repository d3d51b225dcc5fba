#!/usr/bin/env pkgx uv run

import argparse
import gzip
from collections import Counter
from io import StringIO
from typing import TextIO

from core.fetcher import FeedFetcher
from core.logger import Logger
from core.utils import file_exists
from package_managers.opkg.config import Config, load_config
from package_managers.opkg.parser import OpkgParser
from package_managers.opkg.structs import Field, Package


def open_source(source: str, config: Config, logger: Logger) -> TextIO:
    """Opens a local status file / Packages index, or fetches a feed index"""
    if source.startswith(("http://", "https://")):
        fetcher = FeedFetcher(
            name="opkg",
            source=source,
            no_cache=config.exec_config.no_cache,
            test=config.exec_config.test,
        )

        # without FETCH, reuse whatever the last run left in data/opkg/latest
        if config.exec_config.fetch:
            files = fetcher.fetch()
            fetcher.write(files)
            logger.log(f"Fetched {source}")

        path = file_exists(fetcher.output, "latest", fetcher.file_name)
        with open(path, "rb") as f:
            content = f.read()

        if config.exec_config.no_cache:
            fetcher.cleanup()

        return StringIO(content.decode("utf-8", "replace"))

    # a stray byte should cost one character, not the whole file
    path = file_exists(source)
    if path.endswith(".gz"):
        return gzip.open(path, "rt", encoding="utf-8", errors="replace")
    return open(path, encoding="utf-8", errors="replace")


def summarize(packages: list[Package], logger: Logger) -> Counter:
    statuses = Counter(str(pkg.state_status) for pkg in packages)
    for status, count in sorted(statuses.items()):
        logger.log(f"{status}: {count}")

    conffiles = sum(len(pkg.conffiles) for pkg in packages)
    logger.log(f"Parsed {len(packages)} packages with {conffiles} conffiles")
    return statuses


def run(source: str, exclude: list[Field], config: Config, logger: Logger):
    packages: list[Package] = []
    with open_source(source, config, logger) as stream:
        parser = OpkgParser(stream, exclude, config, logger)
        for i, pkg in enumerate(parser.parse()):
            logger.debug(f"{pkg.name} {pkg.full_version()} ({pkg.architecture})")
            packages.append(pkg)

            # in test mode, only look at the first few packages
            if config.exec_config.test and i > 2:
                break

    return summarize(packages, logger)


def field_type(keyword: str) -> Field:
    field = Field.from_keyword(keyword)
    if field is None:
        raise argparse.ArgumentTypeError(f"unknown field {keyword}")
    return field


def main():
    parser = argparse.ArgumentParser(
        description="Parse an opkg status file or Packages index"
    )
    parser.add_argument(
        "source",
        type=str,
        help="path to a status file / Packages index, or a feed URL",
    )
    parser.add_argument(
        "--exclude",
        type=field_type,
        action="append",
        default=[],
        help="field to ignore, may be repeated (e.g. --exclude Description)",
    )
    args = parser.parse_args()

    config = load_config()
    logger = Logger("opkg")
    logger.debug(f"Config: {config}")

    run(args.source, args.exclude, config, logger)


if __name__ == "__main__":
    main()
