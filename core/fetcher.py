import gzip
import os
from dataclasses import dataclass
from datetime import datetime
from shutil import rmtree

from requests import get

from core.logger import Logger


@dataclass
class Data:
    file_path: str
    file_name: str
    content: bytes


class Fetcher:
    def __init__(self, name: str, source: str, no_cache: bool, test: bool):
        self.name = name
        self.source = source
        self.output = f"data/{name}"
        self.logger = Logger(f"{name}_fetcher")
        self.no_cache = no_cache
        self.test = test

    def write(self, files: list[Data]):
        """writes fetched files under data/<name>/<date> and points latest at it"""

        now = datetime.now().strftime("%Y-%m-%d")
        root_path = f"{self.output}/{now}"

        for item in files:
            self.logger.debug(f"writing {item.file_path}/{item.file_name}")
            full_path = os.path.join(root_path, item.file_path)

            # make sure the path exists
            os.makedirs(full_path, exist_ok=True)

            with open(os.path.join(full_path, item.file_name), "wb") as f:
                f.write(item.content)

        self.update_symlink(now)

    def update_symlink(self, latest_path: str):
        latest_symlink = f"{self.output}/latest"
        if os.path.islink(latest_symlink):
            self.logger.debug(f"removing existing symlink {latest_symlink}")
            os.remove(latest_symlink)

        self.logger.debug(f"creating symlink {latest_symlink} -> {latest_path}")
        os.symlink(latest_path, latest_symlink)

    def fetch(self) -> bytes:
        if not self.source:
            raise ValueError("source is not set")

        response = get(self.source)
        try:
            response.raise_for_status()
        except Exception as e:
            self.logger.error(f"error fetching {self.source}: {e}")
            raise e
        return response.content

    def cleanup(self):
        if self.no_cache:
            rmtree(self.output, ignore_errors=True)
            os.makedirs(self.output, exist_ok=True)


# a feed publishes one index, either as Packages or Packages.gz
class FeedFetcher(Fetcher):
    def __init__(
        self,
        name: str,
        source: str,
        no_cache: bool,
        test: bool,
        file_name: str = "Packages",
    ):
        super().__init__(name, source, no_cache, test)
        self.file_name = file_name

    def fetch(self) -> list[Data]:
        content = super().fetch()

        if self.source.endswith(".gz"):
            self.logger.debug(f"decompressing {self.source}")
            content = gzip.decompress(content)

        return [Data("", self.file_name, content)]
