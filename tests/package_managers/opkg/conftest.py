import pytest

from package_managers.opkg.parser import ParseSession
from package_managers.opkg.structs import ALL_FIELDS, Package


@pytest.fixture
def session(mock_config, mock_logger) -> ParseSession:
    """A non-interactive session that reports to the mock logger"""
    return ParseSession(mock_config, mock_logger, interactive=False)


@pytest.fixture
def feed(session):
    """Feed lines into a fresh package, returning the package and every result"""

    def _feed(lines: list[str], fields=ALL_FIELDS, pkg: Package | None = None):
        pkg = pkg if pkg is not None else Package()
        results = [session.parse_line(pkg, line, fields) for line in lines]
        return pkg, results

    return _feed


@pytest.fixture
def status_file():
    return """Package: busybox
Version: 1.36.1-r0
Depends: libc6 (>= 2.35), update-alternatives-opkg
Status: install ok installed
Architecture: armv7ahf-neon
Conffiles:
 /etc/busybox.links.nosuid 4ab3a1bf6cc6b4bbef89fcf02ba43ab2
 /etc/syslog-startup.conf 2b3fe2b0d5a1c3d8a7d15c5e0d6c8c3a
Installed-Time: 1697040000
Auto-Installed: yes

Package: dropbear
Version: 1:2022.83-r0
Depends: libz1 (>= 1.2.13)
Status: deinstall hold,user config-files
Architecture: armv7ahf-neon
Conffiles:
 /etc/default/dropbear 7a2c8a8d2e9a1f4d3b6e5c0a9f8e7d6c
Installed-Time: 1697040123

"""


@pytest.fixture
def packages_index():
    return """Package: libc6
Version: 2.35-r0
Depends: update-alternatives-opkg
Provides: libc6-utils, virtual-libc
Section: libs
Architecture: armv7ahf-neon
Maintainer: OE Core Developers <openembedded-core@lists.openembedded.org>
MD5Sum: 0f8c4b3a7e41b0e2f71d8d2c3b4a5e6f
Size: 461428
Filename: libc6_2.35-r0_armv7ahf-neon.ipk
Source: glibc_2.35.bb
Description: GLIBC (GNU C Library)
 The GNU C Library is used as the system C library in most systems
 with the Linux kernel.
Installed-Size: 1217540
Essential: yes

Package: tzdata
Version: 2023c-r0
Architecture: all
Priority: optional
Section: base
Size: 176003
SHA256sum: 9da19833c1a51e890aa8a11f82ec1e383c0e79410c3d2f6845fd2ec3e23249b8
Description: Timezone data
"""
