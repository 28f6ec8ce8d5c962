"""Error types raised while configuring an OpenSSL build.

Every failure in the discovery pipeline is fatal for the build. The CLI turns
any :class:`BuildError` into a message on stderr and exit status 1; library
callers (``setup.py`` hooks, cffi build scripts) let it propagate so the build
stops.

Error Taxonomy
--------------
:class:`NotFoundError`
    No strategy located usable library/include directories.
:class:`ProbeError`
    The C preprocessor could not expand the probe source.
:class:`MalformedVersionError`
    The header's version macro matched neither expected textual format.
:class:`UnsupportedVersionError`
    The version lies outside the supported range.
:class:`ArtifactError`
    Neither static nor dynamic artifacts are fully present.
:class:`VendorError`
    A vendored build was requested but could not be produced.
"""


class BuildError(RuntimeError):
    """Base class for all fatal configuration errors."""


class NotFoundError(BuildError):
    pass


class ProbeError(BuildError):
    pass


class MalformedVersionError(BuildError, ValueError):
    pass


class UnsupportedVersionError(BuildError):
    pass


class ArtifactError(BuildError):
    pass


class VendorError(BuildError):
    pass
