"""Platform data consumed by the discovery pipeline.

These tables are plain data: install prefixes, artifact naming conventions,
configuration macros and target mappings. They change with operating system
and OpenSSL releases and are kept apart from the algorithms that use them.
"""

# Configuration macros reported through the probe when defined by
# <openssl/opensslconf.h>. Each defined macro becomes one ``osslconf`` fact.
CONFIG_MACROS: tuple[str, ...] = (
    "OPENSSL_NO_BF",
    "OPENSSL_NO_BUF_FREELISTS",
    "OPENSSL_NO_CAMELLIA",
    "OPENSSL_NO_CAST",
    "OPENSSL_NO_CHACHA",
    "OPENSSL_NO_CMS",
    "OPENSSL_NO_COMP",
    "OPENSSL_NO_DEPRECATED_3_0",
    "OPENSSL_NO_DES",
    "OPENSSL_NO_DGRAM",
    "OPENSSL_NO_DH",
    "OPENSSL_NO_DSA",
    "OPENSSL_NO_EC",
    "OPENSSL_NO_EC2M",
    "OPENSSL_NO_ENGINE",
    "OPENSSL_NO_FILENAMES",
    "OPENSSL_NO_IDEA",
    "OPENSSL_NO_KRB5",
    "OPENSSL_NO_MD4",
    "OPENSSL_NO_NEXTPROTONEG",
    "OPENSSL_NO_OCB",
    "OPENSSL_NO_OCSP",
    "OPENSSL_NO_PSK",
    "OPENSSL_NO_RC2",
    "OPENSSL_NO_RC4",
    "OPENSSL_NO_RFC3779",
    "OPENSSL_NO_RMD160",
    "OPENSSL_NO_SCRYPT",
    "OPENSSL_NO_SEED",
    "OPENSSL_NO_SHA",
    "OPENSSL_NO_SM3",
    "OPENSSL_NO_SM4",
    "OPENSSL_NO_SOCK",
    "OPENSSL_NO_SRP",
    "OPENSSL_NO_SRTP",
    "OPENSSL_NO_SSL3_METHOD",
    "OPENSSL_NO_STDIO",
    "OPENSSL_NO_TLSEXT",
    "OPENSSL_NO_WHIRLPOOL",
)

# Install prefixes tried when nothing else located OpenSSL. Only consulted
# for native (host == target) builds. Keys are substrings of the target
# triple; the generic list is tried last for every target.
FALLBACK_PREFIXES: dict[str, tuple[str, ...]] = {
    "apple-darwin": (
        "/opt/homebrew/opt/openssl@3",
        "/opt/homebrew/opt/openssl@1.1",
        "/usr/local/opt/openssl@3",
        "/usr/local/opt/openssl@1.1",
    ),
    "freebsd": ("/usr",),
    "dragonfly": ("/usr/local",),
}

GENERIC_PREFIXES: tuple[str, ...] = (
    "/usr/local/ssl",
    "/usr/lib/ssl",
    "/usr/local",
    "/usr/pkg",
    "/opt/local",
    "/usr",
)

# Artifact file names, formatted with the bare library name.
STATIC_PATTERNS: tuple[str, ...] = ("lib{}.a", "{}.lib", "lib{}.lib")
DYNAMIC_PATTERNS: tuple[str, ...] = ("lib{}.so", "{}.dll", "lib{}.dll", "lib{}.dylib")

# Libraries a static OpenSSL needs on Windows, always linked dynamically.
WINDOWS_STATIC_SYSTEM_LIBS: tuple[str, ...] = ("gdi32", "user32", "crypt32", "ws2_32", "advapi32")

# Target triple -> OpenSSL ``Configure`` target, for vendored builds.
VENDOR_TARGETS: dict[str, str] = {
    "aarch64-apple-darwin": "darwin64-arm64-cc",
    "aarch64-linux-android": "linux-aarch64",
    "aarch64-pc-windows-msvc": "VC-WIN64-ARM",
    "aarch64-unknown-linux-gnu": "linux-aarch64",
    "aarch64-unknown-linux-musl": "linux-aarch64",
    "arm-unknown-linux-gnueabi": "linux-armv4",
    "arm-unknown-linux-gnueabihf": "linux-armv4",
    "armv7-unknown-linux-gnueabihf": "linux-armv4",
    "i686-apple-darwin": "darwin-i386-cc",
    "i686-pc-windows-gnu": "mingw",
    "i686-pc-windows-msvc": "VC-WIN32",
    "i686-unknown-linux-gnu": "linux-elf",
    "powerpc64le-unknown-linux-gnu": "linux-ppc64le",
    "riscv64gc-unknown-linux-gnu": "linux64-riscv64",
    "s390x-unknown-linux-gnu": "linux64-s390x",
    "x86_64-apple-darwin": "darwin64-x86_64-cc",
    "x86_64-pc-windows-gnu": "mingw64",
    "x86_64-pc-windows-msvc": "VC-WIN64A",
    "x86_64-unknown-freebsd": "BSD-x86_64",
    "x86_64-unknown-linux-gnu": "linux-x86_64",
    "x86_64-unknown-linux-musl": "linux-x86_64",
    "x86_64-unknown-netbsd": "BSD-x86_64",
}

# vcpkg triplet architecture names.
VCPKG_ARCHES: dict[str, str] = {
    "x86_64": "x64",
    "i686": "x86",
    "aarch64": "arm64",
}

# Variables steering pkg-config's search; forwarded to the child and recorded.
PKG_CONFIG_SEARCH_VARS: tuple[str, ...] = (
    "PKG_CONFIG_PATH",
    "PKG_CONFIG_LIBDIR",
    "PKG_CONFIG_SYSROOT_DIR",
)
