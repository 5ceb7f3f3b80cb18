"""
TLS helpers: HTTPS client authentication modes and trust material for clients
connecting to a TLS-enabled Keycloak container.
"""
from enum import Enum
import os
from pathlib import Path
import ssl

from cryptography import x509
from cryptography.hazmat.primitives.serialization import Encoding, pkcs12

from keycloak_testcontainer.exceptions import TlsConfigurationException


PKCS12_SUFFIXES = (".p12", ".pfx")
JKS_SUFFIXES = (".jks",)


class HttpsClientAuth(Enum):
    """ Values of Keycloak's `https-client-auth` option. """
    NONE = "none"
    REQUEST = "request"
    REQUIRED = "required"

    def __str__(self) -> str:
        return self.value


def keystore_type(path: str | os.PathLike) -> str | None:
    """ Returns Keycloak key store type for the file suffix of `path` or None, if it's unknown. """
    suffix = Path(path).suffix.lower()
    if suffix in PKCS12_SUFFIXES:
        return "pkcs12"
    if suffix in JKS_SUFFIXES:
        return "jks"
    return None


def load_certificates(path: str | os.PathLike, password: str | None = None) -> list[x509.Certificate]:
    """
    Loads X.509 certificates from a PEM or DER file or a PKCS#12 keystore at `path`.
    Private keys of a keystore are ignored.
    """
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise TlsConfigurationException(f"Failed to read TLS file '{path}'.") from e

    kind = keystore_type(path)
    if kind == "jks":
        raise TlsConfigurationException(
            f"Can't read certificates from JKS keystore '{path}', use a PKCS#12 keystore or a PEM file."
        )

    try:
        if kind == "pkcs12":
            _, certificate, additional = pkcs12.load_key_and_certificates(
                data, password.encode() if password is not None else None
            )
            certificates = ([certificate] if certificate is not None else []) + list(additional)
        elif b"-----BEGIN CERTIFICATE-----" in data:
            certificates = x509.load_pem_x509_certificates(data)
        else:
            certificates = [x509.load_der_x509_certificate(data)]
    except ValueError as e:
        raise TlsConfigurationException(f"Failed to load certificates from '{path}'.") from e

    if not certificates:
        raise TlsConfigurationException(f"No certificates found in '{path}'.")
    return certificates


def to_pem(certificates: list[x509.Certificate]) -> str:
    return "".join(c.public_bytes(Encoding.PEM).decode("ascii") for c in certificates)


def build_ssl_context(certificates: list[x509.Certificate]) -> ssl.SSLContext:
    """ Returns a client SSL context, which trusts only the provided `certificates`. """
    return ssl.create_default_context(cadata=to_pem(certificates))


def write_ca_bundle(certificates: list[x509.Certificate], directory: str | os.PathLike) -> Path:
    """
    Writes `certificates` into a PEM bundle inside `directory` and returns its path
    (for clients, which accept a CA bundle path instead of an SSL context).
    """
    path = Path(directory) / "ca-bundle.pem"
    path.write_text(to_pem(certificates))
    return path
