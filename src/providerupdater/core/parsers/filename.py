from __future__ import annotations

from ...constants import (
    EXTENDED_FILENAME_MIN_PARTS,
    FILENAME_SEPARATOR,
    OVPN_EXTENSION,
)
from ...countries import country_name
from ...exceptions import UnknownCountryCodeError
from ...models import ParsedMeta


def parse_filename(filename: str) -> ParsedMeta:
    """
    Decode the country and city carried by a profile filename.

    Filenames following the extended pattern look like
    ``<provider>-<country code>-<city words...>-<host>.ovpn``. Shorter
    names carry no metadata and yield an empty `ParsedMeta`. The trailing
    host segment is ignored since the hostname comes from the file body.

    Args:
        filename: The profile filename, extension included.

    Returns:
        The decoded metadata.
    Raises:
        UnknownCountryCodeError: If the country code is not in the table.
    """
    stem = filename
    if stem.endswith(OVPN_EXTENSION):
        stem = stem[: -len(OVPN_EXTENSION)]

    parts = stem.split(FILENAME_SEPARATOR)
    if len(parts) < EXTENDED_FILENAME_MIN_PARTS:
        return ParsedMeta()

    code = parts[1]
    country = country_name(code)
    if country is None:
        raise UnknownCountryCodeError(code)

    city = " ".join(parts[2:-1])
    return ParsedMeta(country=country, city=city)
