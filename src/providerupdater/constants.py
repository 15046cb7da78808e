CONFIG_FILE_NAME = "config.yaml"

DEFAULT_ZIP_URL = "https://www.ipvanish.com/software/configs/configs.zip"

OPENVPN = "openvpn"
OVPN_EXTENSION = ".ovpn"

# <provider>-<country code>-<city words...>-<host>.ovpn
FILENAME_SEPARATOR = "-"
EXTENDED_FILENAME_MIN_PARTS = 4
