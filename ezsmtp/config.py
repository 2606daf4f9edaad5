"""Load SMTP server settings from an INI file.

Expected format:

```ini
[smtp]
server = smtp.domain.com
port = 587
username = me@domain.com
password = secret
# or, for CRAM-MD5:
# secret = shared-secret
identity =
timeout = 30
```
"""

import configparser
from pathlib import Path

from .core import EzServer
from .logger import get_logger
from .transport import SMTPTransport


logger = get_logger("ezsmtp.config")


def load_server(config_path: str, section: str = "smtp") -> EzServer:
    """Builds an :class:`EzServer` from ``section`` of an INI file.

    Args:
        config_path (str): Path to the INI file.
        section (str, optional): Section holding the settings. Defaults to ``"smtp"``.

    Returns:
        EzServer: The configured server.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the section is missing or a value is invalid.
    """
    if not Path(config_path).exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    config = configparser.ConfigParser()
    config.read(config_path)

    if not config.has_section(section):
        raise ValueError(f"Config file {config_path} has no [{section}] section")

    values = config[section]
    try:
        port = values.getint("port")
        timeout = values.getfloat("timeout", fallback=30.0)
    except ValueError as e:
        raise ValueError(f"Invalid number in [{section}]: {e}") from e

    smtp = {"server": values.get("server", "").strip(), "port": port}
    account = {
        "username": values.get("username", ""),
        "password": values.get("password", ""),
        "secret": values.get("secret", ""),
        "identity": values.get("identity", ""),
    }
    if port is None:
        del smtp["port"]

    server = EzServer.from_config(smtp, account, SMTPTransport(timeout=timeout))
    logger.info("Loaded SMTP server %s from %s", server.address, config_path)
    return server
