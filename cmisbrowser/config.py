import json
import logging
import os

"""
Configuration file parsing.  A config file is a JSON (or YAML, if pyyaml
is installed) document with one section per connection:

{
    "default": {
        "cmis_url": "http://localhost:8080/browser",
        "cmis_username": "admin",
        "cmis_password": "admin"
    },
    "production": {
        "inherits": "default",
        "cmis_url": "https://cmis.example.com/browser"
    }
}
"""

log = logging.getLogger("cmisbrowser")

#: Constructor arguments of CMISClient, with the type config values are coerced to
CONNKEYS = {
    "url": str,
    "username": str,
    "password": str,
    "succinct_properties": bool,
    "timeout": float,
    "ssl_verify_cert": str,
    "ssl_cert": str,
    "cache_size": int,
}


def config_section(config, section="default"):
    if section in config and "inherits" in config[section]:
        ret = config_section(config, config[section]["inherits"])
    else:
        ret = {}
    if section in config:
        ret.update(config[section])
    return ret


def read_config(fn):
    if not fn:
        cfgdir = f"{os.environ.get('HOME', '/')}/.config/"
        for config_file in (
            f"{cfgdir}/cmisbrowser/connection.conf",
            f"{cfgdir}/cmisbrowser/connection.yaml",
            f"{cfgdir}/cmisbrowser/connection.json",
            "/etc/cmisbrowser/connection.conf",
        ):
            cfg = read_config(config_file)
            if cfg:
                return cfg
        return None

    try:
        try:
            with open(fn, "rb") as config_file:
                return json.load(config_file)
        except json.decoder.JSONDecodeError:
            ## Late import, wrapped in try/except.  yaml is an optional dependency
            try:
                import yaml

                try:
                    with open(fn, "rb") as config_file:
                        return yaml.load(config_file, yaml.SafeLoader)
                except yaml.YAMLError:
                    log.error(
                        f"config file {fn} exists but is neither valid json nor yaml.  Check the syntax."
                    )
            except ImportError:
                log.error(
                    f"config file {fn} exists but is not valid json, and pyyaml is not installed."
                )
    except FileNotFoundError:
        log.info("no config file found")
    return {}


def coerce(key, value):
    """
    Values from environment variables and config files may come as
    strings; turn them into what CMISClient expects
    """
    if not isinstance(value, str):
        return value
    kind = CONNKEYS.get(key, str)
    if kind is bool:
        return value.strip().lower() in ("1", "true", "yes", "on")
    if kind in (int, float):
        return kind(value)
    if key == "ssl_verify_cert" and value.strip().lower() in ("false", "no", "0"):
        return False
    return value


def get_connection_params(
    config_file: str = None,
    config_section_name: str = None,
    environment: bool = True,
    **explicit,
):
    """
    Find connection parameters, in this order:

    * The explicit parameters given
    * Environment variables prepended with `CMIS_`, like `CMIS_URL`,
      `CMIS_USERNAME`, `CMIS_PASSWORD`.
    * A configuration file, `CMIS_CONFIG_FILE` or one of the default
      locations, section `CMIS_CONFIG_SECTION` or "default".  Keys are
      prepended with `cmis_`.

    Returns None if nothing was found
    """
    if explicit:
        return {k: coerce(k, v) for k, v in explicit.items()}

    if environment:
        conf = {}
        for conf_key in (
            x
            for x in os.environ
            if x.startswith("CMIS_") and not x.startswith("CMIS_CONFIG")
        ):
            key = conf_key[5:].lower()
            if key in CONNKEYS:
                conf[key] = coerce(key, os.environ[conf_key])
        if conf:
            return conf
        if not config_file:
            config_file = os.environ.get("CMIS_CONFIG_FILE")
        if not config_section_name:
            config_section_name = os.environ.get("CMIS_CONFIG_SECTION")

    cfg = read_config(config_file)
    if cfg:
        section = config_section(cfg, config_section_name or "default")
        conn_params = {}
        for k in section:
            if k.startswith("cmis_") and section[k] is not None:
                key = k[5:]
                if key == "pass":
                    key = "password"
                if key == "user":
                    key = "username"
                conn_params[key] = coerce(key, section[k])
        if conn_params:
            return conn_params
    return None
