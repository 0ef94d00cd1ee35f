"""
Configuration file parsing.

A configuration file is json or yaml, holding a dict of sections.  Each
section is a dict of settings, keys prepended with `boxsync_` are
passed on to the BoxManager:

    {
        "default": {"boxsync_api_key": "...", "boxsync_auth_token": "..."},
        "proxied": {"inherits": "default", "boxsync_proxy": "proxy.example.com"},
        "all": {"contains": ["default", "proxied"]}
    }
"""

import json
import logging
import os
from fnmatch import fnmatch


def expand_config_section(config, section="default", blacklist=None):
    """
    In the "normal" case, will return [ section ]

    We allow:

    * * includes all sections in config file
    * "Meta"-sections in the config file with the keyword "contains" followed by a list of section names
    * Recursive "meta"-sections
    * Glob patterns (work_* for all sections starting with work_)
    * Glob patterns in "meta"-sections
    """
    if section == "*":
        return [x for x in config if not config[x].get("disable", False)]

    ## If it's not a glob-pattern ...
    if set(section).isdisjoint(set("[*?")):
        ## If it's referring to a "meta section" with the "contains" keyword
        if "contains" in config[section]:
            results = []
            if not blacklist:
                blacklist = set()
            blacklist.add(section)
            for subsection in config[section]["contains"]:
                if subsection not in results and subsection not in blacklist:
                    for recursivesubsection in expand_config_section(
                        config, subsection, blacklist
                    ):
                        if recursivesubsection not in results:
                            results.append(recursivesubsection)
            return results
        else:
            ## Disabled sections should be ignored
            if config[section].get("disable", False):
                return []

            return [section]
    ## section name is a glob pattern
    matching_sections = [x for x in config if fnmatch(x, section)]
    results = []
    for s in matching_sections:
        if set(s).isdisjoint(set("[*?")):
            for expanded in expand_config_section(config, s):
                if expanded not in results:
                    results.append(expanded)
        elif s not in results:
            ## Section names shouldn't contain []?* ... but in case they do ... don't recurse
            results.append(s)
    return results


def config_section(config, section="default"):
    if section in config and "inherits" in config[section]:
        ret = config_section(config, config[section]["inherits"])
    else:
        ret = {}
    if section in config:
        ret.update(config[section])
    return ret


def connection_params(section):
    """The `boxsync_`-prefixed settings of a section, prefix stripped"""
    params = {}
    for k in section:
        if k.startswith("boxsync_") and section[k]:
            key = k[8:]
            if key == "token":
                key = "auth_token"
            params[key] = section[k]
    return params


def read_config(fn, interactive_error=False):
    if not fn:
        cfgdir = f"{os.environ.get('HOME', '/')}/.config"
        for config_file in (
            f"{cfgdir}/boxsync/boxsync.conf",
            f"{cfgdir}/boxsync/boxsync.yaml",
            f"{cfgdir}/boxsync/boxsync.json",
            f"{cfgdir}/boxsync.conf",
            "/etc/boxsync/boxsync.conf",
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
            ## Late import, yaml is an optional dependency
            try:
                import yaml

                try:
                    with open(fn, "rb") as config_file:
                        return yaml.load(config_file, yaml.SafeLoader)
                except yaml.YAMLError:
                    logging.error(
                        f"config file {fn} exists but is neither valid json nor yaml.  Check the syntax."
                    )
            except ImportError:
                logging.error(
                    f"config file {fn} exists but is not valid json, and pyyaml is not installed."
                )

    except FileNotFoundError:
        logging.info("no config file found")
    except ValueError:
        if interactive_error:
            logging.error(
                "error in config file.  Be aware that the interactive configuration will ignore and overwrite the current broken config file",
                exc_info=True,
            )
        else:
            logging.error("error in config file.  It will be ignored", exc_info=True)
    return {}
