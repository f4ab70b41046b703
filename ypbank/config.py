# ypbank/config.py
import copy
import os

import yaml

DEFAULT_FORMAT_MODULES = {
    'csv': 'ypbank.formats.csv_format.CsvFormat',
    'txt': 'ypbank.formats.txt_format.TxtFormat',
    'binary': 'ypbank.formats.bin_format.BinFormat',
}

DEFAULT_CONFIG = {
    'format_modules': DEFAULT_FORMAT_MODULES,
    'log_level': 'WARNING',
}

LOG_LEVEL_ENV = 'YPBANK_LOG_LEVEL'


def load_config(path=None):
    """
    Return the built-in defaults, overlaid with the YAML file at ``path``.
    ``format_modules`` entries are merged per tag so a file may override a
    single codec.
    """
    cfg = copy.deepcopy(DEFAULT_CONFIG)
    if not path:
        return cfg

    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")

    modules = data.pop('format_modules', None) or {}
    unknown = set(modules) - set(DEFAULT_FORMAT_MODULES)
    if unknown:
        raise ValueError(
            f"Unknown format tag(s) in {path}: {', '.join(sorted(unknown))}"
        )
    cfg['format_modules'].update(modules)
    cfg.update(data)
    return cfg


def resolve_log_level(cfg, override=None):
    """Pick the log level: explicit override, then environment, then config."""
    level = override or os.getenv(LOG_LEVEL_ENV) or cfg.get('log_level') or 'WARNING'
    return str(level).upper()
