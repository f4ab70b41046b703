# ypbank/formats/__init__.py
from importlib import import_module

from ypbank.config import DEFAULT_FORMAT_MODULES
from ypbank.formats.base import BaseFormat, FormatTag


def get_format(tag, config=None) -> BaseFormat:
    """Instantiate the codec registered for ``tag`` in ``config['format_modules']``."""
    tag = FormatTag(tag)
    modules = (config or {}).get('format_modules') or DEFAULT_FORMAT_MODULES
    format_path = modules[tag.value]
    module_name, cls_name = format_path.rsplit('.', 1)
    mod = import_module(module_name)
    return getattr(mod, cls_name)()


__all__ = ['BaseFormat', 'FormatTag', 'get_format']
