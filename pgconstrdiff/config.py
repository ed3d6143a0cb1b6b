# -*- coding: utf-8 -*-
"""Utility module for configuration file parsing"""

import os
import sys

import yaml

from pgconstrdiff.diffconstraints import constraint_class


CFG_FILE = os.environ.get("PGCONSTRDIFF_CONFIG_FILE", "config.yaml")


def _home_dir():
    if sys.platform == 'win32':
        dir = os.getenv('APPDATA', '')
    else:
        dir = os.path.join(os.environ['HOME'], '.config')
    return os.path.abspath(dir)


def _load_cfg(cfgdir):
    cfgpath = ''
    cfg = {}
    if cfgdir:
        if os.path.isdir(cfgdir):
            cfgpath = os.path.join(cfgdir, CFG_FILE)
        elif os.path.isfile(cfgdir):
            cfgpath = cfgdir
        if os.path.exists(cfgpath):
            with open(cfgpath) as f:
                cfg = yaml.safe_load(f) or {}
    return cfg


class Config(dict):
    "A configuration dictionary"

    def __init__(self, sys_only=False):
        self.update(_load_cfg(
            os.environ.get("PGCONSTRDIFF_SYS_CONFIG", os.path.abspath(
                os.path.dirname(__file__)))))
        if sys_only:
            return
        self.merge(_load_cfg(os.environ.get(
            "PGCONSTRDIFF_USER_CONFIG",
            os.path.join(_home_dir(), 'pgconstrdiff'))))
        self.merge(_load_cfg(os.getcwd()))

    def merge(self, cfg):
        """Merge extra configuration

        :param cfg: extra configuration (dict)
        """
        for key, val in list(cfg.items()):
            if key in self and isinstance(self[key], dict) \
                    and isinstance(val, dict):
                self[key].update(val)
            else:
                self[key] = val

    def diff_classes(self):
        """Return the constraint classes in creation order

        :return: list of ConstraintClass

        Raises ValueError for an unknown class name.
        """
        diffcfg = self.get('diff') or {}
        return [constraint_class(name)
                for name in diffcfg.get('classes', ['primary_key', 'other'])]
