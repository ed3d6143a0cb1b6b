# -*- coding: utf-8 -*-
"""Utility module for command line argument parsing"""

import logging
from argparse import ArgumentParser, FileType
import getpass

import yaml

from pgconstrdiff.config import Config

_cfg = None

HELP_TEXT = {
    'host': "database server host or socket directory",
    'port': "database server port number",
    'username': "database user name"
}


def _help_dflt(arg, config):
    kwdargs = {'help': HELP_TEXT[arg]}
    if arg in config:
        kwdargs['help'] += " (default %(default)s)"
        kwdargs['default'] = config[arg]
    return kwdargs


def cmd_parser(description, version):
    """Create command line argument parser with common PostgreSQL options

    :param description: text to display before the argument help
    :param version: version of the caller
    :return: the created parser
    """
    global _cfg

    parent = ArgumentParser(add_help=False)
    parent.add_argument('dbname', nargs='?', help='database name')
    group = parent.add_argument_group('Connection options')
    _cfg = Config()
    dbcfg = _cfg.get('database') or {}
    group.add_argument('-H', '--host', **_help_dflt('host', dbcfg))
    group.add_argument('-p', '--port', type=int, **_help_dflt('port', dbcfg))
    group.add_argument('-U', '--username', **_help_dflt('username', dbcfg))
    group.add_argument('-W', '--password', action="store_true",
                       help="force password prompt")
    parent.add_argument('-c', '--config', type=FileType('r'),
                        help="configuration file path")
    parent.add_argument('-o', '--output', type=FileType('w'),
                        help="output file name (default stdout)")
    parent.add_argument('-v', '--verbose', action='count', default=0,
                        help="report progress on stderr (repeat for more)")
    parser = ArgumentParser(parents=[parent], description=description)
    parser.add_argument('--version', action='version',
                        version='%(prog)s ' + '%s' % version)
    return parser


def parse_args(parser, argv=None):
    """Parse command line arguments and return configuration object

    :param parser: ArgumentParser created by cmd_parser
    :param argv: argument list (default sys.argv)
    :return: a Configuration object
    """
    arg_opts = parser.parse_args(argv)
    args = vars(arg_opts)
    for key in ['database', 'files']:
        if not _cfg.get(key):
            _cfg[key] = {}

    def tfr(prim, key, val):
        _cfg[prim][key] = val
        del args[key]

    for key in ['dbname', 'host', 'port', 'username']:
        tfr('database', key, args[key])
    tfr('database', 'password',
        (getpass.getpass() if args['password'] else None))

    for key in ['output', 'config']:
        tfr('files', key, args[key])

    if _cfg['files']['config']:
        _cfg.merge(yaml.safe_load(_cfg['files']['config']) or {})

    level = logging.WARNING
    if arg_opts.verbose == 1:
        level = logging.INFO
    elif arg_opts.verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level,
                        format="%(levelname)s %(name)s: %(message)s")

    _cfg['options'] = arg_opts
    return _cfg
