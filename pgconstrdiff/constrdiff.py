#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""constrdiff - generate SQL statements to update the constraints of a
PostgreSQL database to match those specified in a YAML file"""

import sys
from argparse import FileType

import yaml

from pgconstrdiff import __version__
from pgconstrdiff.database import Database
from pgconstrdiff.cmdargs import cmd_parser, parse_args


def _load(spec):
    inmap = yaml.safe_load(spec)
    if inmap is None:
        return {}
    if not isinstance(inmap, dict):
        raise ValueError("Expected a map of schemas, found %s" %
                         type(inmap).__name__)
    return inmap


def main(argv=None):
    """Convert YAML specifications to constraint DDL."""
    parser = cmd_parser("Generate SQL statements to update the constraints "
                        "of a PostgreSQL database to match those specified "
                        "in a YAML-formatted file", __version__)
    parser.add_argument('spec', nargs='?', type=FileType('r'),
                        default=sys.stdin, help='YAML specification')
    parser.add_argument('--old', type=FileType('r'), metavar='FILE',
                        help="YAML specification of the original schema "
                        "(instead of querying a database)")
    parser.add_argument('-1', '--single-transaction', action='store_true',
                        dest='onetrans', help="wrap commands in BEGIN/COMMIT")
    parser.add_argument('--revert', action='store_true',
                        help="generate SQL to revert changes")
    parser.add_argument('-n', '--schema', metavar='SCHEMA', dest='schemas',
                        action='append', default=[],
                        help="process only named schema(s) (default all)")
    cfg = parse_args(parser, argv)
    output = cfg['files']['output']
    options = cfg['options']
    dbname = cfg['database']['dbname']
    if options.old is None and not dbname:
        parser.error("a database name or --old is required")
    if options.old is not None and dbname and options.spec is sys.stdin:
        # no database with --old: a single argument is the spec
        try:
            with open(dbname) as f:
                options.spec = f.read()
        except OSError as exc:
            parser.error("can't open '%s': %s" % (dbname, exc))
        cfg['database']['dbname'] = None
    try:
        cfg.diff_classes()
        inmap = _load(options.spec)
        db = Database(cfg)
        if options.old is not None:
            stmts = db.diff_two_map(_load(options.old), inmap)
        else:
            stmts = db.diff_map(inmap)
    except (yaml.YAMLError, KeyError, ValueError) as exc:
        print("Unable to process the input YAML file(s)", file=sys.stderr)
        print("Error is '%s'" % exc, file=sys.stderr)
        return 1

    onetrans = options.onetrans or \
        (cfg.get('output') or {}).get('single_transaction', False)
    if stmts:
        fd = output or sys.stdout
        if onetrans:
            print("BEGIN;", file=fd)
        for stmt in stmts:
            print(file=fd)
            print("%s;" % stmt, file=fd)
        if onetrans:
            print(file=fd)
            print("COMMIT;", file=fd)
    if output:
        output.close()
    return 0


if __name__ == '__main__':
    sys.exit(main())
